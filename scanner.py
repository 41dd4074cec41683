# --- scanner.py ---

import logging
import os
import stat
import time
from typing import Callable, List, Optional, Tuple, Union

from errors import RootInvalidError
from filters import Predicate, extension_key, predicate_for
from models import FileObservation, ScanAccumulator, ScanPolicy, SkippedEntry

logger = logging.getLogger(__name__)

# What observing a single directory entry can yield. None means "not
# something we track" (unfollowed symlink, fifo, socket, device).
EntryResult = Union[FileObservation, SkippedEntry, None]


class Scanner:
    """
    Depth-bounded, single-threaded walk of a directory tree.

    A Scanner is bound to one root and one policy; every call to `run()`
    builds a fresh ScanAccumulator, so instances can be reused.
    """

    def __init__(self,
                 root_path: str,
                 policy: ScanPolicy,
                 on_progress: Optional[Callable[[str], None]] = None):
        self.root_path = root_path
        self.policy = policy
        self.on_progress = on_progress

    def run(self) -> ScanAccumulator:
        """Walks the whole bounded subtree and returns the filled accumulator."""
        try:
            root_stat = os.stat(self.root_path)
        except OSError as e:
            raise RootInvalidError(self.root_path, e.strerror or str(e)) from e

        predicate = predicate_for(self.policy, time.time())
        result = ScanAccumulator(root_path=self.root_path)

        if stat.S_ISREG(root_stat.st_mode):
            observation = FileObservation(
                path=self.root_path,
                size_bytes=root_stat.st_size,
                modified_at=root_stat.st_mtime,
            )
            self._record_file(observation, result, predicate)
            return result

        if not stat.S_ISDIR(root_stat.st_mode):
            raise RootInvalidError(self.root_path, "not a regular file or directory")

        self._walk(result, predicate)
        return result

    def _walk(self, result: ScanAccumulator, predicate: Predicate):
        # Worklist of (directory, depth, covered); the root is depth 0.
        # "covered" marks the inside of a directory already matched as a
        # finding: its files still count towards the aggregates but are not
        # findings of their own, since the directory is removed as a whole.
        pending: List[Tuple[str, int, bool]] = [(self.root_path, 0, False)]

        while pending:
            current_path, depth, covered = pending.pop()
            if self.on_progress:
                self.on_progress(current_path)

            listing = self._list_directory(current_path)
            if isinstance(listing, SkippedEntry):
                result.add_skip(listing)
                logger.warning("Cannot scan directory %s: %s", current_path, listing.reason)
                continue
            result.directories_scanned += 1

            subdirs = []
            for entry in listing:
                outcome = self._observe(entry)
                if outcome is None:
                    continue
                if isinstance(outcome, SkippedEntry):
                    result.add_skip(outcome)
                    logger.debug("Cannot access %s: %s", outcome.path, outcome.reason)
                    continue

                if not outcome.is_directory:
                    self._record_file(outcome, result, predicate, covered)
                    continue

                child_covered = covered
                if (not covered and self.policy.include_directories
                        and predicate(outcome.size_bytes, outcome.modified_at)):
                    result.add_finding(outcome)
                    child_covered = True
                if depth + 1 <= self.policy.max_depth:
                    subdirs.append((outcome.path, child_covered))

            # Reversed so the first listed subdirectory is visited first.
            for subdir, child_covered in reversed(subdirs):
                pending.append((subdir, depth + 1, child_covered))

    def _list_directory(self, path: str) -> Union[List[os.DirEntry], SkippedEntry]:
        try:
            with os.scandir(path) as it:
                return list(it)
        except OSError as e:
            return SkippedEntry(path=path, stage="list", reason=_describe(e))

    def _observe(self, entry: os.DirEntry) -> EntryResult:
        """Stats one entry exactly once and turns it into an observation."""
        try:
            entry_stat = entry.stat(follow_symlinks=False)
            if stat.S_ISLNK(entry_stat.st_mode):
                if not self.policy.follow_symlinks:
                    return None
                entry_stat = entry.stat(follow_symlinks=True)
        except OSError as e:
            return SkippedEntry(path=entry.path, stage="stat", reason=_describe(e))

        mode = entry_stat.st_mode
        if stat.S_ISREG(mode):
            is_dir = False
        elif stat.S_ISDIR(mode):
            is_dir = True
        else:
            return None

        return FileObservation(
            path=entry.path,
            size_bytes=entry_stat.st_size,
            modified_at=entry_stat.st_mtime,
            is_directory=is_dir,
        )

    @staticmethod
    def _record_file(observation: FileObservation, result: ScanAccumulator, predicate: Predicate,
                     covered: bool = False):
        result.record_file(observation, extension_key(observation.name))
        if not covered and predicate(observation.size_bytes, observation.modified_at):
            result.add_finding(observation)


def _describe(error: OSError) -> str:
    if isinstance(error, PermissionError):
        return "Permission Denied"
    return f"{type(error).__name__}: {error.strerror or error}"


def scan(root_path: str,
         policy: ScanPolicy,
         on_progress: Optional[Callable[[str], None]] = None) -> ScanAccumulator:
    """
    Scans `root_path` under `policy`.

    Unreadable entries and directories are recorded in `skipped` and the walk
    goes on; only an unusable root raises RootInvalidError.
    """
    return Scanner(root_path, policy, on_progress=on_progress).run()
