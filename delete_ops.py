# --- delete_ops.py ---

import logging
import os
import shutil
from enum import Enum
from typing import Callable, List, Optional, Sequence

from send2trash import send2trash

from errors import DeletionError
from models import CleanupOutcome, FileObservation
from utils import format_bytes

logger = logging.getLogger(__name__)

# Confirmation provider: prompt text -> the user's answer
ConfirmProvider = Callable[[str], str]

# Callback(current_path: str, is_error: bool, message: str)
DeleteProgressCallback = Callable[[str, bool, str], None]

DEFAULT_ACCEPT_PHRASE = "yes"


class CleanupState(Enum):
    SCANNED = "scanned"
    REPORTED = "reported"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    CONFIRMED = "confirmed"
    DECLINED = "declined"
    DELETING = "deleting"
    DONE = "done"


TERMINAL_STATES = {CleanupState.REPORTED, CleanupState.DECLINED, CleanupState.DONE}


class CleanupSession:
    """
    Confirm-then-delete over the findings of one scan.

        SCANNED -> REPORTED                                   (dry run)
        SCANNED -> AWAITING_CONFIRMATION -> DECLINED
        SCANNED -> AWAITING_CONFIRMATION -> CONFIRMED -> DELETING -> DONE
        SCANNED -> DONE                                       (nothing found)

    Nothing on disk is touched outside DELETING. A session runs once.
    """

    def __init__(self,
                 findings: Sequence[FileObservation],
                 confirm: ConfirmProvider,
                 dry_run: bool = True,
                 use_trash: bool = False,
                 accept_phrase: str = DEFAULT_ACCEPT_PHRASE,
                 progress_callback: Optional[DeleteProgressCallback] = None):
        self.findings = list(findings)
        self.confirm = confirm
        self.dry_run = dry_run
        self.use_trash = use_trash
        self.accept_phrase = accept_phrase
        self.progress_callback = progress_callback

        self.outcome = CleanupOutcome()
        self.state = CleanupState.SCANNED
        self.history: List[CleanupState] = [CleanupState.SCANNED]

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def total_size_bytes(self) -> int:
        return sum(f.size_bytes for f in self.findings)

    def prompt_text(self) -> str:
        return (f"Delete {len(self.findings)} items "
                f"({format_bytes(self.total_size_bytes)})? ({self.accept_phrase}/no): ")

    def run(self) -> CleanupOutcome:
        if self.state is not CleanupState.SCANNED:
            raise RuntimeError(f"Cleanup session already ran (state: {self.state.value})")

        if not self.findings:
            self._transition(CleanupState.DONE)
            return self.outcome

        if self.dry_run:
            self._transition(CleanupState.REPORTED)
            return self.outcome

        self._transition(CleanupState.AWAITING_CONFIRMATION)
        if not self._is_confirmed():
            self._transition(CleanupState.DECLINED)
            return self.outcome
        self._transition(CleanupState.CONFIRMED)

        self._transition(CleanupState.DELETING)
        self._delete_all()
        self._transition(CleanupState.DONE)
        return self.outcome

    def _is_confirmed(self) -> bool:
        try:
            answer = self.confirm(self.prompt_text())
        except (EOFError, KeyboardInterrupt) as e:
            logger.info("Confirmation aborted (%s); nothing deleted", type(e).__name__)
            return False
        if answer is None:
            return False
        return answer.strip().lower() == self.accept_phrase.lower()

    def _delete_all(self):
        # progress_callback fires once per finding, after its removal attempt
        for item in self.findings:
            try:
                self._remove(item)
            except DeletionError as e:
                self.outcome.add_error(item.path, e.cause)
                logger.warning("Failed to delete %s: %s", item.path, e.cause)
                if self.progress_callback:
                    self.progress_callback(item.path, True, f"Error deleting {item.name}: {e.cause}")
                continue

            self.outcome.add_success(item)
            if self.progress_callback:
                verb = "Trashed" if self.use_trash else "Deleted"
                self.progress_callback(item.path, False, f"{verb} {item.name}")

    def _remove(self, item: FileObservation):
        try:
            if self.use_trash:
                send2trash(item.path)
            elif item.is_directory:
                shutil.rmtree(item.path)
            else:
                os.remove(item.path)
        except OSError as e:
            raise DeletionError(item.path, e) from e

    def _transition(self, new_state: CleanupState):
        logger.debug("Cleanup: %s -> %s", self.state.value, new_state.value)
        self.state = new_state
        self.history.append(new_state)


def clean(findings: Sequence[FileObservation],
          confirm: ConfirmProvider,
          dry_run: bool = True,
          use_trash: bool = False,
          accept_phrase: str = DEFAULT_ACCEPT_PHRASE,
          progress_callback: Optional[DeleteProgressCallback] = None) -> CleanupOutcome:
    """
    Deletes `findings` after an explicit confirmation.

    Dry runs and declined confirmations return an all-zero outcome without
    touching the filesystem. A failed removal is counted and the remaining
    findings are still processed.
    """
    session = CleanupSession(
        findings,
        confirm,
        dry_run=dry_run,
        use_trash=use_trash,
        accept_phrase=accept_phrase,
        progress_callback=progress_callback,
    )
    return session.run()
