# --- models.py ---

import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from utils import calculate_percentage


@dataclass(frozen=True)
class ScanPolicy:
    """
    Parameters of a single scan. Immutable for the duration of the scan.

    Inventory mode sets `min_size_bytes`, cleanup mode sets `max_age_seconds`.
    Exactly one of them must be given.
    """
    max_depth: int = 5
    min_size_bytes: Optional[int] = None
    max_age_seconds: Optional[int] = None

    # Directory entries are themselves matched against the predicate
    # (cleanup removes whole directories).
    include_directories: bool = False
    follow_symlinks: bool = False

    # "now" for the age predicate; taken at scan start when None
    reference_time: Optional[float] = None

    def __post_init__(self):
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if (self.min_size_bytes is None) == (self.max_age_seconds is None):
            raise ValueError("Exactly one of min_size_bytes or max_age_seconds must be set")
        if self.min_size_bytes is not None and self.min_size_bytes < 0:
            raise ValueError(f"min_size_bytes must be >= 0, got {self.min_size_bytes}")
        if self.max_age_seconds is not None and self.max_age_seconds < 0:
            raise ValueError(f"max_age_seconds must be >= 0, got {self.max_age_seconds}")

    @classmethod
    def inventory(cls, max_depth: int = 5, min_size_bytes: int = 0,
                  follow_symlinks: bool = False) -> 'ScanPolicy':
        return cls(max_depth=max_depth, min_size_bytes=min_size_bytes,
                   follow_symlinks=follow_symlinks)

    @classmethod
    def cleanup(cls, max_age_seconds: int, max_depth: int = 0,
                include_directories: bool = True,
                follow_symlinks: bool = False,
                reference_time: Optional[float] = None) -> 'ScanPolicy':
        return cls(max_depth=max_depth, max_age_seconds=max_age_seconds,
                   include_directories=include_directories,
                   follow_symlinks=follow_symlinks,
                   reference_time=reference_time)

    @property
    def is_age_mode(self) -> bool:
        return self.max_age_seconds is not None


@dataclass(frozen=True)
class FileObservation:
    """
    One filesystem entry as seen by the scanner at stat-time.
    This is a pure data class.
    """
    path: str
    size_bytes: int
    modified_at: float  # st_mtime
    is_directory: bool = False

    @property
    def name(self) -> str:
        return os.path.basename(self.path) or self.path

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "size_bytes": self.size_bytes,
            "modified_at": datetime.fromtimestamp(self.modified_at).isoformat(),
            "is_directory": self.is_directory,
        }


@dataclass(frozen=True)
class SkippedEntry:
    """An entry (stage='stat') or directory listing (stage='list') that could not be read."""
    path: str
    stage: str
    reason: str


@dataclass
class ScanAccumulator:
    """
    Scan-scoped mutable state. A fresh instance is created by every scan.
    """
    root_path: str

    total_size_bytes: int = 0
    file_count: int = 0
    directories_scanned: int = 0

    # Normalized extension -> cumulative size
    type_size_totals: Dict[str, int] = field(default_factory=dict)

    # Observations passing the active predicate, in discovery order
    candidate_findings: List[FileObservation] = field(default_factory=list)

    skipped: List[SkippedEntry] = field(default_factory=list)

    def record_file(self, observation: FileObservation, key: str):
        """Count a regular file towards the aggregates, whatever its filter status."""
        self.file_count += 1
        self.total_size_bytes += observation.size_bytes
        self.type_size_totals[key] = self.type_size_totals.get(key, 0) + observation.size_bytes

    def add_finding(self, observation: FileObservation):
        self.candidate_findings.append(observation)

    def add_skip(self, entry: SkippedEntry):
        self.skipped.append(entry)


@dataclass(frozen=True)
class Report:
    """
    Ranked, truncated view over a finished scan. Read-only.
    """
    total_size_bytes: int
    file_count: int
    top_types_by_size: List[Tuple[str, int]]
    top_findings_by_size: List[FileObservation]
    skipped_count: int = 0

    def percent_of_total(self, size_bytes: int) -> float:
        return calculate_percentage(size_bytes, self.total_size_bytes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_size_bytes": self.total_size_bytes,
            "file_count": self.file_count,
            "skipped_count": self.skipped_count,
            "top_types_by_size": [
                {
                    "extension": ext,
                    "size_bytes": size,
                    "percent": round(self.percent_of_total(size), 2),
                }
                for ext, size in self.top_types_by_size
            ],
            "top_findings_by_size": [obs.to_dict() for obs in self.top_findings_by_size],
        }


@dataclass
class CleanupOutcome:
    """Holds the summary of the delete operation."""
    deleted_count: int = 0
    freed_bytes: int = 0
    error_count: int = 0
    errors: List[str] = field(default_factory=list)

    def add_success(self, observation: FileObservation):
        """Record a successful deletion, using the size captured at scan time."""
        self.deleted_count += 1
        self.freed_bytes += observation.size_bytes

    def add_error(self, path: str, error: Exception):
        """Record a failed deletion."""
        self.error_count += 1
        self.errors.append(f"Failed to delete {path}: {error}")

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.deleted_count, self.freed_bytes, self.error_count)
