"""
Configuration management for disk-guardian
"""
import os
import tempfile
from dataclasses import dataclass, field
from typing import List

MIB = 1024 * 1024
SECONDS_PER_DAY = 24 * 60 * 60


def default_temp_dirs() -> List[str]:
    """Temporary directories that exist on this host, in scan order"""
    home = os.path.expanduser("~")
    candidates = [
        tempfile.gettempdir(),
        os.path.join(home, '.cache'),
        os.path.join(home, 'AppData', 'Local', 'Temp'),
    ]
    dirs = []
    for path in candidates:
        if os.path.isdir(path) and path not in dirs:
            dirs.append(path)
    return dirs


@dataclass
class Config:
    """Configuration settings for the analyzer and the temp cleaner"""
    # Disk analysis
    max_depth: int = 5
    min_size_mb: int = 10
    top_types_limit: int = 10
    top_findings_limit: int = 20

    # How many ranked entries the text renderer prints
    preview_limit: int = 10

    # Temp cleanup
    days_old: int = 7
    accept_phrase: str = 'yes'
    use_trash: bool = False
    temp_dirs: List[str] = field(default_factory=default_temp_dirs)

    follow_symlinks: bool = False
    verbose: bool = False

    @property
    def min_size_bytes(self) -> int:
        return self.min_size_mb * MIB

    @property
    def max_age_seconds(self) -> int:
        return self.days_old * SECONDS_PER_DAY
