# --- utils.py ---

import logging
import os
import shutil
import time
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


def format_bytes(size_bytes: int, use_decimal: bool = False) -> str:
    """
Signature: `format_bytes(size_bytes: int, use_decimal: bool = False) -> str`

Converts a size in bytes to a human-readable string (KB, MB, GB, TB).
Uses binary (1024) steps by default, decimal (1000) when `use_decimal` is set.
"""
    if size_bytes < 0:
        return "0 B"

    units = ['B', 'KB', 'MB', 'GB', 'TB', 'PB']
    power = 1000.0 if use_decimal else 1024.0

    size = float(size_bytes)
    i = 0
    while size >= power and i < len(units) - 1:
        size /= power
        i += 1

    return f"{size:.2f} {units[i]}"


def get_drive_usage(path: str) -> Tuple[int, int, int]:
    """
Signature: `get_drive_usage(path: str) -> Tuple[int, int, int]`

Gets the total disk space, used space, and free space for the drive
that contains the given path.
Returns (total, used, free) in bytes.
Returns (0, 0, 0) on failure (e.g., path not found).
"""
    try:
        # For Windows, get the drive letter (e.g., 'C:\\')
        drive_root = os.path.abspath(path)
        if os.name == 'nt':
            drive_root = os.path.splitdrive(drive_root)[0] + os.sep

        usage = shutil.disk_usage(drive_root)
        return usage.total, usage.used, usage.free
    except FileNotFoundError:
        return (0, 0, 0)
    except OSError as e:
        logger.warning("Could not get disk usage for '%s': %s", path, e)
        return (0, 0, 0)


def calculate_percentage(part: int, whole: int) -> float:
    """
Signature: `calculate_percentage(part: int, whole: int) -> float`

Calculates what percentage 'part' is of 'whole'.
Returns 0.0 if 'whole' is 0 to avoid division by zero.
"""
    if whole == 0:
        return 0.0
    return (part / whole) * 100.0


def get_time_ago_days(timestamp: float, now: Optional[float] = None) -> int:
    """
Signature: `get_time_ago_days(timestamp: float, now: Optional[float] = None) -> int`

Calculates how many whole days ago a given timestamp occurred.
"""
    if now is None:
        now = time.time()
    seconds_ago = now - timestamp
    return int(seconds_ago / (60 * 60 * 24))
