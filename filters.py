# --- filters.py ---

import os
from typing import Callable

from models import ScanPolicy

NO_EXTENSION = "no-extension"

# Predicate(size_bytes, modified_at) -> bool
Predicate = Callable[[int, float], bool]


def extension_key(name: str) -> str:
    """
    Normalized file-type key: the lower-cased extension including the dot
    (e.g. ".log"), or NO_EXTENSION. Dotfiles such as ".bashrc" have none.
    """
    ext = os.path.splitext(name)[1].lower()
    return ext or NO_EXTENSION


def size_predicate(min_size_bytes: int) -> Predicate:
    """Selects files at least `min_size_bytes` large."""
    def is_large(size_bytes: int, modified_at: float) -> bool:
        return size_bytes >= min_size_bytes
    return is_large


def age_predicate(max_age_seconds: int, now: float) -> Predicate:
    """
    Selects entries last modified at least `max_age_seconds` before `now`.
    `now` is fixed when the predicate is built, so every entry of one scan is
    judged against the same instant.
    """
    cutoff_time = now - max_age_seconds

    def is_old(size_bytes: int, modified_at: float) -> bool:
        return modified_at <= cutoff_time
    return is_old


def predicate_for(policy: ScanPolicy, now: float) -> Predicate:
    if policy.is_age_mode:
        reference = policy.reference_time if policy.reference_time is not None else now
        return age_predicate(policy.max_age_seconds, reference)
    return size_predicate(policy.min_size_bytes)
