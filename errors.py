# --- errors.py ---


class DiskGuardianError(Exception):
    """Base class for errors raised by disk-guardian."""


class ScanError(DiskGuardianError):
    """A scan could not be carried out at all."""


class RootInvalidError(ScanError):
    """The scan root cannot be stat'ed, or is neither a file nor a directory."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot scan '{path}': {reason}")
        self.path = path
        self.reason = reason


class DeletionError(DiskGuardianError):
    """Removal of a single finding failed."""

    def __init__(self, path: str, cause: Exception):
        super().__init__(f"{path}: {cause}")
        self.path = path
        self.cause = cause
