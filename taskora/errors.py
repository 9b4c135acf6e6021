"""Exception types raised inside Taskora."""


class TaskoraError(Exception):
    """Base class for Taskora errors."""


class BackupFormatError(TaskoraError):
    """A backup document could not be parsed or failed validation."""


class StoreUnavailableError(TaskoraError):
    """The persistent store backend is not connected."""
