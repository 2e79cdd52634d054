"""Error taxonomy for rc file patching."""

from __future__ import annotations

import errno
from pathlib import Path

# errno values that mean "not allowed to modify this path" rather than
# "something broke"
_PERMISSION_ERRNOS = frozenset({errno.EACCES, errno.EPERM, errno.EROFS})


class RcPatchError(Exception):
    """Raised when an rc file operation fails fatally.

    Always names the path and the operation that failed. The underlying
    ``OSError`` is chained as ``__cause__``.
    """

    def __init__(self, message: str, path: Path | str, operation: str) -> None:
        super().__init__(message)
        self.path = Path(path)
        self.operation = operation


class RcFileError(RcPatchError):
    """Raised when reading, creating or writing a target rc file fails."""


class BackupError(RcPatchError):
    """Raised when a backup copy could not be written."""


def is_permission_error(error: BaseException) -> bool:
    """Check if an error means the target may not be modified."""
    if isinstance(error, PermissionError):
        return True
    return isinstance(error, OSError) and error.errno in _PERMISSION_ERRNOS
