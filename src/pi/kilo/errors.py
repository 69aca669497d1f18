"""Fatal error types for the viewer.

None of these are recoverable: they propagate to the entry point, which
restores the terminal, prints the message and exits with status 1.
"""

from __future__ import annotations


class KiloError(Exception):
    """Base class for fatal viewer errors.

    The message reads ``"<operation>: <reason>"`` so it can be printed
    verbatim on the way out.
    """

    def __init__(self, operation: str, reason: str | None = None) -> None:
        self.operation = operation
        self.reason = reason
        message = f"{operation}: {reason}" if reason else operation
        super().__init__(message)

    @classmethod
    def from_os_error(cls, operation: str, exc: OSError) -> KiloError:
        return cls(operation, exc.strerror or str(exc))


class TerminalConfigError(KiloError):
    """Reading or writing the terminal attributes failed."""


class DimensionQueryError(KiloError):
    """Neither the window-size ioctl nor the cursor probe gave a size."""


class TerminalReadError(KiloError):
    """A read from the terminal failed for a reason other than a timeout."""


class FileOpenError(KiloError):
    """The requested file could not be opened for reading."""

    def __init__(self, path: str, reason: str | None = None) -> None:
        self.path = path
        super().__init__("open", reason)
