from __future__ import annotations

from typing import Optional


class SitecrateError(Exception):
    """Base class for sitecrate errors."""


class InvalidInput(SitecrateError, ValueError):
    """Caller-correctable input: empty password or payload, malformed container."""


class DecryptionFailed(SitecrateError):
    """Cipher or padding rejected the container: wrong password or corrupted file."""


class CorruptArchive(SitecrateError):
    """The (decrypted) payload is not a usable zip archive."""


class ArchiveIOError(SitecrateError, OSError):
    """Filesystem failure while reading or writing ``path``."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        msg = self.args[0] if self.args else ""
        if self.path and self.path not in msg:
            return f"{msg}: {self.path}"
        return msg


def io_error(exc: OSError, path, action: str) -> ArchiveIOError:
    """Wrap ``exc`` with the offending path; callers ``raise ... from exc``."""
    reason = exc.strerror or str(exc)
    return ArchiveIOError(f"Failed to {action} {path}: {reason}", path=str(path))
