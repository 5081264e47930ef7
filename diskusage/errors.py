"""Exceptions raised by diskusage."""

from __future__ import annotations
from typing import Dict, Iterable, Optional


class DiskUsageError(Exception):
    """Base exception for all diskusage errors."""

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class InvalidArgument(DiskUsageError):
    """Bad option or root path. Raised before any traversal work starts."""

    @classmethod
    def choice(cls, kind: str, value, possible: Iterable[str]) -> "InvalidArgument":
        return cls(
            f"Invalid {kind} '{value}', possible values are '{', '.join(possible)}'",
            details={"argument": kind},
        )


class EntryAccessError(DiskUsageError):
    """A single entry could not be stat'd or listed. Recoverable."""

    def __init__(self, path: str, cause: OSError):
        message = cause.strerror or str(cause)
        super().__init__(f"{message}: {path}", details={"errno": str(cause.errno)} if cause.errno else None)
        self.path = path
        self.cause = cause
