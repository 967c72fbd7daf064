"""
Exception taxonomy shared by every backend.

Backend specific failure text is turned into these classes in exactly one
place, :meth:`vc_unified.client.VcsClient.execute`.
"""

from __future__ import annotations

from typing import Optional, Sequence


class VcsError(Exception):
    """Base class for all errors raised by vc_unified."""

    pass


class ExecutionError(VcsError):
    """Raised when a backend command fails.

    The message is the raw error text of the backend tool (stderr, or stdout
    when stderr is empty).
    """

    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = list(command) if command else []
        self.returncode = returncode
        self.stderr = stderr


class NotFoundError(VcsError):
    """Raised when a path or revision does not exist at the resolved location."""

    pass


class ConfigurationError(VcsError):
    """Raised for invalid pointers, base paths or configuration files."""

    pass
