"""
Normalized records returned by client operations.

Every backend parser produces these types, so callers never deal with
``svn`` XML or ``git`` porcelain output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from vc_unified.exceptions import ConfigurationError


class FileKind(str, Enum):
    """Kind of a listed entry."""

    FILE = "file"
    DIR = "dir"


class Status(str, Enum):
    """Relation of a working copy entry to the versioned history.

    Values follow the single character codes of ``svn status``.
    """

    UNVERSIONED = "?"
    ADDED = "A"
    MODIFIED = "M"
    DELETED = "D"
    REPLACED = "R"
    CONFLICTED = "C"
    MISSING = "!"
    IGNORED = "I"
    EXTERNAL = "X"
    OBSTRUCTED = "~"


@dataclass(frozen=True)
class FileInfo:
    """One entry of a listing, status or diff result.

    The revision is informational only and does not take part in equality.
    """

    name: str
    kind: FileKind = FileKind.FILE
    revision: Optional[str] = field(default=None, compare=False)
    status: Optional[Status] = None

    def is_dir(self) -> bool:
        return self.kind is FileKind.DIR

    def is_file(self) -> bool:
        return self.kind is FileKind.FILE


@dataclass(frozen=True)
class Commit:
    """A single historical change as reported by ``log``."""

    revision: str
    author: str
    date: Optional[datetime]
    message: str
    changed_paths: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Credentials:
    """Username and password attached to every backend invocation."""

    username: Optional[str] = None
    password: Optional[str] = None

    def __bool__(self) -> bool:
        return bool(self.username or self.password)

    def __repr__(self) -> str:
        # Keep the password out of logs and tracebacks
        masked = "***" if self.password else None
        return f"Credentials(username={self.username!r}, password={masked!r})"


@dataclass(frozen=True)
class BasePaths:
    """Repository layout conventions for trunk, tags and branches.

    Surrounding slashes are stripped. ``trunk`` may be empty for
    repositories that keep the main line at the root; ``tags`` and
    ``branches`` may not.
    """

    trunk: str = "trunk"
    tags: str = "tags"
    branches: str = "branches"

    def __post_init__(self) -> None:
        for key in ("trunk", "tags", "branches"):
            value = getattr(self, key)
            if not isinstance(value, str):
                raise ConfigurationError(f"Base path '{key}' must be a string")
            value = value.strip("/")
            if key != "trunk" and not value:
                raise ConfigurationError(f"Base path '{key}' must not be empty")
            if ".." in value.split("/"):
                raise ConfigurationError(f"Base path '{key}' must not contain '..'")
            object.__setattr__(self, key, value)
