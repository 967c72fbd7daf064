"""
Pointer model for addressing a position in history.

A :class:`Pointer` names a branch or a tag. The branch called ``trunk`` is
the main line of development by convention, whatever the backend calls it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from vc_unified.exceptions import ConfigurationError


TRUNK = "trunk"


class PointerType(str, Enum):
    """Kind of history location a pointer refers to."""

    BRANCH = "branch"
    TAG = "tag"


@dataclass(frozen=True)
class Pointer:
    """Immutable reference to a branch or tag.

    Attributes
    ----------
    name : str
        Logical branch or tag name, e.g. ``"trunk"`` or ``"feature1"``.
    type : PointerType
        Whether ``name`` refers to a branch or a tag.

    Raises
    ------
    ConfigurationError
        If ``name`` is empty or ``type`` is not a :class:`PointerType`.
    """

    name: str
    type: PointerType = PointerType.BRANCH

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ConfigurationError("Pointer name must be a non-empty string")
        if not isinstance(self.type, PointerType):
            raise ConfigurationError(f"Invalid pointer type: {self.type!r}")

    @classmethod
    def branch(cls, name: str) -> "Pointer":
        return cls(name, PointerType.BRANCH)

    @classmethod
    def tag(cls, name: str) -> "Pointer":
        return cls(name, PointerType.TAG)

    @classmethod
    def trunk(cls) -> "Pointer":
        return cls(TRUNK, PointerType.BRANCH)

    @property
    def is_trunk(self) -> bool:
        """Return True if this pointer is the trunk branch."""
        return self.type is PointerType.BRANCH and self.name == TRUNK

    def __str__(self) -> str:
        return f"{self.type.value}:{self.name}"
