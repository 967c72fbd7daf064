"""Abstract interfaces for backend adapters and output parsers."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Pattern, Sequence, Type

from vc_unified.common.models import BasePaths, Commit, Credentials, FileInfo
from vc_unified.common.pointer import Pointer
from vc_unified.exceptions import ConfigurationError, NotFoundError, VcsError
from vc_unified.execution.executor import Command, CommandExecutor


@dataclass(frozen=True)
class ErrorRule:
    """Maps backend error text matching ``pattern`` onto an error class."""

    pattern: Pattern[str]
    error: Type[VcsError] = NotFoundError

    @classmethod
    def not_found(cls, regex: str) -> "ErrorRule":
        return cls(re.compile(regex), NotFoundError)

    def matches(self, message: str) -> bool:
        return self.pattern.search(message) is not None


class OutputParser(ABC):
    """Turns raw backend output into normalized records.

    Implementations ignore lines or records they do not recognize.
    """

    @abstractmethod
    def parse_listing(self, raw: str) -> List[FileInfo]:
        """Parse a directory listing."""

    @abstractmethod
    def parse_log(self, raw: str) -> List[Commit]:
        """Parse history, newest first."""

    @abstractmethod
    def parse_status(self, raw: str, base_dir: Optional[Path] = None) -> List[FileInfo]:
        """Parse working copy status; ``base_dir`` is the working copy root."""

    @abstractmethod
    def parse_diff(self, raw: str, base: str = "") -> List[FileInfo]:
        """Parse a diff summary; names are made relative to ``base``."""

    @abstractmethod
    def parse_refs(self, raw: str) -> List[str]:
        """Parse a branch or tag enumeration into names."""


class BackendAdapter(ABC):
    """Translates normalized operations into commands for one backend.

    The adapter owns everything backend specific: how a pointer and a
    path become an addressable location, which global arguments every
    invocation carries, which commands implement an operation and which
    error messages mean "does not exist".

    Parameters
    ----------
    executor : CommandExecutor
        Runs the backend binary.
    parser : OutputParser
        Parses the backend's output.
    base_paths : BasePaths, optional
        Layout conventions; defaults to trunk/tags/branches.
    """

    #: Backend kind, e.g. ``"svn"``
    kind: str = ""
    #: Whether history can only be read from a local repository
    requires_local_repository: bool = False
    #: Rules applied by the client to classify failures
    error_rules: Sequence[ErrorRule] = ()

    def __init__(
        self,
        executor: CommandExecutor,
        parser: OutputParser,
        base_paths: Optional[BasePaths] = None,
    ) -> None:
        if base_paths is not None and not isinstance(base_paths, BasePaths):
            raise ConfigurationError("base_paths must be a BasePaths instance")
        self.executor = executor
        self.parser = parser
        self.base_paths = base_paths or BasePaths()

    @abstractmethod
    def resolve(self, url: str, pointer: Pointer, path: str = "") -> str:
        """Return the backend location of ``path`` at ``pointer``."""

    @abstractmethod
    def global_arguments(self, credentials: Credentials) -> Dict[str, Any]:
        """Return the options applied to every invocation."""

    def build(self, operation: str, **params: Any) -> List[Command]:
        """Return the commands implementing ``operation``.

        Raises
        ------
        ConfigurationError
            If the backend does not know the operation.
        """
        builder: Optional[Callable[..., List[Command]]] = getattr(self, f"_build_{operation}", None)
        if builder is None:
            raise ConfigurationError(f"Operation '{operation}' is not supported by the {self.kind} backend")
        return builder(**params)

    def execute(self, command: Command, credentials: Credentials, cwd: Optional[Path] = None) -> str:
        """Run ``command`` with the global arguments merged in.

        Arguments of the command take precedence over global arguments.
        """
        arguments = dict(self.global_arguments(credentials))
        arguments.update(command.arguments)
        return self.executor.execute(command.name, arguments, command.operands, cwd=command.cwd or cwd)

    def finish_export(self, target: Path) -> None:
        """Post-process an export written to ``target``; no-op by default."""
        return None

    def discard_export(self, target: Path) -> None:
        """Remove leftovers of a failed export from ``target``; no-op by default."""
        return None

    def _build_kind(self, **_: Any) -> List[Command]:
        """Commands printing the object type at ``location``; none by default."""
        return []

    def _build_refresh(self, **_: Any) -> List[Command]:
        """Commands updating the local repository from the remote; none by default."""
        return []
