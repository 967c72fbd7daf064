"""
Backend independent version control client.

:class:`VcsClient` is the single entry point for callers. It holds the
active :class:`~vc_unified.common.pointer.Pointer`, the credentials and
the working copy, and delegates everything backend specific to a
:class:`~vc_unified.vcs.base.BackendAdapter`:

1. the pointer and a relative path are resolved to a backend location,
2. the adapter turns the operation into one or more commands,
3. the commands run through the adapter's executor,
4. failures are classified against the adapter's error rules,
5. output is parsed into :class:`FileInfo` / :class:`Commit` records.

A client represents one working copy and is not safe for concurrent use.
"""

from __future__ import annotations

import copy
import logging
import shutil
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from vc_unified.common.models import BasePaths, Commit, Credentials, FileInfo
from vc_unified.common.pointer import Pointer
from vc_unified.common.sorting import sort_entries, sort_names
from vc_unified.exceptions import ConfigurationError, ExecutionError
from vc_unified.execution.executor import Command, CommandExecutor
from vc_unified.vcs.base import BackendAdapter
from vc_unified.vcs.git_adapter import NON_INTERACTIVE_ENV, GitAdapter
from vc_unified.vcs.svn_adapter import SvnAdapter


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


PathLike = Union[str, Path]


def coerce_base_paths(value: Union[BasePaths, Mapping[str, str], None]) -> Optional[BasePaths]:
    """Accept a :class:`BasePaths` or a mapping with trunk/tags/branches keys."""
    if value is None or isinstance(value, BasePaths):
        return value
    if not isinstance(value, Mapping):
        raise ConfigurationError("base_paths must be a mapping")
    unknown = set(value) - {"trunk", "tags", "branches"}
    if unknown:
        raise ConfigurationError(f"Unknown base path keys: {', '.join(sorted(unknown))}")
    return BasePaths(**value)


class VcsClient:
    """Client for one repository and (optionally) one working copy.

    Parameters
    ----------
    url : str
        Repository URL.
    adapter : BackendAdapter
        Backend implementation.
    pointer : Pointer, optional
        Initial pointer; defaults to trunk.
    credentials : Credentials, optional
        Username and password for every invocation.
    base_paths : BasePaths or mapping, optional
        Overrides the adapter's trunk/tags/branches layout.
    working_copy : str or Path, optional
        Existing working copy to operate on.
    """

    def __init__(
        self,
        url: str,
        adapter: BackendAdapter,
        pointer: Optional[Pointer] = None,
        credentials: Optional[Credentials] = None,
        base_paths: Union[BasePaths, Mapping[str, str], None] = None,
        working_copy: Optional[PathLike] = None,
    ) -> None:
        if not isinstance(url, str) or not url.strip():
            raise ConfigurationError("Repository URL must be a non-empty string")
        if not isinstance(adapter, BackendAdapter):
            raise ConfigurationError("adapter must be a BackendAdapter")
        self._url = url.strip().rstrip("/")
        self._adapter = adapter
        paths = coerce_base_paths(base_paths)
        if paths is not None:
            # Layout overrides stay private to this client
            self._adapter = copy.copy(adapter)
            self._adapter.base_paths = paths
        self._pointer = Pointer.trunk()
        if pointer is not None:
            self.set_pointer(pointer)
        self._credentials = credentials or Credentials()
        self._working_copy: Optional[Path] = Path(working_copy) if working_copy else None
        # Private clone for backends that read history locally
        self._scratch: Optional[Path] = None
        self._output: Optional[Callable[[str], None]] = None

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------
    @classmethod
    def svn(
        cls,
        url: str,
        binary: str = "svn",
        timeout: Optional[float] = None,
        base_paths: Union[BasePaths, Mapping[str, str], None] = None,
        **kwargs: Any,
    ) -> "VcsClient":
        """Create a Subversion client using the ``svn`` binary."""
        adapter = SvnAdapter(CommandExecutor(binary, timeout=timeout), base_paths=coerce_base_paths(base_paths))
        return cls(url, adapter, **kwargs)

    @classmethod
    def git(
        cls,
        url: str,
        binary: str = "git",
        timeout: Optional[float] = None,
        base_paths: Union[BasePaths, Mapping[str, str], None] = None,
        trunk_branch: str = "master",
        remote: str = "origin",
        **kwargs: Any,
    ) -> "VcsClient":
        """Create a Git client using the ``git`` binary."""
        executor = CommandExecutor(binary, env=NON_INTERACTIVE_ENV, timeout=timeout)
        adapter = GitAdapter(
            executor,
            base_paths=coerce_base_paths(base_paths),
            trunk_branch=trunk_branch,
            remote=remote,
        )
        return cls(url, adapter, **kwargs)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def url(self) -> str:
        return self._url

    @property
    def adapter(self) -> BackendAdapter:
        return self._adapter

    @property
    def pointer(self) -> Pointer:
        return self._pointer

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    @property
    def working_copy(self) -> Optional[Path]:
        return self._working_copy

    def set_pointer(self, pointer: Pointer) -> "VcsClient":
        """Replace the active pointer.

        The working copy is left untouched; the next operation resolves
        against the new pointer.
        """
        if not isinstance(pointer, Pointer):
            raise ConfigurationError(f"Expected a Pointer, got {type(pointer).__name__}")
        logger.debug("Switching pointer to %s", pointer)
        self._pointer = pointer
        return self

    def set_credentials(self, username: Optional[str], password: Optional[str]) -> "VcsClient":
        self._credentials = Credentials(username or None, password or None)
        return self

    def set_output(self, output: Optional[Callable[[str], None]]) -> "VcsClient":
        """Pass the raw output of every backend command to ``output``.

        ``None`` switches forwarding off.
        """
        if output is not None and not callable(output):
            raise ConfigurationError("output must be callable")
        self._output = output
        return self

    def resolve(self, path: str = "") -> str:
        """Return the backend location of ``path`` at the active pointer."""
        return self._adapter.resolve(self._url, self._pointer, path)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------
    def execute(self, command: Command) -> str:
        """Run ``command`` and classify failures.

        Raises
        ------
        NotFoundError
            If the failure text matches one of the adapter's error rules.
        ExecutionError
            Any other failure, unchanged.
        """
        try:
            output = self._adapter.execute(command, self._credentials, cwd=self._repository_dir())
        except ExecutionError as exc:
            message = str(exc)
            for rule in self._adapter.error_rules:
                if rule.matches(message):
                    logger.debug("Classified failure of '%s' as %s", command.name, rule.error.__name__)
                    raise rule.error(message) from exc
            raise
        if self._output is not None:
            self._output(output)
        return output

    def _run(self, operation: str, **params: Any) -> str:
        output = ""
        for command in self._adapter.build(operation, **params):
            output = self.execute(command)
        return output

    def _repository_dir(self) -> Optional[Path]:
        return self._working_copy or self._scratch

    def _ensure_repository(self) -> None:
        """Prepare the local repository of backends that read history locally.

        The first call clones into a temporary directory unless a working
        copy exists; later calls fetch, so reads see the remote as it is now.
        """
        if not self._adapter.requires_local_repository:
            return
        if self._repository_dir() is not None:
            self._run("refresh", url=self._url, credentials=self._credentials)
            return
        scratch = Path(tempfile.mkdtemp(prefix="vcu-"))
        logger.info("Cloning %s into %s", self._url, scratch)
        try:
            self._run(
                "checkout",
                url=self._url,
                pointer=self._pointer,
                location=self.resolve(""),
                target=scratch,
                credentials=self._credentials,
            )
        except Exception:
            shutil.rmtree(scratch, ignore_errors=True)
            raise
        self._scratch = scratch

    def _require_working_copy(self) -> Path:
        if self._working_copy is None:
            raise ConfigurationError("No working copy; call checkout() first")
        return self._working_copy

    def close(self) -> None:
        """Remove the temporary clone, if one was created."""
        if self._scratch is not None:
            shutil.rmtree(self._scratch, ignore_errors=True)
            self._scratch = None

    def __enter__(self) -> "VcsClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def ls(self, path: str = "") -> List[FileInfo]:
        """List ``path``, directories first, names in natural order."""
        self._ensure_repository()
        location = self.resolve(path)
        kind = self._run("kind", location=location)
        raw = self._run("ls", location=location, kind=kind)
        return sort_entries(self._adapter.parser.parse_listing(raw))

    def cat(self, path: str) -> str:
        """Return the content of the file at ``path``."""
        self._ensure_repository()
        return self._run("cat", location=self.resolve(path))

    def log(self, path: str = "") -> List[Commit]:
        """Return the history of ``path``, newest first."""
        self._ensure_repository()
        raw = self._run("log", location=self.resolve(path))
        return self._adapter.parser.parse_log(raw)

    def checkout(self, target: PathLike) -> None:
        """Create a working copy of the active pointer in ``target``.

        Subsequent ``status``, ``add`` and ``commit`` calls operate on it.
        """
        target = Path(target).absolute()
        self._run(
            "checkout",
            url=self._url,
            pointer=self._pointer,
            location=self.resolve(""),
            target=target,
            credentials=self._credentials,
        )
        self._working_copy = target

    def export(self, path: str, target: PathLike) -> None:
        """Write ``path`` without version control metadata below ``target``.

        The root is exported into ``target`` itself; any other path lands
        in ``target/<basename of path>``.
        """
        self._ensure_repository()
        target = Path(target).absolute()
        target.mkdir(parents=True, exist_ok=True)
        try:
            self._run("export", location=self.resolve(path), path=path, target=target)
        except Exception:
            self._adapter.discard_export(target)
            raise
        self._adapter.finish_export(target)

    def status(self) -> List[FileInfo]:
        """Return the changes of the working copy against its base."""
        working_copy = self._require_working_copy()
        raw = self._run("status")
        return self._adapter.parser.parse_status(raw, base_dir=working_copy)

    def add(self, path: str) -> None:
        """Schedule ``path`` for the next commit."""
        self._require_working_copy()
        self._run("add", path=path)

    def commit(self, message: str) -> None:
        """Create a new revision in the repository from the scheduled changes."""
        self._require_working_copy()
        self._run(
            "commit",
            message=message,
            pointer=self._pointer,
            url=self._url,
            credentials=self._credentials,
        )

    def diff(
        self,
        old_path: str,
        new_path: str,
        old_revision: str,
        new_revision: Optional[str] = None,
    ) -> List[FileInfo]:
        """Summarize differences between ``old_path@old_revision`` and ``new_path``.

        ``new_revision`` defaults to the head of the active pointer.
        """
        self._ensure_repository()
        raw = self._run(
            "diff",
            old_location=self.resolve(old_path),
            new_location=self.resolve(new_path),
            old_revision=str(old_revision),
            new_revision=str(new_revision) if new_revision is not None else None,
        )
        return self._adapter.parser.parse_diff(raw, base=self.resolve(""))

    def branches(self) -> List[str]:
        """Return the branch names of the repository."""
        raw = self._run("branches", url=self._url, credentials=self._credentials)
        return sort_names(self._adapter.parser.parse_refs(raw))

    def tags(self) -> List[str]:
        """Return the tag names of the repository."""
        raw = self._run("tags", url=self._url, credentials=self._credentials)
        return sort_names(self._adapter.parser.parse_refs(raw))


CLIENT_FACTORIES: Dict[str, Callable[..., VcsClient]] = {
    "svn": VcsClient.svn,
    "git": VcsClient.git,
}


def create_client(kind: str, url: str, **options: Any) -> VcsClient:
    """Create a client for backend ``kind`` (``"svn"`` or ``"git"``).

    Raises
    ------
    ConfigurationError
        If ``kind`` is not a known backend.
    """
    factory = CLIENT_FACTORIES.get(kind)
    if factory is None:
        raise ConfigurationError(f"Unknown VCS kind '{kind}'; expected one of: {', '.join(sorted(CLIENT_FACTORIES))}")
    return factory(url, **options)
