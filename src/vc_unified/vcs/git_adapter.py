"""
Git backend adapter.

Git has no directory layout for branches and tags, and it cannot read
history of a remote repository without a local clone. A pointer is
therefore resolved to a remote-tracking ref, and a location is a
``<ref>:<path>`` tree-ish evaluated inside the client's local clone.

Committing publishes the revision: the local commit is pushed to the
pointer's branch on the remote, which matches what ``svn commit`` does.
"""

from __future__ import annotations

import logging
import posixpath
import tarfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote, urlsplit, urlunsplit

from vc_unified.common.models import BasePaths, Credentials
from vc_unified.common.pointer import Pointer, PointerType
from vc_unified.exceptions import ConfigurationError
from vc_unified.execution.executor import Command, CommandExecutor
from vc_unified.vcs.base import BackendAdapter, ErrorRule, OutputParser
from vc_unified.vcs.git_parser import LOG_FORMAT, GitParser


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


#: Temporary archive written by ``export`` before extraction
EXPORT_ARCHIVE = ".vcu-export.tar"

#: Environment that keeps git from prompting for credentials
NON_INTERACTIVE_ENV = {"GIT_TERMINAL_PROMPT": "0"}


class GitAdapter(BackendAdapter):
    """Adapter for the ``git`` command line client.

    Parameters
    ----------
    trunk_branch : str
        Branch the ``trunk`` pointer maps to.
    remote : str
        Name given to the cloned remote.
    """

    kind = "git"
    requires_local_repository = True
    error_rules = (
        ErrorRule.not_found(r"fatal: path '[^']+' does not exist in '[^']+'"),
        ErrorRule.not_found(r"fatal: path '[^']+' exists on disk, but not in '[^']+'"),
        ErrorRule.not_found(r"fatal: [Nn]ot a valid object name"),
        ErrorRule.not_found(r"fatal: invalid object name"),
        ErrorRule.not_found(r"fatal: bad revision"),
        ErrorRule.not_found(r"fatal: pathspec '[^']+' did not match any files"),
        ErrorRule.not_found(r"[Rr]emote branch \S+ not found in upstream"),
    )

    def __init__(
        self,
        executor: Optional[CommandExecutor] = None,
        parser: Optional[OutputParser] = None,
        base_paths: Optional[BasePaths] = None,
        binary: str = "git",
        trunk_branch: str = "master",
        remote: str = "origin",
    ) -> None:
        if not trunk_branch or not isinstance(trunk_branch, str):
            raise ConfigurationError("trunk_branch must be a non-empty string")
        if not remote or not isinstance(remote, str):
            raise ConfigurationError("remote must be a non-empty string")
        super().__init__(
            executor or CommandExecutor(binary, env=NON_INTERACTIVE_ENV),
            parser or GitParser(),
            base_paths,
        )
        self.trunk_branch = trunk_branch
        self.remote = remote

    # ------------------------------------------------------------------
    # Addressing
    # ------------------------------------------------------------------
    def branch_name(self, pointer: Pointer) -> str:
        """Return the branch or tag name ``pointer`` denotes on the remote."""
        if pointer.is_trunk:
            return self.trunk_branch
        return pointer.name

    def ref(self, pointer: Pointer) -> str:
        if pointer.type is PointerType.TAG:
            return f"refs/tags/{pointer.name}"
        return f"{self.remote}/{self.branch_name(pointer)}"

    def resolve(self, url: str, pointer: Pointer, path: str = "") -> str:
        return f"{self.ref(pointer)}:{path.strip('/')}"

    @staticmethod
    def split_location(location: str) -> Tuple[str, str]:
        """Split a ``<ref>:<path>`` tree-ish; ref names cannot contain colons."""
        ref, _, path = location.partition(":")
        return ref, path

    def remote_url(self, url: str, credentials: Credentials) -> str:
        """Return ``url`` with credentials embedded for http(s) remotes."""
        parts = urlsplit(url)
        if not credentials.username or parts.scheme not in ("http", "https"):
            return url
        userinfo = quote(credentials.username, safe="")
        if credentials.password:
            userinfo += ":" + quote(credentials.password, safe="")
        host = parts.netloc.rsplit("@", 1)[-1]
        return urlunsplit((parts.scheme, f"{userinfo}@{host}", parts.path, parts.query, parts.fragment))

    def global_arguments(self, credentials: Credentials) -> Dict[str, Any]:
        # Git takes no credential flags; prompting is disabled through the
        # executor environment and credentials travel in the remote URL.
        return {}

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def _build_kind(self, location: str, **_: Any) -> List[Command]:
        return [Command("cat-file", {"-t": True}, (location,))]

    def _build_ls(self, location: str, kind: str = "", **_: Any) -> List[Command]:
        if kind.strip() == "blob":
            # A file lists as its own entry of the parent tree
            ref, path = self.split_location(location)
            parent, name = posixpath.split(path)
            return [Command("ls-tree", {"-z": True}, (f"{ref}:{parent}", "--", name))]
        return [Command("ls-tree", {"-z": True}, (location,))]

    def _build_cat(self, location: str, **_: Any) -> List[Command]:
        return [Command("show", {}, (location,))]

    def _build_log(self, location: str, **_: Any) -> List[Command]:
        ref, path = self.split_location(location)
        operands = (ref, "--") + ((path,) if path else ())
        return [Command("log", {"--format": LOG_FORMAT, "--name-only": True}, operands)]

    def _build_checkout(
        self,
        url: str,
        pointer: Pointer,
        target: Path,
        credentials: Optional[Credentials] = None,
        **_: Any,
    ) -> List[Command]:
        arguments: Dict[str, Any] = {"--branch": self.branch_name(pointer)}
        if self.remote != "origin":
            arguments["--origin"] = self.remote
        remote_url = self.remote_url(url, credentials or Credentials())
        commands = [Command("clone", arguments, (remote_url, str(target)))]
        if remote_url != url:
            # git stores the clone URL in .git/config; keep credentials out of it
            commands.append(Command("remote", {}, ("set-url", self.remote, url), cwd=Path(target)))
        return commands

    def _build_refresh(self, url: str, credentials: Optional[Credentials] = None, **_: Any) -> List[Command]:
        remote_url = self.remote_url(url, credentials or Credentials())
        refspec = f"+refs/heads/*:refs/remotes/{self.remote}/*"
        return [Command("fetch", {"--prune": True, "--tags": True, "--force": True}, (remote_url, refspec))]

    def _build_export(self, location: str, target: Path, **_: Any) -> List[Command]:
        ref, path = self.split_location(location)
        parent, name = posixpath.split(path)
        archive = Path(target) / EXPORT_ARCHIVE
        operands = (f"{ref}:{parent}",) + ((name,) if name else ())
        return [Command("archive", {"--format": "tar", "--output": str(archive)}, operands)]

    def finish_export(self, target: Path) -> None:
        """Unpack the archive written by ``export`` into ``target``."""
        archive = Path(target) / EXPORT_ARCHIVE
        if not archive.exists():
            return
        logger.debug("Extracting %s into %s", archive, target)
        try:
            with tarfile.open(archive) as tar:
                if hasattr(tarfile, "data_filter"):
                    tar.extractall(target, filter="data")
                else:
                    tar.extractall(target)
        finally:
            archive.unlink()

    def discard_export(self, target: Path) -> None:
        """Remove a partial archive left by a failed ``export``."""
        archive = Path(target) / EXPORT_ARCHIVE
        if archive.exists():
            archive.unlink()

    def _build_status(self, **_: Any) -> List[Command]:
        return [Command("status", {"--porcelain": True, "-z": True, "--untracked-files": "all"})]

    def _build_add(self, path: str, **_: Any) -> List[Command]:
        return [Command("add", {}, ("--", path))]

    def _build_commit(
        self,
        message: str,
        pointer: Pointer,
        url: str = "",
        credentials: Optional[Credentials] = None,
        **_: Any,
    ) -> List[Command]:
        if pointer.type is PointerType.TAG:
            raise ConfigurationError(f"Cannot commit on tag '{pointer.name}'")
        refspec = f"HEAD:refs/heads/{self.branch_name(pointer)}"
        # Push to the URL so current credentials apply; the remote keeps none
        destination = self.remote_url(url, credentials or Credentials()) if url else self.remote
        return [
            Command("commit", {"-m": message}),
            Command("push", {}, (destination, refspec)),
        ]

    def _build_diff(
        self,
        old_location: str,
        new_location: str,
        old_revision: str,
        new_revision: Optional[str] = None,
        **_: Any,
    ) -> List[Command]:
        _, old_path = self.split_location(old_location)
        new_ref, new_path = self.split_location(new_location)
        paths = [path for path in dict.fromkeys([old_path, new_path]) if path]
        operands = (old_revision, new_revision or new_ref, "--") + tuple(paths)
        return [Command("diff", {"--name-status": True, "-z": True}, operands)]

    def _build_branches(self, url: str, credentials: Optional[Credentials] = None, **_: Any) -> List[Command]:
        remote_url = self.remote_url(url, credentials or Credentials())
        return [Command("ls-remote", {"--heads": True}, (remote_url,))]

    def _build_tags(self, url: str, credentials: Optional[Credentials] = None, **_: Any) -> List[Command]:
        remote_url = self.remote_url(url, credentials or Credentials())
        return [Command("ls-remote", {"--tags": True}, (remote_url,))]
