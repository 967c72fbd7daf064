"""
Subversion backend adapter.

Subversion addresses every branch and tag as a directory below the
repository URL, so resolving a pointer is pure string work on the URL.
Read operations run directly against the repository; ``status``, ``add``
and ``commit`` run inside the working copy created by ``checkout``.
"""

from __future__ import annotations

import posixpath
from pathlib import Path
from typing import Any, Dict, List, Optional

from vc_unified.common.models import BasePaths, Credentials
from vc_unified.common.pointer import Pointer, PointerType
from vc_unified.execution.executor import Command, CommandExecutor
from vc_unified.vcs.base import BackendAdapter, ErrorRule, OutputParser
from vc_unified.vcs.svn_parser import SvnParser


# Optional "svn: E170000: " / "svn: warning: W160013: " prefixes
_PREFIX = r"svn: (?:warning: )?(?:[EW]\d+: )?"


class SvnAdapter(BackendAdapter):
    """Adapter for the ``svn`` command line client."""

    kind = "svn"
    requires_local_repository = False
    error_rules = (
        ErrorRule.not_found(_PREFIX + r"URL '[^']+' non-existent in that revision"),
        ErrorRule.not_found(_PREFIX + r"URL '[^']+' doesn't exist"),
        ErrorRule.not_found(_PREFIX + r"File not found"),
        ErrorRule.not_found(_PREFIX + r"'[^']+' path not found"),
        ErrorRule.not_found(_PREFIX + r"The node '[^']+' was not found"),
    )

    def __init__(
        self,
        executor: Optional[CommandExecutor] = None,
        parser: Optional[OutputParser] = None,
        base_paths: Optional[BasePaths] = None,
        binary: str = "svn",
    ) -> None:
        super().__init__(executor or CommandExecutor(binary), parser or SvnParser(), base_paths)

    # ------------------------------------------------------------------
    # Addressing
    # ------------------------------------------------------------------
    def base_segment(self, pointer: Pointer) -> str:
        """Return the repository directory that holds ``pointer``."""
        if pointer.type is PointerType.TAG:
            return f"{self.base_paths.tags}/{pointer.name}"
        if pointer.is_trunk:
            return self.base_paths.trunk
        return f"{self.base_paths.branches}/{pointer.name}"

    def resolve(self, url: str, pointer: Pointer, path: str = "") -> str:
        location = url
        base = self.base_segment(pointer)
        if base:
            location += "/" + base
        location += "/" + path.lstrip("/")
        return location.rstrip("/")

    def global_arguments(self, credentials: Credentials) -> Dict[str, Any]:
        args: Dict[str, Any] = {"--non-interactive": True}
        if credentials.username:
            args["--username"] = credentials.username
        if credentials.password:
            args["--password"] = credentials.password
        return args

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def _build_ls(self, location: str, **_: Any) -> List[Command]:
        return [Command("list", {"--xml": True}, (location,))]

    def _build_cat(self, location: str, **_: Any) -> List[Command]:
        return [Command("cat", {}, (location,))]

    def _build_log(self, location: str, **_: Any) -> List[Command]:
        return [Command("log", {"--xml": True, "--verbose": True}, (location,))]

    def _build_checkout(self, location: str, target: Path, **_: Any) -> List[Command]:
        return [Command("checkout", {}, (location, str(target)))]

    def _build_export(self, location: str, target: Path, path: str = "", **_: Any) -> List[Command]:
        name = posixpath.basename(path.strip("/"))
        destination = Path(target) / name if name else Path(target)
        return [Command("export", {"--force": True}, (location, str(destination)))]

    def _build_status(self, **_: Any) -> List[Command]:
        return [Command("status", {"--xml": True})]

    def _build_add(self, path: str, **_: Any) -> List[Command]:
        # --force skips paths that are already versioned
        return [Command("add", {"--force": True}, ("--", path))]

    def _build_commit(self, message: str, **_: Any) -> List[Command]:
        return [Command("commit", {"-m": message})]

    def _build_diff(
        self,
        old_location: str,
        new_location: str,
        old_revision: str,
        new_revision: Optional[str] = None,
        **_: Any,
    ) -> List[Command]:
        arguments = {
            "--summarize": True,
            "--xml": True,
            "--old": f"{old_location}@{old_revision}",
            "--new": f"{new_location}@{new_revision or 'HEAD'}",
        }
        return [Command("diff", arguments)]

    def _build_branches(self, url: str, **_: Any) -> List[Command]:
        return [Command("list", {"--xml": True}, (f"{url}/{self.base_paths.branches}",))]

    def _build_tags(self, url: str, **_: Any) -> List[Command]:
        return [Command("list", {"--xml": True}, (f"{url}/{self.base_paths.tags}",))]
