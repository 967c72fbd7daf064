"""
Parser for Subversion command output.

Every Subversion command used by the adapter is run with ``--xml``, so
parsing reduces to walking the element tree. Elements or attributes that
are not understood are skipped.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import unquote

from vc_unified.common.models import Commit, FileInfo, FileKind, Status
from vc_unified.vcs.base import OutputParser


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# ``item`` attribute of <wc-status> and of summarized diff <path> elements
STATUS_ITEMS: Dict[str, Status] = {
    "unversioned": Status.UNVERSIONED,
    "added": Status.ADDED,
    "modified": Status.MODIFIED,
    "deleted": Status.DELETED,
    "replaced": Status.REPLACED,
    "conflicted": Status.CONFLICTED,
    "missing": Status.MISSING,
    "incomplete": Status.MISSING,
    "ignored": Status.IGNORED,
    "external": Status.EXTERNAL,
    "obstructed": Status.OBSTRUCTED,
}

PROP_ITEMS: Dict[str, Status] = {
    "modified": Status.MODIFIED,
    "conflicted": Status.CONFLICTED,
}


def parse_svn_date(text: Optional[str]) -> Optional[datetime]:
    """Parse an ``svn`` timestamp such as ``2012-06-13T14:18:06.123456Z``."""
    if not text:
        return None
    value = text.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        logger.debug("Unrecognized svn date: %s", text)
        return None


def _kind(value: Optional[str]) -> FileKind:
    return FileKind.DIR if value == "dir" else FileKind.FILE


class SvnParser(OutputParser):
    """Parses the XML output of ``svn list``, ``log``, ``status`` and ``diff``."""

    def _root(self, raw: str) -> Optional[ET.Element]:
        if not raw or not raw.strip():
            return None
        try:
            return ET.fromstring(raw)
        except ET.ParseError as exc:
            logger.warning("Ignoring unparsable svn XML output: %s", exc)
            return None

    def parse_listing(self, raw: str) -> List[FileInfo]:
        root = self._root(raw)
        if root is None:
            return []
        entries: List[FileInfo] = []
        for entry in root.iter("entry"):
            name = entry.findtext("name")
            if not name:
                continue
            commit = entry.find("commit")
            revision = commit.get("revision") if commit is not None else None
            entries.append(FileInfo(name, _kind(entry.get("kind")), revision))
        return entries

    def parse_log(self, raw: str) -> List[Commit]:
        root = self._root(raw)
        if root is None:
            return []
        commits: List[Commit] = []
        for entry in root.iter("logentry"):
            revision = entry.get("revision")
            if not revision:
                continue
            paths = tuple((path.text or "").strip() for path in entry.iter("path") if path.text)
            commits.append(
                Commit(
                    revision=revision,
                    author=entry.findtext("author") or "",
                    date=parse_svn_date(entry.findtext("date")),
                    message=(entry.findtext("msg") or "").strip(),
                    changed_paths=paths,
                )
            )
        return commits

    def parse_status(self, raw: str, base_dir: Optional[Path] = None) -> List[FileInfo]:
        root = self._root(raw)
        if root is None:
            return []
        entries: List[FileInfo] = []
        for entry in root.iter("entry"):
            path = entry.get("path")
            wc_status = entry.find("wc-status")
            if not path or wc_status is None:
                continue
            status = STATUS_ITEMS.get(wc_status.get("item", ""))
            if status is None:
                # Content unchanged; property changes still count
                status = PROP_ITEMS.get(wc_status.get("props", ""))
            if status is None:
                continue
            name = path.replace("\\", "/")
            kind = FileKind.FILE
            if base_dir is not None and (Path(base_dir) / name).is_dir():
                kind = FileKind.DIR
            entries.append(FileInfo(name, kind, wc_status.get("revision"), status))
        return entries

    def parse_diff(self, raw: str, base: str = "") -> List[FileInfo]:
        root = self._root(raw)
        if root is None:
            return []
        base = unquote(base).rstrip("/")
        entries: List[FileInfo] = []
        for path in root.iter("path"):
            if not path.text:
                continue
            status = STATUS_ITEMS.get(path.get("item", "")) or PROP_ITEMS.get(path.get("props", ""))
            if status is None:
                continue
            name = unquote(path.text.strip())
            if base and (name == base or name.startswith(base + "/")):
                name = name[len(base) + 1:]
            entries.append(FileInfo(name, _kind(path.get("kind")), None, status))
        return entries

    def parse_refs(self, raw: str) -> List[str]:
        return [entry.name for entry in self.parse_listing(raw) if entry.is_dir()]
