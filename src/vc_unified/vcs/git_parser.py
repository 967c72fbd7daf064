"""
Parser for Git command output.

The adapter asks Git for NUL separated output wherever Git offers it
(``ls-tree -z``, ``status --porcelain -z``, ``diff --name-status -z``) so
that file names never need unquoting. History is requested with a custom
``--format`` using ASCII record and unit separators, see :data:`LOG_FORMAT`.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from vc_unified.common.models import Commit, FileInfo, FileKind, Status
from vc_unified.vcs.base import OutputParser


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


RECORD_SEPARATOR = "\x1e"
UNIT_SEPARATOR = "\x1f"

#: ``git log --format`` producing hash, author, ISO date and body per record
LOG_FORMAT = "%x1e%H%x1f%an%x1f%aI%x1f%B%x1f"

# First letter of porcelain / name-status codes
STATUS_CODES: Dict[str, Status] = {
    "A": Status.ADDED,
    "C": Status.ADDED,
    "M": Status.MODIFIED,
    "T": Status.MODIFIED,
    "D": Status.DELETED,
    "R": Status.REPLACED,
    "U": Status.CONFLICTED,
    "?": Status.UNVERSIONED,
    "!": Status.IGNORED,
}

REF_PREFIXES = ("refs/heads/", "refs/tags/", "refs/remotes/")


def _records(raw: str) -> List[str]:
    """Split NUL separated output, falling back to lines."""
    if "\0" in raw:
        return [record for record in raw.split("\0") if record]
    return [line for line in raw.splitlines() if line.strip()]


def parse_git_date(text: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(text.strip())
    except ValueError:
        logger.debug("Unrecognized git date: %s", text)
        return None


class GitParser(OutputParser):
    """Parses the output of ``git ls-tree``, ``log``, ``status``, ``diff`` and ``ls-remote``."""

    def parse_listing(self, raw: str) -> List[FileInfo]:
        entries: List[FileInfo] = []
        for record in _records(raw):
            # <mode> SP <type> SP <object> TAB <name>
            meta, sep, name = record.partition("\t")
            fields = meta.split()
            if not sep or len(fields) != 3 or not name:
                continue
            kind = FileKind.FILE if fields[1] == "blob" else FileKind.DIR
            entries.append(FileInfo(name.rstrip("/").rsplit("/", 1)[-1], kind))
        return entries

    def parse_log(self, raw: str) -> List[Commit]:
        commits: List[Commit] = []
        for record in raw.split(RECORD_SEPARATOR):
            fields = record.split(UNIT_SEPARATOR)
            if len(fields) < 4 or not fields[0].strip():
                continue
            rest = fields[4] if len(fields) > 4 else ""
            commits.append(
                Commit(
                    revision=fields[0].strip(),
                    author=fields[1],
                    date=parse_git_date(fields[2]),
                    message=fields[3].strip(),
                    changed_paths=tuple(line.strip() for line in rest.splitlines() if line.strip()),
                )
            )
        return commits

    def parse_status(self, raw: str, base_dir: Optional[Path] = None) -> List[FileInfo]:
        entries: List[FileInfo] = []
        records = _records(raw)
        index = 0
        while index < len(records):
            record = records[index]
            index += 1
            # XY SP path; renames and copies are followed by the original path
            if len(record) < 4 or record[2] != " ":
                continue
            code = record[:2]
            path = record[3:]
            if code[0] in "RC":
                index += 1
            letter = code[0] if code[0] not in (" ", "?", "!") else code[1]
            if code == "??":
                letter = "?"
            elif code == "!!":
                letter = "!"
            status = STATUS_CODES.get(letter)
            if status is None:
                continue
            kind = FileKind.DIR if path.endswith("/") else FileKind.FILE
            entries.append(FileInfo(path.rstrip("/"), kind, None, status))
        return entries

    def parse_diff(self, raw: str, base: str = "") -> List[FileInfo]:
        entries: List[FileInfo] = []
        records = _records(raw)
        if "\0" not in raw:
            # Tab separated "<code>\t<path>[\t<path>]" lines
            records = [field for line in records for field in line.split("\t")]
        # ``base`` may be a <ref>:<path> tree-ish; names are relative to its path
        base = base.partition(":")[2] if ":" in base else base
        base = base.strip("/")
        index = 0
        while index < len(records):
            code = records[index]
            index += 1
            status = STATUS_CODES.get(code[:1])
            score = code[1:]
            if status is None or (score and not score.isdigit()):
                continue
            if code[0] in "RC":
                # Old path, then new path
                index += 1
            if index >= len(records):
                break
            name = records[index]
            index += 1
            if base and name.startswith(base + "/"):
                name = name[len(base) + 1:]
            entries.append(FileInfo(name, FileKind.FILE, None, status))
        return entries

    def parse_refs(self, raw: str) -> List[str]:
        names: List[str] = []
        for line in raw.splitlines():
            _, sep, ref = line.partition("\t")
            ref = ref.strip() if sep else line.strip()
            if ref.endswith("^{}"):
                continue
            for prefix in REF_PREFIXES:
                if ref.startswith(prefix):
                    ref = ref[len(prefix):]
                    break
            else:
                continue
            if ref and ref not in names:
                names.append(ref)
        return names
