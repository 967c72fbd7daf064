"""
Listing sort order shared by all backends.

Directories come before files. Within one kind, names are compared case
insensitively with natural ordering, so ``file2`` sorts before ``file10``.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Tuple, Union

from .models import FileInfo


_DIGITS = re.compile(r"(\d+)")


def natural_key(name: str) -> Tuple[Union[str, int], ...]:
    """Return a sort key that orders embedded numbers by value.

    ``re.split`` with a capturing group alternates text and digit runs,
    starting with text, so keys of different names always compare
    position by position as str against str and int against int.
    """
    parts = _DIGITS.split(name.lower())
    return tuple(int(part) if index % 2 else part for index, part in enumerate(parts))


def sort_entries(entries: Iterable[FileInfo]) -> List[FileInfo]:
    """Return ``entries`` with directories first, each group in natural order."""
    return sorted(entries, key=lambda entry: (0 if entry.is_dir() else 1, natural_key(entry.name)))


def sort_names(names: Iterable[str]) -> List[str]:
    return sorted(names, key=natural_key)
