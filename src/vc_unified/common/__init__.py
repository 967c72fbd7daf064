"""
Backend independent data model.

Pointers, file entries, commits, credentials and the listing sort order
live here so that adapters and the client share one vocabulary.
"""

from .models import BasePaths, Commit, Credentials, FileInfo, FileKind, Status  # noqa: F401
from .pointer import Pointer, PointerType  # noqa: F401
from .sorting import natural_key, sort_entries  # noqa: F401
