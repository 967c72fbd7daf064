"""
Version control system (VCS) backends.

This package contains the adapter and parser interfaces and their
Subversion and Git implementations. Adapters translate normalized
operations into backend commands; parsers turn the backend's output into
:mod:`vc_unified.common` records.
"""

from .base import BackendAdapter, ErrorRule, OutputParser  # noqa: F401
from .git_adapter import GitAdapter  # noqa: F401
from .git_parser import GitParser  # noqa: F401
from .svn_adapter import SvnAdapter  # noqa: F401
from .svn_parser import SvnParser  # noqa: F401
