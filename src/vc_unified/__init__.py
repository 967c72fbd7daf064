"""
Top-level package for vc_unified.

The package offers one client API over the Subversion and Git command
line tools. Most callers only need :class:`vc_unified.client.VcsClient`
and :func:`vc_unified.client.create_client`; the ``vcu`` command is
defined in :mod:`vc_unified.cli`.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
