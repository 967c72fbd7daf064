"""
Configuration loading for vc_unified.

Provides a loader for the optional JSON configuration file used by the
``vcu`` command. See :mod:`vc_unified.config.loader` for details.
"""

from .loader import ConfigurationError, client_options, load_config  # noqa: F401
