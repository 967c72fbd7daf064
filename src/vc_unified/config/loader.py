"""
Configuration loader for vc_unified.

The ``vcu`` command reads an optional JSON file, by default
``~/.vc_unified/config.json``. The location can be overridden with the
``VCU_CONFIG`` environment variable or an explicit path. Every key is
optional:

``vcs``
    Backend kind, ``"svn"`` or ``"git"``.
``svn_binary`` / ``git_binary``
    Executables to invoke.
``base_paths``
    Object with ``trunk``, ``tags`` and ``branches`` entries.
``trunk_branch`` / ``remote``
    Git branch the trunk pointer maps to, and the remote name.
``username`` / ``password``
    Credentials.
``timeout``
    Seconds after which a backend command is aborted.

A malformed file raises :class:`ConfigurationError`.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from vc_unified.exceptions import ConfigurationError


logger = logging.getLogger(__name__)
# Attach a null handler to avoid "No handler" warnings in environments where
# the root logger is not configured. The CLI configures logging explicitly.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


ENV_VAR = "VCU_CONFIG"
SUPPORTED_VCS = ("svn", "git")
STRING_KEYS = ("svn_binary", "git_binary", "trunk_branch", "remote", "username", "password")
KNOWN_KEYS = frozenset(STRING_KEYS + ("vcs", "base_paths", "timeout"))


def _get_config_directory() -> Path:
    """Return ``~/.vc_unified``, the default configuration directory."""
    return Path.home() / ".vc_unified"


def default_config_path() -> Path:
    override = os.environ.get(ENV_VAR)
    if override:
        return Path(override)
    return _get_config_directory() / "config.json"


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load and validate the configuration.

    Args:
        path: Explicit configuration file. When omitted, the ``VCU_CONFIG``
              environment variable or ``~/.vc_unified/config.json`` is used,
              and a missing file yields an empty configuration.

    Returns:
        The validated configuration dictionary.

    Raises:
        ConfigurationError: If an explicit file is missing, or the file is
            not valid JSON, or a value has the wrong type.
    """
    explicit = path is not None or bool(os.environ.get(ENV_VAR))
    config_path = Path(path) if path is not None else default_config_path()

    if not config_path.exists():
        if explicit:
            logger.error("Configuration file '%s' does not exist", config_path)
            raise ConfigurationError(f"Missing configuration file: {config_path}")
        logger.debug("No configuration file at %s; using defaults", config_path)
        return {}

    try:
        content = config_path.read_text(encoding="utf-8")
        data = json.loads(content)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to read or parse configuration file: %s", exc)
        raise ConfigurationError(f"Invalid JSON in {config_path.name}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError("Configuration must be a JSON object")

    unknown = sorted(set(data) - KNOWN_KEYS)
    if unknown:
        logger.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))

    if "vcs" in data and data["vcs"] not in SUPPORTED_VCS:
        raise ConfigurationError(f"'vcs' must be one of: {', '.join(SUPPORTED_VCS)}")
    for key in STRING_KEYS:
        if key in data and not isinstance(data[key], str):
            raise ConfigurationError(f"'{key}' must be a string")
    if "timeout" in data and (isinstance(data["timeout"], bool) or not isinstance(data["timeout"], (int, float))):
        raise ConfigurationError("'timeout' must be a number")
    if "base_paths" in data:
        base_paths = data["base_paths"]
        if not isinstance(base_paths, dict):
            raise ConfigurationError("'base_paths' must be an object")
        for key, value in base_paths.items():
            if key not in ("trunk", "tags", "branches"):
                raise ConfigurationError(f"Unknown base path '{key}'")
            if not isinstance(value, str):
                raise ConfigurationError(f"Base path '{key}' must be a string")

    logger.debug("Loaded configuration from: %s", config_path)
    return {key: value for key, value in data.items() if key in KNOWN_KEYS}


def client_options(config: Dict[str, Any], vcs: str) -> Dict[str, Any]:
    """Translate configuration keys into keyword arguments for ``create_client``."""
    options: Dict[str, Any] = {}
    binary = config.get(f"{vcs}_binary")
    if binary:
        options["binary"] = binary
    if "timeout" in config:
        options["timeout"] = float(config["timeout"])
    if "base_paths" in config:
        options["base_paths"] = dict(config["base_paths"])
    if vcs == "git":
        for key in ("trunk_branch", "remote"):
            if key in config:
                options[key] = config[key]
    return options
