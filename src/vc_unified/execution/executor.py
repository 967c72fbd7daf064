"""
Subprocess based command executor.

The executor knows nothing about Subversion or Git semantics. It renders
an options map into command line flags, runs the backend binary and
returns its standard output. A non-zero exit status becomes an
:class:`~vc_unified.exceptions.ExecutionError` carrying the tool's own
error text so that the client can classify it.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from vc_unified.exceptions import ExecutionError


logger = logging.getLogger(__name__)
# Attach a null handler to prevent logging errors when no root handlers are
# configured. Logs will still propagate to the root logger when available.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# Option names whose values never appear in logs
SECRET_OPTIONS = frozenset({"--password"})
_URL_PASSWORD = re.compile(r"(://[^/:@]+:)[^/@]+@")


@dataclass(frozen=True)
class Command:
    """A backend subcommand ready to be executed.

    Attributes
    ----------
    name : str
        Subcommand name, e.g. ``"list"`` or ``"ls-tree"``.
    arguments : Dict[str, Any]
        Options map, see :func:`render_arguments`.
    operands : Tuple[str, ...]
        Positional arguments appended after the options.
    cwd : Optional[Path]
        Directory to run in; ``None`` runs in the client's working copy.
    """

    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)
    operands: Tuple[str, ...] = ()
    cwd: Optional[Path] = None


def render_arguments(arguments: Mapping[str, Any]) -> List[str]:
    """Turn an options map into command line tokens.

    ``True`` renders a bare flag, ``False`` and ``None`` are dropped, long
    options with a value render as ``--name=value`` and short options as
    ``-m value``.
    """
    tokens: List[str] = []
    for key, value in arguments.items():
        if value is None or value is False:
            continue
        if value is True:
            tokens.append(key)
        elif key.startswith("--"):
            tokens.append(f"{key}={value}")
        else:
            tokens.extend([key, str(value)])
    return tokens


def _masked(tokens: Sequence[str]) -> List[str]:
    shown = []
    for token in tokens:
        name, sep, _ = token.partition("=")
        if sep and name in SECRET_OPTIONS:
            shown.append(f"{name}=***")
        else:
            shown.append(_URL_PASSWORD.sub(r"\1***@", token))
    return shown


class CommandExecutor:
    """Runs one backend binary.

    Parameters
    ----------
    binary : str
        Executable to invoke, e.g. ``"svn"`` or ``"/usr/bin/git"``.
    env : Mapping[str, str], optional
        Extra environment variables for every invocation.
    timeout : float, optional
        Seconds after which a command is aborted.
    """

    def __init__(
        self,
        binary: str,
        env: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.binary = binary
        self.env = dict(env or {})
        self.timeout = timeout

    def execute(
        self,
        command_name: str,
        arguments: Optional[Mapping[str, Any]] = None,
        operands: Sequence[str] = (),
        cwd: Optional[Path] = None,
    ) -> str:
        """Run ``binary command_name [options] [operands]`` and return stdout.

        Raises
        ------
        ExecutionError
            If the binary is missing, times out or exits with a non-zero
            status.
        """
        full_cmd = [self.binary, command_name] + render_arguments(arguments or {}) + [str(op) for op in operands]
        shown_cmd = _masked(full_cmd)
        logger.debug("Executing command: %s (cwd=%s)", " ".join(shown_cmd), cwd)
        env = None
        if self.env:
            env = dict(os.environ)
            env.update(self.env)
        try:
            result = subprocess.run(
                full_cmd,
                cwd=str(cwd) if cwd else None,
                env=env,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",  # Replace invalid characters instead of failing
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            logger.error("Executable not found: %s", e)
            raise ExecutionError(f"{self.binary} executable not found", command=shown_cmd) from e
        except subprocess.TimeoutExpired as e:
            logger.error("Command timed out after %ss: %s", self.timeout, " ".join(shown_cmd))
            raise ExecutionError(f"Command timed out after {self.timeout}s", command=shown_cmd) from e

        if result.returncode != 0:
            logger.error(
                "Command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                " ".join(shown_cmd),
                result.stdout,
                result.stderr,
            )
            raise ExecutionError(
                result.stderr.strip() or result.stdout.strip(),
                command=shown_cmd,
                returncode=result.returncode,
                stderr=result.stderr,
            )
        return result.stdout
