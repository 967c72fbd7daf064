"""
Command line interface for vc_unified.

This module defines the ``vcu`` command group. Every subcommand maps to
one :class:`~vc_unified.client.VcsClient` operation, so the same command
line works against Subversion and Git repositories. Errors are reported
with the exit codes defined below.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import click

from vc_unified import __version__
from vc_unified.client import VcsClient, create_client
from vc_unified.common.models import Credentials, FileInfo
from vc_unified.common.pointer import Pointer
from vc_unified.config.loader import client_options, load_config
from vc_unified.exceptions import ConfigurationError, ExecutionError, NotFoundError

# Create a module-level logger. Attach a null handler and disable
# propagation to avoid logging errors when the root logger's stream is
# closed (such as during unit tests). When logging is configured by
# the CLI, root handlers will be added and messages will propagate.
logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_NOT_FOUND = 3
EXIT_CONFIG_ERROR = 5
EXIT_VCS_FAILURE = 6


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------

def print_info(message: str, indent: int = 0):
    """Print an info message."""
    prefix = "  " * indent
    click.echo(f"{prefix}ℹ {message}", err=False)


def print_success(message: str, indent: int = 0):
    """Print a success message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✓ {message}", err=False)


def print_error(message: str, indent: int = 0):
    """Print an error message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✗ {message}", err=True)


def format_entry(entry: FileInfo) -> str:
    """Render a listing or status entry as one line."""
    name = f"{entry.name}/" if entry.is_dir() else entry.name
    code = entry.status.value if entry.status else " "
    revision = entry.revision or ""
    return f"{code} {revision:>8}  {name}"


# ---------------------------------------------------------------------------
# Client construction
# ---------------------------------------------------------------------------

@dataclass
class CliSettings:
    """Global options collected by the ``vcu`` group."""

    url: Optional[str] = None
    vcs: Optional[str] = None
    branch: Optional[str] = None
    tag: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    working_copy: Optional[Path] = None
    config_path: Optional[Path] = None


def build_client(settings: CliSettings) -> VcsClient:
    """Create a client from command line options and the configuration file.

    Command line options take precedence over configuration values.

    Raises
    ------
    ConfigurationError
        If the URL or the backend kind cannot be determined, or the
        configuration is invalid.
    """
    config = load_config(settings.config_path)
    vcs = settings.vcs or config.get("vcs")
    if not vcs:
        raise ConfigurationError("No VCS kind given; use --vcs or set 'vcs' in the configuration")
    if not settings.url:
        raise ConfigurationError("No repository URL given; use --url")
    if settings.branch and settings.tag:
        raise ConfigurationError("--branch and --tag are mutually exclusive")

    pointer = Pointer.trunk()
    if settings.tag:
        pointer = Pointer.tag(settings.tag)
    elif settings.branch:
        pointer = Pointer.branch(settings.branch)

    credentials = Credentials(
        settings.username or config.get("username"),
        settings.password or config.get("password"),
    )
    options: Dict[str, Any] = client_options(config, vcs)
    logger.debug("Creating %s client for %s at %s", vcs, settings.url, pointer)
    return create_client(
        vcs,
        settings.url,
        pointer=pointer,
        credentials=credentials,
        working_copy=settings.working_copy,
        **options,
    )


@contextmanager
def client_session(ctx: click.Context) -> Iterator[VcsClient]:
    """Yield a client and translate library errors into exit codes."""
    settings: CliSettings = ctx.obj
    client: Optional[VcsClient] = None
    try:
        client = build_client(settings)
        yield client
    except NotFoundError as exc:
        print_error(f"Not found: {exc}")
        raise click.exceptions.Exit(EXIT_NOT_FOUND)
    except ConfigurationError as exc:
        print_error(f"Configuration error: {exc}")
        raise click.exceptions.Exit(EXIT_CONFIG_ERROR)
    except ExecutionError as exc:
        print_error(f"VCS error: {exc}")
        raise click.exceptions.Exit(EXIT_VCS_FAILURE)
    except click.exceptions.Exit:
        raise
    except Exception as exc:
        # Catch any other unhandled errors
        logging.exception("Unhandled error: %s", exc)
        print_error(f"Unexpected error: {exc}")
        raise click.exceptions.Exit(EXIT_GENERIC_ERROR)
    finally:
        if client is not None:
            client.close()


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@click.group()
@click.option("--url", envvar="VCU_URL", help="Repository URL.")
@click.option("--vcs", type=click.Choice(["svn", "git"]), help="Backend kind.")
@click.option("--branch", help="Operate on this branch instead of trunk.")
@click.option("--tag", help="Operate on this tag instead of trunk.")
@click.option("--username", envvar="VCU_USERNAME", help="Repository username.")
@click.option("--password", envvar="VCU_PASSWORD", help="Repository password.")
@click.option(
    "--working-copy",
    type=click.Path(file_okay=False, path_type=Path),
    help="Existing working copy for status, add and commit.",
)
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), help="Configuration file.")
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.version_option(version=__version__, prog_name="vcu")
@click.pass_context
def main(
    ctx: click.Context,
    url: Optional[str],
    vcs: Optional[str],
    branch: Optional[str],
    tag: Optional[str],
    username: Optional[str],
    password: Optional[str],
    working_copy: Optional[Path],
    config_path: Optional[Path],
    verbose: bool,
) -> None:
    """Uniform client for Subversion and Git repositories."""
    # Use force=True to ensure handlers are reconfigured on subsequent
    # invocations (important for tests).
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )
    ctx.obj = CliSettings(
        url=url,
        vcs=vcs,
        branch=branch,
        tag=tag,
        username=username,
        password=password,
        working_copy=working_copy,
        config_path=config_path,
    )


@main.command("ls")
@click.argument("path", default="")
@click.pass_context
def ls_command(ctx: click.Context, path: str) -> None:
    """List a directory of the repository."""
    with client_session(ctx) as client:
        for entry in client.ls(path):
            click.echo(format_entry(entry))


@main.command("cat")
@click.argument("path")
@click.pass_context
def cat_command(ctx: click.Context, path: str) -> None:
    """Print the content of a file."""
    with client_session(ctx) as client:
        click.echo(client.cat(path), nl=False)


@main.command("log")
@click.argument("path", default="")
@click.pass_context
def log_command(ctx: click.Context, path: str) -> None:
    """Show the history of a path, newest first."""
    with client_session(ctx) as client:
        for commit in client.log(path):
            date = commit.date.isoformat() if commit.date else "-"
            click.echo(f"{click.style(commit.revision, fg='yellow')} | {commit.author} | {date}")
            for line in commit.message.splitlines():
                click.echo(f"    {line}")
            for changed in commit.changed_paths:
                click.echo(f"    • {changed}")


@main.command("checkout")
@click.argument("target", type=click.Path(file_okay=False, path_type=Path))
@click.pass_context
def checkout_command(ctx: click.Context, target: Path) -> None:
    """Create a working copy in TARGET."""
    with client_session(ctx) as client:
        client.checkout(target)
        print_success(f"Checked out {client.pointer} into {target}")


@main.command("export")
@click.argument("path")
@click.argument("target", type=click.Path(file_okay=False, path_type=Path))
@click.pass_context
def export_command(ctx: click.Context, path: str, target: Path) -> None:
    """Export PATH (use / for the root) into TARGET without metadata."""
    with client_session(ctx) as client:
        client.export(path, target)
        print_success(f"Exported {path} into {target}")


@main.command("status")
@click.pass_context
def status_command(ctx: click.Context) -> None:
    """Show working copy changes."""
    with client_session(ctx) as client:
        entries = client.status()
        if not entries:
            print_info("Working copy is clean")
        for entry in entries:
            click.echo(format_entry(entry))


@main.command("add")
@click.argument("paths", nargs=-1, required=True)
@click.pass_context
def add_command(ctx: click.Context, paths: List[str]) -> None:
    """Schedule PATHS for the next commit."""
    with client_session(ctx) as client:
        for path in paths:
            client.add(path)
            print_success(f"Added {path}")


@main.command("commit")
@click.option("-m", "--message", required=True, help="Commit message.")
@click.pass_context
def commit_command(ctx: click.Context, message: str) -> None:
    """Commit scheduled changes."""
    with client_session(ctx) as client:
        client.commit(message)
        print_success(f"Committed to {client.pointer}")


@main.command("diff")
@click.argument("old_path")
@click.argument("new_path", required=False)
@click.option("--from", "old_revision", required=True, help="Old revision.")
@click.option("--to", "new_revision", help="New revision (defaults to the pointer head).")
@click.pass_context
def diff_command(
    ctx: click.Context,
    old_path: str,
    new_path: Optional[str],
    old_revision: str,
    new_revision: Optional[str],
) -> None:
    """Summarize differences of OLD_PATH since a revision."""
    with client_session(ctx) as client:
        for entry in client.diff(old_path, new_path or old_path, old_revision, new_revision):
            click.echo(format_entry(entry))


@main.command("branches")
@click.pass_context
def branches_command(ctx: click.Context) -> None:
    """List branch names."""
    with client_session(ctx) as client:
        for name in client.branches():
            click.echo(name)


@main.command("tags")
@click.pass_context
def tags_command(ctx: click.Context) -> None:
    """List tag names."""
    with client_session(ctx) as client:
        for name in client.tags():
            click.echo(name)
