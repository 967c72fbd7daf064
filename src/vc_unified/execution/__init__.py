"""
Process execution for backend command line tools.
"""

from .executor import Command, CommandExecutor, render_arguments  # noqa: F401
