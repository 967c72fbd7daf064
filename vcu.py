#!/usr/bin/env python
"""
Thin wrapper script to invoke the vc_unified CLI.

Running ``python vcu.py`` is equivalent to running the ``vcu`` console
script installed via ``pyproject.toml``.
"""

from vc_unified.cli import main


if __name__ == "__main__":
    main(prog_name="vcu")
