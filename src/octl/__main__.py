"""Allow ``python -m octl`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m octl`` behaves identically to the ``octl`` console
script.
"""

from __future__ import annotations

from octl.cli.app import cli

if __name__ == "__main__":
    cli()
