"""CLI layer — argument parsing, rendering, prompts and the error boundary.

This package is the outermost layer of the application.  It may import
from ``core`` and ``infra``, but no other layer may import from ``cli``.
Data goes to stdout; messages, prompts and diagnostics go to stderr.
"""
