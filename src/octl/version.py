"""Single source of truth for the octl version string."""

__version__ = "0.1.0"
