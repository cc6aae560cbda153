"""Custom exception hierarchy for octl.

All exceptions that cross layer boundaries must inherit from
:class:`OctlError`.  Raw third-party exceptions (azure-identity,
msgraph-sdk, kiota) must NEVER propagate beyond the infrastructure
layer; they are caught there and re-raised as a typed subclass.

Hierarchy
---------
OctlError
├── ConfigError
├── NotConfiguredError
├── NotLoggedInError
├── AuthenticationError
├── InvalidArgumentError
├── GraphRequestError
│   └── GraphTimeoutError
└── DependencyError
"""

from __future__ import annotations


class OctlError(Exception):
    """Base exception for all octl errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Configuration ---------------------------------------------------------

class ConfigError(OctlError):
    """Raised when the config file cannot be read, parsed, or written."""


class NotConfiguredError(OctlError):
    """Raised when no application (client) ID is available."""


# --- Authentication --------------------------------------------------------

class NotLoggedInError(OctlError):
    """Raised when no usable authentication record or token exists."""


class AuthenticationError(OctlError):
    """Raised when the device-code flow or record handling fails."""


# --- Input validation ------------------------------------------------------

class InvalidArgumentError(OctlError):
    """Raised when a command argument fails validation."""


# --- Remote API ------------------------------------------------------------

class GraphRequestError(OctlError):
    """Raised when a Microsoft Graph request fails."""


class GraphTimeoutError(GraphRequestError):
    """Raised when a Microsoft Graph request exceeds its time bound."""


# --- Environment / tooling -------------------------------------------------

class DependencyError(OctlError):
    """Raised when a required runtime dependency is not available."""


def missing_dependency(package: str) -> DependencyError:
    """Build the standard error for an absent third-party package."""
    return DependencyError(
        f"{package} is not installed. Install with: pip install {package}",
    )
