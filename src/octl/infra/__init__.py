"""Infrastructure layer — config file, identity and Microsoft Graph.

Every raw azure-identity, kiota or msgraph-sdk exception must be caught
here and re-raised as an :class:`~octl.exceptions.OctlError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* The Graph providers (:mod:`octl.infra.graph_mail`,
  :mod:`octl.infra.graph_calendar`) are imported on demand; the SDK's
  generated models are slow to load.
"""

from octl.infra.auth import GRAPH_SCOPES, AuthManager
from octl.infra.config_store import Config
from octl.infra.graph_client import GraphSession

__all__: list[str] = [
    "GRAPH_SCOPES",
    "AuthManager",
    "Config",
    "GraphSession",
]
