"""azure-identity backed authentication lifecycle.

This module is the **only** place in the codebase that imports
``azure.identity``.  It runs the interactive device-code flow once,
persists the resulting (non-secret) authentication record and rebuilds
a silent credential from it on later runs.  Tokens themselves live in
azure-identity's persistent token cache under the name ``octl``.

All identity-library exceptions are re-raised as
:class:`~octl.exceptions.OctlError` subclasses.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

from octl.exceptions import (
    AuthenticationError,
    NotLoggedInError,
    OctlError,
    missing_dependency,
)
from octl.infra import config_store

logger = logging.getLogger(__name__)

GRAPH_SCOPES: tuple[str, ...] = (
    "User.Read",
    "Mail.Read",
    "Mail.ReadWrite",
    "Mail.Send",
    "Calendars.Read",
    "Calendars.ReadWrite",
)
# offline_access is added by MSAL itself and rejected when requested.

TOKEN_CACHE_NAME = "octl"
LOGIN_TIMEOUT_SECONDS = 300

DeviceCodePrompt = Callable[[str, str, datetime], None]
"""``prompt(verification_uri, user_code, expires_on)``."""


def _import_identity() -> Any:
    """Return the ``azure.identity`` module or raise ``DependencyError``."""
    try:
        import azure.identity as identity
    except ModuleNotFoundError as exc:
        raise missing_dependency("azure-identity") from exc
    return identity


class AuthManager:
    """Owns the authentication record and the credential built from it.

    Usage::

        manager = AuthManager(client_id)
        manager.login(prompt)              # once, interactive
        credential = manager.load_credential()  # every later run
    """

    def __init__(
        self,
        client_id: str,
        tenant_id: str = config_store.DEFAULT_TENANT,
        *,
        allow_unencrypted_storage: bool = False,
        record_path: Path | None = None,
    ) -> None:
        self.client_id = client_id
        self.tenant_id = tenant_id or config_store.DEFAULT_TENANT
        self.allow_unencrypted_storage = allow_unencrypted_storage
        self.record_path = record_path or config_store.auth_record_path()
        self._credential: Any = None
        self._record: Any = None

    # ------------------------------------------------------------------
    # Credential construction
    # ------------------------------------------------------------------

    def _build_credential(
        self,
        identity: Any,
        *,
        record: Any = None,
        prompt: DeviceCodePrompt | None = None,
        timeout: int = LOGIN_TIMEOUT_SECONDS,
    ) -> Any:
        cache_options = identity.TokenCachePersistenceOptions(
            name=TOKEN_CACHE_NAME,
            allow_unencrypted_storage=self.allow_unencrypted_storage,
        )
        kwargs: dict[str, Any] = {
            "client_id": self.client_id,
            "tenant_id": self.tenant_id,
            "cache_persistence_options": cache_options,
        }
        if record is not None:
            kwargs["authentication_record"] = record
            kwargs["disable_automatic_authentication"] = True
        if prompt is not None:
            kwargs["prompt_callback"] = prompt
            kwargs["timeout"] = timeout
        return identity.DeviceCodeCredential(**kwargs)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def login(
        self,
        prompt: DeviceCodePrompt,
        timeout: int = LOGIN_TIMEOUT_SECONDS,
    ) -> Any:
        """Run the device-code flow and persist the authentication record.

        Returns the authenticated credential.

        Raises
        ------
        AuthenticationError
            When the flow fails, times out or the record cannot be saved.
        """
        identity = _import_identity()
        credential = self._build_credential(identity, prompt=prompt, timeout=timeout)
        logger.debug("starting device code flow tenant=%s", self.tenant_id)
        try:
            record = credential.authenticate(scopes=list(GRAPH_SCOPES))
        except OctlError:
            raise
        except Exception as exc:
            raise AuthenticationError(f"Login failed: {exc}") from exc

        try:
            config_store.write_private_file(self.record_path, record.serialize())
        except OctlError as exc:
            raise AuthenticationError(
                f"Login succeeded but the session could not be saved: {exc}",
            ) from exc

        self._credential = credential
        self._record = record
        logger.debug("saved authentication record to %s", self.record_path)
        return credential

    def load_credential(self) -> Any:
        """Rebuild a silent credential from the saved record.

        Raises
        ------
        NotLoggedInError
            When no record has been saved.
        AuthenticationError
            When the record is unreadable or corrupt.
        """
        if self._credential is not None:
            return self._credential

        try:
            raw = self.record_path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise NotLoggedInError("not logged in - run 'octl auth login' first") from exc
        except OSError as exc:
            raise AuthenticationError(f"Cannot read authentication record: {exc}") from exc

        identity = _import_identity()
        try:
            record = identity.AuthenticationRecord.deserialize(raw)
        except Exception as exc:
            raise AuthenticationError(
                f"Authentication record is corrupt: {exc}",
                hint="Run 'octl auth login' again.",
            ) from exc

        self._record = record
        self._credential = self._build_credential(identity, record=record)
        return self._credential

    def is_logged_in(self) -> bool:
        """True when a token can be obtained without user interaction."""
        try:
            credential = self.load_credential()
            credential.get_token(*GRAPH_SCOPES)
        except Exception as exc:
            logger.debug("silent token acquisition failed: %s", exc)
            return False
        return True

    def logout(self) -> None:
        """Forget the saved record.  The token cache itself is left in place."""
        try:
            self.record_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise AuthenticationError(f"Cannot remove authentication record: {exc}") from exc
        self._credential = None
        self._record = None

    def user_info(self) -> tuple[str, str]:
        """Return ``(username, home_account_id)`` or ``("", "")``."""
        if self._record is None:
            try:
                self.load_credential()
            except OctlError:
                return "", ""
        record = self._record
        return (
            getattr(record, "username", "") or "",
            getattr(record, "home_account_id", "") or "",
        )
