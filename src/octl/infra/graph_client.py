"""Authenticated Microsoft Graph session.

Wraps a credential and runs one msgraph-sdk coroutine per call, bounded
by the session timeout (:data:`API_TIMEOUT_SECONDS` unless overridden).
The bound covers token acquisition too: azure-identity's device-code
credential is synchronous, so the token is fetched on a worker thread
before the SDK call and later lookups hit its cache.  Each call owns
its HTTP client and closes it before returning.

SDK, kiota and identity exceptions are translated here so providers only
ever see :class:`~octl.exceptions.OctlError` subclasses.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar

from azure.core.exceptions import ClientAuthenticationError

from octl.exceptions import (
    GraphRequestError,
    GraphTimeoutError,
    NotLoggedInError,
    OctlError,
    missing_dependency,
)
from octl.infra.auth import GRAPH_SCOPES

logger = logging.getLogger(__name__)

T = TypeVar("T")

API_TIMEOUT_SECONDS = 30.0

ClientFactory = Callable[[Any, Any], Any]
HttpClientFactory = Callable[[], Any]


def _default_http_client() -> Any:
    try:
        from msgraph_core import GraphClientFactory
    except ModuleNotFoundError as exc:
        raise missing_dependency("msgraph-core") from exc
    return GraphClientFactory.create_with_default_middleware()


def _default_client_factory(credential: Any, http_client: Any) -> Any:
    try:
        from kiota_authentication_azure.azure_identity_authentication_provider import (
            AzureIdentityAuthenticationProvider,
        )
        from msgraph import GraphRequestAdapter, GraphServiceClient
    except ModuleNotFoundError as exc:
        raise missing_dependency("msgraph-sdk") from exc
    auth_provider = AzureIdentityAuthenticationProvider(credential, scopes=list(GRAPH_SCOPES))
    adapter = GraphRequestAdapter(auth_provider, client=http_client)
    return GraphServiceClient(request_adapter=adapter)


def _odata_message(exc: Exception) -> str:
    error = getattr(exc, "error", None)
    message = getattr(error, "message", None) if error is not None else None
    if message:
        code = getattr(error, "code", None)
        return f"{code}: {message}" if code else str(message)
    return str(exc) or type(exc).__name__


def translate_error(exc: Exception, timeout: float = API_TIMEOUT_SECONDS) -> OctlError:
    """Map an SDK/identity exception to the matching :class:`OctlError`.

    *timeout* is the bound that expired, quoted in the timeout message.
    """
    if isinstance(exc, OctlError):
        return exc
    if isinstance(exc, asyncio.TimeoutError):
        return GraphTimeoutError(
            f"Microsoft Graph request timed out after {timeout:g}s",
            hint="Check your network connection and try again.",
        )

    if isinstance(exc, ClientAuthenticationError):
        return NotLoggedInError(
            f"authentication required: {exc}",
            hint="Run 'octl auth login' to sign in again.",
        )

    status = getattr(exc, "response_status_code", None)
    if status is not None:
        return GraphRequestError(f"Graph API error ({status}): {_odata_message(exc)}")
    return GraphRequestError(f"Graph API error: {_odata_message(exc)}")


class GraphSession:
    """Runs Graph SDK coroutines against an authenticated client.

    Parameters
    ----------
    credential:
        Any azure-identity ``TokenCredential``.
    timeout:
        Per-call time bound in seconds, token acquisition included.
    client_factory:
        Builds the SDK client from *credential* and the HTTP client;
        tests inject a fake.
    http_client_factory:
        Returns a fresh ``httpx.AsyncClient``-like object with ``aclose``.
    """

    def __init__(
        self,
        credential: Any,
        *,
        timeout: float = API_TIMEOUT_SECONDS,
        client_factory: ClientFactory | None = None,
        http_client_factory: HttpClientFactory | None = None,
    ) -> None:
        self._credential = credential
        self._timeout = timeout
        self._client_factory: ClientFactory = client_factory or _default_client_factory
        self._http_client_factory: HttpClientFactory = http_client_factory or _default_http_client

    def run(self, operation: Callable[[Any], Awaitable[T]]) -> T:
        """Execute ``operation(client)`` to completion and return its result."""
        # A worker stuck in get_token must not hold up loop shutdown.
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="octl-token")
        try:
            return asyncio.run(
                asyncio.wait_for(self._call(operation, executor), timeout=self._timeout)
            )
        except OctlError:
            raise
        except Exception as exc:
            mapped = translate_error(exc, self._timeout)
            logger.debug("graph call failed: %r", exc)
            raise mapped from exc
        finally:
            executor.shutdown(wait=False)

    async def _call(self, operation: Callable[[Any], Awaitable[T]], executor: ThreadPoolExecutor) -> T:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            executor, functools.partial(self._credential.get_token, *GRAPH_SCOPES)
        )
        # The SDK's HTTP client is bound to the loop it was created on.
        http_client = self._http_client_factory()
        try:
            return await operation(self._client_factory(self._credential, http_client))
        finally:
            await http_client.aclose()
