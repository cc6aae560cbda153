"""Wiring between parsed arguments and the service/infra layers.

Command handlers ask this module for services instead of constructing
providers themselves, which keeps them testable: tests replace
:func:`mail_service` / :func:`calendar_service` with fakes.
"""

from __future__ import annotations

import argparse

from octl.cli.output import FORMAT_JSON, FORMAT_PLAIN, FORMAT_TABLE
from octl.core.calendar_service import CalendarService
from octl.core.mail_service import MailService
from octl.exceptions import NotConfiguredError
from octl.infra import config_store
from octl.infra.auth import AuthManager
from octl.infra.graph_client import GraphSession

NOT_CONFIGURED = "not configured - run 'octl auth login --client-id <your-id>' first"


def output_format(args: argparse.Namespace) -> str:
    if getattr(args, "json", False):
        return FORMAT_JSON
    if getattr(args, "plain", False):
        return FORMAT_PLAIN
    return FORMAT_TABLE


def build_auth_manager(client_id: str | None = None) -> AuthManager:
    return AuthManager(
        client_id if client_id is not None else config_store.get_client_id(),
        config_store.get_tenant_id(),
        allow_unencrypted_storage=config_store.get_allow_unencrypted_storage(),
    )


def build_graph_session() -> GraphSession:
    """Return a session for the saved login.

    Raises
    ------
    NotConfiguredError
        When no client ID is configured.
    NotLoggedInError
        When no authentication record has been saved.
    """
    client_id = config_store.get_client_id()
    if not client_id:
        raise NotConfiguredError(NOT_CONFIGURED)
    credential = build_auth_manager(client_id).load_credential()
    return GraphSession(credential)


def mail_service() -> MailService:
    from octl.infra.graph_mail import GraphMailProvider

    return MailService(GraphMailProvider(build_graph_session()))


def calendar_service() -> CalendarService:
    from octl.infra.graph_calendar import GraphCalendarProvider

    return CalendarService(GraphCalendarProvider(build_graph_session()))
