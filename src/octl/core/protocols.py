"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols, never on concrete Graph
implementations.

Implementations must map all backend-specific exceptions to
:class:`~octl.exceptions.OctlError` subclasses.
"""

from __future__ import annotations

from typing import Protocol

from octl.core.models import (
    CreateEventOptions,
    Event,
    EventListOptions,
    Folder,
    Message,
    MessageListOptions,
    SendOptions,
)


class MailProvider(Protocol):
    """Contract for mailbox backends.

    Options arrive fully resolved (defaults applied, filters composed)
    by :class:`~octl.core.mail_service.MailService`.
    """

    def list_messages(self, opts: MessageListOptions) -> list[Message]: ...

    def get_message(self, message_id: str) -> Message: ...

    def search_messages(self, search: str, top: int) -> list[Message]:
        """Run a full-text search; *search* is already quoted."""
        ...  # pragma: no cover

    def list_folders(self) -> list[Folder]: ...

    def get_folder(self, folder_id: str) -> Folder: ...

    def send_message(self, opts: SendOptions) -> None: ...

    def create_draft(self, opts: SendOptions) -> Message: ...

    def move_message(self, message_id: str, destination_id: str) -> None: ...

    def mark_as_read(self, message_id: str, is_read: bool) -> None: ...

    def delete_message(self, message_id: str) -> None: ...


class CalendarProvider(Protocol):
    """Contract for calendar backends."""

    def list_events(self, opts: EventListOptions) -> list[Event]: ...

    def get_event(self, event_id: str) -> Event: ...

    def create_event(self, opts: CreateEventOptions) -> Event: ...

    def respond_to_event(self, event_id: str, response: str, comment: str) -> None:
        """Send *response* (``accept``/``decline``/``tentative``) to the organizer."""
        ...  # pragma: no cover

    def delete_event(self, event_id: str) -> None: ...
