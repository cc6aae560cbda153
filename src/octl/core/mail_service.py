"""Core mail service — validation, defaults, and query composition.

The service depends on a :class:`~octl.core.protocols.MailProvider`
injected at construction time, keeping the core free of any Graph SDK
imports.

Guarantees
----------
* Pure orchestration: no I/O, no ``print()``.
* Only :class:`~octl.exceptions.OctlError` subclasses escape.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import replace
from typing import TypeVar

from octl.core.models import Folder, Message, MessageListOptions, SendOptions
from octl.core.protocols import MailProvider
from octl.exceptions import GraphRequestError, InvalidArgumentError, OctlError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TOP = 25
DEFAULT_ORDER_BY = "receivedDateTime desc"
UNREAD_FILTER = "isRead eq false"

FOLDER_INBOX = "inbox"
FOLDER_DRAFTS = "drafts"
FOLDER_SENT_ITEMS = "sentitems"
FOLDER_DELETED = "deleteditems"
FOLDER_JUNK = "junkemail"
FOLDER_ARCHIVE = "archive"

WELL_KNOWN_FOLDERS: tuple[str, ...] = (
    FOLDER_INBOX,
    FOLDER_DRAFTS,
    FOLDER_SENT_ITEMS,
    FOLDER_DELETED,
    FOLDER_JUNK,
    FOLDER_ARCHIVE,
)

BODY_TYPE_TEXT = "text"
BODY_TYPE_HTML = "html"


def compose_filter(base: str, unread_only: bool) -> str:
    """Combine an OData filter with the unread-only restriction."""
    if not unread_only:
        return base
    if base:
        return f"({base}) and {UNREAD_FILTER}"
    return UNREAD_FILTER


def quote_search(query: str) -> str:
    """Wrap *query* in double quotes for ``$search``, escaping inner quotes."""
    escaped = query.replace('"', '\\"')
    return f'"{escaped}"'


class MailService:
    """Stateless facade over a :class:`MailProvider`.

    Parameters
    ----------
    provider:
        Any object satisfying the :class:`MailProvider` protocol.
    """

    def __init__(self, provider: MailProvider) -> None:
        self._provider: MailProvider = provider

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def list_messages(self, opts: MessageListOptions | None = None) -> list[Message]:
        """List messages newest first, applying defaults and the unread filter."""
        opts = opts or MessageListOptions()
        if opts.top < 0 or opts.skip < 0:
            raise InvalidArgumentError("count and skip must not be negative.")
        resolved = replace(
            opts,
            top=opts.top or DEFAULT_TOP,
            order_by=opts.order_by or DEFAULT_ORDER_BY,
            filter=compose_filter(opts.filter, opts.unread_only),
            folder_id=opts.folder_id.strip(),
        )
        logger.debug(
            "listing messages top=%d folder=%r filter=%r",
            resolved.top, resolved.folder_id, resolved.filter,
        )
        return self._call(lambda: self._provider.list_messages(resolved))

    def get_message(self, message_id: str) -> Message:
        message_id = self._require_id(message_id, "message")
        return self._call(lambda: self._provider.get_message(message_id))

    def search_messages(self, query: str, top: int = 0) -> list[Message]:
        """Full-text search across the mailbox."""
        if not query.strip():
            raise InvalidArgumentError("Search query must not be empty.")
        search = quote_search(query.strip())
        count = top or DEFAULT_TOP
        logger.debug("searching messages search=%s top=%d", search, count)
        return self._call(lambda: self._provider.search_messages(search, count))

    def list_folders(self) -> list[Folder]:
        return self._call(self._provider.list_folders)

    def get_folder(self, folder_id: str) -> Folder:
        folder_id = self._require_id(folder_id, "folder")
        return self._call(lambda: self._provider.get_folder(folder_id))

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def send_message(self, opts: SendOptions) -> None:
        """Send a message immediately; at least one recipient is required."""
        opts = self._normalise_send(opts)
        if not opts.to:
            raise InvalidArgumentError(
                "At least one recipient is required.",
                hint="Pass --to user@example.com",
            )
        self._call(lambda: self._provider.send_message(opts))

    def create_draft(self, opts: SendOptions) -> Message:
        opts = self._normalise_send(opts)
        return self._call(lambda: self._provider.create_draft(opts))

    def move_message(self, message_id: str, destination: str) -> None:
        """Move a message to a folder id or well-known folder name."""
        message_id = self._require_id(message_id, "message")
        destination = self._require_id(destination, "destination folder")
        if destination.lower() in WELL_KNOWN_FOLDERS:
            destination = destination.lower()
        self._call(lambda: self._provider.move_message(message_id, destination))

    def mark_as_read(self, message_id: str, is_read: bool = True) -> None:
        message_id = self._require_id(message_id, "message")
        self._call(lambda: self._provider.mark_as_read(message_id, is_read))

    def delete_message(self, message_id: str) -> None:
        message_id = self._require_id(message_id, "message")
        self._call(lambda: self._provider.delete_message(message_id))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _require_id(value: str, what: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise InvalidArgumentError(f"A {what} ID is required.")
        return stripped

    @staticmethod
    def _clean_addresses(addresses: Sequence[str]) -> tuple[str, ...]:
        # ``--to a@x,b@y`` and repeated flags both end up here.
        cleaned: list[str] = []
        for entry in addresses:
            cleaned.extend(part.strip() for part in entry.split(",") if part.strip())
        return tuple(cleaned)

    @classmethod
    def _normalise_send(cls, opts: SendOptions) -> SendOptions:
        body_type = (opts.body_type or BODY_TYPE_TEXT).lower()
        if body_type not in (BODY_TYPE_TEXT, BODY_TYPE_HTML):
            raise InvalidArgumentError(f"Unsupported body type: {opts.body_type}")
        return replace(
            opts,
            to=cls._clean_addresses(opts.to),
            cc=cls._clean_addresses(opts.cc),
            bcc=cls._clean_addresses(opts.bcc),
            body_type=body_type,
        )

    @staticmethod
    def _call(operation: Callable[[], T]) -> T:
        """Call the provider and ensure only our exceptions escape."""
        try:
            return operation()
        except OctlError:
            raise
        except Exception as exc:
            raise GraphRequestError(f"Unexpected provider error: {exc}") from exc
