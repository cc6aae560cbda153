"""msgraph-sdk backed implementation of :class:`~octl.core.protocols.MailProvider`.

Builds SDK request configurations from resolved option objects and
converts SDK models to :mod:`octl.core.models` value objects.  Request
failures are translated by :class:`~octl.infra.graph_client.GraphSession`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from kiota_abstractions.base_request_configuration import RequestConfiguration
from msgraph.generated.models.body_type import BodyType
from msgraph.generated.models.email_address import EmailAddress
from msgraph.generated.models.item_body import ItemBody
from msgraph.generated.models.message import Message as GraphMessage
from msgraph.generated.models.recipient import Recipient
from msgraph.generated.users.item.mail_folders.item.messages.messages_request_builder import (
    MessagesRequestBuilder as FolderMessagesRequestBuilder,
)
from msgraph.generated.users.item.mail_folders.mail_folders_request_builder import (
    MailFoldersRequestBuilder,
)
from msgraph.generated.users.item.messages.item.message_item_request_builder import (
    MessageItemRequestBuilder,
)
from msgraph.generated.users.item.messages.item.move.move_post_request_body import (
    MovePostRequestBody,
)
from msgraph.generated.users.item.messages.messages_request_builder import (
    MessagesRequestBuilder,
)
from msgraph.generated.users.item.send_mail.send_mail_post_request_body import (
    SendMailPostRequestBody,
)

from octl.core.models import Folder, Message, MessageListOptions, SendOptions
from octl.exceptions import GraphRequestError
from octl.infra.graph_client import GraphSession

logger = logging.getLogger(__name__)

SUMMARY_FIELDS: list[str] = [
    "id",
    "subject",
    "from",
    "toRecipients",
    "receivedDateTime",
    "isRead",
    "hasAttachments",
    "bodyPreview",
]
DETAIL_FIELDS: list[str] = [*SUMMARY_FIELDS[:-1], "body"]

FOLDER_PAGE_SIZE = 100


# ---------------------------------------------------------------------------
# SDK model → value object
# ---------------------------------------------------------------------------

def _enum_value(value: Any) -> str:
    if value is None:
        return ""
    return str(getattr(value, "value", value)).lower()


def format_address(address: Any) -> str:
    """``"Name <addr>"`` when a distinct display name exists, else ``addr``."""
    if address is None:
        return ""
    name = address.name or ""
    email = address.address or ""
    if name and name != email:
        return f"{name} <{email}>"
    return email


def _addresses(recipients: Iterable[Any] | None) -> tuple[str, ...]:
    return tuple(
        recipient.email_address.address or ""
        for recipient in recipients or ()
        if recipient.email_address is not None
    )


def convert_message(msg: Any, *, include_body: bool = False) -> Message:
    sender = format_address(msg.from_.email_address) if msg.from_ is not None else ""
    body = body_type = ""
    if include_body and msg.body is not None:
        body = msg.body.content or ""
        body_type = _enum_value(msg.body.content_type)
    return Message(
        id=msg.id or "",
        subject=msg.subject or "",
        sender=sender,
        to=_addresses(msg.to_recipients),
        received_at=msg.received_date_time,
        is_read=bool(msg.is_read),
        has_attachments=bool(msg.has_attachments),
        body_preview=msg.body_preview or "",
        body=body,
        body_content_type=body_type,
    )


def convert_folder(folder: Any) -> Folder:
    return Folder(
        id=folder.id or "",
        display_name=folder.display_name or "",
        total_item_count=folder.total_item_count or 0,
        unread_item_count=folder.unread_item_count or 0,
        parent_folder_id=folder.parent_folder_id or "",
    )


# ---------------------------------------------------------------------------
# Value object → SDK model
# ---------------------------------------------------------------------------

def _recipients(addresses: Iterable[str]) -> list[Recipient]:
    return [Recipient(email_address=EmailAddress(address=addr)) for addr in addresses]


def build_graph_message(opts: SendOptions) -> GraphMessage:
    content_type = BodyType.Html if opts.body_type == "html" else BodyType.Text
    message = GraphMessage(
        subject=opts.subject,
        body=ItemBody(content_type=content_type, content=opts.body),
        to_recipients=_recipients(opts.to),
    )
    if opts.cc:
        message.cc_recipients = _recipients(opts.cc)
    if opts.bcc:
        message.bcc_recipients = _recipients(opts.bcc)
    return message


def _values(response: Any) -> list[Any]:
    if response is None:
        return []
    return list(response.value or [])


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------

class GraphMailProvider:
    """Concrete :class:`MailProvider` over ``/me`` mailbox endpoints."""

    def __init__(self, session: GraphSession) -> None:
        self._session = session

    def list_messages(self, opts: MessageListOptions) -> list[Message]:
        if opts.folder_id:
            params_cls: Any = FolderMessagesRequestBuilder.MessagesRequestBuilderGetQueryParameters
        else:
            params_cls = MessagesRequestBuilder.MessagesRequestBuilderGetQueryParameters
        params = params_cls(
            select=SUMMARY_FIELDS,
            top=opts.top,
            orderby=[opts.order_by],
            filter=opts.filter or None,
            skip=opts.skip or None,
        )
        config = RequestConfiguration(query_parameters=params)

        async def _list(client: Any) -> Any:
            if opts.folder_id:
                folder = client.me.mail_folders.by_mail_folder_id(opts.folder_id)
                return await folder.messages.get(request_configuration=config)
            return await client.me.messages.get(request_configuration=config)

        return [convert_message(msg) for msg in _values(self._session.run(_list))]

    def get_message(self, message_id: str) -> Message:
        params = MessageItemRequestBuilder.MessageItemRequestBuilderGetQueryParameters(
            select=DETAIL_FIELDS,
        )
        config = RequestConfiguration(query_parameters=params)

        async def _get(client: Any) -> Any:
            return await client.me.messages.by_message_id(message_id).get(
                request_configuration=config,
            )

        msg = self._session.run(_get)
        if msg is None:
            raise GraphRequestError(f"Message not found: {message_id}")
        return convert_message(msg, include_body=True)

    def search_messages(self, search: str, top: int) -> list[Message]:
        # $search cannot be combined with $orderby.
        params = MessagesRequestBuilder.MessagesRequestBuilderGetQueryParameters(
            select=SUMMARY_FIELDS,
            top=top,
            search=search,
        )
        config = RequestConfiguration(query_parameters=params)

        async def _search(client: Any) -> Any:
            return await client.me.messages.get(request_configuration=config)

        return [convert_message(msg) for msg in _values(self._session.run(_search))]

    def list_folders(self) -> list[Folder]:
        params = MailFoldersRequestBuilder.MailFoldersRequestBuilderGetQueryParameters(
            top=FOLDER_PAGE_SIZE,
        )
        config = RequestConfiguration(query_parameters=params)

        async def _folders(client: Any) -> Any:
            return await client.me.mail_folders.get(request_configuration=config)

        return [convert_folder(folder) for folder in _values(self._session.run(_folders))]

    def get_folder(self, folder_id: str) -> Folder:
        async def _get(client: Any) -> Any:
            return await client.me.mail_folders.by_mail_folder_id(folder_id).get()

        folder = self._session.run(_get)
        if folder is None:
            raise GraphRequestError(f"Folder not found: {folder_id}")
        return convert_folder(folder)

    def send_message(self, opts: SendOptions) -> None:
        body = SendMailPostRequestBody(
            message=build_graph_message(opts),
            save_to_sent_items=opts.save_to_sent,
        )

        async def _send(client: Any) -> None:
            await client.me.send_mail.post(body=body)

        self._session.run(_send)
        logger.debug("sent message to %d recipient(s)", len(opts.to) + len(opts.cc) + len(opts.bcc))

    def create_draft(self, opts: SendOptions) -> Message:
        draft = build_graph_message(opts)

        async def _draft(client: Any) -> Any:
            return await client.me.messages.post(body=draft)

        created = self._session.run(_draft)
        if created is None:
            raise GraphRequestError("Draft creation returned no message.")
        return convert_message(created)

    def move_message(self, message_id: str, destination_id: str) -> None:
        body = MovePostRequestBody(destination_id=destination_id)

        async def _move(client: Any) -> Any:
            return await client.me.messages.by_message_id(message_id).move.post(body=body)

        self._session.run(_move)

    def mark_as_read(self, message_id: str, is_read: bool) -> None:
        patch = GraphMessage(is_read=is_read)

        async def _mark(client: Any) -> Any:
            return await client.me.messages.by_message_id(message_id).patch(body=patch)

        self._session.run(_mark)

    def delete_message(self, message_id: str) -> None:
        async def _delete(client: Any) -> None:
            await client.me.messages.by_message_id(message_id).delete()

        self._session.run(_delete)
