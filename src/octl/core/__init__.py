"""Core / service layer — value objects, validation and defaults.

Rules
-----
* No ``print()`` calls.
* No filesystem or network I/O.
* No imports from ``cli`` or ``infra``.
* Providers are reached only through the protocols in
  :mod:`octl.core.protocols`.
"""

from octl.core.calendar_service import CalendarService
from octl.core.mail_service import MailService
from octl.core.models import (
    CreateEventOptions,
    Event,
    EventListOptions,
    Folder,
    Message,
    MessageListOptions,
    SendOptions,
)
from octl.core.protocols import CalendarProvider, MailProvider

__all__: list[str] = [
    "CalendarProvider",
    "CalendarService",
    "CreateEventOptions",
    "Event",
    "EventListOptions",
    "Folder",
    "MailProvider",
    "MailService",
    "Message",
    "MessageListOptions",
    "SendOptions",
]
