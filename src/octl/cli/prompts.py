"""Interactive prompts (questionary) used by a few commands.

* ``auth login`` asks for the application (client) ID when none is
  configured.
* ``mail delete`` / ``calendar delete`` ask for confirmation.

Prompts only run on a terminal; callers check :func:`is_interactive`
first and fall back to flags otherwise.
"""

from __future__ import annotations

import sys
from typing import Any

from octl.exceptions import InvalidArgumentError, missing_dependency


def _import_questionary() -> Any:
    """Import questionary lazily for interactive prompts."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise missing_dependency("questionary") from exc
    return questionary


def is_interactive() -> bool:
    return sys.stdin.isatty() and sys.stderr.isatty()


def ask_client_id() -> str:
    """Prompt for the Azure application (client) ID.

    Raises
    ------
    InvalidArgumentError
        If the prompt is cancelled or left empty.
    """
    questionary = _import_questionary()
    answer: str | None = questionary.text(
        "Application (client) ID:",
        validate=lambda value: bool(value.strip()) or "A client ID is required.",
    ).ask()  # None on Ctrl+C / Esc
    if not answer or not answer.strip():
        raise InvalidArgumentError(
            "client ID required",
            hint="Pass --client-id, set OCTL_CLIENT_ID, or run 'octl config set-client-id'.",
        )
    return answer.strip()


def confirm(message: str, *, default: bool = False) -> bool:
    """Yes/no prompt; a cancelled prompt counts as "no"."""
    questionary = _import_questionary()
    answer: bool | None = questionary.confirm(message, default=default).ask()
    return bool(answer)


def confirm_unless(yes: bool, question: str) -> bool:
    """Confirm a destructive action; ``--yes`` or a non-terminal skips the prompt."""
    if yes or not is_interactive():
        return True
    return confirm(question)
