"""Pure text helpers used when rendering mail and calendar content.

Rules
-----
* Pure functions only: no I/O, no state.
* Deterministic output for a given input.
"""

from __future__ import annotations

ELLIPSIS = "..."

_LINE_BREAK_TAGS: tuple[tuple[str, str], ...] = (
    ("<br>", "\n"),
    ("<br/>", "\n"),
    ("<br />", "\n"),
    ("</p>", "\n\n"),
    ("</div>", "\n"),
)

# Order matters: ``&nbsp;`` and ``&amp;`` are decoded before the rest.
_ENTITIES: tuple[tuple[str, str], ...] = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
)


def truncate(text: str, max_len: int) -> str:
    """Shorten *text* to *max_len* characters, ending with ``...``."""
    if len(text) <= max_len:
        return text
    return text[: max(max_len - len(ELLIPSIS), 0)] + ELLIPSIS


def short_id(identifier: str, keep: int = 8) -> str:
    """Abbreviate a long Graph identifier for table display."""
    if len(identifier) <= keep:
        return identifier
    return identifier[:keep] + ELLIPSIS


def strip_html(html: str) -> str:
    """Reduce an HTML body to readable plain text.

    This is a convenience renderer, not an HTML parser: block-ending
    tags become line breaks, every other tag is dropped, a handful of
    common entities are decoded, and blank lines are removed.
    """
    text = html
    for tag, replacement in _LINE_BREAK_TAGS:
        text = text.replace(tag, replacement)

    kept: list[str] = []
    in_tag = False
    for char in text:
        if char == "<":
            in_tag = True
            continue
        if char == ">":
            in_tag = False
            continue
        if not in_tag:
            kept.append(char)
    text = "".join(kept)

    for entity, replacement in _ENTITIES:
        text = text.replace(entity, replacement)

    lines = (line.strip() for line in text.split("\n"))
    return "\n".join(line for line in lines if line)
