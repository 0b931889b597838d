"""Sanitization of raw post fields.

Removes the legacy admin formatting wrappers found in imported posts and
HTML-escapes text without ever failing on bad encodings.
"""

from __future__ import annotations

import logging
import re

from chan_archive.schemas.post import Capcode

logger = logging.getLogger(__name__)

# Inline styles the upstream board wrapped around admin announcements.
LEGACY_DIV_WRAPPER = (
    '<div style="padding: 5px;margin-left: .5em;border-color: #faa;'
    'border: 2px dashed rgba(255,0,0,.1);border-radius: 2px">'
)
LEGACY_SPAN_WRAPPER = (
    '<span style="padding: 5px;margin-left: .5em;border-color: #faa;'
    'border: 2px dashed rgba(255,0,0,.1);border-radius: 2px">'
)
LEGACY_DIV_CLOSER = "</div>"
LEGACY_SPAN_CLOSER = "[/spoiler]"

# An ampersand that does not already start a character reference.
_BARE_AMPERSAND = re.compile(r"&(?!(?:[a-zA-Z][a-zA-Z0-9]*|#[0-9]+|#[xX][0-9a-fA-F]+);)")


def sanitize_text(value: str | bytes | None) -> str:
    """Return ``value`` as clean UTF-8 text, dropping undecodable data."""
    if value is None:
        return ""
    if isinstance(value, bytes | bytearray):
        return bytes(value).decode("utf-8", errors="ignore")
    # Lone surrogates cannot be encoded; drop them like invalid bytes.
    return value.encode("utf-8", errors="ignore").decode("utf-8")


def escape_html(value: str | bytes | None) -> str:
    """Escape ``&``, ``<``, ``>`` and ``"`` leaving existing entities intact.

    Existing references such as ``&amp;`` or ``&#39;`` are not encoded a
    second time, so escaping already escaped text is a no-op.
    """
    text = sanitize_text(value)
    text = _BARE_AMPERSAND.sub("&amp;", text)
    return text.replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;")


def process_field(value: str | bytes | None) -> str:
    """Escape a display field such as the title or the poster name."""
    return escape_html(value)


def strip_legacy_wrappers(comment: str, capcode: Capcode | str) -> str:
    """Remove the admin-only wrappers imported posts may begin with."""
    if capcode != Capcode.ADMIN:
        return comment

    if comment.startswith(LEGACY_DIV_WRAPPER):
        comment = comment.replace(LEGACY_DIV_WRAPPER, "")
        if comment.endswith(LEGACY_DIV_CLOSER):
            comment = comment[: -len(LEGACY_DIV_CLOSER)]

    if comment.startswith(LEGACY_SPAN_WRAPPER):
        comment = comment.replace(LEGACY_SPAN_WRAPPER, "")
        if comment.endswith(LEGACY_SPAN_CLOSER):
            comment = comment[: -len(LEGACY_SPAN_CLOSER)]

    return comment


def sanitize_comment(comment: str | bytes | None, capcode: Capcode | str = Capcode.NONE) -> str:
    """Strip legacy wrappers from a raw body and escape it."""
    text = sanitize_text(comment)
    stripped = strip_legacy_wrappers(text, capcode)
    if stripped != text:
        logger.debug("Stripped legacy admin wrapper from comment")
    return escape_html(stripped)
