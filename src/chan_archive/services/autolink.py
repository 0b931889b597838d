"""Turn bare URLs in rendered comments into anchors."""

from __future__ import annotations

import re
from typing import Literal

LinkKind = Literal["url", "email", "both"]

# A URL run must follow the start of the text, whitespace, "(" or "]", which
# also keeps it from matching inside an existing href="..." or >...</a>.
URL_PATTERN = re.compile(
    r"((^|\s|\(|\])(((http(s?)://)|(www\.))(\w+[^\s)<]+)))",
    re.IGNORECASE,
)


def autolink(text: str, *, kind: LinkKind = "url", new_tab: bool = False) -> str:
    """Return ``text`` with URL runs replaced by anchors.

    Args:
        text: Escaped comment text.
        kind: ``"email"`` leaves the text untouched; anything else links URLs.
        new_tab: Add ``target="_blank"`` to generated anchors.

    Returns:
        The linked text.
    """
    if kind == "email":
        return text

    target = ' target="_blank"' if new_tab else ""

    def _replace(match: re.Match[str]) -> str:
        run = match.group(3)
        return f'{match.group(2)}<a href="{run}"{target}>{run}</a>'

    return URL_PATTERN.sub(_replace, text)
