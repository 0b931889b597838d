"""Greentext annotation of quoted lines."""

from __future__ import annotations

import logging
import re

from chan_archive.core.hooks import GREENTEXT_HOOK, HookRegistry, get_hook_registry

logger = logging.getLogger(__name__)

# Lines are matched on the escaped text, so ">" appears as "&gt;".
GREENTEXT_PATTERN = re.compile(r"(\r?\n|^)(&gt;.*?)(?=$|\r?\n)", re.IGNORECASE)
DEFAULT_GREENTEXT_TEMPLATE = r'\1<span class="greentext">\2</span>'


def greentext_template(hooks: HookRegistry | None = None) -> str:
    """Return the replacement template, letting listeners override it."""
    registry = hooks if hooks is not None else get_hook_registry()
    template = registry.dispatch(GREENTEXT_HOOK, DEFAULT_GREENTEXT_TEMPLATE)
    if not isinstance(template, str):
        logger.warning("Ignoring %s listener result of type %s", GREENTEXT_HOOK, type(template))
        return DEFAULT_GREENTEXT_TEMPLATE
    return template


def annotate_greentext(text: str, *, hooks: HookRegistry | None = None) -> str:
    """Wrap every line starting with an escaped ``>`` in a greentext span."""
    template = greentext_template(hooks)
    try:
        return GREENTEXT_PATTERN.sub(template, text)
    except re.error as err:
        logger.warning("Invalid greentext template %r: %s", template, err)
        return GREENTEXT_PATTERN.sub(DEFAULT_GREENTEXT_TEMPLATE, text)
