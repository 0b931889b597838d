"""Tests for greentext annotation."""

from chan_archive.core.hooks import GREENTEXT_HOOK, HookRegistry
from chan_archive.services.greentext import annotate_greentext


def test_wraps_quoted_lines() -> None:
    text = "hello\n&gt;be me\n&gt;be tired\nok"
    assert annotate_greentext(text) == (
        'hello\n<span class="greentext">&gt;be me</span>\n'
        '<span class="greentext">&gt;be tired</span>\nok'
    )


def test_first_line_and_crlf() -> None:
    text = "&gt;first\r\nsecond"
    assert annotate_greentext(text) == '<span class="greentext">&gt;first</span>\r\nsecond'


def test_marker_is_case_insensitive() -> None:
    assert annotate_greentext("&GT;loud") == '<span class="greentext">&GT;loud</span>'


def test_marker_must_start_the_line() -> None:
    assert annotate_greentext("not &gt;green") == "not &gt;green"


def test_hook_overrides_wrapper(hooks: HookRegistry) -> None:
    hooks.register(GREENTEXT_HOOK, lambda template: r'\1<q class="quote">\2</q>')
    assert annotate_greentext("&gt;hi", hooks=hooks) == '<q class="quote">&gt;hi</q>'


def test_invalid_template_falls_back_to_default(hooks: HookRegistry) -> None:
    hooks.register(GREENTEXT_HOOK, lambda template: r"\1<span>\2</span>\3")
    assert annotate_greentext("&gt;hi", hooks=hooks) == '<span class="greentext">&gt;hi</span>'


def test_non_string_template_is_ignored(hooks: HookRegistry) -> None:
    hooks.register(GREENTEXT_HOOK, lambda template: 42)
    assert annotate_greentext("&gt;hi", hooks=hooks) == '<span class="greentext">&gt;hi</span>'
