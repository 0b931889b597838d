"""Tests for internal and cross-board reference resolution."""

from collections.abc import Callable

from chan_archive.core.hooks import EXTERNAL_LINK_HOOK, INTERNAL_LINK_HOOK, HookRegistry
from chan_archive.schemas.post import Post
from chan_archive.services.comment import process_comment
from chan_archive.services.links import InternalLinkParts, ReferenceResolver
from chan_archive.services.render_pass import RenderOptions, RenderPass

ATTRS = 'data-function="highlight" data-backlink="true" data-board="{board}" data-post="{post}"'


def _attrs(css_class: str, post: str, board: str = "a") -> str:
    return f'class="{css_class}" ' + ATTRS.format(board=board, post=post)


def _resolve(render_pass: RenderPass, post: Post, text: str) -> str:
    assert post.board is not None
    return ReferenceResolver(post, post.board, render_pass).resolve(text)


def test_same_thread_reference(render_pass: RenderPass, make_post: Callable[..., Post]) -> None:
    render_pass.register(make_post(1, op=True))
    render_pass.register(make_post(2, thread_num=1))
    quoting = make_post(3, thread_num=1)
    assert _resolve(render_pass, quoting, "&gt;&gt;2") == (
        f'<a href="/a/thread/1/#2" {_attrs("backlink", "2")}>&gt;&gt;2</a>'
    )


def test_thread_reference_uses_op_profile(
    render_pass: RenderPass, make_post: Callable[..., Post]
) -> None:
    render_pass.register(make_post(1, op=True))
    assert _resolve(render_pass, make_post(2, thread_num=1), "&gt;&gt;1") == (
        f'<a href="/a/thread/1/#1" {_attrs("backlink op", "1")}>&gt;&gt;1</a>'
    )


def test_cross_thread_reference(render_pass: RenderPass, make_post: Callable[..., Post]) -> None:
    render_pass.register(make_post(1, op=True))
    render_pass.register(make_post(3, thread_num=1))
    render_pass.register(make_post(10, op=True))
    assert _resolve(render_pass, make_post(11, thread_num=10), "&gt;&gt;3") == (
        f'<a href="/a/thread/1/#3" {_attrs("backlink crossthread", "3")}>&gt;&gt;3</a>'
    )


def test_unregistered_reference_falls_back_to_post_lookup(
    render_pass: RenderPass, make_post: Callable[..., Post]
) -> None:
    assert _resolve(render_pass, make_post(1, op=True), "&gt;&gt;2") == (
        f'<a href="/a/post/2/" {_attrs("backlink unknown", "2")}>&gt;&gt;2</a>'
    )


def test_ghost_reference(render_pass: RenderPass, make_post: Callable[..., Post]) -> None:
    render_pass.register(make_post(1, op=True))
    render_pass.register(make_post(5, subnum=1, thread_num=1))
    assert _resolve(render_pass, make_post(6, thread_num=1), "&gt;&gt;5,1") == (
        f'<a href="/a/thread/1/#5_1" {_attrs("backlink", "5_1")}>&gt;&gt;5,1</a>'
    )


def test_ghost_quoting_post_backlink(
    render_pass: RenderPass, make_post: Callable[..., Post]
) -> None:
    render_pass.register(make_post(1, op=True))
    ghost = make_post(5, subnum=2, thread_num=1)
    staged: dict[str, dict[str, str]] = {}
    assert ghost.board is not None
    ReferenceResolver(ghost, ghost.board, render_pass, staged).resolve("&gt;&gt;1")
    assert staged == {
        "1": {
            "5_2": f'<a href="/a/thread/1/#5_2" {_attrs("backlink", "5_2")}>&gt;&gt;5,2</a>'
        }
    }


def test_preview_leaves_references_alone(
    render_pass: RenderPass, make_post: Callable[..., Post]
) -> None:
    preview = make_post(0, ">>2", thread_num=1)
    processed = process_comment(preview, render_pass)
    assert processed == '<span class="greentext">&gt;&gt;2</span>'
    assert len(render_pass.backlinks) == 0


def test_hash_only_urls(
    render_pass: RenderPass, make_post: Callable[..., Post]
) -> None:
    fragment_pass = RenderPass(
        boards=render_pass.boards,
        uri=render_pass.uri,
        options=RenderOptions(hash_only_urls=True),
        hooks=render_pass.hooks,
    )
    fragment_pass.register(make_post(1, op=True))
    fragment_pass.register(make_post(2, thread_num=1))
    html = _resolve(fragment_pass, make_post(3, thread_num=1), "&gt;&gt;1 &gt;&gt;2 &gt;&gt;9")
    assert 'href="#1"' in html
    assert 'href="#2"' in html
    assert 'href="/a/post/9/"' in html


def test_controller_method_changes_thread_route(
    render_pass: RenderPass, make_post: Callable[..., Post]
) -> None:
    last_pass = RenderPass(
        boards=render_pass.boards,
        uri=render_pass.uri,
        options=RenderOptions(controller_method="last/50"),
        hooks=render_pass.hooks,
    )
    last_pass.register(make_post(1, op=True))
    assert 'href="/a/last/50/1/#1"' in _resolve(last_pass, make_post(2, thread_num=1), "&gt;&gt;1")


def test_internal_hook_adjusts_parts(
    render_pass: RenderPass, hooks: HookRegistry, make_post: Callable[..., Post]
) -> None:
    def quote_tags(parts: InternalLinkParts, **params: object) -> InternalLinkParts:
        parts.tags = ("<q>", "</q>")
        parts.hash = "p"
        return parts

    hooks.register(INTERNAL_LINK_HOOK, quote_tags)
    render_pass.register(make_post(1, op=True))
    html = _resolve(render_pass, make_post(2, thread_num=1), "&gt;&gt;1")
    assert html == f'<q><a href="/a/thread/1/#p1" {_attrs("backlink op", "1")}>&gt;&gt;1</a></q>'


def test_external_unknown_board(render_pass: RenderPass, make_post: Callable[..., Post]) -> None:
    post = make_post(1, op=True)
    assert _resolve(render_pass, post, "&gt;&gt;&gt;/xyz/123") == (
        '<a href="//boards.4chan.org/xyz/res/123">&gt;&gt;&gt;/xyz/123</a>'
    )
    assert _resolve(render_pass, post, "&gt;&gt;&gt;/xyz/") == (
        '<a href="//boards.4chan.org/xyz/">&gt;&gt;&gt;/xyz/</a>'
    )


def test_external_known_board(render_pass: RenderPass, make_post: Callable[..., Post]) -> None:
    post = make_post(1, op=True)
    assert _resolve(render_pass, post, "&gt;&gt;&gt;/g/123") == (
        f'<a href="/g/post/123/" {_attrs("backlink", "123", board="g")}>&gt;&gt;&gt;/g/123</a>'
    )
    assert _resolve(render_pass, post, "&gt;&gt;&gt;/g/") == '<a href="/g/">&gt;&gt;&gt;/g/</a>'


def test_external_reference_does_not_stage_backlinks(
    render_pass: RenderPass, make_post: Callable[..., Post]
) -> None:
    post = make_post(1, op=True)
    staged: dict[str, dict[str, str]] = {}
    assert post.board is not None
    ReferenceResolver(post, post.board, render_pass, staged).resolve("&gt;&gt;&gt;/g/123")
    assert staged == {}


def test_external_hook_adds_attributes(
    render_pass: RenderPass, hooks: HookRegistry, make_post: Callable[..., Post]
) -> None:
    def remote_attrs(parts, **params):
        parts.attributes = ' rel="noreferrer"'
        return parts

    hooks.register(EXTERNAL_LINK_HOOK, remote_attrs)
    html = _resolve(render_pass, make_post(1, op=True), "&gt;&gt;&gt;/xyz/9")
    assert html == '<a href="//boards.4chan.org/xyz/res/9" rel="noreferrer">&gt;&gt;&gt;/xyz/9</a>'


def test_internal_hook_with_wrong_result_keeps_default_parts(
    render_pass: RenderPass, hooks: HookRegistry, make_post: Callable[..., Post]
) -> None:
    hooks.register(INTERNAL_LINK_HOOK, lambda parts, **params: {"tags": ("", "")})
    render_pass.register(make_post(1, op=True))
    assert _resolve(render_pass, make_post(2, thread_num=1), "&gt;&gt;1") == (
        f'<a href="/a/thread/1/#1" {_attrs("backlink op", "1")}>&gt;&gt;1</a>'
    )


def test_internal_hook_mutating_then_failing_leaves_defaults(
    render_pass: RenderPass, hooks: HookRegistry, make_post: Callable[..., Post]
) -> None:
    def mutate_and_break(parts: InternalLinkParts, **params: object) -> str:
        parts.tags = ("<q>", "</q>")
        return "broken"

    hooks.register(INTERNAL_LINK_HOOK, mutate_and_break)
    html = _resolve(render_pass, make_post(1, op=True), "&gt;&gt;2")
    assert not html.startswith("<q>")


def test_external_hook_with_wrong_result_keeps_default_parts(
    render_pass: RenderPass, hooks: HookRegistry, make_post: Callable[..., Post]
) -> None:
    hooks.register(EXTERNAL_LINK_HOOK, lambda parts, **params: ["not", "parts"])
    html = _resolve(render_pass, make_post(1, op=True), "&gt;&gt;&gt;/xyz/9")
    assert html == '<a href="//boards.4chan.org/xyz/res/9">&gt;&gt;&gt;/xyz/9</a>'
