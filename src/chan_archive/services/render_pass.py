"""State shared by every post rendered during one thread rendering pass.

A :class:`RenderPass` owns the thread post index and the backlink registry.
Create one per request; sharing a pass between requests leaks quotes and
backlinks from one render into another.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from chan_archive.core.hooks import HookRegistry, get_hook_registry
from chan_archive.core.settings import Settings, settings
from chan_archive.services.boards import BoardRegistry, InMemoryBoardRegistry
from chan_archive.services.uri import PathUriBuilder, UriBuilder

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from chan_archive.schemas.post import Post, RenderedPost

logger = logging.getLogger(__name__)

BacklinkBatch = dict[str, dict[str, str]]


class ThreadPostIndex:
    """Ordered post tokens per thread, appended to as posts are registered.

    Tokens use the ``num`` / ``num,subnum`` form. A reverse map remembers,
    for each token, the earliest-created thread holding it, which is what a
    scan over the threads in insertion order would find first.
    """

    def __init__(self) -> None:
        self._threads: dict[int, list[str]] = {}
        self._thread_order: dict[int, int] = {}
        self._token_thread: dict[str, int] = {}

    def register(self, thread_num: int, token: str) -> None:
        if thread_num not in self._threads:
            self._thread_order[thread_num] = len(self._threads)
            self._threads[thread_num] = []
        self._threads[thread_num].append(token)

        known = self._token_thread.get(token)
        if known is None or self._thread_order[thread_num] < self._thread_order[known]:
            self._token_thread[token] = thread_num

    def has_thread(self, token: str) -> bool:
        """Return True if ``token`` is the number of a registered thread."""
        return token.isdigit() and int(token) in self._threads

    def find_thread(self, token: str) -> int | None:
        """Return the first registered thread containing ``token``."""
        return self._token_thread.get(token)

    def posts(self, thread_num: int) -> list[str]:
        return list(self._threads.get(thread_num, []))

    def threads(self) -> Mapping[int, list[str]]:
        return {thread: list(tokens) for thread, tokens in self._threads.items()}

    def clear(self) -> None:
        self._threads.clear()
        self._thread_order.clear()
        self._token_thread.clear()

    def __contains__(self, token: object) -> bool:
        return token in self._token_thread

    def __len__(self) -> int:
        return sum(len(tokens) for tokens in self._threads.values())


class BacklinkRegistry:
    """Quoted-by anchors keyed by the quoted post, then by the quoting post.

    Keys use the ``num`` / ``num_subnum`` form.
    """

    def __init__(self) -> None:
        self._entries: BacklinkBatch = {}

    def add(self, target: str, source: str, html: str) -> None:
        self._entries.setdefault(target, {})[source] = html

    def merge(self, batch: BacklinkBatch) -> None:
        for target, sources in batch.items():
            self._entries.setdefault(target, {}).update(sources)

    def get(self, target: str) -> dict[str, str]:
        """Return the entries for ``target`` sorted by quoting post as strings."""
        sources = self._entries.get(target)
        if not sources:
            return {}
        return dict(sorted(sources.items()))

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, target: object) -> bool:
        return target in self._entries

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True)
class RenderOptions:
    """Switches applied to every post of a pass."""

    controller_method: str = "thread"
    hash_only_urls: bool = False
    autolink_new_tab: bool = True
    remote_board_base: str = "//boards.4chan.org"
    secure_tripcode_salt: str = ""

    @classmethod
    def from_settings(cls, config: Settings | None = None, **overrides: object) -> RenderOptions:
        """Build options from application settings, then apply ``overrides``."""
        config = config or settings
        options = cls(
            controller_method=config.controller_method,
            autolink_new_tab=config.autolink_new_tab,
            remote_board_base=config.remote_board_root,
            secure_tripcode_salt=config.secure_tripcode_salt,
        )
        return replace(options, **overrides) if overrides else options


class RenderPass:
    """Context for rendering the posts of one page.

    Args:
        boards: Registry used to resolve ``>>>/board/`` references.
        uri: Builder for every in-application link.
        options: Pass-wide render switches.
        hooks: Hook registry; defaults to the process-wide one.
    """

    def __init__(
        self,
        *,
        boards: BoardRegistry | None = None,
        uri: UriBuilder | None = None,
        options: RenderOptions | None = None,
        hooks: HookRegistry | None = None,
    ) -> None:
        self.boards: BoardRegistry = boards if boards is not None else InMemoryBoardRegistry()
        self.uri: UriBuilder = uri if uri is not None else PathUriBuilder(settings.base_url)
        self.options = options or RenderOptions.from_settings()
        self.hooks = hooks if hooks is not None else get_hook_registry()
        self.index = ThreadPostIndex()
        self.backlinks = BacklinkRegistry()

    def reset(self) -> None:
        """Forget every registered post and backlink."""
        self.index.clear()
        self.backlinks.clear()

    def register(self, post: Post) -> None:
        """Make ``post`` resolvable by quotes in posts rendered afterwards."""
        self.index.register(post.thread_num, post.token)

    def get_backlinks(self, post: Post) -> dict[str, str]:
        """Return the quoted-by anchors collected so far for ``post``."""
        return self.backlinks.get(post.anchor_id)

    def render(self, post: Post) -> RenderedPost:
        """Render ``post`` and record its backlinks in this pass."""
        from chan_archive.services.comment import render_post

        return render_post(post, self)

    def add_post(self, post: Post) -> RenderedPost:
        """Render ``post`` then register it, the incremental archive order.

        Quotes to posts added later degrade to generic post links.
        """
        rendered = self.render(post)
        self.register(post)
        return rendered

    def render_thread(
        self, posts: Iterable[Post], *, register_first: bool = True
    ) -> list[RenderedPost]:
        """Render a sequence of posts.

        With ``register_first`` every post is registered before any body is
        processed, so forward quotes resolve as in-thread links.
        """
        posts = list(posts)
        if not register_first:
            return [self.add_post(post) for post in posts]

        for post in posts:
            self.register(post)
        logger.debug("Registered %d posts before rendering", len(posts))
        return [self.render(post) for post in posts]
