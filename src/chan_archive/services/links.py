"""Resolution of ``>>123`` and ``>>>/board/123`` references.

Internal references are looked up in the pass's thread post index and, as a
side effect, record a quoted-by anchor for the quoting post. External
references resolve the board through the board registry and fall back to
the remote board site when it is unknown.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import TypeVar

from chan_archive.core.hooks import EXTERNAL_LINK_HOOK, INTERNAL_LINK_HOOK
from chan_archive.schemas.post import BoardContext, Post
from chan_archive.services.render_pass import BacklinkBatch, RenderPass

logger = logging.getLogger(__name__)

INTERNAL_REFERENCE = re.compile(r"(&gt;&gt;(\d+(?:,\d+)?))", re.IGNORECASE)
EXTERNAL_REFERENCE = re.compile(
    r"(&gt;&gt;&gt;(/(\w+)/([\w-]+(?:,\d+)?)?(/?)))",
    re.IGNORECASE,
)


def _highlight_attributes(css_class: str, board: str, post: str) -> str:
    return (
        f'class="{css_class}" data-function="highlight" data-backlink="true" '
        f'data-board="{board}" data-post="{post}"'
    )


@dataclass
class InternalLinkParts:
    """Pieces of an internal reference anchor, open to hook listeners.

    ``tags`` wraps the anchor, ``hash`` prefixes the fragment, and each
    ``attr_*`` is the attribute string of one resolution outcome.
    """

    attr: str
    attr_op: str
    attr_cross: str
    attr_unknown: str
    attr_backlink: str
    tags: tuple[str, str] = ("", "")
    hash: str = ""

    @classmethod
    def for_reference(cls, board: str, target: str, source: str) -> InternalLinkParts:
        return cls(
            attr=_highlight_attributes("backlink", board, target),
            attr_op=_highlight_attributes("backlink op", board, target),
            attr_cross=_highlight_attributes("backlink crossthread", board, target),
            attr_unknown=_highlight_attributes("backlink unknown", board, target),
            attr_backlink=_highlight_attributes("backlink", board, source),
        )

    def wrap(self, anchor: str) -> str:
        return f"{self.tags[0]}{anchor}{self.tags[1]}"


@dataclass
class ExternalLinkParts:
    """Pieces of a cross-board reference anchor, open to hook listeners."""

    short_link: str
    query_link: str
    backlink_attr: str
    attributes: str = ""
    tags: tuple[str, str] = ("", "")

    def wrap(self, anchor: str) -> str:
        return f"{self.tags[0]}{anchor}{self.tags[1]}"


PartsT = TypeVar("PartsT", InternalLinkParts, ExternalLinkParts)


class ReferenceResolver:
    """Resolve the references of one post body within a render pass.

    Backlinks are written to ``staged`` rather than to the pass registry so
    the caller can commit them once the whole post rendered.
    """

    def __init__(
        self,
        post: Post,
        board: BoardContext,
        render_pass: RenderPass,
        staged: BacklinkBatch | None = None,
    ) -> None:
        self.post = post
        self.board = board
        self.render_pass = render_pass
        self.staged: BacklinkBatch = staged if staged is not None else {}

    @property
    def _method(self) -> str:
        return self.render_pass.options.controller_method

    def _dispatch_parts(self, event: str, parts: PartsT, **params: object) -> PartsT:
        """Run link listeners on a copy of ``parts``; keep the defaults on a bad result."""
        result = self.render_pass.hooks.dispatch(event, replace(parts), **params)
        if not isinstance(result, type(parts)):
            logger.warning("Ignoring %s listener result of type %s", event, type(result))
            return parts
        return result

    def resolve(self, text: str) -> str:
        """Replace every internal then every external reference in ``text``."""
        text = INTERNAL_REFERENCE.sub(self.internal_link, text)
        return EXTERNAL_REFERENCE.sub(self.external_link, text)

    def internal_link(self, match: re.Match[str]) -> str:
        """Build the anchor for a ``>>num`` or ``>>num,subnum`` match."""
        if self.post.num == 0:
            return match.group(0)

        token = match.group(2)
        target = token.replace(",", "_")
        shortname = self.board.shortname
        uri = self.render_pass.uri
        options = self.render_pass.options

        parts = InternalLinkParts.for_reference(shortname, target, self.post.anchor_id)
        parts = self._dispatch_parts(
            INTERNAL_LINK_HOOK, parts, post=self.post, board=self.board, target=target
        )

        backlink_href = uri.create(shortname, self._method, self.post.thread_num)
        self.staged.setdefault(target, {})[self.post.anchor_id] = parts.wrap(
            f'<a href="{backlink_href}#{parts.hash}{self.post.anchor_id}" '
            f"{parts.attr_backlink}>&gt;&gt;{self.post.token}</a>"
        )

        index = self.render_pass.index
        if index.has_thread(token):
            href = f"#{parts.hash}{target}"
            if not options.hash_only_urls:
                href = uri.create(shortname, self._method, token) + href
            return parts.wrap(f'<a href="{href}" {parts.attr_op}>&gt;&gt;{token}</a>')

        thread = index.find_thread(token)
        if thread is not None:
            attr = parts.attr if thread == self.post.thread_num else parts.attr_cross
            href = f"#{parts.hash}{target}"
            if not options.hash_only_urls:
                href = uri.create(shortname, self._method, thread) + href
            return parts.wrap(f'<a href="{href}" {attr}>&gt;&gt;{token}</a>')

        logger.debug("Quote >>%s not registered in this pass; using post lookup link", token)
        href = uri.create(shortname, "post", target)
        return parts.wrap(f'<a href="{href}" {parts.attr_unknown}>&gt;&gt;{token}</a>')

    def external_link(self, match: re.Match[str]) -> str:
        """Build the anchor for a ``>>>/board/query`` match."""
        link = match.group(2)
        shortname = match.group(3)
        query = match.group(4) or ""
        board = self.render_pass.boards.resolve(shortname)
        remote = self.render_pass.options.remote_board_base.rstrip("/")

        parts = ExternalLinkParts(
            short_link=f"{remote}/{shortname}/",
            query_link=f"{remote}/{shortname}/res/{query}",
            backlink_attr=" " + _highlight_attributes(
                "backlink", board.shortname if board else shortname, query
            ),
        )
        parts = self._dispatch_parts(
            EXTERNAL_LINK_HOOK, parts, post=self.post, board=board, shortname=shortname, query=query
        )

        if board is None:
            if query:
                return parts.wrap(
                    f'<a href="{parts.query_link}"{parts.attributes}>&gt;&gt;&gt;{link}</a>'
                )
            return parts.wrap(f'<a href="{parts.short_link}">&gt;&gt;&gt;{link}</a>')

        if query:
            href = self.render_pass.uri.create(board.shortname, "post", query)
            return parts.wrap(
                f'<a href="{href}"{parts.attributes}{parts.backlink_attr}>&gt;&gt;&gt;{link}</a>'
            )
        return parts.wrap(
            f'<a href="{self.render_pass.uri.create(board.shortname)}">&gt;&gt;&gt;{link}</a>'
        )
