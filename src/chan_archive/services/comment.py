"""Comment rendering pipeline.

Turns a stored post into display-ready HTML in a fixed order: sanitize,
resolve quote references, mark greentext, parse markup, autolink, then the
archive-only cleanup and line breaks. References are resolved before
greentext so a line starting with a quote link is not painted green.
"""

from __future__ import annotations

import logging
import re

from chan_archive.core.exceptions import BoardContextError
from chan_archive.core.hooks import BEFORE_CLEAN_HOOK
from chan_archive.schemas.post import BoardContext, Post, RenderedPost
from chan_archive.services.autolink import autolink
from chan_archive.services.greentext import annotate_greentext
from chan_archive.services.links import ReferenceResolver
from chan_archive.services.markup import render_markup
from chan_archive.services.render_pass import BacklinkBatch, RenderPass
from chan_archive.services.sanitizer import process_field, sanitize_comment, sanitize_text
from chan_archive.services.tripcode import process_name
from chan_archive.utils.time import fourchan_date, original_timestamp

logger = logging.getLogger(__name__)

LITERAL_TAG = re.compile(r"\[(/?(banned|moot|spoiler|code)):lit\]", re.IGNORECASE)
PRE_BLOCK = re.compile(r"<pre>(.*?)</pre>", re.DOTALL)
LINE_BREAK = re.compile(r"(\r\n|\n\r|\r|\n)")


def require_board(post: Post) -> BoardContext:
    """Return the post's board, failing loudly when the caller forgot it."""
    if post.board is None:
        raise BoardContextError(f"Post {post.token} has no board context")
    return post.board


def nl2br(text: str) -> str:
    """Insert ``<br />`` before every line break."""
    return LINE_BREAK.sub(r"<br />\1", text)


def _strip_breaks_in_pre(text: str) -> str:
    return PRE_BLOCK.sub(lambda m: f"<pre>{m.group(1).replace('<br />', '')}</pre>", text)


def process_comment(
    post: Post, render_pass: RenderPass, staged: BacklinkBatch | None = None
) -> str:
    """Return the processed HTML body of ``post``.

    Args:
        post: The post to render; its board decides the archive-only rules.
        render_pass: Pass providing the post index, collaborators and options.
        staged: Receives the backlinks produced by this body. When omitted
            they are written straight into the pass registry.

    Raises:
        BoardContextError: If the post carries no board.
    """
    board = require_board(post)
    archive_context = board.archive and not post.is_ghost
    options = render_pass.options
    direct = staged is None
    batch: BacklinkBatch = {} if staged is None else staged

    comment = sanitize_comment(post.comment, post.capcode)
    comment = ReferenceResolver(post, board, render_pass, batch).resolve(comment)
    comment = annotate_greentext(comment, hooks=render_pass.hooks)
    comment = render_markup(comment, archive_context=archive_context)
    comment = autolink(comment, kind="url", new_tab=options.autolink_new_tab)

    if archive_context:
        comment = LITERAL_TAG.sub(r"[\1]", comment)

    comment = _strip_breaks_in_pre(nl2br(comment.strip()))

    if direct:
        render_pass.backlinks.merge(batch)
    return sanitize_text(comment)


def render_post(post: Post, render_pass: RenderPass) -> RenderedPost:
    """Render every display field of ``post`` within ``render_pass``.

    Backlinks produced by the body are committed to the pass registry only
    after the whole post rendered, so a failure leaves the pass untouched.
    """
    require_board(post)
    hooked = render_pass.hooks.dispatch(BEFORE_CLEAN_HOOK, post, render_pass=render_pass)
    if isinstance(hooked, Post):
        post = hooked
    else:
        logger.warning("Ignoring %s listener result of type %s", BEFORE_CLEAN_HOOK, type(hooked))

    staged: BacklinkBatch = {}
    comment_processed = process_comment(post, render_pass, staged)
    timestamp = original_timestamp(post.timestamp, archive=require_board(post).archive)

    parsed = process_name(post.name, secure_salt=render_pass.options.secure_tripcode_salt)
    trip = parsed.trip or post.trip

    rendered = RenderedPost(
        num=post.num,
        subnum=post.subnum,
        thread_num=post.thread_num,
        op=post.op,
        anchor_id=post.anchor_id,
        name_processed=process_field(parsed.name),
        trip_processed=process_field(trip),
        email_processed=process_field(post.email),
        title_processed=process_field(post.title),
        poster_hash_processed=process_field(post.poster_hash),
        poster_country_name_processed=(
            process_field(post.poster_country_name)
            if post.poster_country_name is not None
            else None
        ),
        comment_sanitized=sanitize_text(post.comment),
        comment_processed=comment_processed,
        original_timestamp=timestamp,
        fourchan_date=fourchan_date(timestamp),
    )

    render_pass.backlinks.merge(staged)
    logger.debug("Rendered post %s with %d quotes", post.token, len(staged))
    return rendered
