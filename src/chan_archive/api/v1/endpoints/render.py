"""Rendering endpoints for the archive API."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from chan_archive.api.v1.dependencies import HooksDep, SettingsDep, UriBuilderDep
from chan_archive.core.exceptions import RenderError
from chan_archive.schemas.render import (
    BacklinkOut,
    RenderedPostOut,
    ThreadRenderRequest,
    ThreadRenderResponse,
    TripcodeRequest,
    TripcodeResponse,
)
from chan_archive.services.boards import InMemoryBoardRegistry
from chan_archive.services.render_pass import RenderOptions, RenderPass
from chan_archive.services.tripcode import process_name

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/render", tags=["render"])


@router.post("/thread", response_model=ThreadRenderResponse)
async def render_thread(
    payload: ThreadRenderRequest,
    config: SettingsDep,
    uri: UriBuilderDep,
    hooks: HooksDep,
) -> ThreadRenderResponse:
    """Render a batch of posts in a fresh pass and return them with backlinks.

    Args:
        payload: Board, boards known for cross-board quotes, posts and options
        config: Application settings
        uri: Builder for in-application links
        hooks: Process-wide hook registry

    Returns:
        Rendered posts in request order, each with its quoted-by anchors
    """
    boards = InMemoryBoardRegistry([payload.board, *payload.known_boards])
    overrides: dict[str, object] = {"hash_only_urls": payload.options.hash_only_urls}
    if payload.options.controller_method:
        overrides["controller_method"] = payload.options.controller_method
    options = RenderOptions.from_settings(config, **overrides)

    # One pass per request: the index and registry must never be shared.
    render_pass = RenderPass(boards=boards, uri=uri, options=options, hooks=hooks)
    posts = [
        post if post.board is not None else post.model_copy(update={"board": payload.board})
        for post in payload.posts
    ]

    try:
        rendered = render_pass.render_thread(
            posts, register_first=payload.options.register_first
        )
    except RenderError as err:
        logger.warning("Rejected thread render for /%s/: %s", payload.board.shortname, err)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(err),
        ) from err

    results = []
    for post, item in zip(posts, rendered):
        backlinks = [
            BacklinkOut(anchor_id=source, html=html)
            for source, html in render_pass.get_backlinks(post).items()
        ]
        results.append(RenderedPostOut(**item.model_dump(), backlinks=backlinks))

    return ThreadRenderResponse(board=payload.board.shortname, posts=results)


@router.post("/tripcode", response_model=TripcodeResponse)
async def derive_tripcode(payload: TripcodeRequest, config: SettingsDep) -> TripcodeResponse:
    """Split a raw name into its display name and tripcode."""
    parsed = process_name(payload.name, secure_salt=config.secure_tripcode_salt)
    return TripcodeResponse(name=parsed.name, trip=parsed.trip)
