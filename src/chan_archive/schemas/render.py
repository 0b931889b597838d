"""Request and response schemas for the render endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field

from .post import BoardContext, Post, RenderedPost


class RenderOptionsIn(BaseModel):
    """Per-request switches for a thread render."""

    controller_method: str | None = Field(None, description="Route used for in-thread links")
    hash_only_urls: bool = Field(False, description="Emit fragment-only hrefs for resolved quotes")
    register_first: bool = Field(
        True,
        description="Register every post before rendering so forward quotes resolve",
    )


class ThreadRenderRequest(BaseModel):
    """Schema for rendering the posts of one or more threads of a board."""

    board: BoardContext
    known_boards: list[BoardContext] = Field(default_factory=list)
    posts: list[Post] = Field(..., min_length=1, max_length=5000)
    options: RenderOptionsIn = Field(default_factory=RenderOptionsIn)


class BacklinkOut(BaseModel):
    """A single "quoted by" entry."""

    anchor_id: str
    html: str


class RenderedPostOut(RenderedPost):
    """Rendered post plus the backlinks collected during the pass."""

    backlinks: list[BacklinkOut] = Field(default_factory=list)


class ThreadRenderResponse(BaseModel):
    board: str
    posts: list[RenderedPostOut]


class TripcodeRequest(BaseModel):
    name: str = Field(..., max_length=256, description="Raw name field, optionally with #secret")


class TripcodeResponse(BaseModel):
    name: str
    trip: str
