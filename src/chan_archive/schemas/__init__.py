"""Pydantic schemas for posts, boards and the render API."""

from .post import BoardContext, Capcode, Post, RenderedPost
from .render import (
    BacklinkOut,
    RenderedPostOut,
    RenderOptionsIn,
    ThreadRenderRequest,
    ThreadRenderResponse,
    TripcodeRequest,
    TripcodeResponse,
)

__all__ = [
    "BoardContext",
    "Capcode",
    "Post",
    "RenderedPost",
    "BacklinkOut",
    "RenderedPostOut",
    "RenderOptionsIn",
    "ThreadRenderRequest",
    "ThreadRenderResponse",
    "TripcodeRequest",
    "TripcodeResponse",
]
