# src/chan_archive/services/__init__.py
"""Rendering services for archived posts."""

from .boards import InMemoryBoardRegistry
from .comment import process_comment, render_post
from .render_pass import BacklinkRegistry, RenderOptions, RenderPass, ThreadPostIndex
from .tripcode import process_name
from .uri import PathUriBuilder

__all__ = [
    "BacklinkRegistry",
    "InMemoryBoardRegistry",
    "PathUriBuilder",
    "RenderOptions",
    "RenderPass",
    "ThreadPostIndex",
    "process_comment",
    "process_name",
    "render_post",
]
