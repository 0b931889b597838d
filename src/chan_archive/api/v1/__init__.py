# src/chan_archive/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import render_router

__all__ = [
    "render_router",
]
