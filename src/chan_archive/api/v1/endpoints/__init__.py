# src/chan_archive/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .render import router as render_router

__all__ = [
    "render_router",
]
