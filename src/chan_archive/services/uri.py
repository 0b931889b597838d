"""URI construction for links emitted by the renderer."""

from __future__ import annotations

from typing import Protocol


class UriBuilder(Protocol):
    """Anything able to turn route segments into an application path."""

    def create(self, *segments: str | int) -> str: ...


class PathUriBuilder:
    """Join route segments under a base URL: ``/a/thread/123/``."""

    def __init__(self, base_url: str = "/") -> None:
        self.base_url = base_url.rstrip("/") + "/"

    def create(self, *segments: str | int) -> str:
        parts = [str(segment).strip("/") for segment in segments]
        path = "/".join(part for part in parts if part)
        return f"{self.base_url}{path}/" if path else self.base_url
