# tests/conftest.py
from __future__ import annotations

import base64
from collections.abc import Callable, Iterator
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from chan_archive.core.hooks import HookRegistry, get_hook_registry, reset_hooks
from chan_archive.main import app as fastapi_app
from chan_archive.schemas.post import BoardContext, Post
from chan_archive.services.boards import InMemoryBoardRegistry
from chan_archive.services.render_pass import RenderOptions, RenderPass
from chan_archive.services.uri import PathUriBuilder

TEST_SECURE_SALT = base64.b64encode(b"test-secure-salt").decode()


@pytest.fixture(autouse=True)
def clean_hooks() -> Iterator[None]:
    """Give every test an empty process-wide hook registry."""
    reset_hooks()
    try:
        yield
    finally:
        reset_hooks()


@pytest.fixture()
def hooks() -> HookRegistry:
    return get_hook_registry()


@pytest.fixture()
def board() -> BoardContext:
    return BoardContext(shortname="a", name="Anime & Manga")


@pytest.fixture()
def archive_board() -> BoardContext:
    return BoardContext(shortname="jp", name="Otaku Culture", archive=True)


@pytest.fixture()
def other_board() -> BoardContext:
    return BoardContext(shortname="g", name="Technology")


@pytest.fixture()
def render_options() -> RenderOptions:
    return RenderOptions(secure_tripcode_salt=TEST_SECURE_SALT)


@pytest.fixture()
def render_pass(
    board: BoardContext,
    archive_board: BoardContext,
    other_board: BoardContext,
    render_options: RenderOptions,
    hooks: HookRegistry,
) -> RenderPass:
    return RenderPass(
        boards=InMemoryBoardRegistry([board, archive_board, other_board]),
        uri=PathUriBuilder("/"),
        options=render_options,
        hooks=hooks,
    )


@pytest.fixture()
def make_post(board: BoardContext) -> Callable[..., Post]:
    """Build a post on the default board; keyword arguments override fields."""

    def _make(num: int, comment: str = "", **fields: Any) -> Post:
        data: dict[str, Any] = {
            "num": num,
            "thread_num": num,
            "comment": comment,
            "board": board,
            "timestamp": 1_700_000_000,
        }
        data.update(fields)
        return Post(**data)

    return _make


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client
