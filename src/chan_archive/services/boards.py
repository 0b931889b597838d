"""Board lookup used to resolve cross-board references."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from chan_archive.schemas.post import BoardContext


class BoardRegistry(Protocol):
    """Resolves a board shortname, returning ``None`` for unknown boards."""

    def resolve(self, shortname: str) -> BoardContext | None: ...


class InMemoryBoardRegistry:
    """Board registry backed by a dictionary keyed by shortname."""

    def __init__(self, boards: Iterable[BoardContext] = ()) -> None:
        self._boards: dict[str, BoardContext] = {}
        for board in boards:
            self.add(board)

    def add(self, board: BoardContext) -> None:
        self._boards[board.shortname] = board

    def resolve(self, shortname: str) -> BoardContext | None:
        return self._boards.get(shortname)

    def __contains__(self, shortname: object) -> bool:
        return shortname in self._boards

    def __len__(self) -> int:
        return len(self._boards)
