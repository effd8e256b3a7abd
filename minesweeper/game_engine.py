from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Tuple
import logging

from .board import Board, Cell, OutOfBounds, generate, index


logger = logging.getLogger(__name__)


class GameStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    WON = "won"
    LOST = "lost"

    @property
    def is_terminal(self) -> bool:
        return self is not GameStatus.IN_PROGRESS


@dataclass(frozen=True)
class GameState:
    num_rows: int
    num_cols: int
    num_mines: int
    cells: Tuple[Cell, ...]
    status: GameStatus

    def cell(self, row: int, col: int) -> Cell:
        if not (0 <= row < self.num_rows and 0 <= col < self.num_cols):
            raise OutOfBounds("out_of_bounds")
        return self.cells[index(row, col, self.num_cols)]

    @property
    def flags_total(self) -> int:
        return sum(1 for c in self.cells if c.is_flagged)

    @property
    def revealed_total(self) -> int:
        return sum(1 for c in self.cells if not c.is_covered)

    @property
    def mines_remaining(self) -> int:
        return self.num_mines - self.flags_total


class GameEngine:
    """Owns one session: the generated board plus the live cover and flag state.

    ``reveal`` and ``toggle_flag`` are the only mutators. ``current_state``
    returns a frozen snapshot, so callers never hold a reference into the
    engine's own lists.
    """

    def __init__(self, board: Board) -> None:
        self._board = board
        n = board.num_rows * board.num_cols
        self._covered: List[bool] = [True] * n
        self._flagged: List[bool] = [False] * n
        self._status = GameStatus.IN_PROGRESS

    @property
    def status(self) -> GameStatus:
        return self._status

    def _index(self, row: int, col: int) -> int:
        if not self._board.contains(row, col):
            raise OutOfBounds("out_of_bounds")
        return index(row, col, self._board.num_cols)

    def _is_win(self) -> bool:
        for i, cell in enumerate(self._board.cells):
            if not cell.is_mine and self._covered[i]:
                return False
        return True

    def _result(self, action: str, row: int, col: int, changed: bool, hit_mine: bool = False) -> Dict[str, Any]:
        return {
            "action": action,
            "row": row,
            "col": col,
            "changed": changed,
            "hit_mine": hit_mine,
            "cleared_cells": 1 if changed and action == "reveal" else 0,
            "status_after": self._status,
            "revealed_total": self._covered.count(False),
            "flags_total": self._flagged.count(True),
        }

    def reveal(self, row: int, col: int) -> Dict[str, Any]:
        i = self._index(row, col)
        if self._status.is_terminal or not self._covered[i] or self._flagged[i]:
            return self._result("reveal", row, col, changed=False)
        self._covered[i] = False
        if self._board.cells[i].is_mine:
            self._status = GameStatus.LOST
            logger.info("mine revealed at (%d, %d), session lost", row, col)
            return self._result("reveal", row, col, changed=True, hit_mine=True)
        if self._is_win():
            self._status = GameStatus.WON
            logger.info("last safe cell revealed at (%d, %d), session won", row, col)
        return self._result("reveal", row, col, changed=True)

    def toggle_flag(self, row: int, col: int) -> Dict[str, Any]:
        i = self._index(row, col)
        if self._status.is_terminal or not self._covered[i]:
            return self._result("flag", row, col, changed=False)
        self._flagged[i] = not self._flagged[i]
        return self._result("flag", row, col, changed=True)

    def current_state(self) -> GameState:
        cells = tuple(
            replace(cell, is_covered=self._covered[i], is_flagged=self._flagged[i])
            for i, cell in enumerate(self._board.cells)
        )
        return GameState(
            self._board.num_rows,
            self._board.num_cols,
            self._board.num_mines,
            cells,
            self._status,
        )


def new_session(num_rows: int, num_cols: int, num_mines: int, rng_seed: int | None = None) -> GameEngine:
    return GameEngine(generate(num_rows, num_cols, num_mines, rng_seed=rng_seed))


def render_style(cell: Cell) -> str:
    if cell.is_flagged:
        return "flagged"
    if cell.is_covered:
        return "covered"
    if cell.is_mine:
        return "mine"
    return "number" if cell.mine_count_around > 0 else "blank"


_STYLE_CODES = {"flagged": "F", "covered": "H", "mine": "M"}


def to_client_view(s: GameState) -> List[List[str]]:
    board: List[List[str]] = []
    for r in range(s.num_rows):
        row: List[str] = []
        for c in range(s.num_cols):
            cell = s.cells[index(r, c, s.num_cols)]
            style = render_style(cell)
            row.append(_STYLE_CODES.get(style, str(cell.mine_count_around)))
        board.append(row)
    return board
