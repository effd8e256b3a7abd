from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Tuple
import logging
import random


logger = logging.getLogger(__name__)


class InvalidConfiguration(ValueError):
    """Board dimensions or mine count outside their allowed ranges."""


class OutOfBounds(ValueError):
    """A coordinate outside the grid."""


@dataclass(frozen=True)
class Cell:
    row: int
    col: int
    is_mine: bool = False
    mine_count_around: int = 0
    is_covered: bool = True
    is_flagged: bool = False


@dataclass(frozen=True)
class Board:
    num_rows: int
    num_cols: int
    num_mines: int
    cells: Tuple[Cell, ...]

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.num_rows and 0 <= col < self.num_cols

    def cell(self, row: int, col: int) -> Cell:
        if not self.contains(row, col):
            raise OutOfBounds("out_of_bounds")
        return self.cells[index(row, col, self.num_cols)]

    def mine_positions(self) -> List[Tuple[int, int]]:
        return [(c.row, c.col) for c in self.cells if c.is_mine]


def index(row: int, col: int, num_cols: int) -> int:
    return row * num_cols + col


def coords(idx: int, num_cols: int) -> Tuple[int, int]:
    return divmod(idx, num_cols)


def neighbors(r: int, c: int, num_rows: int, num_cols: int):
    for nr in range(max(0, r - 1), min(num_rows, r + 2)):
        for nc in range(max(0, c - 1), min(num_cols, c + 2)):
            if nr == r and nc == c:
                continue
            yield nr, nc


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _validate_dimensions(num_rows: int, num_cols: int) -> None:
    if not (_is_int(num_rows) and _is_int(num_cols)):
        raise InvalidConfiguration("non_integer_configuration")
    if num_rows < 1 or num_cols < 1:
        raise InvalidConfiguration("non_positive_dimensions")


def validate_configuration(num_rows: int, num_cols: int, num_mines: int) -> None:
    _validate_dimensions(num_rows, num_cols)
    if not _is_int(num_mines):
        raise InvalidConfiguration("non_integer_configuration")
    if num_mines < 0:
        raise InvalidConfiguration("negative_mine_count")
    if num_mines > num_rows * num_cols:
        raise InvalidConfiguration("too_many_mines_for_board")


def build_board(num_rows: int, num_cols: int, mine_positions: Iterable[Tuple[int, int]]) -> Board:
    """Lay out a board from explicit mine coordinates and compute adjacency counts."""
    _validate_dimensions(num_rows, num_cols)
    n = num_rows * num_cols
    mines = set()
    for r, c in mine_positions:
        if not (0 <= r < num_rows and 0 <= c < num_cols):
            raise InvalidConfiguration("invalid_mine_position")
        i = index(r, c, num_cols)
        if i in mines:
            raise InvalidConfiguration("invalid_mine_position")
        mines.add(i)

    cells: List[Cell] = []
    for i in range(n):
        r, c = coords(i, num_cols)
        if i in mines:
            cells.append(Cell(r, c, is_mine=True))
            continue
        cnt = 0
        for nr, nc in neighbors(r, c, num_rows, num_cols):
            if index(nr, nc, num_cols) in mines:
                cnt += 1
        cells.append(Cell(r, c, mine_count_around=cnt))
    return Board(num_rows, num_cols, len(mines), tuple(cells))


def generate(num_rows: int, num_cols: int, num_mines: int, rng_seed: int | None = None) -> Board:
    validate_configuration(num_rows, num_cols, num_mines)
    positions = [coords(i, num_cols) for i in range(num_rows * num_cols)]
    rng = random.Random(rng_seed)
    rng.shuffle(positions)
    board = build_board(num_rows, num_cols, positions[:num_mines])
    logger.debug("generated %dx%d board with %d mines", num_rows, num_cols, num_mines)
    return board
