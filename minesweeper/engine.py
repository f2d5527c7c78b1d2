"""Grid engine: mine layout, reveal/flag state and the flood-fill reveal."""
import random
from typing import FrozenSet, Iterator, List, Optional, Tuple

from minesweeper.errors import InvalidConfiguration, OutOfRange
from minesweeper.types import (
    DIFFICULTY_PRESETS,
    CellState,
    Difficulty,
    FlagOutcome,
    SelectOutcome,
)

Coordinate = Tuple[int, int]


class GridEngine:
    """Owns one grid's mine layout and per-cell reveal/flag state.

    Mines are not placed at construction. The caller places them on the first
    reveal with :meth:`place_mines`, which keeps the first selected cell safe.
    """

    def __init__(self, rows: int, columns: int, bomb_quantity: int,
                 rng: Optional[random.Random] = None):
        if rows <= 0 or columns <= 0:
            raise InvalidConfiguration(f"Grid must have positive dimensions, got {rows}x{columns}")
        if bomb_quantity < 0 or bomb_quantity > rows * columns:
            raise InvalidConfiguration(
                f"Cannot place {bomb_quantity} bombs on a {rows}x{columns} grid"
            )

        self._rows = rows
        self._columns = columns
        self._bomb_quantity = bomb_quantity
        self._rng = rng if rng is not None else random.Random()
        self.reset_board()

    @classmethod
    def for_difficulty(cls, difficulty: Difficulty,
                       rng: Optional[random.Random] = None) -> "GridEngine":
        preset = DIFFICULTY_PRESETS[difficulty]
        return cls(preset.rows, preset.columns, preset.bomb_quantity, rng=rng)

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def columns(self) -> int:
        return self._columns

    @property
    def bomb_quantity(self) -> int:
        return self._bomb_quantity

    @property
    def flags_remaining(self) -> int:
        return self._flags_remaining

    @property
    def revealed_count(self) -> int:
        return self._revealed_count

    @property
    def mines_placed(self) -> bool:
        return self._mines_placed

    def reset_board(self) -> None:
        """Clear the layout and every cell state. Dimensions are kept."""
        self._mines: List[List[bool]] = [[False] * self._columns for _ in range(self._rows)]
        self._adjacency: List[List[int]] = [[0] * self._columns for _ in range(self._rows)]
        self._states: List[List[CellState]] = [
            [CellState.UNVISITED] * self._columns for _ in range(self._rows)
        ]
        self._flags_remaining = self._bomb_quantity
        self._revealed_count = 0
        self._mines_placed = False

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self._rows and 0 <= col < self._columns

    def _check_bounds(self, row: int, col: int) -> None:
        if not self.in_bounds(row, col):
            raise OutOfRange(row, col, self._rows, self._columns)

    def neighbors(self, row: int, col: int) -> Iterator[Coordinate]:
        """Yield the in-bounds cells of the 8-neighborhood."""
        for dr in [-1, 0, 1]:
            for dc in [-1, 0, 1]:
                if dr == 0 and dc == 0:
                    continue
                new_row = row + dr
                new_col = col + dc
                if self.in_bounds(new_row, new_col):
                    yield new_row, new_col

    def cell_state(self, row: int, col: int) -> CellState:
        self._check_bounds(row, col)
        return self._states[row][col]

    def is_mine(self, row: int, col: int) -> bool:
        self._check_bounds(row, col)
        return self._mines[row][col]

    def adjacent_mines(self, row: int, col: int) -> int:
        """Mines around a non-mine cell. Meaningless for mine cells."""
        self._check_bounds(row, col)
        return self._adjacency[row][col]

    def mine_positions(self) -> FrozenSet[Coordinate]:
        return frozenset(
            (row, col)
            for row in range(self._rows)
            for col in range(self._columns)
            if self._mines[row][col]
        )

    def place_mines(self, exclude_row: int, exclude_col: int) -> List[Coordinate]:
        """Lay out the mines around a safe first cell, then reveal from it.

        The board is re-zeroed first, so a second call reshuffles rather than
        stacking mines. Returns the cells revealed by the opening flood fill.
        """
        self._check_bounds(exclude_row, exclude_col)
        cell_count = self._rows * self._columns
        if self._bomb_quantity >= cell_count:
            raise InvalidConfiguration(
                f"No safe cell left for the first reveal with {self._bomb_quantity} bombs"
            )

        self.reset_board()

        safe_index = exclude_row * self._columns + exclude_col
        candidates = [index for index in range(cell_count) if index != safe_index]
        for index in self._rng.sample(candidates, self._bomb_quantity):
            row, col = divmod(index, self._columns)
            self._mines[row][col] = True

        for row in range(self._rows):
            for col in range(self._columns):
                if not self._mines[row][col]:
                    self._adjacency[row][col] = sum(
                        1 for r, c in self.neighbors(row, col) if self._mines[r][c]
                    )

        self._mines_placed = True
        return self._visit(exclude_row, exclude_col)

    def select(self, row: int, col: int) -> SelectOutcome:
        """Reveal a cell. A mine is reported, not revealed."""
        self._check_bounds(row, col)
        if self._states[row][col] is CellState.FLAGGED:
            return SelectOutcome.CONTINUE
        if self._mines[row][col]:
            return SelectOutcome.MINE_HIT
        self._visit(row, col)
        return SelectOutcome.CONTINUE

    def toggle_flag(self, row: int, col: int) -> FlagOutcome:
        self._check_bounds(row, col)
        state = self._states[row][col]
        if state is CellState.REVEALED:
            return FlagOutcome.REJECTED

        if state is CellState.UNVISITED:
            if self._flags_remaining == 0:
                return FlagOutcome.REJECTED
            self._states[row][col] = CellState.FLAGGED
            self._flags_remaining -= 1
        else:
            self._states[row][col] = CellState.UNVISITED
            self._flags_remaining += 1
        return FlagOutcome.ACCEPTED

    def is_won(self) -> bool:
        """Every non-mine cell is revealed. Flags play no part."""
        return self._revealed_count == self._rows * self._columns - self._bomb_quantity

    def reveal_all_mines(self) -> None:
        """Mark every mine cell revealed for the end-of-game display."""
        for row in range(self._rows):
            for col in range(self._columns):
                if self._mines[row][col]:
                    self._states[row][col] = CellState.REVEALED

    def _visit(self, row: int, col: int) -> List[Coordinate]:
        """Flood-fill reveal from a cell using an explicit stack.

        Numbered cells are revealed but never expanded. Flagged and already
        revealed cells are left alone.
        """
        revealed: List[Coordinate] = []
        stack = [(row, col)]
        while stack:
            r, c = stack.pop()
            if self._mines[r][c] or self._states[r][c] is not CellState.UNVISITED:
                continue

            self._states[r][c] = CellState.REVEALED
            self._revealed_count += 1
            revealed.append((r, c))

            if self._adjacency[r][c] == 0:
                stack.extend(
                    (nr, nc) for nr, nc in self.neighbors(r, c)
                    if self._states[nr][nc] is CellState.UNVISITED
                )
        return revealed
