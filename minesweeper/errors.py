"""Errors raised by the Minesweeper rules engine."""


class MinesweeperError(Exception):
    """Base class for rules engine errors."""


class InvalidConfiguration(MinesweeperError, ValueError):
    """A board cannot be built with the requested dimensions and bombs."""


class OutOfRange(MinesweeperError, IndexError):
    """A row/column pair lies outside the grid."""

    def __init__(self, row: int, col: int, rows: int, columns: int):
        super().__init__(f"Cell ({row}, {col}) is outside a {rows}x{columns} grid")
        self.row = row
        self.col = col
