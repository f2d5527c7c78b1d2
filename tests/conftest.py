"""
Pytest configuration and shared fixtures.
"""
import random
from datetime import datetime, timezone

import pytest

from minesweeper.best_times import BestTimeStore, InMemorySettings
from minesweeper.engine import GridEngine


class FixedMines(random.Random):
    """Random source that always lays mines on the given linear indices."""

    def __init__(self, indices):
        super().__init__(0)
        self.indices = list(indices)

    def sample(self, population, k, **kwargs):
        assert all(index in population for index in self.indices)
        return self.indices[:k]


def reference_flood(engine: GridEngine, row: int, col: int):
    """Cells a full zero-region expansion reaches from a safe cell."""
    reached = {(row, col)}
    frontier = [(row, col)]
    while frontier:
        r, c = frontier.pop(0)
        if engine.adjacent_mines(r, c) != 0:
            continue
        for neighbor in engine.neighbors(r, c):
            if neighbor not in reached and not engine.is_mine(*neighbor):
                reached.add(neighbor)
                frontier.append(neighbor)
    return reached


def revealed_cells(engine: GridEngine):
    from minesweeper.types import CellState
    return {
        (r, c)
        for r in range(engine.rows)
        for c in range(engine.columns)
        if engine.cell_state(r, c) is CellState.REVEALED
    }


@pytest.fixture
def t0() -> datetime:
    return datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def single_mine_grid() -> GridEngine:
    """3x3 grid whose only mine sits in the bottom-right corner."""
    return GridEngine(3, 3, 1, rng=FixedMines([8]))


@pytest.fixture
def memory_store() -> BestTimeStore:
    return BestTimeStore(InMemorySettings())
