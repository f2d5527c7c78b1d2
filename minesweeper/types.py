"""Type definitions for Temporal Minesweeper."""
from dataclasses import dataclass
from typing import Dict, List, Optional
from datetime import datetime
from enum import Enum


class CellState(str, Enum):
    """Player-visible state of a single cell."""
    UNVISITED = 'UNVISITED'
    FLAGGED = 'FLAGGED'
    REVEALED = 'REVEALED'


class SelectOutcome(str, Enum):
    """Result of selecting a cell."""
    CONTINUE = 'CONTINUE'
    MINE_HIT = 'MINE_HIT'


class FlagOutcome(str, Enum):
    """Result of toggling a flag."""
    ACCEPTED = 'ACCEPTED'
    REJECTED = 'REJECTED'


class Difficulty(str, Enum):
    """The four fixed difficulty tiers."""
    EASY = 'EASY'
    MODERATE = 'MODERATE'
    HARD = 'HARD'
    PRO = 'PRO'


@dataclass(frozen=True)
class DifficultyPreset:
    """Board dimensions bound to a difficulty tier."""
    difficulty: Difficulty
    rows: int
    columns: int
    bomb_quantity: int

    def __str__(self) -> str:
        return f"{self.difficulty.value.title()}: {self.rows} x {self.columns} ({self.bomb_quantity} Bombs)"


DIFFICULTY_PRESETS: Dict[Difficulty, DifficultyPreset] = {
    Difficulty.EASY: DifficultyPreset(Difficulty.EASY, 10, 10, 5),
    Difficulty.MODERATE: DifficultyPreset(Difficulty.MODERATE, 13, 13, 20),
    Difficulty.HARD: DifficultyPreset(Difficulty.HARD, 15, 15, 40),
    Difficulty.PRO: DifficultyPreset(Difficulty.PRO, 15, 15, 60),
}

DEFAULT_DIFFICULTY = Difficulty.MODERATE


class GameStatus(str, Enum):
    """Possible game states."""
    NOT_STARTED = 'NOT_STARTED'
    IN_PROGRESS = 'IN_PROGRESS'
    WON = 'WON'
    LOST = 'LOST'
    CLOSED = 'CLOSED'


@dataclass
class CellView:
    """What a renderer may know about one cell.

    ``is_mine`` and ``adjacent_mines`` are only filled in once the cell is
    revealed, so a client can never read the layout off a running game.
    """
    row: int
    col: int
    state: CellState
    adjacent_mines: Optional[int] = None
    is_mine: bool = False


@dataclass
class GameState:
    """Current state of the game."""
    id: str
    difficulty: Difficulty
    rows: int
    columns: int
    bomb_quantity: int
    cells: List[List[CellView]]
    status: GameStatus
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    elapsed_seconds: float = 0.0
    flags_remaining: int = 0
    cells_revealed: int = 0
    best_time: Optional[float] = None
    new_best_time: Optional[bool] = None


@dataclass
class MoveRequest:
    """Request to make a move."""
    row: int
    col: int
    action: str  # 'reveal', 'flag', 'unflag'


MOVE_ACTIONS = ('reveal', 'flag', 'unflag')


@dataclass
class GameConfig:
    """Configuration for creating a new game."""
    difficulty: Optional[Difficulty] = None  # None keeps the current tier on restart


@dataclass
class BestTimeSubmission:
    """A completed game's duration for a tier."""
    difficulty: Difficulty
    duration_seconds: float


@dataclass
class BestTimeResult:
    """Answer from the best-time store after a submission."""
    difficulty: Difficulty
    new_record: bool
    best_time: Optional[float]
