"""One round of play: drives a GridEngine and tracks status and timing."""
import random
from datetime import datetime
from typing import Optional

from minesweeper.engine import GridEngine
from minesweeper.types import (
    CellState,
    CellView,
    Difficulty,
    GameState,
    GameStatus,
    MoveRequest,
    SelectOutcome,
)

FINISHED_STATUSES = (GameStatus.WON, GameStatus.LOST, GameStatus.CLOSED)


class GameSession:
    """Round lifecycle around a single engine.

    The session never reads a clock itself. Callers pass ``now`` into every
    move so the same code runs inside a workflow and in plain tests.
    """

    def __init__(self, difficulty: Difficulty, rng: Optional[random.Random] = None):
        self.rng = rng
        self.difficulty = difficulty
        self.best_time: Optional[float] = None
        self._new_game(difficulty)

    def _new_game(self, difficulty: Difficulty) -> None:
        self.difficulty = difficulty
        self.engine = GridEngine.for_difficulty(difficulty, rng=self.rng)
        self.status = GameStatus.NOT_STARTED
        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None
        self.new_best_time: Optional[bool] = None

    @property
    def is_finished(self) -> bool:
        return self.status in FINISHED_STATUSES

    def apply_move(self, move: MoveRequest, now: datetime) -> GameStatus:
        if move.action == 'reveal':
            return self.reveal(move.row, move.col, now)
        if move.action in ('flag', 'unflag'):
            self.toggle_flag(move.row, move.col, now)
            return self.status
        raise ValueError(f"Unknown action: {move.action}")

    def _start(self, now: datetime) -> None:
        if self.status == GameStatus.NOT_STARTED:
            self.status = GameStatus.IN_PROGRESS
            self.start_time = now

    def _finish(self, status: GameStatus, now: datetime) -> None:
        self.status = status
        self.end_time = now

    def reveal(self, row: int, col: int, now: datetime) -> GameStatus:
        if self.is_finished:
            return self.status
        self._start(now)

        if not self.engine.mines_placed:
            self.engine.place_mines(row, col)
        elif self.engine.select(row, col) is SelectOutcome.MINE_HIT:
            self.engine.reveal_all_mines()
            self._finish(GameStatus.LOST, now)
            return self.status

        if self.engine.is_won():
            self._finish(GameStatus.WON, now)
        return self.status

    def toggle_flag(self, row: int, col: int, now: datetime) -> None:
        # Nothing to mark before the first reveal lays out the mines
        if self.is_finished or not self.engine.mines_placed:
            return
        self._start(now)
        self.engine.toggle_flag(row, col)

    def restart(self, difficulty: Optional[Difficulty] = None) -> None:
        """Throw the board away and start over, optionally on another tier."""
        if difficulty is not None and difficulty != self.difficulty:
            self.best_time = None
        self._new_game(difficulty or self.difficulty)

    def close(self, now: datetime) -> None:
        if self.status != GameStatus.CLOSED:
            self.status = GameStatus.CLOSED
            self.end_time = self.end_time or now

    def elapsed_seconds(self, now: datetime) -> float:
        if self.start_time is None:
            return 0.0
        end = self.end_time or now
        return (end - self.start_time).total_seconds()

    def record_best_time(self, new_record: bool, best_time: Optional[float]) -> None:
        self.new_best_time = new_record
        self.best_time = best_time

    def snapshot(self, game_id: str, now: datetime) -> GameState:
        engine = self.engine
        cells = []
        for row in range(engine.rows):
            row_cells = []
            for col in range(engine.columns):
                state = engine.cell_state(row, col)
                if state is CellState.REVEALED:
                    is_mine = engine.is_mine(row, col)
                    row_cells.append(CellView(
                        row=row,
                        col=col,
                        state=state,
                        adjacent_mines=None if is_mine else engine.adjacent_mines(row, col),
                        is_mine=is_mine,
                    ))
                else:
                    row_cells.append(CellView(row=row, col=col, state=state))
            cells.append(row_cells)

        return GameState(
            id=game_id,
            difficulty=self.difficulty,
            rows=engine.rows,
            columns=engine.columns,
            bomb_quantity=engine.bomb_quantity,
            cells=cells,
            status=self.status,
            start_time=self.start_time,
            end_time=self.end_time,
            elapsed_seconds=self.elapsed_seconds(now),
            flags_remaining=engine.flags_remaining,
            cells_revealed=engine.revealed_count,
            best_time=self.best_time,
            new_best_time=self.new_best_time,
        )
