import logging
import random
from datetime import timedelta

import pytest

from conftest import FixedMines
from minesweeper.session import GameSession
from minesweeper.types import CellState, Difficulty, GameStatus, MoveRequest

# Easy is 10x10 with 5 mines
LAST_ROW_MINES = [95, 96, 97, 98, 99]
DIAGONAL_MINES = [11, 22, 33, 44, 55]


def test_new_session_is_not_started(t0):
    session = GameSession(Difficulty.EASY, rng=random.Random(1))
    assert session.status == GameStatus.NOT_STARTED
    assert session.start_time is None
    assert not session.engine.mines_placed
    assert session.elapsed_seconds(t0) == 0.0


def test_first_reveal_places_mines_and_starts_clock(t0):
    session = GameSession(Difficulty.MODERATE, rng=random.Random(4))
    session.reveal(6, 6, t0)

    assert session.engine.mines_placed
    assert not session.engine.is_mine(6, 6)
    assert session.engine.cell_state(6, 6) is CellState.REVEALED
    assert session.start_time == t0
    assert session.status in (GameStatus.IN_PROGRESS, GameStatus.WON)


def test_first_reveal_can_win_outright(t0):
    session = GameSession(Difficulty.EASY, rng=FixedMines(LAST_ROW_MINES))
    assert session.reveal(0, 0, t0) == GameStatus.WON
    assert session.end_time == t0
    assert session.engine.revealed_count == 95


def test_hitting_a_mine_loses_and_shows_mines(t0):
    session = GameSession(Difficulty.EASY, rng=FixedMines(DIAGONAL_MINES))
    assert session.reveal(0, 0, t0) == GameStatus.IN_PROGRESS
    assert session.engine.revealed_count == 1

    later = t0 + timedelta(seconds=3)
    assert session.reveal(1, 1, later) == GameStatus.LOST
    assert session.end_time == later
    for index in DIAGONAL_MINES:
        row, col = divmod(index, 10)
        assert session.engine.cell_state(row, col) is CellState.REVEALED


def test_moves_after_game_over_are_ignored(t0):
    session = GameSession(Difficulty.EASY, rng=FixedMines(DIAGONAL_MINES))
    session.reveal(0, 0, t0)
    session.reveal(1, 1, t0)
    revealed = session.engine.revealed_count

    assert session.reveal(9, 0, t0) == GameStatus.LOST
    session.toggle_flag(9, 9, t0)
    assert session.engine.revealed_count == revealed
    assert session.engine.cell_state(9, 9) is CellState.UNVISITED


def test_flag_before_first_reveal_is_ignored(t0):
    session = GameSession(Difficulty.EASY)
    session.toggle_flag(3, 3, t0)
    assert session.engine.cell_state(3, 3) is CellState.UNVISITED
    assert session.engine.flags_remaining == 5
    assert session.status == GameStatus.NOT_STARTED


def test_flag_after_first_reveal(t0):
    session = GameSession(Difficulty.EASY, rng=FixedMines(DIAGONAL_MINES))
    session.reveal(0, 0, t0)
    session.apply_move(MoveRequest(row=1, col=1, action='flag'), t0)
    assert session.engine.cell_state(1, 1) is CellState.FLAGGED
    session.apply_move(MoveRequest(row=1, col=1, action='unflag'), t0)
    assert session.engine.cell_state(1, 1) is CellState.UNVISITED


def test_unknown_action_raises(t0):
    session = GameSession(Difficulty.EASY)
    with pytest.raises(ValueError):
        session.apply_move(MoveRequest(row=0, col=0, action='chord'), t0)


def test_elapsed_time_runs_until_game_ends(t0):
    session = GameSession(Difficulty.EASY, rng=FixedMines(DIAGONAL_MINES))
    session.reveal(0, 0, t0)
    assert session.elapsed_seconds(t0 + timedelta(seconds=5)) == 5.0

    session.reveal(1, 1, t0 + timedelta(seconds=7))
    assert session.elapsed_seconds(t0 + timedelta(seconds=60)) == 7.0


def test_restart_replaces_board(t0):
    session = GameSession(Difficulty.EASY, rng=FixedMines(DIAGONAL_MINES))
    session.reveal(0, 0, t0)
    session.reveal(1, 1, t0)
    session.record_best_time(False, 12.0)

    session.restart()
    assert session.status == GameStatus.NOT_STARTED
    assert session.difficulty == Difficulty.EASY
    assert session.engine.revealed_count == 0
    assert not session.engine.mines_placed
    assert session.start_time is None and session.end_time is None
    assert session.new_best_time is None
    assert session.best_time == 12.0

    session.restart(Difficulty.PRO)
    assert session.difficulty == Difficulty.PRO
    assert (session.engine.rows, session.engine.bomb_quantity) == (15, 60)
    assert session.best_time is None


def test_close(t0):
    session = GameSession(Difficulty.EASY)
    session.close(t0)
    assert session.status == GameStatus.CLOSED
    assert session.is_finished
    assert session.reveal(0, 0, t0) == GameStatus.CLOSED


def test_snapshot_hides_unrevealed_cells(t0):
    session = GameSession(Difficulty.EASY, rng=FixedMines(DIAGONAL_MINES))
    session.reveal(0, 0, t0)
    state = session.snapshot("game-1", t0 + timedelta(seconds=2))

    assert state.id == "game-1"
    assert state.difficulty == Difficulty.EASY
    assert (state.rows, state.columns, state.bomb_quantity) == (10, 10, 5)
    assert state.status == GameStatus.IN_PROGRESS
    assert state.elapsed_seconds == 2.0
    assert state.flags_remaining == 5
    assert state.cells_revealed == 1

    opened = state.cells[0][0]
    assert opened.state is CellState.REVEALED
    assert opened.adjacent_mines == 1
    assert not opened.is_mine

    hidden = state.cells[1][1]
    assert hidden.state is CellState.UNVISITED
    assert hidden.adjacent_mines is None
    assert hidden.is_mine is False


def test_snapshot_after_loss_shows_mines(t0):
    session = GameSession(Difficulty.EASY, rng=FixedMines(DIAGONAL_MINES))
    session.reveal(0, 0, t0)
    session.reveal(1, 1, t0)
    state = session.snapshot("game-1", t0)
    assert state.status == GameStatus.LOST
    assert state.cells[1][1].is_mine
    assert state.cells[1][1].adjacent_mines is None
    assert state.cells[5][5].is_mine


def test_snapshot_carries_best_time(t0):
    session = GameSession(Difficulty.EASY, rng=FixedMines(LAST_ROW_MINES))
    session.reveal(0, 0, t0)
    session.record_best_time(True, 0.0)
    state = session.snapshot("game-1", t0)
    assert state.status == GameStatus.WON
    assert state.new_best_time is True
    assert state.best_time == 0.0


def test_session_play_does_not_log(t0, caplog):
    # Replays re-run session code, so records come only from workflow.logger
    caplog.set_level(logging.DEBUG)
    session = GameSession(Difficulty.EASY, rng=FixedMines(DIAGONAL_MINES))
    session.reveal(0, 0, t0)
    session.toggle_flag(1, 1, t0)
    session.reveal(1, 1, t0)
    session.reveal(2, 2, t0)
    session.restart(Difficulty.HARD)

    assert [r for r in caplog.records if r.name.startswith("minesweeper.")] == []
