"""Temporal workflows for Minesweeper game."""
import asyncio
from datetime import timedelta
from temporalio import workflow
from temporalio.common import RetryPolicy
from temporalio.exceptions import ActivityError, ApplicationError

with workflow.unsafe.imports_passed_through():
    from minesweeper.activities import BestTimeActivities
    from minesweeper.session import GameSession
    from minesweeper.types import (
        DEFAULT_DIFFICULTY,
        MOVE_ACTIONS,
        BestTimeSubmission,
        GameConfig,
        GameState,
        GameStatus,
        MoveRequest,
    )

# Settings reads and writes are local, so a failure is reported, not retried
BEST_TIME_RETRY_POLICY = RetryPolicy(maximum_attempts=1)
BEST_TIME_TIMEOUT = timedelta(seconds=30)


@workflow.defn
class MinesweeperWorkflow:
    """Workflow that manages a single Minesweeper game."""

    def __init__(self):
        self.game_id: str = ""
        self.session: GameSession | None = None
        self.last_activity_time: float = 0
        self.should_close: bool = False
        self.lock = asyncio.Lock()

    @workflow.run
    async def run(self, game_id: str, initial_config: GameConfig) -> None:
        """Main workflow entry point."""
        # Store game_id immediately so queries can access it during initialization
        self.game_id = game_id
        self.last_activity_time = workflow.time()

        session = GameSession(
            initial_config.difficulty or DEFAULT_DIFFICULTY,
            rng=workflow.random(),
        )
        session.best_time = await self._load_best_time(session)
        self.session = session

        # Auto-close workflow after 24 hours of inactivity
        inactivity_timeout = timedelta(hours=24).total_seconds()
        check_interval = timedelta(minutes=1).total_seconds()

        while not self.should_close:
            try:
                await workflow.wait_condition(
                    lambda: self.should_close or
                            (workflow.time() - self.last_activity_time) >= inactivity_timeout,
                    timeout=check_interval,
                )
            except asyncio.TimeoutError:
                pass

            if (workflow.time() - self.last_activity_time) >= inactivity_timeout:
                workflow.logger.info(f"Game {game_id} auto-closing due to 24 hours of inactivity")
                break

        # Let any in-flight move finish before closing the game
        await workflow.wait_condition(workflow.all_handlers_finished)
        self.session.close(workflow.now())
        workflow.logger.info(f"Minesweeper workflow {game_id} completed")

    @workflow.update
    async def make_move_update(self, move_request: MoveRequest) -> GameState:
        """Update to make a move and return the updated state."""
        async with self.lock:
            if self.session.is_finished:
                return self._snapshot()  # Return current state if game is over

            self.last_activity_time = workflow.time()
            mines_placed = self.session.engine.mines_placed
            status = self.session.apply_move(move_request, workflow.now())

            if not mines_placed and self.session.engine.mines_placed:
                workflow.logger.debug(
                    f"Game {self.game_id} placed mines around ({move_request.row}, {move_request.col})"
                )
            if self.session.is_finished:
                workflow.logger.info(
                    f"Game {self.game_id} on {self.session.difficulty.value} ended {status.value} "
                    f"after {self.session.elapsed_seconds(workflow.now()):.2f}s"
                )
            if status == GameStatus.WON:
                await self._submit_best_time()
            return self._snapshot()

    @make_move_update.validator
    def validate_move(self, move_request: MoveRequest) -> None:
        if not self.session:
            raise ValueError("Game state not initialized")
        if move_request.action not in MOVE_ACTIONS:
            raise ValueError(f"Unknown action: {move_request.action}")
        if not self.session.engine.in_bounds(move_request.row, move_request.col):
            raise ValueError(
                f"Cell ({move_request.row}, {move_request.col}) is outside the "
                f"{self.session.engine.rows}x{self.session.engine.columns} grid"
            )

    @workflow.update
    async def restart_game_update(self, config: GameConfig) -> GameState:
        """Update to restart the game and return the new state."""
        async with self.lock:
            self.last_activity_time = workflow.time()
            self.session.restart(config.difficulty)
            self.session.best_time = await self._load_best_time(self.session)
            return self._snapshot()

    @restart_game_update.validator
    def validate_restart(self, config: GameConfig) -> None:
        if not self.session:
            raise ValueError("Game state not initialized")

    @workflow.signal
    def close_game_signal(self) -> None:
        """Signal to close the game."""
        self.should_close = True

    @workflow.query
    def get_game_state_query(self) -> GameState | None:
        """Query to get the current game state, None while initializing."""
        if not self.session:
            return None
        return self._snapshot()

    def _snapshot(self) -> GameState:
        return self.session.snapshot(self.game_id, workflow.now())

    async def _load_best_time(self, session: GameSession) -> float | None:
        try:
            return await workflow.execute_activity_method(
                BestTimeActivities.get_best_time,
                session.difficulty,
                start_to_close_timeout=BEST_TIME_TIMEOUT,
                retry_policy=BEST_TIME_RETRY_POLICY,
            )
        except ActivityError as error:
            workflow.logger.error(f"Error reading best time: {error}")
            raise ApplicationError(f"Failed to read best time: {error.cause or error}") from error

    async def _submit_best_time(self) -> None:
        submission = BestTimeSubmission(
            difficulty=self.session.difficulty,
            duration_seconds=self.session.elapsed_seconds(workflow.now()),
        )
        try:
            result = await workflow.execute_activity_method(
                BestTimeActivities.submit_best_time,
                submission,
                start_to_close_timeout=BEST_TIME_TIMEOUT,
                retry_policy=BEST_TIME_RETRY_POLICY,
            )
        except ActivityError as error:
            workflow.logger.error(f"Error recording best time: {error}")
            raise ApplicationError(f"Failed to record best time: {error.cause or error}") from error

        self.session.record_best_time(result.new_record, result.best_time)
        if result.new_record:
            workflow.logger.info(
                f"Game {self.game_id} set a new {submission.difficulty.value} record: "
                f"{submission.duration_seconds:.2f}s"
            )
