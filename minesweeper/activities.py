"""Temporal activities for best-time persistence."""
from typing import Optional

from temporalio import activity

from minesweeper.best_times import BestTimeStore, format_best_time
from minesweeper.types import BestTimeResult, BestTimeSubmission, Difficulty


class BestTimeActivities:
    """Activities bound to one best-time store.

    Workflows stay deterministic, so every read and write of the durable
    settings happens here.
    """

    def __init__(self, store: BestTimeStore):
        self.store = store

    @activity.defn
    async def get_best_time(self, difficulty: Difficulty) -> Optional[float]:
        """Read the best time recorded for a tier."""
        return self.store.get_best_time(difficulty)

    @activity.defn
    async def submit_best_time(self, submission: BestTimeSubmission) -> BestTimeResult:
        """Offer a finished game's duration as the new best time."""
        new_record = self.store.submit_time(submission.difficulty, submission.duration_seconds)
        best_time = self.store.get_best_time(submission.difficulty)
        activity.logger.info(
            f"Submitted {format_best_time(submission.duration_seconds)}s on "
            f"{submission.difficulty.value}, new record: {new_record}"
        )
        return BestTimeResult(
            difficulty=submission.difficulty,
            new_record=new_record,
            best_time=best_time,
        )
