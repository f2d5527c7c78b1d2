"""Temporal worker for Minesweeper game."""
import asyncio
import logging
from temporalio.worker import Worker
from minesweeper.activities import BestTimeActivities
from minesweeper.best_times import BestTimeStore, JsonFileSettings
from minesweeper.client_provider import get_temporal_client
from minesweeper.config import Settings
from minesweeper.workflows import MinesweeperWorkflow

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def build_worker(client, settings: Settings, store: BestTimeStore) -> Worker:
    best_time_activities = BestTimeActivities(store)
    return Worker(
        client,
        task_queue=settings.task_queue,
        workflows=[MinesweeperWorkflow],
        activities=[
            best_time_activities.get_best_time,
            best_time_activities.submit_best_time,
        ],
    )


async def main():
    """Start the Temporal worker."""
    settings = Settings.from_env()
    client = await get_temporal_client(settings)

    best_times_path = settings.resolve_best_times_path()
    store = BestTimeStore(JsonFileSettings(best_times_path))
    worker = build_worker(client, settings, store)

    logger.info("Worker started, connected to Temporal")
    logger.info(f"Listening on task queue: {settings.task_queue}")
    logger.info(f"Best times stored in {best_times_path}")

    await worker.run()


if __name__ == "__main__":
    asyncio.run(main())
