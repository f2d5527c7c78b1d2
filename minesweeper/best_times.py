"""Best completion time per difficulty, kept in a durable key-value store."""
import json
import logging
import os
import pathlib
import tempfile
from typing import Dict, Optional, Protocol

from minesweeper.types import Difficulty

logger = logging.getLogger(__name__)

BEST_TIME_KEYS: Dict[Difficulty, str] = {
    Difficulty.EASY: "easyBestTime",
    Difficulty.MODERATE: "modBestTime",
    Difficulty.HARD: "hardBestTime",
    Difficulty.PRO: "proBestTime",
}


class SettingsStore(Protocol):
    """Durable key-value settings holding one float per key."""

    def get(self, key: str) -> Optional[float]:
        ...

    def set(self, key: str, value: float) -> None:
        ...


class InMemorySettings:
    """Settings kept in a dict. Gone when the process exits."""

    def __init__(self, values: Optional[Dict[str, float]] = None):
        self.values: Dict[str, float] = dict(values or {})

    def get(self, key: str) -> Optional[float]:
        return self.values.get(key)

    def set(self, key: str, value: float) -> None:
        self.values[key] = value


class JsonFileSettings:
    """Settings persisted as a flat JSON object in a single file.

    A missing file means no values have been stored yet. Unreadable or
    corrupt files raise, so a lost update never goes unnoticed.
    """

    def __init__(self, path: pathlib.Path):
        self.path = pathlib.Path(path)

    def _load(self) -> Dict[str, float]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Settings file {self.path} does not hold a JSON object")
        return data

    def get(self, key: str) -> Optional[float]:
        value = self._load().get(key)
        return float(value) if value is not None else None

    def set(self, key: str, value: float) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Write beside the target and swap so a crash never leaves half a file
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise


def format_best_time(seconds: Optional[float]) -> str:
    """Render a best time with two decimals, or N/A when absent."""
    return f"{seconds:,.2f}" if seconds is not None else "N/A"


class BestTimeStore:
    """Save-if-improved policy over a settings store."""

    def __init__(self, settings: SettingsStore):
        self.settings = settings

    def get_best_time(self, difficulty: Difficulty) -> Optional[float]:
        """Return the stored best time, or None if the tier has none yet."""
        return self.settings.get(BEST_TIME_KEYS[difficulty])

    def submit_time(self, difficulty: Difficulty, duration_seconds: float) -> bool:
        """Store the duration if it beats the current best.

        Returns True when the duration became the new best. Ties keep the
        existing record.
        """
        if duration_seconds < 0:
            raise ValueError(f"Duration must be non-negative, got {duration_seconds}")

        best_time = self.get_best_time(difficulty)
        if best_time is not None and duration_seconds >= best_time:
            return False

        self.settings.set(BEST_TIME_KEYS[difficulty], duration_seconds)
        logger.info(f"New best time for {difficulty.value}: {format_best_time(duration_seconds)}s")
        return True

    def best_times(self) -> Dict[Difficulty, Optional[float]]:
        return {difficulty: self.get_best_time(difficulty) for difficulty in Difficulty}
