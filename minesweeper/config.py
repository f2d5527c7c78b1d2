"""Process configuration read from the environment."""
import os
import pathlib
import platform
from dataclasses import dataclass
from typing import Optional


# Returns the per-user configuration directory for an application,
# following the conventions of the current operating system.
def get_app_config_dir(app_name: str) -> pathlib.Path:
    home = pathlib.Path.home()
    system = platform.system()

    if system == "Darwin":
        return home / "Library/Application Support" / app_name
    elif system == "Windows":
        app_data = os.getenv("AppData")
        if app_data is None:
            raise RuntimeError("AppData environment variable not set")
        return pathlib.Path(app_data) / app_name
    else:
        xdg_config_home = os.getenv("XDG_CONFIG_HOME")
        if xdg_config_home:
            return pathlib.Path(xdg_config_home) / app_name
        return home / ".config" / app_name


@dataclass(frozen=True)
class Settings:
    temporal_address: str = "localhost:7233"
    temporal_namespace: str = "default"
    temporal_profile: Optional[str] = None
    task_queue: str = "minesweeper-task-queue"
    port: int = 3000
    best_times_path: Optional[pathlib.Path] = None

    @classmethod
    def from_env(cls) -> "Settings":
        best_times_file = os.getenv("MINESWEEPER_BEST_TIMES_FILE")
        return cls(
            temporal_address=os.getenv("TEMPORAL_ADDRESS", "localhost:7233"),
            temporal_namespace=os.getenv("TEMPORAL_NAMESPACE", "default"),
            temporal_profile=os.getenv("TEMPORAL_PROFILE") or None,
            task_queue=os.getenv("MINESWEEPER_TASK_QUEUE", "minesweeper-task-queue"),
            port=int(os.getenv("PORT", 3000)),
            best_times_path=pathlib.Path(best_times_file) if best_times_file else None,
        )

    def resolve_best_times_path(self) -> pathlib.Path:
        if self.best_times_path is not None:
            return self.best_times_path
        return get_app_config_dir("minesweeper") / "best_times.json"
