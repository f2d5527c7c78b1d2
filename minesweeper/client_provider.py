from temporalio.client import Client
from temporalio.envconfig import ClientConfig

from minesweeper.config import Settings, get_app_config_dir


# Configures and returns a Temporal Client. This uses the address and
# namespace from the settings, unless a profile name is set and the
# temporal.toml config file exists, in which case the profile wins.
async def get_temporal_client(settings: Settings | None = None) -> Client:
    settings = settings or Settings.from_env()
    config_file_path = get_app_config_dir("temporalio") / "temporal.toml"
    if settings.temporal_profile and config_file_path.is_file():
        connect_config = ClientConfig.load_client_connect_config(
            profile=settings.temporal_profile,
            config_file=str(config_file_path),
        )
        return await Client.connect(**connect_config)
    return await Client.connect(
        settings.temporal_address,
        namespace=settings.temporal_namespace,
    )
