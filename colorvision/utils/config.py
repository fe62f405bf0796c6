import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_CONFIG_DIR = Path(
    os.environ.get("COLORVISION_CONFIG_DIR", str(Path.home() / ".local/share/colorvision"))
)
DEFAULT_LOG_LEVEL = os.environ.get("COLORVISION_LOGLEVEL", "INFO")


@dataclass
class Settings:
    config_dir: Path = DEFAULT_CONFIG_DIR
    log_level: str = DEFAULT_LOG_LEVEL


SETTINGS = Settings()
