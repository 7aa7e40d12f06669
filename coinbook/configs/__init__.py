from pathlib import Path

from .schemas import (
    AppConfig,
    FeedConfig,
    LoggingConfig,
    RestConfig,
    load_app_config,
)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "config.yaml"

__all__ = [
    "AppConfig",
    "DEFAULT_CONFIG_PATH",
    "FeedConfig",
    "LoggingConfig",
    "RestConfig",
    "load_app_config",
]
