"""Runtime configuration loader with environment overrides.

Env overrides (applied on top of the YAML file):
- COINBOOK_CONFIG: path to the YAML file
- FEED_EXCHANGE: gdax | gemini
- FEED_PRODUCT_ID: e.g. BTC-USD
- STALE_AFTER_MS: staleness window in milliseconds
- LOG_STDOUT: mirror the app log to stdout
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from coinbook.configs import DEFAULT_CONFIG_PATH, AppConfig, load_app_config


def getenv_bool(key: str, default: bool) -> bool:
    val = os.getenv(key)
    if val is None:
        return default
    return val.lower() in {"1", "true", "yes", "on"}


def load_runtime(app_path: Optional[Path] = None) -> AppConfig:
    """Load app config.

    Priority for the file:
    1) Explicit `app_path` argument
    2) `COINBOOK_CONFIG` env var
    3) Packaged default config.yaml; if it is missing, schema defaults
    """
    if app_path is None:
        env_p = os.getenv("COINBOOK_CONFIG")
        app_path = Path(env_p) if env_p else DEFAULT_CONFIG_PATH
    if Path(app_path).exists():
        app = load_app_config(Path(app_path))
    else:
        app = AppConfig()

    feed = app.feed
    exchange = os.getenv("FEED_EXCHANGE")
    if exchange:
        feed.exchange = exchange.lower()  # type: ignore[assignment]
    product = os.getenv("FEED_PRODUCT_ID")
    if product:
        feed.product_id = product
    stale = os.getenv("STALE_AFTER_MS")
    if stale:
        feed.stale_after_ms = int(stale.split("#", 1)[0].strip())
    app.logging.stdout = getenv_bool("LOG_STDOUT", app.logging.stdout)
    # re-validate env overrides
    return AppConfig.model_validate(app.model_dump())
