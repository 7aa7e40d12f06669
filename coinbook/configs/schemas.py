"""Pydantic-based configuration schemas and YAML loader.

These schemas define runtime configuration for the book feed: which exchange
and product to follow, staleness and reconnect tuning, the REST endpoint used
for bootstrapping, and where logs go.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, Field


class FeedConfig(BaseModel):
    """Exchange feed selection and liveness/reconnect tuning."""

    exchange: Literal["gdax", "gemini"] = Field("gdax")
    product_id: str = Field("BTC-USD")
    ws_url: Optional[str] = Field(None, description="Override the adapter's default socket URL")
    stale_after_ms: int = Field(500, ge=0, description="Book is Stale when no update for longer than this")
    ping_interval: float = 15.0
    ping_timeout: float = 10.0
    backoff_initial: float = 0.2
    backoff_max: float = 10.0
    max_reconnects: Optional[int] = None


class RestConfig(BaseModel):
    base_url: str = "https://api.exchange.coinbase.com"
    timeout: float = 5.0
    retries: int = 2


class LoggingConfig(BaseModel):
    logs_dir: Path = Field(Path("logs"))
    level: str = "INFO"
    stdout: bool = True
    summary_depth: int = 5


class AppConfig(BaseModel):
    """Top-level application config."""

    feed: FeedConfig = FeedConfig()
    rest: RestConfig = RestConfig()
    logging: LoggingConfig = LoggingConfig()


def load_yaml(path: Path) -> dict[str, Any]:
    return yaml.safe_load(path.read_text()) or {}


def load_app_config(path: Path) -> AppConfig:
    obj = load_yaml(path)
    return AppConfig(**obj)
