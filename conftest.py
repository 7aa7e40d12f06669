"""Configure test environment and block network access in unit runs."""

from __future__ import annotations

import os
import socket
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _live_enabled() -> bool:
    return os.getenv("COINBOOK_LIVE", "false").lower() == "true"


@pytest.fixture(autouse=True)
def _env_and_optional_block_network(monkeypatch):
    # Keep user config/env from leaking into tests
    for key in ("COINBOOK_CONFIG", "FEED_EXCHANGE", "FEED_PRODUCT_ID", "STALE_AFTER_MS", "LOG_STDOUT"):
        monkeypatch.delenv(key, raising=False)
    if not _live_enabled():
        # Block network in unit/default runs
        def _no_network(*args, **kwargs):  # noqa: ANN001, D401
            raise RuntimeError("Network access blocked in tests/CI")

        monkeypatch.setattr(socket, "create_connection", _no_network)
