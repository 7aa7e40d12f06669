"""BookFeed: message handling, drops, desync reporting and summaries."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from coinbook.core.feed import BookFeed
from coinbook.core.orderbook import OrderBookSynchronizer
from coinbook.core.price import PriceKey
from coinbook.core.types import EpochState, LivenessStatus, Side
from coinbook.exchanges import GdaxAdapter, GeminiAdapter
from coinbook.utils.structlog import StructLogger


def read_jsonl(fp: Path) -> list[dict]:
    if not fp.exists():
        return []
    return [json.loads(line) for line in fp.read_text(encoding="utf-8").splitlines() if line.strip()]


def _snapshot(bids, asks) -> str:
    return json.dumps({"type": "snapshot", "product_id": "BTC-USD", "bids": bids, "asks": asks})


def _l2(*changes) -> str:
    return json.dumps({"type": "l2update", "product_id": "BTC-USD", "changes": list(changes)})


@pytest.fixture
def feed(tmp_path: Path) -> BookFeed:
    slog = StructLogger(tmp_path / "run", "run")
    return BookFeed(GdaxAdapter(), OrderBookSynchronizer(symbol="BTC-USD"), slog=slog, summary_depth=2)


@pytest.mark.unit
def test_snapshot_then_deltas(feed: BookFeed) -> None:
    feed.on_connect(900)
    assert feed.on_message(1_000, _snapshot([["100.00", "1.5"]], [["101.00", "2.0"]]))
    assert feed.sync.liveness(1_000) is LivenessStatus.BOOTSTRAPPING
    assert feed.on_message(1_100, _l2(["buy", "100.00", "0"], ["buy", "99.5", "3"]))
    assert feed.sync.best(Side.BUY) == (PriceKey.parse("99.5"), 3.0)
    assert feed.sync.liveness(1_100) is LivenessStatus.LIVE
    assert feed.stats.messages == 2
    assert feed.stats.events == 4
    assert feed.stats.dropped == 0


@pytest.mark.unit
def test_bad_message_is_dropped_whole(feed: BookFeed, tmp_path: Path, caplog) -> None:
    feed.on_message(1_000, _snapshot([["100", "1"]], [["101", "1"]]))
    bad = _l2(["buy", "99", "1"], ["sell", "101.0000001", "1"])
    with caplog.at_level(logging.ERROR, logger="coinbook.feed"):
        assert feed.on_message(1_050, bad) is False
    assert "dropping message" in caplog.text
    # the valid first change was not applied either
    assert feed.sync.level_count(Side.BUY) == 1
    assert feed.sync.last_update_ts == 1_000
    assert feed.stats.dropped == 1
    events = read_jsonl(tmp_path / "run" / "events.jsonl")
    errs = [e for e in events if e["step"] == "parse_error"]
    assert len(errs) == 1 and errs[0]["meta"]["raw"] == bad
    # feed keeps going
    assert feed.on_message(1_060, _l2(["buy", "99", "1"]))
    assert feed.sync.level_count(Side.BUY) == 2


@pytest.mark.unit
def test_second_snapshot_reports_desync_once(feed: BookFeed, tmp_path: Path, caplog) -> None:
    feed.on_message(1_000, _snapshot([["100", "1"]], [["101", "1"]]))
    feed.on_message(1_010, _l2(["sell", "101", "2"]))
    with caplog.at_level(logging.WARNING, logger="coinbook.feed"):
        feed.on_message(1_020, _snapshot([["100", "5"]], []))
        feed.on_message(1_030, _l2(["sell", "102", "1"]))
        feed.on_message(1_040, _snapshot([["100", "6"]], []))
    assert feed.sync.epoch_state is EpochState.DESYNCED
    assert feed.sync.liveness(1_040) is LivenessStatus.DESYNCED
    assert feed.stats.desyncs == 1
    assert caplog.text.count("book desynced") == 1
    epochs = [e for e in read_jsonl(tmp_path / "run" / "events.jsonl") if e["step"] == "epoch"]
    assert epochs[0]["meta"]["previous"] == "Live"
    assert epochs[0]["meta"]["current"] == "Desynced"
    # reconnect resets
    feed.on_connect(2_000)
    assert feed.sync.liveness(2_000) is LivenessStatus.BOOTSTRAPPING
    assert feed.sync.level_count(Side.BUY) == 0


@pytest.mark.unit
def test_heartbeat_logs_summary(feed: BookFeed, tmp_path: Path, caplog) -> None:
    feed.on_message(1_000, _snapshot([["100", "1"], ["99", "2"], ["98", "3"]], [["101", "1"]]))
    feed.on_message(1_010, _l2(["sell", "101", "2"]))
    hb = json.dumps({"type": "heartbeat", "product_id": "BTC-USD", "last_trade_id": 1, "sequence": 2, "time": "x"})
    with caplog.at_level(logging.INFO, logger="coinbook.feed"):
        assert feed.on_message(1_020, hb)
    assert "bid/ask levels 3/1" in caplog.text
    summaries = [e for e in read_jsonl(tmp_path / "run" / "events.jsonl") if e["step"] == "summary"]
    meta = summaries[-1]["meta"]
    assert meta["bid_levels"] == 3
    assert meta["best_bid"] == [100.0, 1.0]
    assert meta["bids"] == [[100.0, 1.0], [99.0, 2.0]]
    assert meta["liveness"] == "Live"


@pytest.mark.unit
def test_exchange_error_is_logged(feed: BookFeed, tmp_path: Path) -> None:
    assert feed.on_message(1, json.dumps({"type": "error", "message": "bad product"}))
    infos = [e for e in read_jsonl(tmp_path / "run" / "events.jsonl") if e["step"] == "exchange_error"]
    assert infos[0]["meta"]["message"] == "bad product"


@pytest.mark.unit
def test_gemini_feed_without_structlog() -> None:
    feed = BookFeed(GeminiAdapter(), OrderBookSynchronizer())
    initial = {
        "type": "update",
        "events": [
            {"type": "change", "reason": "initial", "price": "10.5", "remaining": "2", "side": "bid"},
            {"type": "change", "reason": "initial", "price": "11", "remaining": "1", "side": "ask"},
        ],
    }
    change = {"type": "update", "events": [{"type": "change", "reason": "cancel", "price": "10.5", "remaining": "0", "side": "bid"}]}
    assert feed.on_message(5, json.dumps(initial))
    assert feed.sync.liveness(5) is LivenessStatus.BOOTSTRAPPING
    assert feed.on_message(6, json.dumps(change))
    assert feed.sync.best(Side.BUY) is None
    assert feed.sync.liveness(6) is LivenessStatus.LIVE
    assert feed.on_message(7, "{") is False


@pytest.mark.unit
def test_gemini_heartbeat_logs_summary(caplog) -> None:
    feed = BookFeed(GeminiAdapter(product_id="BTC-USD"), OrderBookSynchronizer(symbol="BTC-USD"))
    assert feed.adapter.url.endswith("?heartbeat=true")
    initial = {
        "type": "update",
        "events": [{"type": "change", "reason": "initial", "price": "10.5", "remaining": "2", "side": "bid"}],
    }
    assert feed.on_message(5, json.dumps(initial))
    with caplog.at_level(logging.INFO, logger="coinbook.feed"):
        assert feed.on_message(6, json.dumps({"type": "heartbeat", "socket_sequence": 1}))
    assert "bid/ask levels 1/0" in caplog.text
    assert "[Bootstrapping]" in caplog.text
