import json
import logging
from pathlib import Path

from coinbook.utils.structlog import StructLogger, init_run_dir, setup_loggers


def test_structlog_schema(tmp_path: Path) -> None:
    run_id = "run_test"
    run_dir = tmp_path / run_id
    slog = StructLogger(run_dir, run_id)

    # Emit a variety of events
    slog.log_summary(ts=1, symbol="BTC-USD", view={"bid_levels": 1, "liveness": "Live"})
    slog.log_parse_error(ts=2, symbol="BTC-USD", error="bad price", raw="{}")
    slog.log_epoch(ts=3, symbol="BTC-USD", previous="Live", current="Desynced", reason="snapshot while live")
    slog.log_connection(ts=4, symbol="BTC-USD", event="open", detail={"url": "wss://x"})
    slog.log_info(ts=5, symbol=None, tag="exchange_error", payload={"message": "m"})

    fp = run_dir / "events.jsonl"
    assert fp.exists()
    lines = fp.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 5
    steps = []
    for ln in lines:
        obj = json.loads(ln)
        assert set(["ts", "run_id", "step", "symbol", "meta"]).issubset(obj.keys())
        steps.append(obj["step"])
    assert steps == ["summary", "parse_error", "epoch", "connection", "exchange_error"]
    assert json.loads(lines[3])["meta"] == {"event": "open", "url": "wss://x"}


def _drop_handlers() -> None:
    lg = logging.getLogger("coinbook")
    for h in list(lg.handlers):
        lg.removeHandler(h)
        h.close()


def test_setup_loggers_writes_app_log(tmp_path: Path) -> None:
    _drop_handlers()
    try:
        logger, logs_dir = setup_loggers("r1", tmp_path, stdout=False)
        assert logs_dir == init_run_dir(tmp_path, "r1")
        logger.getChild("feed").info("hello %s", "world")
        for h in logger.handlers:
            h.flush()
        assert "INFO hello world" in (logs_dir / "app.log").read_text(encoding="utf-8")
    finally:
        _drop_handlers()
