"""Follow one instrument's L2 book from an exchange feed.

Commands:
- real-time: connect to the exchange socket and keep the book in sync
- log FILE: record raw socket frames to a JSONL file, or - for stdout (no book)
- replay FILE: rebuild the book from a recorded JSONL file
- snapshot: load the Coinbase REST level-2 book and print a summary

Logs go to logs/<run_id>/app.log, structured events to logs/<run_id>/events.jsonl.
"""
from __future__ import annotations

import json
import sys
import time
from argparse import ArgumentParser
from pathlib import Path
from typing import Optional, Sequence

# Ensure project root is importable when run directly
_ROOT = Path(__file__).resolve().parents[2]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from coinbook.configs import AppConfig  # noqa: E402
from coinbook.core.api import CoinbaseREST, bootstrap_from_rest  # noqa: E402
from coinbook.core.config import load_runtime  # noqa: E402
from coinbook.core.data_feed import now_ms  # noqa: E402
from coinbook.core.data_ws import FeedClient  # noqa: E402
from coinbook.core.feed import BookFeed  # noqa: E402
from coinbook.core.orderbook import OrderBookSynchronizer  # noqa: E402
from coinbook.core.recorder import STDOUT_TARGETS, Recorder  # noqa: E402
from coinbook.core.replay import replay_jsonl  # noqa: E402
from coinbook.exchanges import get_adapter  # noqa: E402
from coinbook.utils.structlog import StructLogger, setup_loggers  # noqa: E402


def build_parser() -> ArgumentParser:
    ap = ArgumentParser(prog="coinbook")
    ap.add_argument("--config", type=Path, default=None)
    ap.add_argument("--exchange", choices=["gdax", "gemini"], default=None)
    ap.add_argument("--product", default=None)
    ap.add_argument("--run-id", default=None)
    sub = ap.add_subparsers(dest="command", required=True)
    sub.add_parser("real-time")
    p_log = sub.add_parser("log")
    p_log.add_argument("file", type=Path, help="JSONL output, or - for stdout")
    p_replay = sub.add_parser("replay")
    p_replay.add_argument("file", type=Path)
    sub.add_parser("snapshot")
    return ap


def _build_feed(app: AppConfig, slog: Optional[StructLogger]) -> BookFeed:
    adapter = get_adapter(app.feed.exchange, app.feed.product_id, app.feed.ws_url)
    sync = OrderBookSynchronizer(symbol=app.feed.product_id, stale_after_ms=app.feed.stale_after_ms)
    return BookFeed(adapter, sync, slog=slog, summary_depth=app.logging.summary_depth)


def _client(handler, url: str, app: AppConfig) -> FeedClient:
    return FeedClient(
        handler,
        url,
        ping_interval=app.feed.ping_interval,
        ping_timeout=app.feed.ping_timeout,
        backoff_initial=app.feed.backoff_initial,
        backoff_max=app.feed.backoff_max,
        max_reconnects=app.feed.max_reconnects,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    app = load_runtime(args.config)
    if args.exchange:
        app.feed.exchange = args.exchange
    if args.product:
        app.feed.product_id = args.product

    # raw frames own stdout when recording to it
    record_stdout = args.command == "log" and str(args.file) in STDOUT_TARGETS
    run_id = args.run_id or f"{args.command}_{time.strftime('%Y%m%d_%H%M%S')}"
    logger, logs_dir = setup_loggers(
        run_id,
        Path(app.logging.logs_dir),
        stdout=app.logging.stdout and not record_stdout,
        level=app.logging.level,
    )
    slog = StructLogger(logs_dir, run_id)
    logger.info("exchange=%s product=%s command=%s", app.feed.exchange, app.feed.product_id, args.command)

    if args.command == "real-time":
        feed = _build_feed(app, slog)
        client = _client(feed, feed.adapter.url, app)
        try:
            client.run()
        except KeyboardInterrupt:
            client.stop()
        logger.info("feed stats: %s", feed.stats)
        return 0

    if args.command == "log":
        adapter = get_adapter(app.feed.exchange, app.feed.product_id, app.feed.ws_url)
        rec = Recorder(args.file, subscribe=adapter.subscribe_message())
        client = _client(rec, adapter.url, app)
        try:
            client.run()
        except KeyboardInterrupt:
            client.stop()
        logger.info("recorded %d messages to %s", rec.count, args.file)
        return 0

    if args.command == "replay":
        if not args.file.exists():
            logger.error("replay file not found: %s", args.file)
            return 1
        feed = _build_feed(app, slog)
        res = replay_jsonl(args.file, feed)
        feed.log_summary(feed.sync.last_update_ts)
        print(
            json.dumps(
                {"lines": res.lines, "applied": res.applied, "skipped": res.skipped, "connects": res.connects}
            )
        )
        return 0

    # snapshot
    rest = CoinbaseREST(base_url=app.rest.base_url, timeout=app.rest.timeout, retries=app.rest.retries)
    feed = _build_feed(app, slog)
    ts = now_ms()
    count = bootstrap_from_rest(feed.sync, rest, app.feed.product_id, ts)
    logger.info("loaded %d snapshot entries", count)
    view = feed.sync.snapshot_view(ts, depth=app.logging.summary_depth)
    print(json.dumps(view.summary(), ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
