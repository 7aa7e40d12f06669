"""Glue between an exchange adapter and the book synchronizer.

BookFeed is the message handler the transport and replay drive. Each raw
message is normalized in full first, then applied in one batch. A message that
fails to parse is logged and dropped; the feed keeps going. A desync is
reported once per epoch and never repaired here: the book stays Desynced until
the next on_connect() or an explicit reset().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from coinbook.exchanges.base import NormalizedEventSource
from coinbook.utils.structlog import StructLogger

from .errors import MalformedUpdate, MessageError, PriceParseError
from .orderbook import OrderBookSynchronizer
from .types import EpochState

log = logging.getLogger("coinbook.feed")


@dataclass
class FeedStats:
    messages: int = 0
    events: int = 0
    dropped: int = 0
    desyncs: int = 0
    connects: int = 0


def _fmt_level(level) -> str:
    if level is None:
        return "None"
    return f"({level[0]}, {level[1]})"


class BookFeed:
    def __init__(
        self,
        adapter: NormalizedEventSource,
        synchronizer: OrderBookSynchronizer,
        slog: Optional[StructLogger] = None,
        summary_depth: int = 0,
    ) -> None:
        self.adapter = adapter
        self.sync = synchronizer
        self.slog = slog
        self.summary_depth = summary_depth
        self.stats = FeedStats()

    @property
    def symbol(self) -> str:
        return self.sync.symbol

    def subscribe_message(self) -> str | None:
        return self.adapter.subscribe_message()

    def on_connect(self, ts: int) -> None:
        self.sync.reset()
        self.stats.connects += 1
        log.info("connected to %s, book reset", self.adapter.url)
        if self.slog is not None:
            self.slog.log_connection(
                ts=ts, symbol=self.symbol, event="open", detail={"url": self.adapter.url}
            )

    def on_message(self, ts: int, raw: str) -> bool:
        """Apply one raw message. Returns False when the message was dropped."""
        self.stats.messages += 1
        before = self.sync.epoch_state
        try:
            msg = self.adapter.normalize(ts, raw)
            self.stats.events += self.sync.apply_many(msg.events)
        except (MessageError, PriceParseError, MalformedUpdate) as exc:
            self.stats.dropped += 1
            log.error("dropping message: %s %s", exc, raw)
            if self.slog is not None:
                self.slog.log_parse_error(ts=ts, symbol=self.symbol, error=str(exc), raw=raw)
            return False

        after = self.sync.epoch_state
        if after is EpochState.DESYNCED and before is not EpochState.DESYNCED:
            self.stats.desyncs += 1
            log.warning(
                "snapshot entry after book went live on %s: book desynced, reset required",
                self.symbol or self.adapter.name,
            )
            if self.slog is not None:
                self.slog.log_epoch(
                    ts=ts,
                    symbol=self.symbol,
                    previous=before.value,
                    current=after.value,
                    reason=f"{msg.kind} while live",
                )

        if msg.kind == "heartbeat":
            self.log_summary(ts)
        elif msg.kind == "subscriptions":
            log.info("subscriptions: %s", msg.detail)
        elif msg.kind == "error":
            log.error("exchange error: %s", msg.detail)
            if self.slog is not None:
                self.slog.log_info(ts=ts, symbol=self.symbol, tag="exchange_error", payload=msg.detail or {})
        return True

    def log_summary(self, ts: int) -> None:
        view = self.sync.snapshot_view(ts, depth=self.summary_depth)
        log.info(
            "bid/ask levels %d/%d: %s %s [%s]",
            view.bid_count,
            view.ask_count,
            _fmt_level(view.best_bid),
            _fmt_level(view.best_ask),
            view.liveness.value,
        )
        if self.slog is not None:
            summary = view.summary()
            if self.summary_depth:
                summary["bids"] = [[float(p), s] for p, s in view.bids]
                summary["asks"] = [[float(p), s] for p, s in view.asks]
            self.slog.log_summary(ts=ts, symbol=self.symbol, view=summary)
