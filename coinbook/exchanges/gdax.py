"""GDAX / Coinbase Exchange level2 channel adapter.

Message shapes handled:
- {"type": "snapshot", "product_id": ..., "bids": [[price, size], ...], "asks": [...]}
- {"type": "l2update", "product_id": ..., "changes": [[side, price, size], ...]}
- {"type": "heartbeat" | "subscriptions" | "error", ...}
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, List

from coinbook.core.errors import MessageError
from coinbook.core.types import FeedMessage, Side, UpdateEvent

from .base import load_object, make_event, message_type, parse_side

GDAX_WS_URL = "wss://ws-feed.gdax.com"


def _pair_events(ts: int, side: Side, rows: Any) -> List[UpdateEvent]:
    if not isinstance(rows, list):
        raise MessageError(f"expected list of levels for {side.value}")
    out: List[UpdateEvent] = []
    for row in rows:
        # REST books carry a third num-orders column; ws snapshots do not
        if not isinstance(row, (list, tuple)) or len(row) < 2:
            raise MessageError(f"malformed level {row!r}")
        out.append(make_event(ts, side, row[0], row[1], snapshot=True))
    return out


def snapshot_events(ts: int, bids: Any, asks: Any) -> List[UpdateEvent]:
    """Snapshot entries for a full book given as [price, size, ...] rows."""
    return _pair_events(ts, Side.BUY, bids) + _pair_events(ts, Side.SELL, asks)


@dataclass
class GdaxAdapter:
    product_id: str = "BTC-USD"
    url: str = GDAX_WS_URL
    name: str = "gdax"

    def subscribe_message(self) -> str | None:
        return json.dumps(
            {
                "type": "subscribe",
                "product_ids": [self.product_id],
                "channels": ["level2", "heartbeat"],
            }
        )

    def normalize(self, ts: int, raw: str) -> FeedMessage:
        obj = load_object(raw)
        kind = message_type(obj)
        if kind == "snapshot":
            events = snapshot_events(ts, obj.get("bids"), obj.get("asks"))
            return FeedMessage("snapshot", events, {"product_id": obj.get("product_id")})
        if kind == "l2update":
            changes = obj.get("changes")
            if not isinstance(changes, list):
                raise MessageError("l2update without changes")
            events = []
            for change in changes:
                if not isinstance(change, (list, tuple)) or len(change) != 3:
                    raise MessageError(f"malformed change {change!r}")
                side, price, size = change
                events.append(make_event(ts, parse_side(side), price, size, snapshot=False))
            return FeedMessage("update", events)
        if kind == "heartbeat":
            return FeedMessage(
                "heartbeat",
                detail={"sequence": obj.get("sequence"), "time": obj.get("time")},
            )
        if kind == "subscriptions":
            return FeedMessage("subscriptions", detail={"channels": obj.get("channels")})
        if kind == "error":
            return FeedMessage("error", detail={"message": obj.get("message"), "reason": obj.get("reason")})
        raise MessageError(f"unexpected type {kind}")
