"""Gemini v1 market data adapter.

The v1 socket is per symbol and needs no subscribe message. Heartbeats are only
sent when the URL asks for them with heartbeat=true. Book changes come
as {"type": "update", "events": [{"type": "change", "side": "bid"|"ask",
"price": ..., "remaining": ..., "reason": ...}, ...]}. The first update after
connecting carries the full book with reason "initial"; those entries are
snapshot entries. Trade and auction events are skipped.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from coinbook.core.errors import MessageError
from coinbook.core.types import FeedMessage

from .base import load_object, make_event, message_type, parse_side

GEMINI_WS_BASE = "wss://api.gemini.com/v1/marketdata"


def symbol_for(product_id: str) -> str:
    """BTC-USD -> btcusd."""
    return product_id.replace("-", "").replace("/", "").lower()


@dataclass
class GeminiAdapter:
    product_id: str = "BTC-USD"
    url: str = field(default="")
    name: str = "gemini"

    def __post_init__(self) -> None:
        if not self.url:
            self.url = f"{GEMINI_WS_BASE}/{symbol_for(self.product_id)}?heartbeat=true"

    def subscribe_message(self) -> str | None:
        return None

    def normalize(self, ts: int, raw: str) -> FeedMessage:
        obj = load_object(raw)
        kind = message_type(obj)
        if kind == "heartbeat":
            return FeedMessage("heartbeat", detail={"socket_sequence": obj.get("socket_sequence")})
        if kind != "update":
            raise MessageError(f"unexpected type {kind}")
        raw_events = obj.get("events")
        if raw_events is None:
            raise MessageError("no events")
        if not isinstance(raw_events, list):
            raise MessageError("unexpected event type")
        events = []
        initial = False
        for ev in raw_events:
            if not isinstance(ev, dict):
                raise MessageError("event is not an object")
            if message_type(ev) != "change":
                continue
            snapshot = ev.get("reason") == "initial"
            initial = initial or snapshot
            events.append(
                make_event(ts, parse_side(ev.get("side")), ev.get("price"), ev.get("remaining"), snapshot)
            )
        if not events:
            return FeedMessage("ignored", detail={"event_count": len(raw_events)})
        return FeedMessage("snapshot" if initial else "update", events)
