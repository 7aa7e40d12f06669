"""Common typed models for book updates, feed messages and read views."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple

from .price import SCALE, PriceKey

EPOCH_TS = 0  # epoch ms sentinel for "never updated"


class Side(str, Enum):
    BUY = "BUY"
    SELL = "SELL"

    @classmethod
    def of_str(cls, text: str) -> "Side":
        """Map exchange side spellings (buy/sell, bid/ask) onto a Side."""
        key = text.lower()
        if key in ("buy", "bid"):
            return cls.BUY
        if key in ("sell", "ask"):
            return cls.SELL
        raise ValueError(f"unknown side {text!r}")


class EpochState(str, Enum):
    AWAITING_INITIAL_SNAPSHOT = "AwaitingInitialSnapshot"
    LIVE = "Live"
    DESYNCED = "Desynced"


class LivenessStatus(str, Enum):
    BOOTSTRAPPING = "Bootstrapping"
    DESYNCED = "Desynced"
    STALE = "Stale"
    LIVE = "Live"


@dataclass(frozen=True, slots=True)
class UpdateEvent:
    ts: int  # epoch ms
    side: Side
    price: PriceKey
    size: float
    is_snapshot_entry: bool = False


@dataclass(slots=True)
class FeedMessage:
    """One raw exchange message after normalization.

    kind: update | snapshot | heartbeat | subscriptions | error | ignored
    """

    kind: str
    events: list[UpdateEvent] = field(default_factory=list)
    detail: Optional[dict[str, Any]] = None


Level = Tuple[PriceKey, float]


@dataclass(frozen=True, slots=True)
class BookView:
    """Consistent copy of the book taken under the synchronizer lock."""

    ts: int
    last_update_ts: int
    epoch: EpochState
    liveness: LivenessStatus
    best_bid: Optional[Level]
    best_ask: Optional[Level]
    bid_count: int
    ask_count: int
    bids: Tuple[Level, ...] = ()
    asks: Tuple[Level, ...] = ()

    def spread(self) -> float | None:
        if self.best_bid is None or self.best_ask is None:
            return None
        return (self.best_ask[0].units - self.best_bid[0].units) / SCALE

    def summary(self) -> dict[str, Any]:
        def _lvl(lvl: Optional[Level]) -> list[float] | None:
            return None if lvl is None else [float(lvl[0]), lvl[1]]

        return {
            "bid_levels": self.bid_count,
            "ask_levels": self.ask_count,
            "best_bid": _lvl(self.best_bid),
            "best_ask": _lvl(self.best_ask),
            "epoch": self.epoch.value,
            "liveness": self.liveness.value,
            "last_update_ts": self.last_update_ts,
        }
