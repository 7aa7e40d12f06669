"""Single-instrument L2 book synchronizer.

Combines the level store, the snapshot epoch tracker and the last-update clock
behind one lock. Writers call apply()/apply_event()/apply_many() in feed order;
readers may query from other threads and always see the three pieces of state
from the same event.

Updates keep being applied after the book is Desynced; the book is then only
reported as untrustworthy through liveness().
"""

from __future__ import annotations

import threading
from typing import Iterable, List, Optional

from .epoch import EpochTracker
from .errors import MalformedUpdate
from .levels import LevelStore, check_size
from .price import PriceKey
from .types import EPOCH_TS, BookView, EpochState, Level, LivenessStatus, Side, UpdateEvent

STALE_AFTER_MS = 500


def _validate(ts: int, side: Side, price: PriceKey, size: float) -> float:
    if isinstance(ts, bool) or not isinstance(ts, int):
        raise MalformedUpdate(f"ts must be int epoch ms, got {ts!r}")
    if not isinstance(side, Side):
        raise MalformedUpdate(f"side must be a Side, got {side!r}")
    if not isinstance(price, PriceKey):
        raise MalformedUpdate(f"price must be a PriceKey, got {price!r}")
    return check_size(size)


class OrderBookSynchronizer:
    def __init__(self, symbol: str = "", stale_after_ms: int = STALE_AFTER_MS) -> None:
        self.symbol = symbol
        self.stale_after_ms = stale_after_ms
        self._lock = threading.Lock()
        self._store = LevelStore()
        self._epoch = EpochTracker()
        self._last_update_ts = EPOCH_TS

    # -------- writer side --------
    def apply(
        self,
        ts: int,
        side: Side,
        price: PriceKey,
        size: float,
        is_snapshot_entry: bool,
    ) -> None:
        size = _validate(ts, side, price, size)
        with self._lock:
            self._apply_locked(ts, side, price, size, is_snapshot_entry)

    def apply_event(self, event: UpdateEvent) -> None:
        self.apply(event.ts, event.side, event.price, event.size, event.is_snapshot_entry)

    def apply_many(self, events: Iterable[UpdateEvent]) -> int:
        """Validate every event, then apply them all under one lock.

        Nothing is applied if any event is malformed. Returns the event count.
        """
        checked = [(ev, _validate(ev.ts, ev.side, ev.price, ev.size)) for ev in events]
        with self._lock:
            for ev, size in checked:
                self._apply_locked(ev.ts, ev.side, ev.price, size, ev.is_snapshot_entry)
        return len(checked)

    def _apply_locked(
        self, ts: int, side: Side, price: PriceKey, size: float, is_snapshot_entry: bool
    ) -> None:
        self._last_update_ts = ts
        self._epoch.transition(bool(is_snapshot_entry))
        self._store.upsert_or_remove(side, price, size)

    def reset(self) -> None:
        with self._lock:
            self._store.clear()
            self._epoch.reset()
            self._last_update_ts = EPOCH_TS

    # -------- reader side --------
    @property
    def epoch_state(self) -> EpochState:
        with self._lock:
            return self._epoch.state

    @property
    def last_update_ts(self) -> int:
        with self._lock:
            return self._last_update_ts

    def best(self, side: Side) -> Optional[Level]:
        with self._lock:
            return self._store.best(side)

    def level_count(self, side: Side) -> int:
        with self._lock:
            return self._store.level_count(side)

    def levels(self, side: Side, depth: int | None = None) -> List[Level]:
        with self._lock:
            return self._store.levels(side, depth)

    def total_size(self, side: Side) -> float:
        with self._lock:
            return self._store.total_size(side)

    def liveness(self, now: int) -> LivenessStatus:
        with self._lock:
            return self._liveness_locked(now)

    def _liveness_locked(self, now: int) -> LivenessStatus:
        # Desynced wins over staleness: a fresh message will not repair it.
        if self._epoch.is_desynced():
            return LivenessStatus.DESYNCED
        if self._epoch.is_bootstrapping():
            return LivenessStatus.BOOTSTRAPPING
        if now - self._last_update_ts > self.stale_after_ms:
            return LivenessStatus.STALE
        return LivenessStatus.LIVE

    def snapshot_view(self, now: int, depth: int | None = 0) -> BookView:
        """Copy the book atomically.

        depth=0 copies only best levels and counts, None copies every level.
        """
        with self._lock:
            store = self._store
            if depth == 0:
                bids: tuple = ()
                asks: tuple = ()
            else:
                bids = tuple(store.levels(Side.BUY, depth))
                asks = tuple(store.levels(Side.SELL, depth))
            return BookView(
                ts=now,
                last_update_ts=self._last_update_ts,
                epoch=self._epoch.state,
                liveness=self._liveness_locked(now),
                best_bid=store.best(Side.BUY),
                best_ask=store.best(Side.SELL),
                bid_count=store.level_count(Side.BUY),
                ask_count=store.level_count(Side.SELL),
                bids=bids,
                asks=asks,
            )
