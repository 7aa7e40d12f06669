"""Aggregated price levels for both sides of one book.

Each side is a SortedDict keyed by PriceKey. Bids are stored with a negated
key function so that index 0 is always the best level on either side.
"""

from __future__ import annotations

import math
from itertools import islice
from typing import List, Optional

from sortedcontainers import SortedDict

from .errors import MalformedUpdate
from .price import PriceKey
from .types import Level, Side


def check_size(size: float) -> float:
    """Return size as float or raise MalformedUpdate for NaN/inf/negative."""
    try:
        size = float(size)
    except (TypeError, ValueError) as exc:
        raise MalformedUpdate(f"size is not a number: {size!r}") from exc
    if math.isnan(size) or math.isinf(size):
        raise MalformedUpdate(f"size must be finite, got {size!r}")
    if size < 0.0:
        raise MalformedUpdate(f"size must be non-negative, got {size!r}")
    return size


class LevelStore:
    def __init__(self) -> None:
        self.bids: SortedDict[PriceKey, float] = SortedDict(lambda p: -p.units)
        self.asks: SortedDict[PriceKey, float] = SortedDict()

    def _side(self, side: Side) -> SortedDict:
        return self.bids if side == Side.BUY else self.asks

    def upsert_or_remove(self, side: Side, price: PriceKey, size: float) -> None:
        size = check_size(size)
        levels = self._side(side)
        if size == 0.0:
            levels.pop(price, None)
        else:
            levels[price] = size

    def best(self, side: Side) -> Optional[Level]:
        levels = self._side(side)
        if not levels:
            return None
        return levels.peekitem(0)

    def level_count(self, side: Side) -> int:
        return len(self._side(side))

    def levels(self, side: Side, depth: int | None = None) -> List[Level]:
        """Levels best-to-worst, optionally cut to the first `depth`."""
        items = self._side(side).items()
        if depth is None:
            return list(items)
        return list(islice(items, depth))

    def total_size(self, side: Side) -> float:
        return math.fsum(self._side(side).values())

    def clear(self) -> None:
        self.bids.clear()
        self.asks.clear()
