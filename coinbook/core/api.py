"""Minimal REST wrapper for the Coinbase Exchange public book endpoint.

Provides a sync client using httpx.Client with retry and timeout, and a
bootstrap helper that loads a full level-2 book as snapshot entries. Tests use
httpx.MockTransport to avoid network.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Optional

import httpx

from coinbook.exchanges.gdax import snapshot_events

from .errors import RestAPIError
from .orderbook import OrderBookSynchronizer
from .types import UpdateEvent


@dataclass
class CoinbaseREST:
    base_url: str = "https://api.exchange.coinbase.com"
    timeout: float = 5.0
    retries: int = 2
    client_factory: Callable[[str, float], httpx.Client] | None = None

    def _client(self) -> httpx.Client:
        if self.client_factory is not None:
            return self.client_factory(self.base_url, self.timeout)
        return httpx.Client(base_url=self.base_url, timeout=self.timeout)

    def _get(self, path: str, params: Optional[dict[str, Any]] = None) -> dict:
        last_exc: Exception | None = None
        for _ in range(self.retries + 1):
            try:
                with self._client() as client:
                    resp = client.get(path, params=params)
                    if 400 <= resp.status_code < 500:
                        # client errors are not retried
                        raise RestAPIError(resp.status_code, resp.text)
                    resp.raise_for_status()
                    return resp.json()
            except (httpx.HTTPError, ValueError) as exc:
                last_exc = exc
        assert last_exc is not None
        raise last_exc

    def book(self, product_id: str, level: int = 2) -> dict:
        data = self._get(f"/products/{product_id}/book", {"level": level})
        if not isinstance(data, dict) or "bids" not in data or "asks" not in data:
            raise RestAPIError(200, "unexpected response for book", data)
        return data

    def snapshot_events(self, product_id: str, ts: int) -> List[UpdateEvent]:
        data = self.book(product_id, level=2)
        return snapshot_events(ts, data["bids"], data["asks"])


def bootstrap_from_rest(
    sync: OrderBookSynchronizer, rest: CoinbaseREST, product_id: str, ts: int
) -> int:
    """Reset the book and load a REST snapshot; returns the entries applied.

    The book stays Bootstrapping until the first delta arrives.
    """
    events = rest.snapshot_events(product_id, ts)
    sync.reset()
    return sync.apply_many(events)
