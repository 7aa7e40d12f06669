from .base import NormalizedEventSource
from .gdax import GdaxAdapter
from .gemini import GeminiAdapter

ADAPTERS = {
    "gdax": GdaxAdapter,
    "gemini": GeminiAdapter,
}


def get_adapter(exchange: str, product_id: str = "BTC-USD", ws_url: str | None = None) -> NormalizedEventSource:
    try:
        cls = ADAPTERS[exchange]
    except KeyError:
        raise ValueError(f"unknown exchange {exchange!r}") from None
    if ws_url:
        return cls(product_id=product_id, url=ws_url)
    return cls(product_id=product_id)


__all__ = [
    "ADAPTERS",
    "GdaxAdapter",
    "GeminiAdapter",
    "NormalizedEventSource",
    "get_adapter",
]
