from .epoch import EpochTracker
from .errors import CoinbookError, MalformedUpdate, MessageError, PriceParseError, RestAPIError
from .levels import LevelStore
from .orderbook import STALE_AFTER_MS, OrderBookSynchronizer
from .price import PriceKey
from .types import BookView, EpochState, FeedMessage, LivenessStatus, Side, UpdateEvent

__all__ = [
    "BookView",
    "CoinbookError",
    "EpochState",
    "EpochTracker",
    "FeedMessage",
    "LevelStore",
    "LivenessStatus",
    "MalformedUpdate",
    "MessageError",
    "OrderBookSynchronizer",
    "PriceKey",
    "PriceParseError",
    "RestAPIError",
    "STALE_AFTER_MS",
    "Side",
    "UpdateEvent",
]
