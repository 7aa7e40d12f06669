"""Exception types shared by the book core, adapters and REST client."""

from __future__ import annotations

from typing import Any


class CoinbookError(Exception):
    """Base class for all coinbook errors."""


class PriceParseError(CoinbookError, ValueError):
    def __init__(self, text: str, reason: str) -> None:
        super().__init__(f"unable to parse as price ({reason}): {text!r}")
        self.text = text
        self.reason = reason


class MalformedUpdate(CoinbookError, ValueError):
    """An update reached the book with a bad side, price or size.

    Raised before any state is touched.
    """


class MessageError(CoinbookError, ValueError):
    """A raw feed message could not be turned into update events."""


class RestAPIError(CoinbookError):
    def __init__(self, status_code: int, message: str, data: Any | None = None):
        super().__init__(f"REST error {status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.data = data
