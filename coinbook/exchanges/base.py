"""Shared pieces for exchange adapters.

An adapter turns one raw text frame into a FeedMessage carrying normalized
UpdateEvents. Adapters never touch the book; a message is normalized in full
before anything is applied, so a bad field drops the whole message.
"""

from __future__ import annotations

import json
import math
from typing import Any, Protocol, runtime_checkable

from coinbook.core.errors import MessageError
from coinbook.core.price import PriceKey
from coinbook.core.types import FeedMessage, Side, UpdateEvent


@runtime_checkable
class NormalizedEventSource(Protocol):
    name: str
    url: str

    def subscribe_message(self) -> str | None: ...

    def normalize(self, ts: int, raw: str) -> FeedMessage: ...


def load_object(raw: str) -> dict[str, Any]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise MessageError(f"invalid json: {exc}") from exc
    if not isinstance(data, dict):
        raise MessageError("json message is not an object")
    return data


def message_type(obj: dict[str, Any]) -> str:
    if "type" not in obj:
        raise MessageError("json message has missing type")
    value = obj["type"]
    if not isinstance(value, str):
        raise MessageError("json message has unexpected type")
    return value


def parse_size(text: Any) -> float:
    try:
        size = float(text)
    except (TypeError, ValueError) as exc:
        raise MessageError(f"unable to parse size {text!r}") from exc
    if not math.isfinite(size) or size < 0.0:
        raise MessageError(f"invalid size {text!r}")
    return size


def parse_side(text: Any) -> Side:
    if not isinstance(text, str):
        raise MessageError(f"unexpected side {text!r}")
    try:
        return Side.of_str(text)
    except ValueError as exc:
        raise MessageError(str(exc)) from exc


def make_event(ts: int, side: Side, price: Any, size: Any, snapshot: bool) -> UpdateEvent:
    if not isinstance(price, str):
        raise MessageError(f"price must be a decimal string, got {price!r}")
    return UpdateEvent(
        ts=ts,
        side=side,
        price=PriceKey.parse(price),
        size=parse_size(size),
        is_snapshot_entry=snapshot,
    )
