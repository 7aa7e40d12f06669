"""Clock and reconnect-backoff helpers shared by the live transport."""

from __future__ import annotations

import time
from typing import Iterator


def now_ms() -> int:
    return int(time.time() * 1000)


def exp_backoff(initial: float = 0.2, maximum: float = 10.0) -> Iterator[float]:
    delay = initial
    while True:
        yield delay
        delay = min(maximum, delay * 2)
