"""Live WebSocket transport with reconnect.

Drives a message handler (BookFeed or Recorder) from a websocket-client
WebSocketApp. Every successful open calls handler.on_connect() before the
subscribe message goes out, so the book is reset for each fresh connection.
After a disconnect the client sleeps on an exponential backoff and reconnects
until stop() is called or max_reconnects is used up.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional, Protocol

import websocket

from .data_feed import exp_backoff, now_ms

log = logging.getLogger("coinbook.ws")


class FeedHandler(Protocol):
    def subscribe_message(self) -> str | None: ...

    def on_connect(self, ts: int) -> None: ...

    def on_message(self, ts: int, raw: str) -> bool: ...


AppFactory = Callable[..., Any]


class FeedClient:
    def __init__(
        self,
        handler: FeedHandler,
        url: str,
        *,
        ping_interval: float = 15.0,
        ping_timeout: float = 10.0,
        backoff_initial: float = 0.2,
        backoff_max: float = 10.0,
        max_reconnects: Optional[int] = None,
        app_factory: Optional[AppFactory] = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.handler = handler
        self.url = url
        self.ping_interval = ping_interval
        self.ping_timeout = ping_timeout
        self.backoff_initial = backoff_initial
        self.backoff_max = backoff_max
        self.max_reconnects = max_reconnects
        self.app_factory = app_factory or websocket.WebSocketApp
        self.clock = clock
        self.connects = 0
        self._stop = threading.Event()
        self._ws: Any = None

    # -------- callbacks --------
    def _on_open(self, wsapp: Any) -> None:
        self.connects += 1
        self.handler.on_connect(self.clock())
        sub = self.handler.subscribe_message()
        if sub is not None:
            wsapp.send(sub)
            log.info("successfully sent subscription message")

    def _on_message(self, _wsapp: Any, message: Any) -> None:
        if isinstance(message, (bytes, bytearray)):
            log.error("unexpected binary message %r", message[:64])
            return
        self.handler.on_message(self.clock(), message)

    def _on_error(self, _wsapp: Any, error: Any) -> None:
        log.error("websocket error: %s", error)

    def _on_close(self, _wsapp: Any, code: Any = None, msg: Any = None) -> None:
        log.warning("websocket closed: %s %s", code, msg)

    # -------- lifecycle --------
    def run(self) -> int:
        """Connect and keep reconnecting; returns the number of connections opened."""
        delays = exp_backoff(self.backoff_initial, self.backoff_max)
        attempts = 0
        while not self._stop.is_set():
            opened = self.connects
            self._ws = self.app_factory(
                self.url,
                on_open=self._on_open,
                on_message=self._on_message,
                on_error=self._on_error,
                on_close=self._on_close,
            )
            self._ws.run_forever(ping_interval=self.ping_interval, ping_timeout=self.ping_timeout)
            attempts += 1
            if self.connects > opened:
                delays = exp_backoff(self.backoff_initial, self.backoff_max)
            if self._stop.is_set():
                break
            if self.max_reconnects is not None and attempts > self.max_reconnects:
                log.error("giving up after %d reconnects", self.max_reconnects)
                break
            delay = next(delays)
            log.info("reconnecting to %s in %.1fs", self.url, delay)
            self._stop.wait(delay)
        return self.connects

    def stop(self) -> None:
        self._stop.set()
        if self._ws is not None:
            self._ws.close()
