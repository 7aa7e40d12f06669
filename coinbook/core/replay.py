"""Replay recorded feed messages through a message handler."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

log = logging.getLogger("coinbook.replay")


class MessageHandler(Protocol):
    def on_connect(self, ts: int) -> None: ...

    def on_message(self, ts: int, raw: str) -> bool: ...


@dataclass
class ReplayResult:
    lines: int = 0
    applied: int = 0
    skipped: int = 0
    connects: int = 0


def replay_jsonl(path: Path, handler: MessageHandler) -> ReplayResult:
    """Feed each recorded line to the handler in file order.

    {"ts", "connect": true} markers call handler.on_connect(ts), as the live
    transport does on every fresh connection, and are counted in `connects`.
    {"ts", "raw"} lines go to handler.on_message. Undecodable lines are counted
    as skipped; messages the handler drops are counted as skipped too.
    """
    res = ReplayResult()
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            s = line.strip()
            if not s:
                continue
            try:
                rec = json.loads(s)
                ts = int(rec["ts"])
                connect = rec.get("connect") is True
                raw = None if connect else rec["raw"]
            except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
                res.lines += 1
                log.error("Error when parsing recorded line %d: %s", res.lines, exc)
                res.skipped += 1
                continue
            if connect:
                handler.on_connect(ts)
                res.connects += 1
                continue
            res.lines += 1
            if not isinstance(raw, str):
                raw = json.dumps(raw)
            if handler.on_message(ts, raw):
                res.applied += 1
            else:
                res.skipped += 1
    return res
