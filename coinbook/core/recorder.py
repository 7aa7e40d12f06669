"""Raw feed message recorder (JSONL).

Plugs into the transport in place of a BookFeed: every text frame is appended
as {"ts": <epoch ms>, "raw": <frame>} so it can be fed back through replay.
Each fresh connection is written as {"ts": <epoch ms>, "connect": true}.
A path of "-" or "stdout" writes the lines to standard output.
"""
from __future__ import annotations
import json
import sys
from pathlib import Path
from typing import Any

STDOUT_TARGETS = ("-", "stdout")


class Recorder:
    def __init__(self, path: Path | str, subscribe: str | None = None) -> None:
        self.to_stdout = str(path) in STDOUT_TARGETS
        self.path = Path(path)
        self.subscribe = subscribe
        if not self.to_stdout:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        self.count = 0
        self.connects = 0

    def write(self, event: dict[str, Any]) -> None:
        line = json.dumps(event, ensure_ascii=False) + "\n"
        if self.to_stdout:
            sys.stdout.write(line)
            sys.stdout.flush()
            return
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line)

    # Message handler surface
    def subscribe_message(self) -> str | None:
        return self.subscribe

    def on_connect(self, ts: int) -> None:
        self.write({"ts": ts, "connect": True})
        self.connects += 1

    def on_message(self, ts: int, raw: str) -> bool:
        self.write({"ts": ts, "raw": raw})
        self.count += 1
        return True
