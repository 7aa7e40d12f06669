from __future__ import annotations

import json
import logging
import sys
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional


def _ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


@dataclass
class BaseEvent:
    ts: int
    run_id: str
    step: str  # e.g., summary | parse_error | epoch | connection | info
    symbol: Optional[str] = None
    meta: Optional[dict[str, Any]] = None

    def to_jsonl(self) -> str:
        d = asdict(self)
        return json.dumps(d, ensure_ascii=False)


class StructLogger:
    def __init__(self, run_dir: Path, run_id: str) -> None:
        self.run_dir = run_dir
        self.run_id = run_id
        _ensure_dir(run_dir)
        self.events_fp = run_dir / "events.jsonl"

    def _write(self, event: BaseEvent) -> None:
        with self.events_fp.open("a", encoding="utf-8") as f:
            f.write(event.to_jsonl() + "\n")

    # Book summary (levels, best prices, liveness)
    def log_summary(self, *, ts: int, symbol: str, view: dict[str, Any]) -> None:
        self._write(
            BaseEvent(ts=ts, run_id=self.run_id, step="summary", symbol=symbol, meta=view)
        )

    # Dropped message
    def log_parse_error(
        self,
        *,
        ts: int,
        symbol: Optional[str],
        error: str,
        raw: Optional[str] = None,
    ) -> None:
        self._write(
            BaseEvent(
                ts=ts,
                run_id=self.run_id,
                step="parse_error",
                symbol=symbol,
                meta={"error": error, "raw": raw},
            )
        )

    # Epoch state change (Live -> Desynced, resets)
    def log_epoch(
        self,
        *,
        ts: int,
        symbol: str,
        previous: str,
        current: str,
        reason: Optional[str] = None,
    ) -> None:
        self._write(
            BaseEvent(
                ts=ts,
                run_id=self.run_id,
                step="epoch",
                symbol=symbol,
                meta={"previous": previous, "current": current, "reason": reason},
            )
        )

    # Transport lifecycle
    def log_connection(
        self,
        *,
        ts: int,
        symbol: Optional[str],
        event: str,
        detail: Optional[dict[str, Any]] = None,
    ) -> None:
        self._write(
            BaseEvent(
                ts=ts,
                run_id=self.run_id,
                step="connection",
                symbol=symbol,
                meta={"event": event, **(detail or {})},
            )
        )

    # Generic info hook (e.g., exchange error payloads)
    def log_info(
        self, *, ts: int, symbol: Optional[str], tag: str, payload: dict[str, Any]
    ) -> None:
        self._write(
            BaseEvent(ts=ts, run_id=self.run_id, step=tag, symbol=symbol, meta=payload)
        )


def init_run_dir(base_logs: Path, run_id: str) -> Path:
    run_dir = base_logs / run_id
    _ensure_dir(run_dir)
    return run_dir


def setup_loggers(
    run_id: str, base_logs: Path = Path("logs"), stdout: bool = True, level: str = "INFO"
) -> tuple[logging.Logger, Path]:
    logs_dir = init_run_dir(base_logs, run_id)
    logger = logging.getLogger("coinbook")
    logger.setLevel(level)
    fmt = logging.Formatter("%(asctime)s %(levelname)s %(message)s")
    if not logger.handlers:
        fh = logging.FileHandler(logs_dir / "app.log")
        fh.setLevel(level)
        fh.setFormatter(fmt)
        logger.addHandler(fh)
        if stdout:
            sh = logging.StreamHandler(sys.stdout)
            sh.setLevel(level)
            sh.setFormatter(fmt)
            logger.addHandler(sh)
    return logger, logs_dir
