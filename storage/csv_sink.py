"""Append-only CSV log of every processed sample."""
from __future__ import annotations

import asyncio
import threading
from pathlib import Path
from typing import Optional

from analysis.models import AlertDecision, Sample
from constants import CSV_HEADER


def _format_optional(value: Optional[float], fmt: str = "") -> str:
    if value is None:
        return ""
    return format(value, fmt) if fmt else str(value)


def format_record(timestamp: str, sample: Sample, decision: AlertDecision) -> str:
    """Builds one CSV line; undefined values are written as empty fields."""
    return ",".join(
        [
            timestamp,
            str(sample.price),
            _format_optional(decision.pct_change, ".6f"),
            str(sample.block),
            _format_optional(decision.delta_quote),
            _format_optional(decision.delta_base),
        ]
    )


class CsvSink:
    """Appends sample rows to a CSV file, writing the header once."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def ensure_header(self) -> None:
        with self._lock:
            self._ensure_header_locked()

    def _ensure_header_locked(self) -> None:
        if self.path.exists():
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(",".join(CSV_HEADER) + "\n")

    async def append_record(self, line: str) -> None:
        await asyncio.to_thread(self._append_record_sync, line)

    def _append_record_sync(self, line: str) -> None:
        with self._lock:
            self._ensure_header_locked()
            with self.path.open("a", encoding="utf-8", newline="") as handle:
                handle.write(line.rstrip("\n") + "\n")

    async def append_sample(self, timestamp: str, sample: Sample, decision: AlertDecision) -> None:
        await self.append_record(format_record(timestamp, sample, decision))
