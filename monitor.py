# monitor.py
import asyncio
from datetime import datetime, timezone
from typing import Optional

from analysis.alerts import evaluate_history
from analysis.history import HistoryBuffer
from analysis.models import AlertDecision, PoolOrientation, Sample, TokenMeta
from analysis.pricing import sample_from_snapshot
from config import MonitorConfig
from constants import C_RED, C_RESET, C_YELLOW, ERROR_BACKOFF_SECONDS
from services.chain_reader import ChainReader
from services.reserve_sampler import ReserveSampler
from services.telegram_notifier import TelegramNotifier
from storage import CsvSink


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_console_line(
    timestamp: str,
    sample: Sample,
    decision: AlertDecision,
    orientation: PoolOrientation,
) -> str:
    """Renders the per-block status line shown on the console and sent as alerts."""
    prefix = "ALERT" if decision.is_alert else "INFO"
    change = "" if decision.pct_change is None else f" ({decision.pct_change:+.4f}%)"

    deltas = []
    if decision.delta_quote is not None:
        deltas.append(f"Δ{orientation.quote_delta_label or orientation.quote_label} {decision.delta_quote:.2f}")
    if decision.delta_base is not None:
        deltas.append(f"Δ{orientation.base_delta_label or orientation.base_label} {decision.delta_base:.6f}")
    delta_str = f" | {' | '.join(deltas)}" if deltas else ""

    return (
        f"{prefix} | {timestamp} | {orientation.base_label} ≈ {sample.price:.6f} "
        f"{orientation.quote_label}{change} | block {sample.block}{delta_str}"
    )


def format_failure_line(timestamp: str, exc: Exception) -> str:
    parts = [f"{type(exc).__name__}:"]
    code = getattr(exc, "code", None)
    if code:
        parts.append(str(code))
    parts.append(getattr(exc, "message", None) or str(exc))
    return f"WARN | {timestamp} | {' '.join(parts)}"


class PoolMonitor:
    """Samples the pool once per new block and raises windowed price alerts."""

    def __init__(
        self,
        config: MonitorConfig,
        reader: ChainReader,
        sampler: ReserveSampler,
        sink: CsvSink,
        token0: TokenMeta,
        token1: TokenMeta,
        orientation: PoolOrientation,
        notifier: Optional[TelegramNotifier] = None,
    ):
        self.config = config
        self.reader = reader
        self.sampler = sampler
        self.sink = sink
        self.token0 = token0
        self.token1 = token1
        self.orientation = orientation
        self.notifier = notifier
        self.history = HistoryBuffer(config.window_blocks)
        self.last_block: Optional[int] = None

    async def run(self):
        """The main monitoring loop; runs until the process is stopped."""
        while True:
            await self.poll_once()

    async def poll_once(self) -> Optional[AlertDecision]:
        """
        Runs one Polling/Processing step.

        Returns the decision for a newly processed block, or None when the
        head has not moved or the step failed.
        """
        try:
            block = await self.reader.get_latest_block()
            if self.last_block is not None and block == self.last_block:
                await asyncio.sleep(self.config.interval)
                return None
            return await self._process_block(block)
        except Exception as e:
            print(f"{C_YELLOW}{format_failure_line(utc_timestamp(), e)}{C_RESET}")
            await asyncio.sleep(ERROR_BACKOFF_SECONDS)
            return None

    async def _process_block(self, block: int) -> Optional[AlertDecision]:
        snapshot = await self.sampler.sample(block)
        sample = sample_from_snapshot(snapshot, self.token0, self.token1, self.orientation)
        timestamp = utc_timestamp()

        if not self.history.append(sample):
            self.last_block = block
            return None
        # Committed to history: the block is not reprocessed even if output fails.
        self.last_block = block

        decision = evaluate_history(self.history, self.config.threshold_pct, self.config.min_usdc)
        line = format_console_line(timestamp, sample, decision, self.orientation)

        if decision.is_alert:
            print(f"{C_RED}{line}{C_RESET}")
        elif not self.config.quiet:
            print(line)

        await self.sink.append_sample(timestamp, sample, decision)

        if decision.is_alert and self.notifier is not None:
            await self.notifier.send_alert(line)
        return decision
