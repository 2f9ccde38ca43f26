# alerts.py
from typing import Optional

from analysis.history import HistoryBuffer
from analysis.models import AlertDecision, Sample


def _reserve_delta(current: Optional[float], previous: Optional[float]) -> Optional[float]:
    if current is None or previous is None:
        return None
    return current - previous


def evaluate(
    current: Sample,
    look_back_sample: Optional[Sample],
    previous_sample: Optional[Sample],
    threshold_pct: float,
    min_activity: float,
) -> AlertDecision:
    """
    Combines the windowed price move and the reserve activity into an alert decision.

    A price alert needs a look-back sample, so nothing fires on cold start.
    ``min_activity == 0`` disables the activity gate; any positive value
    requires a known quote reserve delta of at least that size.
    """
    pct_change: Optional[float] = None
    if look_back_sample is not None:
        pct_change = (current.price - look_back_sample.price) / look_back_sample.price * 100

    delta_quote = None
    delta_base = None
    if previous_sample is not None:
        delta_quote = _reserve_delta(current.quote_reserve, previous_sample.quote_reserve)
        delta_base = _reserve_delta(current.base_reserve, previous_sample.base_reserve)

    price_alert = pct_change is not None and abs(pct_change) >= threshold_pct
    activity_ok = min_activity == 0 or (
        delta_quote is not None and abs(delta_quote) >= min_activity
    )

    return AlertDecision(
        pct_change=pct_change,
        delta_quote=delta_quote,
        delta_base=delta_base,
        price_alert=price_alert,
        activity_ok=activity_ok,
        is_alert=price_alert and activity_ok,
    )


def evaluate_history(
    history: HistoryBuffer,
    threshold_pct: float,
    min_activity: float,
) -> Optional[AlertDecision]:
    """Evaluates the most recent sample in ``history``; None when it is empty."""
    current = history.latest()
    if current is None:
        return None
    return evaluate(
        current,
        history.look_back(history.window_blocks),
        history.previous(),
        threshold_pct,
        min_activity,
    )
