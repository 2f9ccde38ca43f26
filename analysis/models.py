#!/usr/bin/env python3
from dataclasses import dataclass
from typing import Optional

@dataclass(frozen=True)
class TokenMeta:
    """ERC-20 metadata for one side of the pool."""
    address: str
    symbol: str
    decimals: int

@dataclass(frozen=True)
class ReserveSnapshot:
    """Raw pool reserves read against a single block."""
    block: int
    reserve0: int
    reserve1: int

@dataclass(frozen=True)
class PoolOrientation:
    """Which pool side holds the quote and base assets, resolved once at startup."""
    quote_is_token0: bool
    quote_index: Optional[int]  # 0/1, or None when the quote symbol was not found
    base_index: Optional[int]
    quote_label: str  # price text labels, following quote_is_token0
    base_label: str
    quote_delta_label: Optional[str] = None  # symbol at quote_index
    base_delta_label: Optional[str] = None  # symbol at base_index

@dataclass(frozen=True)
class Sample:
    """One observation of the pool at a given block."""
    block: int
    price: float  # quote units per 1 base unit
    quote_reserve: Optional[float] = None
    base_reserve: Optional[float] = None

@dataclass(frozen=True)
class AlertDecision:
    """Outcome of evaluating the current sample against the rolling history."""
    pct_change: Optional[float]
    delta_quote: Optional[float]
    delta_base: Optional[float]
    price_alert: bool
    activity_ok: bool
    is_alert: bool
