# pricing.py
from typing import Optional

from analysis.models import PoolOrientation, ReserveSnapshot, Sample, TokenMeta
from errors import DerivationError


def normalise_reserve(raw_reserve: int, decimals: int) -> float:
    """Converts a raw integer reserve to a human-scale amount."""
    return raw_reserve / (10 ** decimals)


def derive_price(
    reserve_a: int,
    decimals_a: int,
    reserve_b: int,
    decimals_b: int,
    quote_is_a: bool,
) -> float:
    """
    Returns the pool spot price as quote units per 1 base unit.

    Args:
        reserve_a / reserve_b: Raw on-chain reserves of the two pool sides.
        decimals_a / decimals_b: ERC-20 decimal exponents of each side.
        quote_is_a: True when side A holds the quote asset.

    Raises:
        DerivationError: If either reserve is zero, since the price would be
            undefined or zero.
    """
    amount_a = normalise_reserve(reserve_a, decimals_a)
    amount_b = normalise_reserve(reserve_b, decimals_b)

    quote_amount, base_amount = (amount_a, amount_b) if quote_is_a else (amount_b, amount_a)
    if base_amount <= 0:
        raise DerivationError("base reserve is zero; price is undefined")
    if quote_amount <= 0:
        raise DerivationError("quote reserve is zero; price would be zero")
    return quote_amount / base_amount


def _symbol_matches_base(symbol: str, base_symbol: str) -> bool:
    # Substring match so wrapped variants (WETH, WETH.e) resolve to the same asset.
    return base_symbol.upper() in symbol.upper()


def _symbol_matches_quote(symbol: str, quote_symbol: str) -> bool:
    return symbol.upper() == quote_symbol.upper()


def resolve_orientation(
    token0: TokenMeta,
    token1: TokenMeta,
    base_symbol: str,
    quote_symbol: str,
) -> PoolOrientation:
    """Matches pool token symbols against the expected base and quote assets."""
    base_index: Optional[int] = None
    if _symbol_matches_base(token0.symbol, base_symbol):
        base_index = 0
    elif _symbol_matches_base(token1.symbol, base_symbol):
        base_index = 1

    quote_index: Optional[int] = None
    if _symbol_matches_quote(token0.symbol, quote_symbol):
        quote_index = 0
    elif _symbol_matches_quote(token1.symbol, quote_symbol):
        quote_index = 1

    # Only a base asset on side 1 flips the price to token0 per token1.
    quote_is_token0 = base_index == 1
    if quote_is_token0:
        quote_label, base_label = token0.symbol, token1.symbol
    else:
        quote_label, base_label = token1.symbol, token0.symbol

    tokens = (token0, token1)
    return PoolOrientation(
        quote_is_token0=quote_is_token0,
        quote_index=quote_index,
        base_index=base_index,
        quote_label=quote_label,
        base_label=base_label,
        quote_delta_label=tokens[quote_index].symbol if quote_index is not None else None,
        base_delta_label=tokens[base_index].symbol if base_index is not None else None,
    )


def sample_from_snapshot(
    snapshot: ReserveSnapshot,
    token0: TokenMeta,
    token1: TokenMeta,
    orientation: PoolOrientation,
) -> Sample:
    """Derives a Sample from raw reserves, tagging reserves by role when known."""
    price = derive_price(
        snapshot.reserve0,
        token0.decimals,
        snapshot.reserve1,
        token1.decimals,
        orientation.quote_is_token0,
    )
    amounts = (
        normalise_reserve(snapshot.reserve0, token0.decimals),
        normalise_reserve(snapshot.reserve1, token1.decimals),
    )
    quote_reserve = amounts[orientation.quote_index] if orientation.quote_index is not None else None
    base_reserve = amounts[orientation.base_index] if orientation.base_index is not None else None
    return Sample(
        block=snapshot.block,
        price=price,
        quote_reserve=quote_reserve,
        base_reserve=base_reserve,
    )
