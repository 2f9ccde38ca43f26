#!/usr/bin/env python3
import os
import re
import math
import argparse
from typing import NamedTuple, Optional, Sequence

import constants
from errors import ConfigError

_ADDRESS_RE = re.compile(r'^0x[0-9a-fA-F]{40}$')


class MonitorConfig(NamedTuple):
    """Typed configuration object."""
    rpc_url: str
    pair_address: str
    interval: float
    threshold_pct: float
    window_blocks: int
    min_usdc: float
    quiet: bool
    csv_path: str
    base_symbol: str
    quote_symbol: str
    rpc_timeout: float
    telegram_enabled: bool
    telegram_bot_token: str | None
    telegram_chat_id: str | None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Sample a Uniswap V2 pool once per block and alert on windowed price moves.",
        epilog="Example: ./main.py --window 5 --threshold 0.5 --min-usdc 10000 --quiet"
    )
    parser.add_argument('--interval', type=float, default=constants.DEFAULT_CHECK_INTERVAL, help='Seconds between new-block checks (default: 1).')
    parser.add_argument('--threshold', type=float, default=0.0, help='Percent move over the window that triggers an alert (default: 0).')
    parser.add_argument('--window', type=int, default=1, help='Number of blocks to look back for the percent change (default: 1).')
    parser.add_argument('--min-usdc', type=float, default=0.0, help='Minimum absolute quote reserve change between samples; 0 disables the activity gate (default: 0).')
    parser.add_argument('--quiet', action='store_true', help='Only print alert lines.')
    parser.add_argument('--csv', default=constants.DEFAULT_CSV_PATH, help='CSV file every sample is appended to (default: prices.csv).')
    parser.add_argument('--pair', default=constants.DEFAULT_PAIR_ADDRESS, help='Pool address to monitor (default: Uniswap V2 USDC/WETH).')
    parser.add_argument('--base-symbol', default=constants.DEFAULT_BASE_SYMBOL, help='Symbol of the asset being priced, substring match (default: WETH).')
    parser.add_argument('--quote-symbol', default=constants.DEFAULT_QUOTE_SYMBOL, help='Symbol of the asset prices are quoted in (default: USDC).')
    parser.add_argument('--rpc-timeout', type=float, default=constants.DEFAULT_RPC_TIMEOUT, help='Timeout in seconds for each JSON-RPC request (default: 10).')
    parser.add_argument('--telegram-enabled', action='store_true', help='Send alerts to Telegram.')
    return parser


def load_config(argv: Optional[Sequence[str]] = None) -> MonitorConfig:
    """
    Parses command-line arguments and loads environment variables to create a configuration object.

    Raises ConfigError for any value the monitor cannot run with.
    """
    args = build_parser().parse_args(argv)

    if not math.isfinite(args.interval) or args.interval <= 0:
        raise ConfigError("--interval must be a positive number (seconds)")
    if not math.isfinite(args.threshold) or args.threshold < 0:
        raise ConfigError("--threshold must be a number >= 0 (percent)")
    if args.window < 1:
        raise ConfigError("--window must be an integer >= 1 (blocks)")
    if not math.isfinite(args.min_usdc) or args.min_usdc < 0:
        raise ConfigError("--min-usdc must be a number >= 0")
    if not math.isfinite(args.rpc_timeout) or args.rpc_timeout <= 0:
        raise ConfigError("--rpc-timeout must be a positive number (seconds)")
    if not _ADDRESS_RE.match(args.pair):
        raise ConfigError(f"--pair must be a 0x-prefixed 20-byte hex address, got {args.pair!r}")
    if not args.base_symbol.strip() or not args.quote_symbol.strip():
        raise ConfigError("--base-symbol and --quote-symbol must not be empty")

    # Load from environment
    rpc_url = os.environ.get(constants.RPC_URL_ENV_VAR)
    telegram_bot_token = os.environ.get(constants.TELEGRAM_BOT_TOKEN_ENV_VAR)
    telegram_chat_id = os.environ.get(constants.TELEGRAM_CHAT_ID_ENV_VAR)

    if not rpc_url:
        raise ConfigError(f"Missing {constants.RPC_URL_ENV_VAR} in environment")

    if args.telegram_enabled and not (telegram_bot_token and telegram_chat_id):
        raise ConfigError(
            f"Telegram is enabled, but {constants.TELEGRAM_BOT_TOKEN_ENV_VAR} or {constants.TELEGRAM_CHAT_ID_ENV_VAR} are not set."
        )

    return MonitorConfig(
        rpc_url=rpc_url,
        pair_address=args.pair,
        interval=args.interval,
        threshold_pct=args.threshold,
        window_blocks=args.window,
        min_usdc=args.min_usdc,
        quiet=args.quiet,
        csv_path=args.csv,
        base_symbol=args.base_symbol.strip(),
        quote_symbol=args.quote_symbol.strip(),
        rpc_timeout=args.rpc_timeout,
        telegram_enabled=args.telegram_enabled,
        telegram_bot_token=telegram_bot_token,
        telegram_chat_id=telegram_chat_id,
    )
