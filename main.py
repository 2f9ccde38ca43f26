#!/usr/bin/env python3
import asyncio
import logging
import sys
from typing import Optional, Sequence

import aiohttp

import constants
from analysis.pricing import resolve_orientation
from config import MonitorConfig, load_config
from errors import ConfigError
from monitor import PoolMonitor
from services.chain_reader import ChainReader
from services.reserve_sampler import ReserveSampler
from services.telegram_notifier import TelegramNotifier
from storage import CsvSink


async def build_monitor(
    config: MonitorConfig,
    session: aiohttp.ClientSession,
    notifier: Optional[TelegramNotifier] = None,
) -> PoolMonitor:
    """Resolves the pool's tokens and orientation, then wires up the monitor."""
    reader = ChainReader(session, rpc_url=config.rpc_url, timeout=config.rpc_timeout)

    chain_id = await reader.get_chain_id()
    print(f"Network: chainId {chain_id}")

    token0_address, token1_address = await reader.get_pair_tokens(config.pair_address)
    token0 = await reader.get_token_meta(token0_address)
    token1 = await reader.get_token_meta(token1_address)
    orientation = resolve_orientation(token0, token1, config.base_symbol, config.quote_symbol)

    print(f"Monitoring Uniswap V2 pair {constants.C_BLUE}{token0.symbol}/{token1.symbol}{constants.C_RESET}")
    print(f"Pair: {config.pair_address}")
    print(
        f"Block-sampled | check {config.interval}s | window {config.window_blocks} blocks | "
        f"threshold {config.threshold_pct}% | min-usdc {config.min_usdc} | quiet {config.quiet}"
    )
    if orientation.base_index is None or orientation.quote_index is None:
        print(
            f"{constants.C_YELLOW}Pool does not contain both {config.base_symbol} and {config.quote_symbol}; "
            f"reserve deltas may be blank.{constants.C_RESET}"
        )

    sink = CsvSink(config.csv_path)
    sink.ensure_header()

    return PoolMonitor(
        config,
        reader,
        ReserveSampler(reader, config.pair_address),
        sink,
        token0,
        token1,
        orientation,
        notifier=notifier,
    )


async def run_monitor(config: MonitorConfig) -> None:
    async with aiohttp.ClientSession(headers={'User-Agent': 'PoolMonitor/1.0'}) as session:
        notifier = None
        if config.telegram_enabled:
            notifier = TelegramNotifier.from_token(config.telegram_bot_token, config.telegram_chat_id)
            await notifier.start()
            print("Telegram notifier initialized.")
        try:
            monitor = await build_monitor(config, session, notifier)
            await monitor.run()
        finally:
            if notifier is not None:
                await notifier.close()


def main(argv: Optional[Sequence[str]] = None) -> None:
    """The main synchronous entry point for the application."""
    logging.basicConfig(level=logging.WARNING, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        config = load_config(argv)
    except ConfigError as exc:
        print(f"{constants.C_RED}Fatal error: {exc}{constants.C_RESET}")
        sys.exit(1)

    try:
        asyncio.run(run_monitor(config))
    except KeyboardInterrupt:
        print("Stopped.")
    except Exception as exc:
        print(f"{constants.C_RED}Fatal error: {exc}{constants.C_RESET}")
        sys.exit(1)


if __name__ == "__main__":
    main()
