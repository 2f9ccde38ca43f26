#!/usr/bin/env python3
from typing import Optional

from analysis.models import ReserveSnapshot
from services.chain_reader import ChainReader


class ReserveSampler:
    """Reads a pool's reserves together with the block they were read at."""

    def __init__(self, reader: ChainReader, pair_address: str) -> None:
        self._reader = reader
        self.pair_address = pair_address

    async def sample(self, block_number: Optional[int] = None) -> ReserveSnapshot:
        """
        Returns the pool reserves at ``block_number`` (the current head when omitted).

        The reserve call is pinned to the same block height that is reported,
        so the snapshot never mixes two blocks. Raises ReadFailure on any
        transport or decoding problem.
        """
        if block_number is None:
            block_number = await self._reader.get_latest_block()
        reserve0, reserve1, _ = await self._reader.get_reserves(self.pair_address, block_number)
        return ReserveSnapshot(block=block_number, reserve0=reserve0, reserve1=reserve1)
