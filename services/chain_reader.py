#!/usr/bin/env python3
import asyncio
from typing import Any, Dict, Optional, Tuple

import aiohttp
from aiohttp import ClientSession

from analysis.models import TokenMeta
from constants import (
    DECIMALS_SIG,
    GET_RESERVES_SIG,
    SYMBOL_SIG,
    TOKEN0_SIG,
    TOKEN1_SIG,
)
from errors import ReadFailure


class ChainReader:
    """Reads Uniswap V2 pair and ERC-20 state over a JSON-RPC endpoint."""

    def __init__(
        self,
        session: ClientSession,
        *,
        rpc_url: str,
        timeout: float,
    ) -> None:
        self._session = session
        self._rpc_url = rpc_url
        self._timeout = timeout
        self._decimals_cache: Dict[str, int] = {}
        self._symbol_cache: Dict[str, str] = {}
        self._id_lock = asyncio.Lock()
        self._next_request_id = 1

    async def get_chain_id(self) -> int:
        result = await self._rpc_call("eth_chainId", [])
        return self._decode_int(result, "eth_chainId")

    async def get_latest_block(self) -> int:
        result = await self._rpc_call("eth_blockNumber", [])
        return self._decode_int(result, "eth_blockNumber")

    async def get_pair_tokens(self, pair_address: str) -> Tuple[str, str]:
        pair_address = self._normalise_address(pair_address)
        token0 = self._decode_address(await self._eth_call(pair_address, TOKEN0_SIG), "token0")
        token1 = self._decode_address(await self._eth_call(pair_address, TOKEN1_SIG), "token1")
        return token0, token1

    async def get_reserves(self, pair_address: str, block_number: Optional[int] = None) -> Tuple[int, int, int]:
        """Returns (reserve0, reserve1, block_timestamp_last), pinned to ``block_number`` when given."""
        pair_address = self._normalise_address(pair_address)
        block_tag = hex(block_number) if block_number is not None else "latest"
        result = await self._eth_call(pair_address, GET_RESERVES_SIG, block_tag)
        if not result or len(result) < 194:
            raise ReadFailure(f"malformed getReserves result: {result!r}", code="BAD_DATA")
        try:
            reserve0 = int(result[2:66], 16)
            reserve1 = int(result[66:130], 16)
            timestamp_last = int(result[130:194], 16)
        except ValueError as exc:
            raise ReadFailure(f"malformed getReserves result: {result!r}", code="BAD_DATA") from exc
        return reserve0, reserve1, timestamp_last

    async def get_token_decimals(self, token_address: str) -> int:
        token_address = self._normalise_address(token_address)
        cached = self._decimals_cache.get(token_address)
        if cached is not None:
            return cached
        result = await self._eth_call(token_address, DECIMALS_SIG)
        decimals = self._decode_int(result, "decimals")
        self._decimals_cache[token_address] = decimals
        return decimals

    async def get_token_symbol(self, token_address: str) -> str:
        token_address = self._normalise_address(token_address)
        cached = self._symbol_cache.get(token_address)
        if cached is not None:
            return cached
        result = await self._eth_call(token_address, SYMBOL_SIG)
        symbol = self._decode_symbol(result)
        self._symbol_cache[token_address] = symbol
        return symbol

    async def get_token_meta(self, token_address: str) -> TokenMeta:
        symbol = await self.get_token_symbol(token_address)
        decimals = await self.get_token_decimals(token_address)
        return TokenMeta(
            address=self._normalise_address(token_address),
            symbol=symbol,
            decimals=decimals,
        )

    async def _eth_call(self, to: str, data: str, block: str = "latest") -> Optional[str]:
        call_params = {"to": to, "data": data}
        return await self._rpc_call("eth_call", [call_params, block])

    async def _rpc_call(self, method: str, params: list) -> Any:
        request_id = await self._get_request_id()
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": request_id,
        }
        try:
            async with self._session.post(self._rpc_url, json=payload, timeout=self._timeout) as response:
                response.raise_for_status()
                data = await response.json()
        except aiohttp.ClientResponseError as exc:
            raise ReadFailure(f"{method} failed: {exc.message}", code=str(exc.status)) from exc
        except aiohttp.ClientError as exc:
            raise ReadFailure(f"{method} failed: {exc}", code="NETWORK_ERROR") from exc
        except asyncio.TimeoutError as exc:
            raise ReadFailure(f"{method} timed out after {self._timeout}s", code="TIMEOUT") from exc
        except ValueError as exc:
            raise ReadFailure(f"{method} returned invalid JSON: {exc}", code="BAD_DATA") from exc

        if not isinstance(data, dict):
            raise ReadFailure(f"{method} returned unexpected payload: {data!r}", code="BAD_DATA")
        if 'error' in data:
            error = data['error']
            if isinstance(error, dict):
                code = error.get('code')
                raise ReadFailure(
                    f"{method} failed: {error.get('message', 'unknown error')}",
                    code=str(code) if code is not None else None,
                )
            raise ReadFailure(f"{method} failed: {error}")
        return data.get('result')

    async def _get_request_id(self) -> int:
        async with self._id_lock:
            request_id = self._next_request_id
            self._next_request_id += 1
        return request_id

    @staticmethod
    def _decode_int(value: Optional[str], what: str) -> int:
        if not value or not isinstance(value, str):
            raise ReadFailure(f"empty {what} result", code="BAD_DATA")
        try:
            return int(value, 16)
        except ValueError as exc:
            raise ReadFailure(f"malformed {what} result: {value!r}", code="BAD_DATA") from exc

    @staticmethod
    def _decode_symbol(value: Optional[str]) -> str:
        if not value or len(value) < 66:
            raise ReadFailure(f"malformed symbol result: {value!r}", code="BAD_DATA")
        raw = value[2:]
        try:
            if len(raw) == 64:
                # Legacy tokens (e.g. MKR) return bytes32 instead of string.
                return bytes.fromhex(raw).rstrip(b"\x00").decode("utf-8", errors="replace")
            offset = int(raw[:64], 16) * 2
            length = int(raw[offset:offset + 64], 16) * 2
            data = raw[offset + 64:offset + 64 + length]
            return bytes.fromhex(data).decode("utf-8", errors="replace")
        except ValueError as exc:
            raise ReadFailure(f"malformed symbol result: {value!r}", code="BAD_DATA") from exc

    @staticmethod
    def _normalise_address(address: str) -> str:
        """Lower-cases an address and ensures the 0x prefix."""
        if not address:
            raise ReadFailure("empty address", code="BAD_DATA")
        digits = address[2:] if address.lower().startswith("0x") else address
        return "0x" + digits.lower()

    @staticmethod
    def _decode_address(value: Optional[str], what: str) -> str:
        """Takes the low 20 bytes of an ABI-encoded address word."""
        if not value or len(value) < 66:
            raise ReadFailure(f"malformed {what} result: {value!r}", code="BAD_DATA")
        return "0x" + value[-40:].lower()
