import aiohttp
import pytest

from errors import ReadFailure
from services.chain_reader import ChainReader


class FakeResponse:
    def __init__(self, payload):
        self._payload = payload
        self.status = 200

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    def raise_for_status(self):
        return None

    async def json(self):
        return self._payload


class FakeSession:
    def __init__(self, responses):
        self._responses = list(responses)
        self.requests = []

    def post(self, url, json, timeout):
        self.requests.append(json)
        if not self._responses:
            raise AssertionError("No more fake responses configured")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return FakeResponse(response)


def _format_uint(value: int) -> str:
    return format(value, '064x')


def _make_reserve_payload(reserve0: int, reserve1: int, timestamp_last: int) -> str:
    return '0x' + _format_uint(reserve0) + _format_uint(reserve1) + _format_uint(timestamp_last)


def _make_string_payload(text: str) -> str:
    data = text.encode().hex()
    padded = data + '0' * (64 - len(data) % 64 if len(data) % 64 else 0)
    return '0x' + _format_uint(32) + _format_uint(len(text)) + padded


def _reader(session):
    return ChainReader(session, rpc_url='http://mock-rpc', timeout=5.0)


@pytest.mark.asyncio
async def test_get_latest_block_decodes_hex():
    session = FakeSession([{'jsonrpc': '2.0', 'id': 1, 'result': '0x10'}])
    assert await _reader(session).get_latest_block() == 16
    assert session.requests[0]['method'] == 'eth_blockNumber'


@pytest.mark.asyncio
async def test_get_reserves_pins_block_number():
    pair_address = '0xAAAA000000000000000000000000000000000001'
    session = FakeSession([
        {'jsonrpc': '2.0', 'id': 1, 'result': _make_reserve_payload(15000 * 10 ** 6, 10 * 10 ** 18, 1_700_000_000)},
    ])

    reserves = await _reader(session).get_reserves(pair_address, 255)

    assert reserves == (15000 * 10 ** 6, 10 * 10 ** 18, 1_700_000_000)
    call_params, block_tag = session.requests[0]['params']
    assert call_params['to'] == pair_address.lower()
    assert call_params['data'] == '0x0902f1ac'
    assert block_tag == '0xff'


@pytest.mark.asyncio
async def test_get_pair_tokens_decodes_addresses():
    token0 = '0xbbbb000000000000000000000000000000000002'
    token1 = '0xcccc000000000000000000000000000000000003'
    session = FakeSession([
        {'jsonrpc': '2.0', 'id': 1, 'result': '0x000000000000000000000000' + token0[2:]},
        {'jsonrpc': '2.0', 'id': 2, 'result': '0x000000000000000000000000' + token1[2:]},
    ])

    assert await _reader(session).get_pair_tokens('0xaaaa000000000000000000000000000000000001') == (token0, token1)


@pytest.mark.asyncio
async def test_get_token_meta_decodes_string_symbol_and_caches():
    token = '0xcccc000000000000000000000000000000000003'
    session = FakeSession([
        {'jsonrpc': '2.0', 'id': 1, 'result': _make_string_payload('USDC')},
        {'jsonrpc': '2.0', 'id': 2, 'result': '0x' + _format_uint(6)},
    ])
    reader = _reader(session)

    meta = await reader.get_token_meta(token)
    again = await reader.get_token_meta(token)

    assert meta.symbol == 'USDC'
    assert meta.decimals == 6
    assert again == meta
    assert len(session.requests) == 2


@pytest.mark.asyncio
async def test_get_token_symbol_decodes_bytes32():
    session = FakeSession([
        {'jsonrpc': '2.0', 'id': 1, 'result': '0x' + b'MKR'.hex().ljust(64, '0')},
    ])
    assert await _reader(session).get_token_symbol('0xdddd000000000000000000000000000000000004') == 'MKR'


@pytest.mark.asyncio
async def test_rpc_error_object_becomes_read_failure_with_code():
    session = FakeSession([
        {'jsonrpc': '2.0', 'id': 1, 'error': {'code': -32005, 'message': 'rate limited'}},
    ])

    with pytest.raises(ReadFailure) as exc_info:
        await _reader(session).get_latest_block()

    assert exc_info.value.code == '-32005'
    assert 'rate limited' in str(exc_info.value)


@pytest.mark.asyncio
async def test_transport_error_becomes_read_failure():
    cause = aiohttp.ClientConnectionError('connection refused')
    session = FakeSession([cause])

    with pytest.raises(ReadFailure) as exc_info:
        await _reader(session).get_latest_block()

    assert exc_info.value.code == 'NETWORK_ERROR'
    assert exc_info.value.__cause__ is cause


@pytest.mark.asyncio
async def test_malformed_reserves_become_read_failure():
    session = FakeSession([{'jsonrpc': '2.0', 'id': 1, 'result': '0x'}])

    with pytest.raises(ReadFailure) as exc_info:
        await _reader(session).get_reserves('0xaaaa000000000000000000000000000000000001', 1)

    assert exc_info.value.code == 'BAD_DATA'


@pytest.mark.asyncio
async def test_request_ids_increase():
    session = FakeSession([
        {'jsonrpc': '2.0', 'id': 1, 'result': '0x1'},
        {'jsonrpc': '2.0', 'id': 2, 'result': '0x2'},
    ])
    reader = _reader(session)
    await reader.get_latest_block()
    await reader.get_latest_block()
    assert [r['id'] for r in session.requests] == [1, 2]


@pytest.mark.asyncio
async def test_short_token_result_becomes_read_failure():
    session = FakeSession([{'jsonrpc': '2.0', 'id': 1, 'result': '0x'}])

    with pytest.raises(ReadFailure) as exc_info:
        await _reader(session).get_pair_tokens('0xaaaa000000000000000000000000000000000001')

    assert exc_info.value.code == 'BAD_DATA'
    assert 'token0' in str(exc_info.value)


@pytest.mark.asyncio
async def test_empty_address_is_rejected_before_any_request():
    session = FakeSession([])

    with pytest.raises(ReadFailure):
        await _reader(session).get_token_decimals('')

    assert session.requests == []
