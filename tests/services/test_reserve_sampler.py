import pytest
from unittest.mock import AsyncMock, MagicMock

from analysis.models import ReserveSnapshot
from errors import ReadFailure
from services.reserve_sampler import ReserveSampler

PAIR = '0xb4e16d0168e52d35cacd2c6185b44281ec28c9dc'


@pytest.fixture
def mock_reader():
    reader = MagicMock()
    reader.get_latest_block = AsyncMock(return_value=500)
    reader.get_reserves = AsyncMock(return_value=(1_000, 2_000, 1_700_000_000))
    return reader


@pytest.mark.asyncio
async def test_sample_reads_head_when_block_not_given(mock_reader):
    snapshot = await ReserveSampler(mock_reader, PAIR).sample()

    assert snapshot == ReserveSnapshot(block=500, reserve0=1_000, reserve1=2_000)
    mock_reader.get_reserves.assert_awaited_once_with(PAIR, 500)


@pytest.mark.asyncio
async def test_sample_uses_given_block(mock_reader):
    snapshot = await ReserveSampler(mock_reader, PAIR).sample(42)

    assert snapshot.block == 42
    mock_reader.get_latest_block.assert_not_awaited()
    mock_reader.get_reserves.assert_awaited_once_with(PAIR, 42)


@pytest.mark.asyncio
async def test_sample_propagates_read_failure(mock_reader):
    mock_reader.get_reserves.side_effect = ReadFailure('eth_call failed: boom', code='NETWORK_ERROR')

    with pytest.raises(ReadFailure):
        await ReserveSampler(mock_reader, PAIR).sample(42)
