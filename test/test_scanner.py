import pytest

from aave_liquidator.core.state import Borrower
from aave_liquidator.core.wad_ray_math import WAD
from aave_liquidator.strategies.scanner import UnderwaterScanner

from conftest import USDC, WETH, addr


def make_borrowers(n: int, with_debt: bool = True):
    return [Borrower(address=addr(0x5000 + i), collateral=[WETH], debt=[USDC] if with_debt else []) for i in range(n)]


@pytest.mark.asyncio
async def test_only_borrowers_below_one_are_returned_sorted(adapter):
    borrowers = make_borrowers(5)
    hfs = [WAD, WAD - 1, 2 * WAD, WAD // 2, 9 * WAD // 10]
    adapter.health_factors = {b.address: hf for b, hf in zip(borrowers, hfs)}

    result = await UnderwaterScanner(adapter, chunk_delay=0).scan(borrowers)

    assert result == [
        (borrowers[3].address, WAD // 2),
        (borrowers[4].address, 9 * WAD // 10),
        (borrowers[1].address, WAD - 1),
    ]


@pytest.mark.asyncio
async def test_borrowers_without_debt_are_not_queried(adapter):
    borrowers = make_borrowers(3, with_debt=False) + [Borrower(address=addr(0x6000), collateral=[WETH], debt=[USDC])]
    adapter.health_factors = {b.address: 0 for b in borrowers}
    result = await UnderwaterScanner(adapter, chunk_delay=0).scan(borrowers)
    assert adapter.multicall_batches == [("getUserAccountData", 1)]
    assert len(result) == 1


@pytest.mark.asyncio
async def test_scans_in_chunks(adapter):
    borrowers = make_borrowers(12)
    await UnderwaterScanner(adapter, chunk_size=5, chunk_delay=0).scan(borrowers)
    assert [size for _, size in adapter.multicall_batches] == [5, 5, 2]


@pytest.mark.asyncio
async def test_scan_stops_once_the_cap_is_reached(adapter):
    borrowers = make_borrowers(10)
    adapter.health_factors = {b.address: WAD - 1 - i for i, b in enumerate(borrowers)}

    result = await UnderwaterScanner(adapter, chunk_size=4, max_candidates=3, chunk_delay=0).scan(borrowers)

    # Cap reached inside the first chunk; later chunks are never fetched
    assert adapter.multicall_batches == [("getUserAccountData", 4)]
    assert len(result) == 3
    assert [hf for _, hf in result] == sorted(hf for _, hf in result)
    assert result[0] == (borrowers[3].address, WAD - 4)


@pytest.mark.asyncio
async def test_empty_input(adapter):
    assert await UnderwaterScanner(adapter, chunk_delay=0).scan([]) == []
    assert adapter.multicall_batches == []
