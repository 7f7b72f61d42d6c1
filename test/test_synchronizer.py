# /test/test_synchronizer.py
# Event ingestion, windowing, and the persisted checkpoint.
import json

import pytest

from aave_liquidator.core.state import Borrower, StateCache
from aave_liquidator.core.state_cache import (
    StateCacheCorruptedError,
    load_state_cache,
    reset_state_cache,
    save_state_cache,
)
from aave_liquidator.strategies.synchronizer import StateSynchronizer, ingest_events, iter_block_windows

from conftest import ALICE, BOB, DAI, USDC, WETH


@pytest.mark.parametrize("start,end,window", [(0, 2500, 1024), (100, 100, 1024), (5, 4100, 1024), (0, 9, 3)])
def test_windows_cover_the_range_exactly_once(start, end, window):
    windows = list(iter_block_windows(start, end, window))
    covered = [block for lo, hi in windows for block in range(lo, hi + 1)]
    assert covered == list(range(start, end + 1))
    assert all(hi - lo + 1 <= window for lo, hi in windows)


def test_windows_edge_cases():
    assert list(iter_block_windows(10, 9)) == []
    assert list(iter_block_windows(0, 2500)) == [(0, 1023), (1024, 2047), (2048, 2500)]
    with pytest.raises(ValueError):
        list(iter_block_windows(0, 10, 0))


def test_reingesting_events_is_idempotent():
    borrows = [(ALICE, USDC), (ALICE, DAI), (BOB, USDC)]
    supplies = [(ALICE, WETH), (BOB, WETH), (ALICE, WETH)]
    once = ingest_events({}, borrows, supplies)
    twice = ingest_events(ingest_events({}, borrows, supplies), borrows, supplies)
    assert once == twice
    assert once[ALICE].debt == [USDC, DAI]
    assert once[ALICE].collateral == [WETH]
    assert once[BOB].debt == [USDC]


@pytest.mark.asyncio
async def test_missing_cache_starts_from_creation_block(adapter, deployment, tmp_path):
    sync = StateSynchronizer(adapter, deployment, tmp_path / "borrowers.json")
    await sync.load()
    assert sync.last_block_number == deployment.creation_block
    assert sync.borrowers == {}


@pytest.mark.asyncio
async def test_sync_before_load_is_an_error(adapter, deployment, tmp_path):
    sync = StateSynchronizer(adapter, deployment, tmp_path / "borrowers.json")
    with pytest.raises(RuntimeError):
        await sync.sync()


@pytest.mark.asyncio
async def test_sync_ingests_every_window_and_persists(adapter, deployment, tmp_path):
    start = deployment.creation_block
    adapter.block_number = start + 2500
    adapter.borrow_events = [(start, ALICE, USDC), (start + 1500, BOB, DAI), (start + 2500, ALICE, DAI)]
    adapter.supply_events = [(start + 3, ALICE, WETH), (start + 2100, BOB, WETH)]
    cache_path = tmp_path / "borrowers.json"

    sync = StateSynchronizer(adapter, deployment, cache_path)
    await sync.load()
    assert await sync.sync() is True

    borrow_windows = [(lo, hi) for kind, lo, hi in adapter.log_windows if kind == "Borrow"]
    assert borrow_windows == [(start, start + 1023), (start + 1024, start + 2047), (start + 2048, start + 2500)]
    assert sync.last_block_number == start + 2500
    assert sync.borrowers[ALICE].debt == [USDC, DAI]
    assert sync.borrowers[ALICE].collateral == [WETH]
    assert sync.borrowers[BOB].debt == [DAI]

    persisted = json.loads(cache_path.read_text())
    assert persisted["last_block_number"] == start + 2500
    assert persisted["borrowers"][ALICE] == {"address": ALICE, "collateral": [WETH], "debt": [USDC, DAI]}


@pytest.mark.asyncio
async def test_sync_at_head_does_nothing(adapter, deployment, tmp_path):
    sync = StateSynchronizer(adapter, deployment, tmp_path / "borrowers.json")
    await sync.load()
    assert await sync.sync() is False
    assert adapter.log_windows == []
    assert not (tmp_path / "borrowers.json").exists()


@pytest.mark.asyncio
async def test_failed_window_keeps_checkpoint_and_cache(adapter, deployment, tmp_path):
    start = deployment.creation_block
    cache_path = tmp_path / "borrowers.json"
    await save_state_cache(cache_path, StateCache(last_block_number=start, borrowers={}))

    adapter.block_number = start + 3000
    adapter.borrow_events = [(start + 10, ALICE, USDC)]
    adapter.failures["get_supply_events"] = ConnectionError("rpc down")

    sync = StateSynchronizer(adapter, deployment, cache_path)
    await sync.load()
    with pytest.raises(ConnectionError):
        await sync.sync()

    assert sync.last_block_number == start
    assert sync.borrowers == {}
    assert (await load_state_cache(cache_path)).last_block_number == start

    # The next pass retries the same range from the untouched checkpoint
    adapter.log_windows.clear()
    assert await sync.sync() is True
    assert adapter.log_windows[0] == ("Borrow", start, start + 1023)
    assert sync.borrowers[ALICE].debt == [USDC]
    assert (await load_state_cache(cache_path)).last_block_number == start + 3000


@pytest.mark.asyncio
async def test_cache_round_trip_preserves_insertion_order(tmp_path):
    path = tmp_path / "nested" / "borrowers.json"
    cache = StateCache(
        last_block_number=123456,
        borrowers={ALICE: Borrower(address=ALICE, collateral=[WETH, USDC], debt=[DAI, USDC])},
    )
    await save_state_cache(path, cache)
    loaded = await load_state_cache(path)
    assert loaded == cache
    assert loaded.borrowers[ALICE].debt == [DAI, USDC]


@pytest.mark.asyncio
async def test_cache_keys_and_assets_are_normalised(tmp_path):
    path = tmp_path / "borrowers.json"
    lower = ALICE.lower()
    path.write_text(json.dumps({
        "last_block_number": 7,
        "borrowers": {lower: {"address": lower, "collateral": [WETH.lower(), WETH], "debt": []}},
    }))
    loaded = await load_state_cache(path)
    assert list(loaded.borrowers) == [ALICE]
    assert loaded.borrowers[ALICE].collateral == [WETH]


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["{not json", '{"borrowers": {}}', '{"last_block_number": -1, "borrowers": {}}'])
async def test_corrupted_cache_is_reported_not_reset(tmp_path, content):
    path = tmp_path / "borrowers.json"
    path.write_text(content)
    with pytest.raises(StateCacheCorruptedError):
        await load_state_cache(path)
    assert path.exists()


def test_reset_state_cache(tmp_path):
    path = tmp_path / "borrowers.json"
    assert reset_state_cache(path) is False
    path.write_text("{}")
    assert reset_state_cache(path) is True
    assert not path.exists()


@pytest.mark.asyncio
async def test_undecodable_cache_is_reported_not_reset(tmp_path):
    path = tmp_path / "borrowers.json"
    path.write_bytes(b"\xff\xfe{")
    with pytest.raises(StateCacheCorruptedError):
        await load_state_cache(path)
    assert path.exists()
