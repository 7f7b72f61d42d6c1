# /aave_liquidator/strategies/synchronizer.py
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Tuple

from aave_liquidator.core.deployments import DeploymentConfig
from aave_liquidator.core.logger import get_logger, KNOWN_BORROWERS
from aave_liquidator.core.state import Borrower, StateCache, fold_borrow_event, fold_supply_event
from aave_liquidator.core.state_cache import load_state_cache, save_state_cache

log = get_logger(__name__)

# Max blocks per eth_getLogs request
LOG_BLOCK_RANGE = 1024


def iter_block_windows(from_block: int, to_block: int, window: int = LOG_BLOCK_RANGE) -> Iterator[Tuple[int, int]]:
    """
    Inclusive [start, end] windows covering from_block..to_block exactly once.

    >>> list(iter_block_windows(0, 2500))
    [(0, 1023), (1024, 2047), (2048, 2500)]
    """
    if window < 1:
        raise ValueError("window must be at least one block")
    for start in range(from_block, to_block + 1, window):
        yield start, min(start + window - 1, to_block)


def ingest_events(
    borrowers: Dict[str, Borrower],
    borrow_events: Iterable[Tuple[str, str]],
    supply_events: Iterable[Tuple[str, str]],
) -> Dict[str, Borrower]:
    """Folds (onBehalfOf, reserve) events into borrowers in place. Idempotent."""
    for on_behalf_of, reserve in borrow_events:
        fold_borrow_event(borrowers, on_behalf_of, reserve)
    for on_behalf_of, reserve in supply_events:
        fold_supply_event(borrowers, on_behalf_of, reserve)
    return borrowers


class StateSynchronizer:
    """
    Keeps the borrower map in step with the chain head.

    The checkpoint (last_block_number) and the cache file only move forward
    after every window of a pass has been fetched; a failed pass leaves both
    untouched and the next pass retries the same range.
    """
    def __init__(self, adapter, deployment: DeploymentConfig, cache_path: str | Path, log_block_range: int = LOG_BLOCK_RANGE):
        self.adapter = adapter
        self.deployment = deployment
        self.cache_path = Path(cache_path)
        self.log_block_range = log_block_range
        self.borrowers: Dict[str, Borrower] = {}
        self.last_block_number = deployment.creation_block
        self.loaded = False

    async def load(self):
        """Restores the cache, or starts from the deployment block when there is none."""
        cache = await load_state_cache(self.cache_path)
        if cache is None:
            log.info("NO_STATE_CACHE_STARTING_FROM_CREATION_BLOCK", creation_block=self.deployment.creation_block)
            self.last_block_number = self.deployment.creation_block
            self.borrowers = {}
        else:
            self.last_block_number = cache.last_block_number
            self.borrowers = cache.borrowers
        self.loaded = True
        KNOWN_BORROWERS.set(len(self.borrowers))

    async def sync(self) -> bool:
        """Catches up to the latest block. Returns False when already at head."""
        if not self.loaded:
            raise RuntimeError("StateSynchronizer.load() must run before sync()")

        latest_block = await self.adapter.get_block_number()
        if latest_block <= self.last_block_number:
            log.debug("STATE_ALREADY_AT_HEAD", last_block_number=self.last_block_number, latest_block=latest_block)
            return False

        log.info("STATE_SYNC_STARTED", from_block=self.last_block_number, to_block=latest_block)
        borrow_events: List[Tuple[str, str]] = []
        supply_events: List[Tuple[str, str]] = []
        for start, end in iter_block_windows(self.last_block_number, latest_block, self.log_block_range):
            borrow_events.extend(await self.adapter.get_borrow_events(start, end))
            supply_events.extend(await self.adapter.get_supply_events(start, end))

        known = len(self.borrowers)
        working = {address: b.model_copy(deep=True) for address, b in self.borrowers.items()}
        ingest_events(working, borrow_events, supply_events)

        await save_state_cache(self.cache_path, StateCache(last_block_number=latest_block, borrowers=working))
        self.borrowers = working
        self.last_block_number = latest_block
        KNOWN_BORROWERS.set(len(self.borrowers))

        log.info(
            "STATE_SYNCED",
            last_block_number=latest_block,
            borrow_events=len(borrow_events),
            supply_events=len(supply_events),
            new_borrowers=len(self.borrowers) - known,
            total_borrowers=len(self.borrowers),
        )
        return True
