# /aave_liquidator/strategies/scanner.py
import asyncio
from typing import Iterable, List, Tuple

from aave_liquidator.core.logger import get_logger
from aave_liquidator.core.state import Borrower
from aave_liquidator.core.wad_ray_math import WAD

log = get_logger(__name__)

MULTICALL_CHUNK_SIZE = 500
# Bounds evaluation cost per tick
MAX_UNDERWATER_CANDIDATES = 50
# Pause between batches for upstream rate limits
CHUNK_DELAY_SECS = 0.1


class UnderwaterScanner:
    """Finds borrowers whose health factor is below 1.0, most underwater first."""
    def __init__(
        self,
        adapter,
        chunk_size: int = MULTICALL_CHUNK_SIZE,
        max_candidates: int = MAX_UNDERWATER_CANDIDATES,
        chunk_delay: float = CHUNK_DELAY_SECS,
    ):
        self.adapter = adapter
        self.chunk_size = chunk_size
        self.max_candidates = max_candidates
        self.chunk_delay = chunk_delay

    async def scan(self, borrowers: Iterable[Borrower]) -> List[Tuple[str, int]]:
        """(address, health factor) pairs sorted ascending by health factor."""
        with_debt = [b.address for b in borrowers if b.debt]
        total = len(with_debt)
        log.info("SCANNING_BORROWERS_WITH_DEBT", count=total)

        underwater: List[Tuple[str, int]] = []
        for offset in range(0, total, self.chunk_size):
            chunk = with_debt[offset:offset + self.chunk_size]
            health_factors = await self.adapter.get_health_factors(chunk)
            for address, health_factor in zip(chunk, health_factors):
                if health_factor < WAD:
                    log.info("UNDERWATER_BORROWER_FOUND", borrower=address, health_factor=health_factor)
                    underwater.append((address, health_factor))

            scanned = offset + len(chunk)
            log.info("SCAN_PROGRESS", underwater=len(underwater), progress_pct=100 * scanned // total)

            if len(underwater) >= self.max_candidates:
                log.warning("UNDERWATER_CAP_REACHED", cap=self.max_candidates, unscanned=total - scanned)
                break
            if scanned < total:
                await asyncio.sleep(self.chunk_delay)

        underwater.sort(key=lambda item: item[1])
        return underwater[:self.max_candidates]
