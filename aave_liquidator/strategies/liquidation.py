# /aave_liquidator/strategies/liquidation.py
# Aave v3 liquidation strategy: one tick = refresh, approve, sync, scan,
# price, evaluate, and build at most one liquidation transaction.

from pathlib import Path
from typing import Dict, List

from aave_liquidator.core.deployments import DeploymentConfig
from aave_liquidator.core.logger import get_logger, CYCLES_ABORTED
from aave_liquidator.core.state import Borrower, GasBidInfo, SubmitTx
from aave_liquidator.strategies.base import AbstractStrategy
from aave_liquidator.strategies.evaluator import LiquidationMode, OpportunityEvaluator, select_best
from aave_liquidator.strategies.execution import ExecutionBuilder
from aave_liquidator.strategies.prices import native_to_wei, take_price_snapshot
from aave_liquidator.strategies.reserves import ReserveConfigCache
from aave_liquidator.strategies.scanner import UnderwaterScanner
from aave_liquidator.strategies.synchronizer import LOG_BLOCK_RANGE, StateSynchronizer

log = get_logger(__name__)


class CycleAbortedError(Exception):
    """A tick stage failed; nothing was submitted and the next tick starts over."""
    def __init__(self, stage: str, cause: Exception):
        super().__init__(f"cycle aborted during {stage}: {cause}")
        self.stage = stage
        self.cause = cause


class LiquidationStrategy(AbstractStrategy):
    """
    Owns every piece of mutable liquidation state: the reserve configs, the
    borrower map and its checkpoint. Components are wired once here and
    share nothing at module level.
    """
    def __init__(
        self,
        adapter,
        deployment: DeploymentConfig,
        tx_manager,
        mode: LiquidationMode,
        chain_id: int,
        bid_percentage: int = 50,
        cache_path: str | Path = "borrowers.json",
        log_block_range: int = LOG_BLOCK_RANGE,
        scanner: UnderwaterScanner | None = None,
    ):
        self.adapter = adapter
        self.deployment = deployment
        self.mode = LiquidationMode(mode)
        self.bid_percentage = bid_percentage

        self.reserves = ReserveConfigCache(adapter)
        self.synchronizer = StateSynchronizer(adapter, deployment, cache_path, log_block_range)
        self.scanner = scanner or UnderwaterScanner(adapter)
        self.evaluator = OpportunityEvaluator(adapter, self.reserves, self.mode)
        self.executor = ExecutionBuilder(adapter, self.mode, chain_id, tx_manager)
        log.info("LIQUIDATION_STRATEGY_INITIALIZED", mode=self.mode.value, pool=deployment.pool_address)

    @property
    def borrowers(self) -> Dict[str, Borrower]:
        return self.synchronizer.borrowers

    @property
    def last_block_number(self) -> int:
        return self.synchronizer.last_block_number

    async def sync_state(self) -> None:
        """Startup: reserve configs, approvals, cached borrowers, then catch up to head."""
        await self.reserves.refresh()
        await self.executor.ensure_allowances(list(self.reserves.tokens))
        await self.synchronizer.load()
        await self.synchronizer.sync()
        log.info("STRATEGY_STATE_SYNCED", last_block_number=self.last_block_number, borrowers=len(self.borrowers))

    async def _stage(self, stage: str, awaitable):
        try:
            return await awaitable
        except Exception as e:
            CYCLES_ABORTED.labels(stage).inc()
            log.error("CYCLE_ABORTED", stage=stage, error=str(e), error_type=type(e).__name__)
            raise CycleAbortedError(stage, e) from e

    async def process_tick(self) -> List[SubmitTx]:
        await self._stage("reserves", self.reserves.refresh())
        tokens = list(self.reserves.tokens)
        await self._stage("allowances", self.executor.ensure_allowances(tokens))
        await self._stage("sync", self.synchronizer.sync())

        candidates = await self._stage("scan", self.scanner.scan(self.borrowers.values()))
        if not candidates:
            log.info("NO_UNDERWATER_BORROWERS", borrowers=len(self.borrowers))
            return []

        prices = await self._stage("prices", take_price_snapshot(self.adapter, tokens, self.deployment.weth_address))
        opportunities = await self._stage("evaluate", self.evaluator.evaluate_all(candidates, self.borrowers, prices))

        best = select_best(opportunities)
        if best is None:
            log.info("NO_PROFITABLE_OPPORTUNITY", candidates=len(candidates), evaluated=len(opportunities))
            return []

        log.info(
            "BEST_OPPORTUNITY",
            borrower=best.borrower,
            collateral=best.collateral_symbol,
            debt=best.debt_symbol,
            debt_to_cover=best.debt_to_cover,
            profit_eth=best.profit_eth,
            health_factor=best.health_factor,
        )
        tx = await self._stage("build", self.executor.build_liquidation(best))
        # Gas is bid in wei
        bid = GasBidInfo(bid_percentage=self.bid_percentage, total_profit=native_to_wei(best.profit_eth))
        return [SubmitTx(tx=tx, gas_bid_info=bid)]
