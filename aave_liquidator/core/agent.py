# /aave_liquidator/core/agent.py
# An async orchestrator for a single, long-running, stateful strategy.

import asyncio

from aave_liquidator.core.config import settings
from aave_liquidator.core.logger import get_logger, set_cycle_counter, CYCLES_COMPLETED, LIQUIDATIONS_SUBMITTED
from aave_liquidator.strategies.base import AbstractStrategy
from aave_liquidator.strategies.liquidation import CycleAbortedError

log = get_logger(__name__)


class Agent:
    """
    Drives a strategy: sync_state() once, then process_tick() every poll
    interval, handing each returned action to the transaction manager.
    A failed cycle is logged and the loop carries on with the next one.
    """
    def __init__(self, strategy: AbstractStrategy, tx_manager, run_interval: float | None = None):
        self.strategy = strategy
        self.tx_manager = tx_manager
        self.strategy_name = getattr(strategy, 'strategy_name', type(strategy).__name__)
        self.run_interval = settings.POLL_INTERVAL_SECS if run_interval is None else run_interval
        self.cycle_counter = 0

    async def run_cycle(self) -> int:
        """Runs one tick and submits its actions. Returns the number submitted."""
        self.cycle_counter += 1
        set_cycle_counter(self.cycle_counter)

        actions = await self.strategy.process_tick()
        submitted = 0
        for action in actions:
            tx_hash = await self.tx_manager.submit(action.tx, action.gas_bid_info)
            LIQUIDATIONS_SUBMITTED.inc()
            submitted += 1
            log.info("LIQUIDATION_SUBMITTED", tx_hash=tx_hash, to=action.tx.get('to'))
        CYCLES_COMPLETED.inc()
        return submitted

    async def run_loop(self, max_cycles: int | None = None):
        """The main async execution loop. Runs forever unless max_cycles is given."""
        log.info("AGENT_STARTING_LOOP", strategy=self.strategy_name, interval=self.run_interval)
        await self.strategy.sync_state()

        while max_cycles is None or self.cycle_counter < max_cycles:
            try:
                await self.run_cycle()
            except CycleAbortedError as e:
                log.warning("AGENT_CYCLE_SKIPPED", strategy=self.strategy_name, stage=e.stage)
            except Exception as e:
                log.error("AGENT_LOOP_ERROR", strategy=self.strategy_name, error=str(e), exc_info=True)

            if max_cycles is not None and self.cycle_counter >= max_cycles:
                break
            await asyncio.sleep(self.run_interval)

        log.warning("AGENT_LOOP_STOPPED", strategy=self.strategy_name, cycles=self.cycle_counter)
