# /aave_liquidator/strategies/base.py
# - Defines the AbstractStrategy interface driven by the Agent.

from typing import List

from aave_liquidator.core.state import SubmitTx


class AbstractStrategy:
    """
    Interface every tick-driven strategy implements.

    The Agent calls sync_state() once before the first tick, then
    process_tick() on every tick, submitting whatever actions it returns.
    A strategy owns its mutable state; nothing else writes to it.
    """
    async def sync_state(self) -> None:
        """Restore persisted state and bring it up to date."""
        raise NotImplementedError

    async def process_tick(self) -> List[SubmitTx]:
        """Run one cycle and return the transactions to submit (possibly none)."""
        raise NotImplementedError
