# /aave_liquidator/strategies/execution.py
# Turns a chosen opportunity into an unsigned transaction and keeps
# the pool approved to pull every reserve token.
from typing import Iterable

from aave_liquidator.core.logger import get_logger, APPROVALS_SENT
from aave_liquidator.core.state import LiquidationOpportunity
from aave_liquidator.core.wad_ray_math import MAX_UINT256
from aave_liquidator.strategies.evaluator import LiquidationMode

log = get_logger(__name__)


class ExecutionBuilder:
    def __init__(self, adapter, mode: LiquidationMode, chain_id: int, tx_manager):
        self.adapter = adapter
        self.mode = LiquidationMode(mode)
        self.chain_id = chain_id
        self.tx_manager = tx_manager

    @property
    def allowance_owner(self) -> str:
        """Whoever repays the debt: the executor itself, or the helper contract."""
        if self.mode is LiquidationMode.DIRECT:
            return self.tx_manager.address
        return self.adapter.liquidator_address

    async def build_liquidation(self, op: LiquidationOpportunity) -> dict:
        if self.mode is LiquidationMode.DIRECT:
            tx = self.adapter.liquidation_call_tx(op.collateral, op.debt, op.borrower, op.debt_to_cover)
        else:
            data0, data1 = await self.adapter.encode_liquidation_call(op.collateral, op.debt, op.borrower, op.debt_to_cover)
            tx = self.adapter.liquidate_tx(op.collateral, op.debt, op.debt_to_cover, data0, data1)
        tx["chainId"] = self.chain_id
        log.info("LIQUIDATION_TX_BUILT", mode=self.mode.value, borrower=op.borrower, to=tx["to"], debt_to_cover=op.debt_to_cover)
        return tx

    async def ensure_allowances(self, tokens: Iterable[str]) -> int:
        """
        Approves the pool for every token it cannot yet pull from the owner.

        The nonce is read from the chain once per pass and advanced locally
        after each broadcast. The first failed read or send aborts the pass.
        Returns the number of approvals sent.
        """
        owner = self.allowance_owner
        spender = self.adapter.pool_address
        await self.tx_manager.sync_nonce()

        sent = 0
        for token in tokens:
            allowance = await self.adapter.allowance(token, owner, spender)
            if allowance != 0:
                continue

            log.info("APPROVING_TOKEN", token=token, owner=owner, spender=spender)
            if self.mode is LiquidationMode.DIRECT:
                tx = self.adapter.approve_tx(token, spender, MAX_UINT256)
            else:
                tx = self.adapter.approve_pool_tx(token)
            tx["chainId"] = self.chain_id
            tx_hash = await self.tx_manager.submit(tx)
            APPROVALS_SENT.inc()
            sent += 1
            log.info("TOKEN_APPROVED", token=token, tx_hash=tx_hash)
        return sent
