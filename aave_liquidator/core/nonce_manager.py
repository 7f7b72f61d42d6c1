# /aave_liquidator/core/nonce_manager.py
from web3 import AsyncWeb3

from aave_liquidator.core.logger import get_logger

log = get_logger(__name__)


class NonceManager:
    """
    Local nonce counter for the executor account.

    Synced from the node, then bumped after every successful broadcast so
    several transactions sent within one tick do not collide.
    """
    def __init__(self, w3: AsyncWeb3, address: str):
        self.w3 = w3
        self.address = address
        self.nonce = -1

    async def sync(self) -> int:
        self.nonce = await self.w3.eth.get_transaction_count(self.address, "pending")
        log.info("NONCE_FROM_RPC", nonce=self.nonce)
        return self.nonce

    async def get(self) -> int:
        if self.nonce < 0:
            await self.sync()
        return self.nonce

    def bump(self):
        self.nonce += 1
        log.debug("NONCE_BUMPED", nonce=self.nonce)
