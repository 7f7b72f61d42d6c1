# /aave_liquidator/core/provider.py
# Builds the async Web3 client and signing account from settings.
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3
from web3.middleware import ExtraDataToPOAMiddleware

from aave_liquidator.core.config import settings
from aave_liquidator.core.logger import get_logger

log = get_logger(__name__)


class Web3Provider:
    def __init__(self, rpc_url: str | None = None, private_key: str | None = None):
        rpc_url = rpc_url or settings.rpc_url
        if not rpc_url:
            raise ValueError("RPC_URL is not configured.")
        if private_key is None and settings.EXECUTOR_PRIVATE_KEY:
            private_key = settings.EXECUTOR_PRIVATE_KEY.get_secret_value()
        if not private_key:
            raise ValueError("EXECUTOR_PRIVATE_KEY is not configured.")

        self.rpc_url = rpc_url
        self.w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": 10}))
        # Polygon, BNB and Celo return oversized extraData
        self.w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
        self.account: LocalAccount = Account.from_key(private_key)
        self.address = self.account.address
        self.chain_id = settings.chain_id

    async def initialize(self) -> int:
        """Checks connectivity and resolves the chain id when not configured."""
        if not await self.w3.is_connected():
            raise ConnectionError("RPC node is unreachable.")
        if not self.chain_id:
            self.chain_id = await self.w3.eth.chain_id
        log.info("WEB3_PROVIDER_INITIALIZED", chain_id=self.chain_id, address=self.address)
        return self.chain_id
