# /aave_liquidator/adapters/aave.py
# Adapter for every Aave v3 contract interaction the strategy needs.
from typing import Iterable, List, Tuple

from eth_abi import decode
from web3 import AsyncWeb3, Web3

from aave_liquidator.abis import (
    AAVE_ORACLE_ABI,
    ERC20_ABI,
    L2_ENCODER_ABI,
    LIQUIDATOR_ABI,
    MULTICALL3_ABI,
    POOL_ABI,
    POOL_DATA_PROVIDER_ABI,
    USER_ACCOUNT_DATA_TYPES,
)
from aave_liquidator.core.decorators import retriable_network_call
from aave_liquidator.core.deployments import DeploymentConfig, MULTICALL3_ADDRESS
from aave_liquidator.core.logger import get_logger

log = get_logger(__name__)

# Uniswap v3 fee tier the liquidator contract swaps collateral through
HELPER_SWAP_POOL_FEE = 500


class EncoderNotDeployedError(RuntimeError):
    pass


class AaveAdapter:
    """
    Thin async wrapper over the pool, data provider, oracle, L2 encoder,
    liquidator helper, ERC20 tokens and Multicall3.

    Reads return plain Python values; write helpers return unsigned
    transaction dicts (to, data, value) for the TransactionManager to fill in.
    """
    def __init__(self, w3: AsyncWeb3, deployment: DeploymentConfig, liquidator_address: str, executor_address: str):
        self.w3 = w3
        self.deployment = deployment
        self.pool_address = deployment.pool_address
        self.liquidator_address = Web3.to_checksum_address(liquidator_address)
        self.executor_address = Web3.to_checksum_address(executor_address)

        self.pool = w3.eth.contract(address=deployment.pool_address, abi=POOL_ABI)
        self.data_provider = w3.eth.contract(address=deployment.pool_data_provider, abi=POOL_DATA_PROVIDER_ABI)
        self.oracle = w3.eth.contract(address=deployment.oracle_address, abi=AAVE_ORACLE_ABI)
        self.liquidator = w3.eth.contract(address=self.liquidator_address, abi=LIQUIDATOR_ABI)
        self.multicall = w3.eth.contract(address=MULTICALL3_ADDRESS, abi=MULTICALL3_ABI)
        self.encoder = (
            w3.eth.contract(address=deployment.l2_encoder, abi=L2_ENCODER_ABI)
            if deployment.has_l2_encoder else None
        )
        log.info("AAVE_ADAPTER_INITIALIZED", pool=self.pool_address, liquidator=self.liquidator_address)

    def _erc20(self, token: str):
        return self.w3.eth.contract(address=Web3.to_checksum_address(token), abi=ERC20_ABI)

    # --- chain head & event logs ---

    @retriable_network_call
    async def get_block_number(self) -> int:
        return await self.w3.eth.block_number

    @retriable_network_call
    async def get_borrow_events(self, from_block: int, to_block: int) -> List[Tuple[str, str]]:
        """(onBehalfOf, reserve) for every Borrow in [from_block, to_block]."""
        logs = await self.pool.events.Borrow().get_logs(from_block=from_block, to_block=to_block)
        return [(entry["args"]["onBehalfOf"], entry["args"]["reserve"]) for entry in logs]

    @retriable_network_call
    async def get_supply_events(self, from_block: int, to_block: int) -> List[Tuple[str, str]]:
        """(onBehalfOf, reserve) for every Supply in [from_block, to_block]."""
        logs = await self.pool.events.Supply().get_logs(from_block=from_block, to_block=to_block)
        return [(entry["args"]["onBehalfOf"], entry["args"]["reserve"]) for entry in logs]

    # --- reserve introspection ---

    async def get_all_reserves_tokens(self) -> List[Tuple[str, str]]:
        """(symbol, token address) for every listed reserve."""
        return [(symbol, address) for symbol, address in await self.data_provider.functions.getAllReservesTokens().call()]

    async def get_all_a_tokens(self) -> List[Tuple[str, str]]:
        return [(symbol, address) for symbol, address in await self.data_provider.functions.getAllATokens().call()]

    async def get_reserve_configuration_data(self, asset: str) -> tuple:
        return tuple(await self.data_provider.functions.getReserveConfigurationData(asset).call())

    async def get_liquidation_protocol_fee(self, asset: str) -> int:
        return await self.data_provider.functions.getLiquidationProtocolFee(asset).call()

    # --- batched reads ---

    async def _aggregate(self, calls: List[Tuple[str, bytes]]) -> List[bytes]:
        if not calls:
            return []
        _, return_data = await self.multicall.functions.aggregate(calls).call()
        return return_data

    @retriable_network_call
    async def get_health_factors(self, users: Iterable[str]) -> List[int]:
        """Health factor (wad) per user, in input order, from one Multicall3 round trip."""
        calls = [
            (self.pool.address, self.pool.functions.getUserAccountData(user)._encode_transaction_data())
            for user in users
        ]
        return [decode(USER_ACCOUNT_DATA_TYPES, raw)[5] for raw in await self._aggregate(calls)]

    @retriable_network_call
    async def get_asset_prices(self, assets: Iterable[str]) -> List[int]:
        """Oracle price (8 decimals, quote currency) per asset, in input order."""
        calls = [
            (self.oracle.address, self.oracle.functions.getAssetPrice(asset)._encode_transaction_data())
            for asset in assets
        ]
        return [decode(["uint256"], raw)[0] for raw in await self._aggregate(calls)]

    # --- per-borrower reads ---

    async def get_user_reserve_data(self, asset: str, user: str) -> tuple:
        return tuple(await self.data_provider.functions.getUserReserveData(asset, user).call())

    async def balance_of(self, token: str, owner: str) -> int:
        return await self._erc20(token).functions.balanceOf(owner).call()

    async def allowance(self, token: str, owner: str, spender: str) -> int:
        return await self._erc20(token).functions.allowance(owner, spender).call()

    # --- liquidation helper ---

    def _require_encoder(self):
        if self.encoder is None:
            raise EncoderNotDeployedError("L2 Encoder address is not deployed on this network")
        return self.encoder

    async def encode_liquidation_call(self, collateral: str, debt: str, user: str, debt_to_cover: int) -> Tuple[bytes, bytes]:
        encoder = self._require_encoder()
        data0, data1 = await encoder.functions.encodeLiquidationCall(collateral, debt, user, debt_to_cover, False).call()
        return data0, data1

    async def simulate_liquidate(self, collateral: str, debt: str, debt_to_cover: int, data0: bytes, data1: bytes) -> int:
        """eth_call of Liquidator.liquidate; returns the signed gain in debt-asset units."""
        fn = self.liquidator.functions.liquidate(collateral, debt, HELPER_SWAP_POOL_FEE, debt_to_cover, data0, data1)
        return await fn.call({"from": self.executor_address})

    # --- unsigned transactions ---

    @staticmethod
    def _tx(contract_fn) -> dict:
        return {"to": contract_fn.address, "data": contract_fn._encode_transaction_data(), "value": 0}

    def liquidation_call_tx(self, collateral: str, debt: str, user: str, debt_to_cover: int) -> dict:
        return self._tx(self.pool.functions.liquidationCall(collateral, debt, user, debt_to_cover, False))

    def liquidate_tx(self, collateral: str, debt: str, debt_to_cover: int, data0: bytes, data1: bytes) -> dict:
        return self._tx(self.liquidator.functions.liquidate(collateral, debt, HELPER_SWAP_POOL_FEE, debt_to_cover, data0, data1))

    def approve_tx(self, token: str, spender: str, amount: int) -> dict:
        return self._tx(self._erc20(token).functions.approve(spender, amount))

    def approve_pool_tx(self, token: str) -> dict:
        return self._tx(self.liquidator.functions.approvePool(token))
