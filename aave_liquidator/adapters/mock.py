# /aave_liquidator/adapters/mock.py
# In-memory stand-ins for AaveAdapter and TransactionManager.
# Enables testing the whole strategy without a node.

from typing import Dict, List, Tuple

from web3 import Web3

from aave_liquidator.adapters.aave import EncoderNotDeployedError
from aave_liquidator.core.deployments import DeploymentConfig
from aave_liquidator.core.logger import get_logger
from aave_liquidator.core.state import GasBidInfo

log = get_logger(__name__)


class MockTransactionManager:
    """
    A mock implementation of TransactionManager for testing purposes.
    It does not send real transactions but simulates the process.
    """
    def __init__(self, from_address: str = "0x000000000000000000000000000000000000E0E0", chain_id: int = 10):
        self.address = Web3.to_checksum_address(from_address)
        self.chain_id = chain_id
        self.nonce = 0
        self.chain_nonce = 0
        self.sent_transactions: List[dict] = []
        self.nonce_syncs = 0
        self._fail_after: int | None = None

    def set_next_call_to_fail(self, after: int = 0):
        """Make the call after `after` successful sends raise."""
        self._fail_after = after

    async def sync_nonce(self) -> int:
        self.nonce_syncs += 1
        self.nonce = self.chain_nonce
        return self.nonce

    async def submit(self, tx_params: Dict, gas_bid_info: GasBidInfo | None = None) -> str:
        if self._fail_after is not None:
            if self._fail_after == 0:
                self._fail_after = None
                log.error("MOCK_TX_FORCED_FAILURE", params=tx_params)
                raise ConnectionError("Forced failure for testing.")
            self._fail_after -= 1

        tx_hash = f"0xfake_tx_hash_{self.nonce}"
        full_tx = {"hash": tx_hash, "nonce": self.nonce, "gas_bid_info": gas_bid_info, **tx_params}
        log.info("MOCK_TRANSACTION_SENT", tx=full_tx)
        self.sent_transactions.append(full_tx)
        self.nonce += 1
        self.chain_nonce = self.nonce
        return tx_hash


class MockAaveAdapter:
    """
    Scriptable replacement for AaveAdapter.

    Tests populate the public dicts/lists; every network-shaped call can be
    made to fail via `failures` (method name -> exception, raised once).
    """
    def __init__(self, deployment: DeploymentConfig, liquidator_address: str = "0x000000000000000000000000000000000000beef", executor_address: str = "0x000000000000000000000000000000000000E0E0"):
        self.deployment = deployment
        self.pool_address = deployment.pool_address
        self.liquidator_address = Web3.to_checksum_address(liquidator_address)
        self.executor_address = Web3.to_checksum_address(executor_address)

        self.block_number = deployment.creation_block
        # (block, on_behalf_of, reserve)
        self.borrow_events: List[Tuple[int, str, str]] = []
        self.supply_events: List[Tuple[int, str, str]] = []
        # (symbol, token, a_token)
        self.reserves: List[Tuple[str, str, str]] = []
        # token -> (decimals, ltv, threshold, bonus, reserve_factor, ...)
        self.reserve_configs: Dict[str, tuple] = {}
        self.protocol_fees: Dict[str, int] = {}
        self.health_factors: Dict[str, int] = {}
        self.prices: Dict[str, int] = {}
        # (asset, user) -> (stable_debt, variable_debt)
        self.user_debts: Dict[Tuple[str, str], Tuple[int, int]] = {}
        # (token, owner) -> balance
        self.balances: Dict[Tuple[str, str], int] = {}
        # (token, owner, spender) -> allowance
        self.allowances: Dict[Tuple[str, str, str], int] = {}
        # (collateral, debt) -> gain returned by the helper simulation
        self.simulated_gains: Dict[Tuple[str, str], int] = {}
        self.has_encoder = deployment.has_l2_encoder

        self.failures: Dict[str, Exception] = {}
        self.log_windows: List[Tuple[str, int, int]] = []
        self.multicall_batches: List[Tuple[str, int]] = []

    def _maybe_fail(self, name: str):
        error = self.failures.pop(name, None)
        if error is not None:
            raise error

    @staticmethod
    def _cs(address: str) -> str:
        return Web3.to_checksum_address(address)

    # --- chain head & event logs ---

    async def get_block_number(self) -> int:
        self._maybe_fail("get_block_number")
        return self.block_number

    async def get_borrow_events(self, from_block: int, to_block: int) -> List[Tuple[str, str]]:
        self._maybe_fail("get_borrow_events")
        self.log_windows.append(("Borrow", from_block, to_block))
        return [(user, reserve) for block, user, reserve in self.borrow_events if from_block <= block <= to_block]

    async def get_supply_events(self, from_block: int, to_block: int) -> List[Tuple[str, str]]:
        self._maybe_fail("get_supply_events")
        self.log_windows.append(("Supply", from_block, to_block))
        return [(user, reserve) for block, user, reserve in self.supply_events if from_block <= block <= to_block]

    # --- reserve introspection ---

    async def get_all_reserves_tokens(self) -> List[Tuple[str, str]]:
        self._maybe_fail("get_all_reserves_tokens")
        return [(symbol, token) for symbol, token, _ in self.reserves]

    async def get_all_a_tokens(self) -> List[Tuple[str, str]]:
        self._maybe_fail("get_all_a_tokens")
        return [("a" + symbol, a_token) for symbol, _, a_token in self.reserves]

    async def get_reserve_configuration_data(self, asset: str) -> tuple:
        self._maybe_fail(f"get_reserve_configuration_data:{self._cs(asset)}")
        return self.reserve_configs[self._cs(asset)]

    async def get_liquidation_protocol_fee(self, asset: str) -> int:
        self._maybe_fail(f"get_liquidation_protocol_fee:{self._cs(asset)}")
        return self.protocol_fees.get(self._cs(asset), 0)

    # --- batched reads ---

    async def get_health_factors(self, users) -> List[int]:
        self._maybe_fail("get_health_factors")
        users = list(users)
        self.multicall_batches.append(("getUserAccountData", len(users)))
        return [self.health_factors.get(self._cs(u), 2**256 - 1) for u in users]

    async def get_asset_prices(self, assets) -> List[int]:
        self._maybe_fail("get_asset_prices")
        assets = list(assets)
        self.multicall_batches.append(("getAssetPrice", len(assets)))
        return [self.prices.get(self._cs(a), 0) for a in assets]

    # --- per-borrower reads ---

    async def get_user_reserve_data(self, asset: str, user: str) -> tuple:
        self._maybe_fail("get_user_reserve_data")
        stable, variable = self.user_debts.get((self._cs(asset), self._cs(user)), (0, 0))
        a_balance = 0
        return (a_balance, stable, variable, stable, variable, 0, 0, 0, True)

    async def balance_of(self, token: str, owner: str) -> int:
        self._maybe_fail("balance_of")
        return self.balances.get((self._cs(token), self._cs(owner)), 0)

    async def allowance(self, token: str, owner: str, spender: str) -> int:
        self._maybe_fail("allowance")
        return self.allowances.get((self._cs(token), self._cs(owner), self._cs(spender)), 0)

    # --- liquidation helper ---

    async def encode_liquidation_call(self, collateral: str, debt: str, user: str, debt_to_cover: int) -> Tuple[bytes, bytes]:
        if not self.has_encoder:
            raise EncoderNotDeployedError("L2 Encoder address is not deployed on this network")
        self._maybe_fail("encode_liquidation_call")
        return debt_to_cover.to_bytes(32, "big"), bytes.fromhex(self._cs(user)[2:]).rjust(32, b"\x00")

    async def simulate_liquidate(self, collateral: str, debt: str, debt_to_cover: int, data0: bytes, data1: bytes) -> int:
        self._maybe_fail("simulate_liquidate")
        return self.simulated_gains[(self._cs(collateral), self._cs(debt))]

    # --- unsigned transactions ---

    def liquidation_call_tx(self, collateral: str, debt: str, user: str, debt_to_cover: int) -> dict:
        return {"to": self.pool_address, "data": ("liquidationCall", collateral, debt, user, debt_to_cover, False), "value": 0}

    def liquidate_tx(self, collateral: str, debt: str, debt_to_cover: int, data0: bytes, data1: bytes) -> dict:
        return {"to": self.liquidator_address, "data": ("liquidate", collateral, debt, 500, debt_to_cover, data0, data1), "value": 0}

    def approve_tx(self, token: str, spender: str, amount: int) -> dict:
        return {"to": self._cs(token), "data": ("approve", spender, amount), "value": 0}

    def approve_pool_tx(self, token: str) -> dict:
        return {"to": self.liquidator_address, "data": ("approvePool", token), "value": 0}
