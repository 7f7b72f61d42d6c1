# /aave_liquidator/core/tx.py
# Signs and broadcasts unsigned transactions produced by the strategy.
from typing import Dict, Any

from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3

from aave_liquidator.core.logger import get_logger
from aave_liquidator.core.nonce_manager import NonceManager
from aave_liquidator.core.state import GasBidInfo

log = get_logger(__name__)


def bid_gas_price(gas_bid_info: GasBidInfo, gas_limit: int) -> int:
    """Gas price that spends bid_percentage of the expected profit on gas."""
    if gas_limit <= 0:
        raise ValueError("gas_limit must be positive")
    return gas_bid_info.total_profit * gas_bid_info.bid_percentage // 100 // gas_limit


class TransactionManager:
    """Fills in sender, nonce and fees, signs, and broadcasts transactions."""
    def __init__(self, w3: AsyncWeb3, account: LocalAccount, chain_id: int, nonce_manager: NonceManager | None = None):
        self.w3 = w3
        self.account = account
        self.address = account.address
        self.chain_id = chain_id
        self.nonce_manager = nonce_manager or NonceManager(w3, self.address)

    async def sync_nonce(self) -> int:
        return await self.nonce_manager.sync()

    async def submit(self, tx_params: Dict[str, Any], gas_bid_info: GasBidInfo | None = None) -> str:
        """Signs and sends tx_params. The nonce is bumped only after a successful broadcast."""
        current_nonce = await self.nonce_manager.get()
        full_tx_params = {
            'from': self.address,
            'nonce': current_nonce,
            'chainId': self.chain_id,
            **tx_params
        }
        try:
            if 'gas' not in full_tx_params:
                full_tx_params['gas'] = await self.w3.eth.estimate_gas(full_tx_params)

            if gas_bid_info is not None:
                price = bid_gas_price(gas_bid_info, full_tx_params['gas'])
                full_tx_params['maxFeePerGas'] = price
                full_tx_params['maxPriorityFeePerGas'] = price
            elif 'maxFeePerGas' not in full_tx_params and 'gasPrice' not in full_tx_params:
                gas_price = await self.w3.eth.gas_price
                full_tx_params['maxFeePerGas'] = gas_price * 2
                full_tx_params['maxPriorityFeePerGas'] = await self.w3.eth.max_priority_fee

            signed_tx = self.account.sign_transaction(full_tx_params)
            tx_hash = await self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        except Exception as e:
            log.error("TRANSACTION_FAILURE", nonce=current_nonce, to=tx_params.get('to'), error=str(e))
            raise

        self.nonce_manager.bump()
        log.info("TRANSACTION_BROADCASTED", tx_hash=tx_hash.hex(), nonce=current_nonce, to=full_tx_params.get('to'))
        return tx_hash.hex()
