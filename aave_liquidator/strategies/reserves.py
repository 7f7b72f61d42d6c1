# /aave_liquidator/strategies/reserves.py
from typing import Dict

from web3 import Web3

from aave_liquidator.core.logger import get_logger
from aave_liquidator.core.state import TokenConfig

log = get_logger(__name__)


class MissingTokenConfigError(LookupError):
    pass


class ReserveConfigCache:
    """
    Static per-reserve parameters, keyed by asset address.

    Rebuilt from scratch on every refresh. A reserve whose configuration or
    protocol fee cannot be read is left out of that refresh.
    """
    def __init__(self, adapter):
        self.adapter = adapter
        self.tokens: Dict[str, TokenConfig] = {}

    async def refresh(self) -> Dict[str, TokenConfig]:
        all_tokens = await self.adapter.get_all_reserves_tokens()
        all_a_tokens = await self.adapter.get_all_a_tokens()
        log.debug("RESERVES_LISTED", count=len(all_tokens))

        tokens: Dict[str, TokenConfig] = {}
        for (symbol, token), (_, a_token) in zip(all_tokens, all_a_tokens):
            token = Web3.to_checksum_address(token)
            try:
                decimals, ltv, threshold, bonus, reserve_factor, *_ = await self.adapter.get_reserve_configuration_data(token)
                protocol_fee = await self.adapter.get_liquidation_protocol_fee(token)
            except Exception as e:
                log.error("RESERVE_CONFIG_FETCH_FAILED", token=token, symbol=symbol, error=str(e))
                continue
            tokens[token] = TokenConfig(
                address=token,
                a_address=Web3.to_checksum_address(a_token),
                decimals=decimals,
                ltv=ltv,
                liquidation_threshold=threshold,
                liquidation_bonus=bonus,
                reserve_factor=reserve_factor,
                protocol_fee=protocol_fee,
                symbol=symbol,
            )

        self.tokens = tokens
        log.info("RESERVE_CONFIGS_REFRESHED", count=len(tokens), skipped=len(all_tokens) - len(tokens))
        return tokens

    def get(self, asset: str) -> TokenConfig:
        try:
            return self.tokens[Web3.to_checksum_address(asset)]
        except KeyError:
            raise MissingTokenConfigError(f"No token config for {asset}") from None

    def symbol(self, asset: str) -> str:
        config = self.tokens.get(Web3.to_checksum_address(asset))
        return config.symbol if config else ""

    def __len__(self) -> int:
        return len(self.tokens)
