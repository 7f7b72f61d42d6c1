# /aave_liquidator/strategies/prices.py
from typing import Dict, Iterable

from web3 import Web3

from aave_liquidator.core.logger import get_logger

log = get_logger(__name__)

# Oracle prices carry 8 decimals
PRICE_ONE = 10**8


class MissingPriceError(LookupError):
    pass


def native_to_wei(value: int) -> int:
    """Re-scales an amount priced at PRICE_ONE per native unit into wei, truncating toward zero."""
    magnitude = abs(value) * 10**18 // PRICE_ONE
    return magnitude if value >= 0 else -magnitude


class PriceSnapshot:
    """
    Oracle prices for one tick. Never persisted.

    price_in_eth() re-denominates a quote-currency price in the wrapped
    native asset, which is its own numeraire at exactly PRICE_ONE.
    """
    def __init__(self, prices: Dict[str, int], native_asset: str):
        self.prices = {Web3.to_checksum_address(a): p for a, p in prices.items()}
        self.native_asset = Web3.to_checksum_address(native_asset)

    def price(self, asset: str) -> int:
        price = self.prices.get(Web3.to_checksum_address(asset))
        if not price:
            raise MissingPriceError(f"No price found for asset {asset}")
        return price

    def price_in_eth(self, asset: str) -> int:
        if Web3.to_checksum_address(asset) == self.native_asset:
            return PRICE_ONE
        return self.price(asset) * PRICE_ONE // self.price(self.native_asset)

    def __len__(self) -> int:
        return len(self.prices)


async def take_price_snapshot(adapter, assets: Iterable[str], native_asset: str) -> PriceSnapshot:
    """One Multicall3 batch of oracle prices for every asset."""
    assets = list(assets)
    prices = await adapter.get_asset_prices(assets)
    log.info("PRICE_SNAPSHOT_TAKEN", assets=len(assets))
    return PriceSnapshot(dict(zip(assets, prices)), native_asset)
