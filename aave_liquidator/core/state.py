# /aave_liquidator/core/state.py
# Value types shared by the strategy components.
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from web3 import Web3


def _checksum(address: str) -> str:
    return Web3.to_checksum_address(address)


class Borrower(BaseModel):
    """
    A pool user reconstructed from Borrow/Supply events.

    collateral and debt behave as insertion-ordered sets: they only ever
    grow, and adding an asset that is already present is a no-op. Membership
    means "possibly active"; actual exposure is read live at evaluation time.
    """
    address: str
    collateral: List[str] = Field(default_factory=list)
    debt: List[str] = Field(default_factory=list)

    @field_validator("address")
    @classmethod
    def _checksum_address(cls, v: str) -> str:
        return _checksum(v)

    @field_validator("collateral", "debt")
    @classmethod
    def _dedupe_assets(cls, v: List[str]) -> List[str]:
        return list(dict.fromkeys(_checksum(a) for a in v))

    def add_collateral(self, asset: str) -> bool:
        return self._add(self.collateral, asset)

    def add_debt(self, asset: str) -> bool:
        return self._add(self.debt, asset)

    @staticmethod
    def _add(assets: List[str], asset: str) -> bool:
        asset = _checksum(asset)
        if asset in assets:
            return False
        assets.append(asset)
        return True


class StateCache(BaseModel):
    """Persisted checkpoint: the last fully synced block and every known borrower."""
    last_block_number: int = Field(ge=0, lt=2**64)
    borrowers: Dict[str, Borrower] = Field(default_factory=dict)

    @field_validator("borrowers")
    @classmethod
    def _key_by_address(cls, v: Dict[str, Borrower]) -> Dict[str, Borrower]:
        return {b.address: b for b in v.values()}


class TokenConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str
    a_address: str
    decimals: int
    ltv: int
    liquidation_threshold: int
    liquidation_bonus: int
    reserve_factor: int
    protocol_fee: int
    symbol: str

    @property
    def unit(self) -> int:
        return 10**self.decimals


class LiquidationOpportunity(BaseModel):
    model_config = ConfigDict(frozen=True)

    borrower: str
    collateral: str
    debt: str
    debt_to_cover: int
    collateral_to_liquidate: int
    # Native currency scaled by PRICE_ONE (8 decimals); may be negative
    profit_eth: int
    # collateral value as a percentage of debt value (direct mode only)
    profit_factor: int = 0
    health_factor: int
    collateral_symbol: str = ""
    debt_symbol: str = ""


class GasBidInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    bid_percentage: int
    # Expected profit in wei
    total_profit: int


class SubmitTx(BaseModel):
    """Action handed from the strategy to the transaction submitter."""
    model_config = ConfigDict(frozen=True)

    tx: dict
    gas_bid_info: GasBidInfo | None = None


def fold_borrow_event(borrowers: Dict[str, Borrower], on_behalf_of: str, reserve: str) -> Borrower:
    """Records a Borrow event: reserve joins the user's debt set."""
    borrower = _get_or_create(borrowers, on_behalf_of)
    borrower.add_debt(reserve)
    return borrower


def fold_supply_event(borrowers: Dict[str, Borrower], on_behalf_of: str, reserve: str) -> Borrower:
    """Records a Supply event: reserve joins the user's collateral set."""
    borrower = _get_or_create(borrowers, on_behalf_of)
    borrower.add_collateral(reserve)
    return borrower


def _get_or_create(borrowers: Dict[str, Borrower], address: str) -> Borrower:
    address = _checksum(address)
    borrower = borrowers.get(address)
    if borrower is None:
        borrower = Borrower(address=address)
        borrowers[address] = borrower
    return borrower
