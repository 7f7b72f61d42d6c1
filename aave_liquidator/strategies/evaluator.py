# /aave_liquidator/strategies/evaluator.py
"""
Per-borrower liquidation sizing and profit estimation.

Sizing mirrors the pool's own liquidation logic: a close factor bounds the
repayable debt, the liquidation bonus scales the seized collateral, and the
seizure is capped by the borrower's aToken balance. Every multiplication is
bounded to uint256 so a result here is one the contract could produce.
"""
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from web3.exceptions import ContractLogicError

from aave_liquidator.core.logger import get_logger, OPPORTUNITIES_REJECTED
from aave_liquidator.core.state import Borrower, LiquidationOpportunity
from aave_liquidator.core.wad_ray_math import (
    MathDivisionByZeroError,
    WadRayMathError,
    checked_mul,
    percent_div,
    percent_mul,
)
from aave_liquidator.adapters.aave import EncoderNotDeployedError
from aave_liquidator.strategies.prices import PRICE_ONE, MissingPriceError, PriceSnapshot
from aave_liquidator.strategies.reserves import MissingTokenConfigError, ReserveConfigCache

log = get_logger(__name__)

# Above a 0.95 health factor only half the debt may be repaid in one call
LIQUIDATION_CLOSE_FACTOR_THRESHOLD = 950_000_000_000_000_000
DEFAULT_LIQUIDATION_CLOSE_FACTOR = 5000
MAX_LIQUIDATION_CLOSE_FACTOR = 10000


class LiquidationMode(str, Enum):
    # Pool.liquidationCall from the executor, repaying with its own balance
    DIRECT = "direct"
    # Flash-loan liquidator contract, calldata packed by the L2 encoder
    HELPER = "helper"


class OpportunityRejected(Exception):
    pass


PairPolicy = Callable[[Borrower], Tuple[str, str]]


def first_by_insertion_order(borrower: Borrower) -> Tuple[str, str]:
    """Picks the first collateral and first debt asset the borrower was seen with."""
    if not borrower.collateral:
        raise OpportunityRejected("No collateral found")
    if not borrower.debt:
        raise OpportunityRejected("No debt found")
    return borrower.collateral[0], borrower.debt[0]


def close_factor_for(health_factor: int) -> int:
    if health_factor > LIQUIDATION_CLOSE_FACTOR_THRESHOLD:
        return DEFAULT_LIQUIDATION_CLOSE_FACTOR
    return MAX_LIQUIDATION_CLOSE_FACTOR


def compute_debt_to_cover(total_debt: int, close_factor: int) -> int:
    return checked_mul(total_debt, close_factor) // MAX_LIQUIDATION_CLOSE_FACTOR


def _div(numerator: int, denominator: int, what: str) -> int:
    if denominator == 0:
        raise MathDivisionByZeroError(f"{what}: division by zero")
    return numerator // denominator


def compute_base_collateral(debt_price: int, debt_to_cover: int, debt_unit: int, collateral_price: int, collateral_unit: int) -> int:
    """Collateral worth exactly debt_to_cover, before the liquidation bonus."""
    return _div(
        checked_mul(debt_price, debt_to_cover, collateral_unit),
        checked_mul(collateral_price, debt_unit),
        "baseCollateral",
    )


def size_liquidation(
    total_debt: int,
    health_factor: int,
    debt_price: int,
    debt_unit: int,
    collateral_price: int,
    collateral_unit: int,
    liquidation_bonus: int,
    collateral_balance: int,
) -> Tuple[int, int]:
    """Returns (debt_to_cover, collateral_to_liquidate) for quote-currency prices."""
    debt_to_cover = compute_debt_to_cover(total_debt, close_factor_for(health_factor))
    base_collateral = compute_base_collateral(debt_price, debt_to_cover, debt_unit, collateral_price, collateral_unit)
    collateral_to_liquidate = percent_mul(base_collateral, liquidation_bonus)

    if collateral_to_liquidate > collateral_balance:
        collateral_to_liquidate = collateral_balance
        debt_to_cover = _div(
            checked_mul(collateral_price, collateral_to_liquidate, debt_unit),
            percent_div(checked_mul(debt_price, collateral_unit), liquidation_bonus),
            "debtToCover",
        )
    return debt_to_cover, collateral_to_liquidate


def direct_profit(
    collateral_price_eth: int,
    collateral_to_liquidate: int,
    collateral_unit: int,
    debt_price_eth: int,
    debt_to_cover: int,
    debt_unit: int,
) -> Tuple[int, int]:
    """(profit, profit_factor): seized collateral minus repaid debt, both in native wei."""
    collateral_value = checked_mul(collateral_price_eth, collateral_to_liquidate) // collateral_unit
    debt_value = checked_mul(debt_price_eth, debt_to_cover) // debt_unit
    profit_factor = collateral_value * 100 // debt_value if debt_value else 0
    return collateral_value - debt_value, profit_factor


def helper_profit(gain: int, collateral_price_eth: int) -> int:
    """Converts the helper's signed gain into native units, truncating toward zero."""
    magnitude = abs(gain) * collateral_price_eth // PRICE_ONE
    return magnitude if gain >= 0 else -magnitude


def select_best(opportunities: Iterable[LiquidationOpportunity]) -> Optional[LiquidationOpportunity]:
    """Highest profit wins, first one on ties; nothing unless the winner is strictly profitable."""
    best: Optional[LiquidationOpportunity] = None
    for op in opportunities:
        if best is None or op.profit_eth > best.profit_eth:
            best = op
    if best is None or best.profit_eth <= 0:
        return None
    return best


class OpportunityEvaluator:
    # Expected per-borrower failures; anything else aborts the tick
    SKIPPABLE_ERRORS = (
        OpportunityRejected,
        WadRayMathError,
        MissingPriceError,
        MissingTokenConfigError,
        ContractLogicError,
        EncoderNotDeployedError,
    )

    def __init__(self, adapter, reserves: ReserveConfigCache, mode: LiquidationMode, pair_policy: PairPolicy = first_by_insertion_order):
        self.adapter = adapter
        self.reserves = reserves
        self.mode = LiquidationMode(mode)
        self.pair_policy = pair_policy

    async def evaluate(self, borrower: Borrower, health_factor: int, prices: PriceSnapshot) -> LiquidationOpportunity:
        collateral, debt = self.pair_policy(borrower)
        return await self.evaluate_pair(borrower, collateral, debt, health_factor, prices)

    async def evaluate_pair(
        self,
        borrower: Borrower,
        collateral: str,
        debt: str,
        health_factor: int,
        prices: PriceSnapshot,
    ) -> LiquidationOpportunity:
        if collateral == debt:
            raise OpportunityRejected("Collateral and debt are the same asset")

        collateral_price = prices.price(collateral)
        debt_price = prices.price(debt)
        collateral_config = self.reserves.get(collateral)
        debt_config = self.reserves.get(debt)

        _, stable_debt, variable_debt, *_ = await self.adapter.get_user_reserve_data(debt, borrower.address)
        collateral_balance = await self.adapter.balance_of(collateral_config.a_address, borrower.address)

        debt_to_cover, collateral_to_liquidate = size_liquidation(
            total_debt=stable_debt + variable_debt,
            health_factor=health_factor,
            debt_price=debt_price,
            debt_unit=debt_config.unit,
            collateral_price=collateral_price,
            collateral_unit=collateral_config.unit,
            liquidation_bonus=collateral_config.liquidation_bonus,
            collateral_balance=collateral_balance,
        )
        if debt_to_cover == 0:
            raise OpportunityRejected("No debt to cover")

        collateral_price_eth = prices.price_in_eth(collateral)
        profit_factor = 0
        if self.mode is LiquidationMode.DIRECT:
            profit_eth, profit_factor = direct_profit(
                collateral_price_eth,
                collateral_to_liquidate,
                collateral_config.unit,
                prices.price_in_eth(debt),
                debt_to_cover,
                debt_config.unit,
            )
        else:
            data0, data1 = await self.adapter.encode_liquidation_call(collateral, debt, borrower.address, debt_to_cover)
            gain = await self.adapter.simulate_liquidate(collateral, debt, debt_to_cover, data0, data1)
            profit_eth = helper_profit(gain, collateral_price_eth)

        op = LiquidationOpportunity(
            borrower=borrower.address,
            collateral=collateral,
            debt=debt,
            debt_to_cover=debt_to_cover,
            collateral_to_liquidate=collateral_to_liquidate,
            profit_eth=profit_eth,
            profit_factor=profit_factor,
            health_factor=health_factor,
            collateral_symbol=collateral_config.symbol,
            debt_symbol=debt_config.symbol,
        )
        log.info(
            "OPPORTUNITY_FOUND",
            borrower=op.borrower,
            collateral=f"{collateral}({op.collateral_symbol})",
            debt=f"{debt}({op.debt_symbol})",
            collateral_to_liquidate=collateral_to_liquidate,
            debt_to_cover=debt_to_cover,
            profit_eth=profit_eth,
            profit_factor=profit_factor,
        )
        return op

    async def evaluate_all(
        self,
        candidates: Iterable[Tuple[str, int]],
        borrowers: Dict[str, Borrower],
        prices: PriceSnapshot,
    ) -> List[LiquidationOpportunity]:
        """Evaluates every candidate, skipping (and reporting) those that cannot be liquidated."""
        opportunities = []
        for address, health_factor in candidates:
            borrower = borrowers.get(address)
            pair = None
            try:
                if borrower is None:
                    raise OpportunityRejected("Borrower not found")
                pair = self.pair_policy(borrower)
                opportunities.append(await self.evaluate_pair(borrower, *pair, health_factor, prices))
            except self.SKIPPABLE_ERRORS as e:
                OPPORTUNITIES_REJECTED.labels(type(e).__name__).inc()
                log.info(
                    "OPPORTUNITY_REJECTED",
                    borrower=address,
                    health_factor=health_factor,
                    collateral=self._describe(pair[0]) if pair else None,
                    debt=self._describe(pair[1]) if pair else None,
                    reason=str(e),
                    error_type=type(e).__name__,
                )
        return opportunities

    def _describe(self, asset: str) -> str:
        return f"{asset}({self.reserves.symbol(asset)})"
