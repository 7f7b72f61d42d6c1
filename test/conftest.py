# /test/conftest.py
# Shared fixtures: an Optimism-shaped deployment and a small two-reserve market
# scripted into the mock adapter.
from types import SimpleNamespace

import pytest
from web3 import Web3

from aave_liquidator.adapters.mock import MockAaveAdapter, MockTransactionManager
from aave_liquidator.core.deployments import Deployment, get_deployment_config


def addr(n: int) -> str:
    return Web3.to_checksum_address(f"0x{n:040x}")


DEPLOYMENT = get_deployment_config(Deployment.AAVE_V3_OPTIMISM)

WETH = DEPLOYMENT.weth_address
USDC = addr(0xA0)
DAI = addr(0xB0)
A_WETH = addr(0xA1)
A_USDC = addr(0xA2)
A_DAI = addr(0xA3)

EXECUTOR = addr(0xE0E0)
LIQUIDATOR = addr(0xBEEF)
ALICE = addr(0x1001)
BOB = addr(0x1002)
CAROL = addr(0x1003)


def reserve_config(decimals: int, bonus: int) -> tuple:
    # decimals, ltv, threshold, bonus, reserve factor, collateral, borrowing, stable, active, frozen
    return (decimals, 8000, 8250, bonus, 1000, True, True, False, True, False)


@pytest.fixture
def deployment():
    return DEPLOYMENT


@pytest.fixture
def tx_manager():
    return MockTransactionManager(from_address=EXECUTOR)


@pytest.fixture
def adapter(deployment):
    return MockAaveAdapter(deployment, liquidator_address=LIQUIDATOR, executor_address=EXECUTOR)


@pytest.fixture
def market(adapter):
    """WETH at 2000 and USDC at 1 (8-decimal quote), DAI listed but unpriced."""
    adapter.reserves = [("WETH", WETH, A_WETH), ("USDC", USDC, A_USDC), ("DAI", DAI, A_DAI)]
    adapter.reserve_configs = {
        WETH: reserve_config(18, 10500),
        USDC: reserve_config(6, 10450),
        DAI: reserve_config(18, 10500),
    }
    adapter.protocol_fees = {WETH: 1000, USDC: 1000, DAI: 1000}
    adapter.prices = {WETH: 2000 * 10**8, USDC: 10**8}
    return SimpleNamespace(adapter=adapter, weth=WETH, usdc=USDC, dai=DAI, a_weth=A_WETH, a_usdc=A_USDC, a_dai=A_DAI)
