import pytest

from aave_liquidator.core.logger import APPROVALS_SENT
from aave_liquidator.core.state import LiquidationOpportunity
from aave_liquidator.core.wad_ray_math import MAX_UINT256
from aave_liquidator.adapters.aave import EncoderNotDeployedError
from aave_liquidator.strategies.evaluator import LiquidationMode
from aave_liquidator.strategies.execution import ExecutionBuilder

from conftest import ALICE, DAI, EXECUTOR, LIQUIDATOR, USDC, WETH

OP = LiquidationOpportunity(
    borrower=ALICE, collateral=WETH, debt=USDC, debt_to_cover=500 * 10**6,
    collateral_to_liquidate=2625 * 10**14, profit_eth=1_250_000, health_factor=9 * 10**17,
)


@pytest.mark.asyncio
async def test_direct_liquidation_calls_the_pool(adapter, tx_manager):
    builder = ExecutionBuilder(adapter, LiquidationMode.DIRECT, 10, tx_manager)
    tx = await builder.build_liquidation(OP)
    assert tx["to"] == adapter.pool_address
    assert tx["data"] == ("liquidationCall", WETH, USDC, ALICE, 500 * 10**6, False)
    assert tx["chainId"] == 10


@pytest.mark.asyncio
async def test_helper_liquidation_uses_encoded_calldata(adapter, tx_manager):
    builder = ExecutionBuilder(adapter, LiquidationMode.HELPER, 10, tx_manager)
    tx = await builder.build_liquidation(OP)
    name, collateral, debt, fee, debt_to_cover, data0, data1 = tx["data"]
    assert tx["to"] == LIQUIDATOR
    assert (name, collateral, debt, fee, debt_to_cover) == ("liquidate", WETH, USDC, 500, 500 * 10**6)
    assert data0 == (500 * 10**6).to_bytes(32, "big")
    assert len(data1) == 32


@pytest.mark.asyncio
async def test_helper_liquidation_needs_an_encoder(adapter, tx_manager):
    adapter.has_encoder = False
    builder = ExecutionBuilder(adapter, LiquidationMode.HELPER, 10, tx_manager)
    with pytest.raises(EncoderNotDeployedError):
        await builder.build_liquidation(OP)


@pytest.mark.asyncio
async def test_direct_mode_approves_missing_allowances_from_the_executor(adapter, tx_manager):
    adapter.allowances[(USDC, EXECUTOR, adapter.pool_address)] = 1
    tx_manager.chain_nonce = 7
    before = APPROVALS_SENT._value.get()
    builder = ExecutionBuilder(adapter, LiquidationMode.DIRECT, 10, tx_manager)

    sent = await builder.ensure_allowances([WETH, USDC, DAI])

    assert sent == 2
    assert APPROVALS_SENT._value.get() == before + 2
    assert tx_manager.nonce_syncs == 1
    assert [tx["nonce"] for tx in tx_manager.sent_transactions] == [7, 8]
    assert [tx["to"] for tx in tx_manager.sent_transactions] == [WETH, DAI]
    assert tx_manager.sent_transactions[0]["data"] == ("approve", adapter.pool_address, MAX_UINT256)


@pytest.mark.asyncio
async def test_helper_mode_approves_through_the_liquidator(adapter, tx_manager):
    adapter.allowances[(WETH, LIQUIDATOR, adapter.pool_address)] = MAX_UINT256
    builder = ExecutionBuilder(adapter, LiquidationMode.HELPER, 10, tx_manager)

    await builder.ensure_allowances([WETH, USDC])

    assert [tx["data"] for tx in tx_manager.sent_transactions] == [("approvePool", USDC)]
    assert tx_manager.sent_transactions[0]["to"] == LIQUIDATOR


@pytest.mark.asyncio
async def test_failed_approval_aborts_the_pass(adapter, tx_manager):
    tx_manager.set_next_call_to_fail(after=1)
    builder = ExecutionBuilder(adapter, LiquidationMode.DIRECT, 10, tx_manager)

    with pytest.raises(ConnectionError):
        await builder.ensure_allowances([WETH, USDC, DAI])

    # First approval went out, the second failed, the third was never tried
    assert [tx["to"] for tx in tx_manager.sent_transactions] == [WETH]


@pytest.mark.asyncio
async def test_failed_allowance_read_aborts_the_pass(adapter, tx_manager):
    adapter.failures["allowance"] = ConnectionError("rpc down")
    builder = ExecutionBuilder(adapter, LiquidationMode.DIRECT, 10, tx_manager)
    with pytest.raises(ConnectionError):
        await builder.ensure_allowances([WETH])
    assert tx_manager.sent_transactions == []
