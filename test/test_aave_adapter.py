# /test/test_aave_adapter.py
# Calldata encoding and Multicall3 decoding; no node is contacted.
import pytest
from eth_abi import encode
from web3 import AsyncWeb3, Web3

from aave_liquidator.adapters.aave import AaveAdapter, EncoderNotDeployedError
from aave_liquidator.core.deployments import Deployment, get_deployment_config
from aave_liquidator.core.wad_ray_math import MAX_UINT256

from conftest import ALICE, BOB, EXECUTOR, LIQUIDATOR, USDC, WETH


def selector(signature: str) -> str:
    return Web3.to_hex(Web3.keccak(text=signature)[:4])


def make_adapter(deployment=Deployment.AAVE_V3_OPTIMISM) -> AaveAdapter:
    w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider("http://127.0.0.1:1"))
    return AaveAdapter(w3, get_deployment_config(deployment), LIQUIDATOR, EXECUTOR)


def test_transaction_builders_encode_calldata():
    adapter = make_adapter()

    tx = adapter.liquidation_call_tx(WETH, USDC, ALICE, 10**6)
    assert tx["to"] == adapter.pool_address
    assert tx["value"] == 0
    assert tx["data"].startswith(selector("liquidationCall(address,address,address,uint256,bool)"))

    tx = adapter.liquidate_tx(WETH, USDC, 10**6, b"\x01" * 32, b"\x02" * 32)
    assert tx["to"] == LIQUIDATOR
    assert tx["data"].startswith(selector("liquidate(address,address,uint24,uint256,bytes32,bytes32)"))

    tx = adapter.approve_tx(USDC, adapter.pool_address, MAX_UINT256)
    assert tx["to"] == USDC
    assert tx["data"].startswith(selector("approve(address,uint256)"))
    assert tx["data"].endswith("f" * 64)

    tx = adapter.approve_pool_tx(USDC)
    assert tx["data"].startswith(selector("approvePool(address)"))


@pytest.mark.asyncio
async def test_missing_encoder_is_reported():
    adapter = make_adapter(Deployment.AAVE_V3_ETHEREUM)
    assert adapter.encoder is None
    with pytest.raises(EncoderNotDeployedError):
        await adapter.encode_liquidation_call(WETH, USDC, ALICE, 1)


@pytest.mark.asyncio
async def test_health_factors_are_decoded_in_order():
    adapter = make_adapter()
    batches = []

    async def fake_aggregate(calls):
        batches.append(calls)
        return [encode(["uint256"] * 6, [1, 2, 3, 4, 5, hf]) for hf in (7 * 10**17, 2 * 10**18)]

    adapter._aggregate = fake_aggregate
    assert await adapter.get_health_factors([ALICE, BOB]) == [7 * 10**17, 2 * 10**18]

    (calls,) = batches
    assert [target for target, _ in calls] == [adapter.pool_address] * 2
    assert calls[0][1].startswith(selector("getUserAccountData(address)"))


@pytest.mark.asyncio
async def test_prices_are_decoded_in_order():
    adapter = make_adapter()

    async def fake_aggregate(calls):
        assert [target for target, _ in calls] == [adapter.oracle.address] * 2
        return [encode(["uint256"], [p]) for p in (2000 * 10**8, 10**8)]

    adapter._aggregate = fake_aggregate
    assert await adapter.get_asset_prices([WETH, USDC]) == [2000 * 10**8, 10**8]
