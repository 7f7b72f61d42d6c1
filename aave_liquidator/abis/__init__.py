from aave_liquidator.abis.aave import (
    AAVE_ORACLE_ABI,
    L2_ENCODER_ABI,
    POOL_ABI,
    POOL_DATA_PROVIDER_ABI,
    USER_ACCOUNT_DATA_TYPES,
)
from aave_liquidator.abis.erc20 import ERC20_ABI
from aave_liquidator.abis.liquidator import LIQUIDATOR_ABI
from aave_liquidator.abis.multicall import MULTICALL3_ABI

__all__ = [
    "AAVE_ORACLE_ABI",
    "ERC20_ABI",
    "L2_ENCODER_ABI",
    "LIQUIDATOR_ABI",
    "MULTICALL3_ABI",
    "POOL_ABI",
    "POOL_DATA_PROVIDER_ABI",
    "USER_ACCOUNT_DATA_TYPES",
]
