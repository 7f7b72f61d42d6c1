# /aave_liquidator/core/deployments.py
# Immutable per-network contract addresses for the supported Aave v3 deployments.
from enum import Enum

from pydantic import BaseModel, ConfigDict
from web3 import Web3

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
MULTICALL3_ADDRESS = Web3.to_checksum_address("0xcA11bde05977b3631167028862bE2a173976CA11")
# WETH predeploy on OP-stack chains
OP_STACK_WETH_ADDRESS = "0x4200000000000000000000000000000000000006"


class Deployment(str, Enum):
    AAVE = "AAVE"
    SEASHELL = "SEASHELL"
    AAVE_V3_SONIC = "AaveV3Sonic"
    AAVE_V3_CELO = "AaveV3Celo"
    AAVE_V3_ETHEREUM = "AaveV3Ethereum"
    AAVE_V3_OPTIMISM = "AaveV3Optimism"
    AAVE_V3_BNB = "AaveV3Bnb"
    AAVE_V3_ARBITRUM = "AaveV3Arbitrum"
    AAVE_V3_AVAX = "AaveV3Avax"
    AAVE_V3_POLYGON = "AaveV3Polygon"


class DeploymentConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    pool_address: str
    pool_data_provider: str
    oracle_address: str
    # Zero where the network has no L2Encoder
    l2_encoder: str
    creation_block: int
    weth_address: str

    @property
    def has_l2_encoder(self) -> bool:
        return int(self.l2_encoder, 16) != 0


def _config(pool, data_provider, oracle, l2_encoder, creation_block, weth) -> DeploymentConfig:
    return DeploymentConfig(
        pool_address=Web3.to_checksum_address(pool),
        pool_data_provider=Web3.to_checksum_address(data_provider),
        oracle_address=Web3.to_checksum_address(oracle),
        l2_encoder=Web3.to_checksum_address(l2_encoder),
        creation_block=creation_block,
        weth_address=Web3.to_checksum_address(weth),
    )


DEPLOYMENTS: dict[Deployment, DeploymentConfig] = {
    Deployment.AAVE: _config(
        "0xA238Dd80C259a72e81d7e4664a9801593F98d1c5",
        "0x2d8A3C5677189723C4cB8873CfC9C8976FDF38Ac",
        "0x2Cc0Fc26eD4563A5ce5e8bdcfe1A2878676Ae156",
        "0x39e97c588B2907Fb67F44fea256Ae3BA064207C5",
        2963358,
        OP_STACK_WETH_ADDRESS,
    ),
    Deployment.SEASHELL: _config(
        "0x8F44Fd754285aa6A2b8B9B97739B79746e0475a7",
        "0x2A0979257105834789bC6b9E1B00446DFbA8dFBa",
        "0xFDd4e83890BCcd1fbF9b10d71a5cc0a738753b01",
        "0xceceF475167f7BFD8995c0cbB577644b623cD7Cf",
        3318602,
        OP_STACK_WETH_ADDRESS,
    ),
    Deployment.AAVE_V3_SONIC: _config(
        "0x5362dBb1e601abF3a4c14c22ffEdA64042E5eAA3",
        "0x306c124fFba5f2Bc0BcAf40D249cf19D492440b9",
        "0xD63f7658C66B2934Bd234D79D06aEF5290734B30",
        ZERO_ADDRESS,
        7986580,
        "0x039e2fB66102314Ce7b64Ce5Ce3E5183bc94aD38",
    ),
    Deployment.AAVE_V3_CELO: _config(
        "0x3E59A31363E2ad014dcbc521c4a0d5757d9f3402",
        "0x33b7d355613110b4E842f5f7057Ccd36fb4cee28",
        "0x1e693D088ceFD1E95ba4c4a5F7EeA41a1Ec37e8b",
        ZERO_ADDRESS,
        30390066,
        "0x471EcE3750Da237f93B8E339c536989b8978a438",
    ),
    Deployment.AAVE_V3_ETHEREUM: _config(
        "0x87870Bca3F3fD6335C3F4ce8392D69350B4fA4E2",
        "0x497a1994c46d4f6C864904A9f1fac6328Cb7C8a6",
        "0x54586bE62E3c3580375aE3723C145253060Ca0C2",
        ZERO_ADDRESS,
        16291126,
        "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
    ),
    Deployment.AAVE_V3_OPTIMISM: _config(
        "0x794a61358D6845594F94dc1DB02A252b5b4814aD",
        "0x14496b405D62c24F91f04Cda1c69Dc526D56fDE5",
        "0xD81eb3728a631871a7eBBaD631b5f424909f0c77",
        "0x9abADECD08572e0eA5aF4d47A9C7984a5AA503dC",
        4365693,
        OP_STACK_WETH_ADDRESS,
    ),
    Deployment.AAVE_V3_BNB: _config(
        "0x6807dc923806fE8Fd134338EABCA509979a7e0cB",
        "0x1e26247502e90b4fab9D0d17e4775e90085D2A35",
        "0x39bc1bfDa2130d6Bb6DBEfd366939b4c7aa7C697",
        ZERO_ADDRESS,
        33571625,
        "0xbb4CdB9CBd36B01bD1cBaEBF2De08d9173bc095c",
    ),
    Deployment.AAVE_V3_ARBITRUM: _config(
        "0x794a61358D6845594F94dc1DB02A252b5b4814aD",
        "0x14496b405D62c24F91f04Cda1c69Dc526D56fDE5",
        "0xb56c2F0B653B2e0b10C9b928C8580Ac5Df02C7C7",
        "0x9abADECD08572e0eA5aF4d47A9C7984a5AA503dC",
        7742429,
        "0x82aF49447D8a07e3bd95BD0d56f35241523fBab1",
    ),
    Deployment.AAVE_V3_AVAX: _config(
        "0x794a61358D6845594F94dc1DB02A252b5b4814aD",
        "0x14496b405D62c24F91f04Cda1c69Dc526D56fDE5",
        "0xEBd36016B3eD09D4693Ed4251c67Bd858c3c7C9C",
        ZERO_ADDRESS,
        11970506,
        "0xB31f66AA3C1e785363F0875A1B74E27b85FD66c7",
    ),
    Deployment.AAVE_V3_POLYGON: _config(
        "0x794a61358D6845594F94dc1DB02A252b5b4814aD",
        "0x14496b405D62c24F91f04Cda1c69Dc526D56fDE5",
        "0xb023e699F5a33916Ea823A16485e259257cA8Bd1",
        ZERO_ADDRESS,
        25826028,
        "0x0d500B1d8E8eF31E21C99d1Db9A6444d3ADf1270",
    ),
}


def get_deployment_config(deployment: Deployment | str) -> DeploymentConfig:
    """Looks up a deployment by enum member or by its name (e.g. "AaveV3Arbitrum")."""
    return DEPLOYMENTS[Deployment(deployment)]
