# /aave_liquidator/core/config_validator.py
# Run at startup to validate all configs and secrets.
from web3 import Web3

from aave_liquidator.core.config import settings, Settings
from aave_liquidator.core.deployments import Deployment, ZERO_ADDRESS
from aave_liquidator.core.logger import log


def collect_errors(config: Settings) -> list[str]:
    errors = []
    for var in ['EXECUTOR_PRIVATE_KEY', 'RPC_URL']:
        if not getattr(config, var, None):
            errors.append(f"Missing required configuration: {var}")

    try:
        Deployment(config.DEPLOYMENT)
    except ValueError:
        errors.append(f"Unknown deployment: {config.DEPLOYMENT}")

    if not Web3.is_address(config.LIQUIDATOR_ADDRESS):
        errors.append(f"Invalid LIQUIDATOR_ADDRESS: {config.LIQUIDATOR_ADDRESS}")
    elif not config.USE_AAVE_LIQUIDATOR and config.LIQUIDATOR_ADDRESS.lower() == ZERO_ADDRESS:
        errors.append("LIQUIDATOR_ADDRESS is required unless USE_AAVE_LIQUIDATOR is set")

    if not 0 <= config.BID_PERCENTAGE <= 100:
        errors.append(f"BID_PERCENTAGE must be within 0..100, got {config.BID_PERCENTAGE}")
    return errors


def validate(config: Settings = settings):
    log.info("--- CONFIG VALIDATION START ---")
    errors = collect_errors(config)
    if errors:
        for error in errors:
            log.critical(error)
        raise ValueError("System configuration is incomplete. Halting.")

    log.info("--- CONFIG VALIDATION PASSED ---")


if __name__ == "__main__":
    validate()
