# /main.py
# Entry point: validates configuration, wires the Aave adapter and the
# liquidation strategy, and runs the agent next to a health endpoint.
import asyncio
from aiohttp import web

from aave_liquidator.core.config import settings
from aave_liquidator.core.config_validator import validate as validate_config
from aave_liquidator.core.logger import configure_logging, get_logger
from aave_liquidator.core.deployments import get_deployment_config
from aave_liquidator.core.provider import Web3Provider
from aave_liquidator.core.state_cache import reset_state_cache
from aave_liquidator.core.tx import TransactionManager
from aave_liquidator.core.agent import Agent
from aave_liquidator.adapters.aave import AaveAdapter
from aave_liquidator.strategies.evaluator import LiquidationMode
from aave_liquidator.strategies.liquidation import LiquidationStrategy


def make_healthz(strategy: LiquidationStrategy):
    async def healthz(request):
        """Provides a JSON health status for the service."""
        return web.json_response({
            "status": "ok",
            "last_synced_block": strategy.last_block_number,
            "known_borrowers": len(strategy.borrowers),
        })
    return healthz


async def main():
    configure_logging()
    log = get_logger("Liquidator.System")
    validate_config()
    log.info("LIQUIDATOR_STARTING", deployment=settings.DEPLOYMENT)

    if settings.RESET_STATE_CACHE:
        reset_state_cache(settings.STATE_CACHE_FILE)

    provider = Web3Provider()
    chain_id = await provider.initialize()
    tx_manager = TransactionManager(provider.w3, provider.account, chain_id)

    deployment = get_deployment_config(settings.DEPLOYMENT)
    adapter = AaveAdapter(provider.w3, deployment, settings.LIQUIDATOR_ADDRESS, provider.address)
    mode = LiquidationMode.DIRECT if settings.USE_AAVE_LIQUIDATOR else LiquidationMode.HELPER
    strategy = LiquidationStrategy(
        adapter=adapter,
        deployment=deployment,
        tx_manager=tx_manager,
        mode=mode,
        chain_id=chain_id,
        bid_percentage=settings.BID_PERCENTAGE,
        cache_path=settings.STATE_CACHE_FILE,
    )
    agent = Agent(strategy=strategy, tx_manager=tx_manager)

    # --- Start Healthcheck Server ---
    app = web.Application()
    app.add_routes([web.get("/healthz", make_healthz(strategy))])
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "0.0.0.0", settings.HEALTH_PORT)
    await site.start()
    log.info("HEALTHCHECK_SERVER_STARTED", port=settings.HEALTH_PORT)

    try:
        await agent.run_loop()
    finally:
        await runner.cleanup()
        log.warning("SYSTEM_SHUTDOWN_COMPLETE")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
