# /aave_liquidator/core/config.py
import structlog
from pydantic_settings import BaseSettings
from pydantic import SecretStr


class Settings(BaseSettings):
    # Executor
    EXECUTOR_PRIVATE_KEY: SecretStr | None = None

    # RPC endpoint (HTTP)
    RPC_URL: SecretStr | None = None

    # Chain configuration. 0 means "ask the node" at startup.
    chain_id: int = 0

    # Strategy
    DEPLOYMENT: str = "AAVE"
    LIQUIDATOR_ADDRESS: str = "0x0000000000000000000000000000000000000000"
    # Liquidate straight through Pool.liquidationCall instead of the helper contract
    USE_AAVE_LIQUIDATOR: bool = False
    # Percentage of profit to pay in gas
    BID_PERCENTAGE: int = 50

    # Operational Settings
    LOG_LEVEL: str = "INFO"
    SENTRY_DSN: SecretStr | None = None
    HEALTH_PORT: int = 8080
    POLL_INTERVAL_SECS: int = 60 * 5
    STATE_CACHE_FILE: str = "borrowers.json"
    # Wipe the borrower cache on startup and re-derive from the creation block
    RESET_STATE_CACHE: bool = False

    @property
    def rpc_url(self) -> str | None:
        return self.RPC_URL.get_secret_value() if self.RPC_URL else None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


try:
    settings = Settings()
except Exception as e:
    # The logger module depends on settings, so use structlog's defaults here
    structlog.get_logger("Liquidator.Config").critical("FAILED_TO_LOAD_SETTINGS", error=str(e))
    raise SystemExit(1)
