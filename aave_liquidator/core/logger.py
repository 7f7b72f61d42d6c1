# /aave_liquidator/core/logger.py
import logging
import structlog
from structlog.contextvars import bind_contextvars
import sentry_sdk
from prometheus_client import Counter, Gauge

from aave_liquidator.core.config import settings

# --- Prometheus Metrics ---
CYCLES_COMPLETED = Counter("liquidator_cycles_completed_total", "Ticks that ran to completion")
CYCLES_ABORTED = Counter("liquidator_cycles_aborted_total", "Ticks aborted by an error", ["stage"])
OPPORTUNITIES_REJECTED = Counter("liquidator_opportunities_rejected_total", "Borrowers skipped during evaluation", ["reason"])
APPROVALS_SENT = Counter("liquidator_approvals_sent_total", "Token approval transactions broadcast")
LIQUIDATIONS_SUBMITTED = Counter("liquidator_liquidations_submitted_total", "Liquidation transactions handed to the submitter")
LAST_SYNCED_BLOCK = Gauge("liquidator_last_synced_block", "Block number of the last persisted state cache")
KNOWN_BORROWERS = Gauge("liquidator_known_borrowers", "Borrowers reconstructed from pool events")


def configure_logging():
    if settings.SENTRY_DSN:
        sentry_sdk.init(dsn=settings.SENTRY_DSN.get_secret_value(), traces_sample_rate=1.0)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.format_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(default=str),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(settings.LOG_LEVEL.upper())),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str):
    return structlog.get_logger(name)


def set_cycle_counter(counter: int):
    bind_contextvars(cycle_counter=counter)


configure_logging()
log = get_logger("Liquidator.System")
