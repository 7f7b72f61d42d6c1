# /aave_liquidator/core/state_cache.py
# JSON persistence for the borrower map and its sync checkpoint.
import os
from pathlib import Path

import aiofiles
from pydantic import ValidationError

from aave_liquidator.core.state import StateCache
from aave_liquidator.core.logger import get_logger, LAST_SYNCED_BLOCK

log = get_logger(__name__)


class StateCacheCorruptedError(Exception):
    """The cache file exists but cannot be parsed. Never silently reset."""


async def load_state_cache(path: str | Path) -> StateCache | None:
    """Returns the persisted cache, or None when no file exists yet."""
    path = Path(path)
    try:
        async with aiofiles.open(path, "r") as f:
            data = await f.read()
    except FileNotFoundError:
        log.info("STATE_CACHE_NOT_FOUND", path=str(path))
        return None
    except UnicodeDecodeError as e:
        log.error("STATE_CACHE_CORRUPTED", path=str(path), error=str(e))
        raise StateCacheCorruptedError(f"State cache {path} is not valid UTF-8: {e}") from e

    try:
        cache = StateCache.model_validate_json(data)
    except ValidationError as e:
        log.error("STATE_CACHE_CORRUPTED", path=str(path), error=str(e))
        raise StateCacheCorruptedError(f"Failed to parse state cache {path}: {e}") from e

    log.info("STATE_CACHE_LOADED", path=str(path), last_block_number=cache.last_block_number, borrowers=len(cache.borrowers))
    return cache


async def save_state_cache(path: str | Path, cache: StateCache) -> None:
    """Overwrites the cache file wholesale. Not crash-atomic."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    async with aiofiles.open(path, "w") as f:
        await f.write(cache.model_dump_json())
    LAST_SYNCED_BLOCK.set(cache.last_block_number)
    log.debug("STATE_CACHE_WRITTEN", path=str(path), last_block_number=cache.last_block_number)


def reset_state_cache(path: str | Path) -> bool:
    """Deletes the cache so the next load starts again from the creation block."""
    try:
        os.remove(path)
    except FileNotFoundError:
        return False
    log.warning("STATE_CACHE_RESET", path=str(path))
    return True
