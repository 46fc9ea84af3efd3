import asyncio
import logging
import time

from photobox.core.config import settings
from photobox.monitoring.setup import report_sweep
from photobox.services.link_registry import LinkRegistry

logger = logging.getLogger(__name__)

INTERVAL_SECS = settings.SWEEP_INTERVAL_SECONDS

SWEPT_LINKS = 0


def sweep_once(registry: LinkRegistry) -> int:
    global SWEPT_LINKS
    started = time.perf_counter()
    removed = registry.sweep()
    remaining = len(registry)
    duration = time.perf_counter() - started

    SWEPT_LINKS += removed
    report_sweep(removed, remaining, duration)
    logger.info("sweep_summary removed=%s remaining=%s duration=%.3fs total_removed=%s",
                removed, remaining, duration, SWEPT_LINKS)
    return removed


async def sweep_expired_links(registry: LinkRegistry, interval: float = INTERVAL_SECS):
    logger.info("Sweep task started: interval=%s", interval)

    while True:
        try:
            sweep_once(registry)
            await asyncio.sleep(interval)
        except asyncio.CancelledError:
            logger.info("Sweep task cancelled by shutdown")
            raise
        except Exception as e:
            logger.exception("Sweep loop error: %s", e)
            await asyncio.sleep(min(60, interval))


async def start_sweep_task(registry: LinkRegistry):
    return await sweep_expired_links(registry)
