import logging
import time

from fastapi import Request
from fastapi.responses import JSONResponse
from prometheus_client import Counter, Gauge, Histogram
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

uploads_total = Counter("photobox_uploads_total", "Uploads stored and registered")
upload_failures = Counter("photobox_upload_failures_total", "Rejected or failed uploads", ["reason"])
link_lookups = Counter("photobox_link_lookups_total", "Link lookups by endpoint and outcome", ["endpoint", "outcome"])
active_links = Gauge("photobox_active_links", "Entries currently held by the link registry")
sweep_runs = Counter("photobox_sweep_runs_total", "Registry sweep runs")
sweep_removed = Counter("photobox_sweep_removed_total", "Expired links removed by the sweep")
sweep_duration = Histogram("photobox_sweep_duration_seconds", "Duration of a sweep run in seconds")


def report_sweep(removed: int, remaining: int, duration: float) -> None:
    """Record sweep metrics to Prometheus."""
    sweep_runs.inc()
    if removed:
        sweep_removed.inc(removed)
    active_links.set(remaining)
    sweep_duration.observe(duration)


def report_lookup(endpoint: str, outcome: str) -> None:
    link_lookups.labels(endpoint=endpoint, outcome=outcome).inc()


def setup_monitoring(app: ASGIApp):
    Instrumentator().instrument(app).expose(app, endpoint="/api/metrics", include_in_schema=False)

    @app.middleware("http")
    async def monitor_requests(request: Request, call_next):
        start_time = time.time()
        response = None
        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception("Unhandled error: %s %s -> %s", request.method, request.url.path, e)
            response = JSONResponse(status_code=500, content={"error": "Internal Server Error"})
        finally:
            process_time = time.time() - start_time
            logger.info("method=%s path=%s status=%s duration=%.4fs",
                        request.method, request.url.path,
                        getattr(response, "status_code", "?"), process_time)
        return response
