import asyncio
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from photobox.core.config import settings
from photobox.core.minio_client import get_object_store
from photobox.dependencies import link_registry
from photobox.monitoring.setup import setup_monitoring
from photobox.routes import (
    download_router,
    health_router,
    preview_router,
    qr_router,
    upload_router,
)
from photobox.tasks.sweep import start_sweep_task

logger = logging.getLogger("photobox")


@asynccontextmanager
async def lifespan(app: FastAPI):
    missing = settings.missing_required()
    if missing:
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")

    try:
        await run_in_threadpool(get_object_store().ensure_bucket)
        logger.info("MinIO initialized bucket=%s", settings.MINIO_BUCKET)
    except Exception as e:
        logger.error(f"MinIO initialization failed: {e}")
        raise

    sweep_task = asyncio.create_task(start_sweep_task(link_registry))
    logger.info("Background sweep task started")

    yield

    sweep_task.cancel()
    try:
        await sweep_task
    except asyncio.CancelledError:
        logger.info("Sweep task cancelled")
    logger.info("Application shutdown complete")


app = FastAPI(
    title="Photobox",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    expose_headers=["Content-Disposition", "Content-Length"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    )
    return JSONResponse(status_code=422, content={"error": f"Invalid request: {problems}"})


app.include_router(upload_router, prefix="/api")
app.include_router(download_router, prefix="/api")
app.include_router(qr_router, prefix="/api")
app.include_router(health_router, prefix="/api")
app.include_router(preview_router)

setup_monitoring(app)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=settings.PORT,
        log_level="info",
        timeout_keep_alive=60,
        limit_concurrency=100
    )
