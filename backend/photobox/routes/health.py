from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from photobox.core.minio_client import ObjectStore
from photobox.dependencies import get_object_store, get_registry
from photobox.services.link_registry import LinkRegistry, utcnow

router = APIRouter(tags=["Health"])


@router.get("/hello")
async def hello():
    return {"status": "OK", "message": "Hello, World!"}


@router.get("/health")
async def health_check(
    registry: LinkRegistry = Depends(get_registry),
    store: ObjectStore = Depends(get_object_store),
):
    try:
        await run_in_threadpool(store.ping)
        storage_status = "ok"
    except Exception as e:
        storage_status = f"error: {str(e)}"

    return {
        "status": "OK",
        "timestamp": utcnow().isoformat(),
        "storage": storage_status,
        "activeLinks": len(registry),
    }
