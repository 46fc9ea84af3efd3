from __future__ import annotations

import logging
import posixpath
import urllib.parse
from typing import AsyncIterator

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool

from photobox.core.minio_client import ObjectStore, StorageError
from photobox.dependencies import get_object_store, get_registry
from photobox.monitoring.setup import active_links, report_lookup
from photobox.services.link_registry import LinkEntry, LinkExpired, LinkNotFound, LinkRegistry

logger = logging.getLogger("photobox")

router = APIRouter(tags=["Download"])


def _rfc5987_filename(value: str) -> str:
    quoted = urllib.parse.quote(value, safe="")
    return f'filename="{value.encode("latin-1", "ignore").decode("latin-1")}"; filename*=UTF-8\'\'{quoted}'


async def _aiter_object(obj) -> AsyncIterator[bytes]:
    try:
        while True:
            chunk = await run_in_threadpool(obj.read, 1024 * 1024)  # 1 MiB
            if not chunk:
                break
            yield chunk
    finally:
        await run_in_threadpool(obj.close)
        await run_in_threadpool(obj.release_conn)


def resolve_link(registry: LinkRegistry, file_id: str, endpoint: str) -> LinkEntry:
    """Registry lookup translated to 404 (unknown) / 410 (expired)."""
    try:
        entry = registry.lookup(file_id)
    except LinkNotFound:
        report_lookup(endpoint, "not_found")
        raise HTTPException(status_code=404, detail="File not found")
    except LinkExpired:
        report_lookup(endpoint, "expired")
        active_links.set(len(registry))
        logger.info("Expired link requested file_id=%s", file_id)
        raise HTTPException(status_code=410, detail="File has expired")
    report_lookup(endpoint, "ok")
    return entry


@router.get("/file/{file_id}")
async def download_file(
    file_id: str,
    registry: LinkRegistry = Depends(get_registry),
    store: ObjectStore = Depends(get_object_store),
):
    entry = resolve_link(registry, file_id, "file")

    try:
        obj = await run_in_threadpool(store.get, entry.storage_key)
    except StorageError as e:
        # registry says live but the store has nothing usable; not repaired here
        logger.error("Download failed file_id=%s key=%s: %s", file_id, entry.storage_key, e)
        raise HTTPException(status_code=500, detail="File download failed")

    filename = posixpath.basename(entry.storage_key)
    headers = {"Content-Disposition": f"attachment; {_rfc5987_filename(filename)}"}

    return StreamingResponse(
        _aiter_object(obj),
        media_type="application/octet-stream",
        headers=headers,
    )
