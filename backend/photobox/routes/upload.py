from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from starlette.datastructures import UploadFile
from starlette.concurrency import run_in_threadpool

from photobox.core.config import settings
from photobox.core.minio_client import ObjectStore, StorageError
from photobox.dependencies import get_object_store, get_registry, get_uploaded_file
from photobox.monitoring.setup import active_links, upload_failures, uploads_total
from photobox.schemas.share import UploadResponse
from photobox.services.link_registry import LinkRegistry
from photobox.services.qr import QRCodeError, make_qr_data_uri
from photobox.services.uploads import (
    UploadTooLarge,
    build_storage_key,
    discard,
    new_file_id,
    stage_upload,
)
from photobox.utils.urls import download_url, preview_url

logger = logging.getLogger("photobox")

router = APIRouter(tags=["Upload"])


@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    request: Request,
    file: UploadFile | None = Depends(get_uploaded_file),
    registry: LinkRegistry = Depends(get_registry),
    store: ObjectStore = Depends(get_object_store),
):
    if file is None or not file.filename:
        upload_failures.labels(reason="missing_file").inc()
        raise HTTPException(status_code=400, detail="No file provided")

    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if settings.ALLOWED_CONTENT_TYPES and content_type not in settings.ALLOWED_CONTENT_TYPES:
        upload_failures.labels(reason="unsupported_type").inc()
        raise HTTPException(status_code=415, detail=f"Unsupported file type: {content_type or 'unknown'}")

    try:
        temp_path = await stage_upload(file, settings.MAX_UPLOAD_BYTES)
    except UploadTooLarge as e:
        upload_failures.labels(reason="too_large").inc()
        raise HTTPException(status_code=413, detail=f"File exceeds {e.limit} bytes")

    file_id = new_file_id()
    storage_key = build_storage_key(file_id, file.filename, registry.now())
    logger.info("Upload started file_id=%s key=%s", file_id, storage_key)

    try:
        await run_in_threadpool(store.put_file, storage_key, temp_path, content_type)
    except StorageError as e:
        upload_failures.labels(reason="storage").inc()
        logger.error("Upload failed file_id=%s: %s", file_id, e)
        raise HTTPException(status_code=500, detail="File upload failed")
    finally:
        discard(temp_path)

    entry = registry.insert(file_id, storage_key, settings.link_ttl)
    active_links.set(len(registry))

    url = preview_url(request, file_id)
    try:
        qr_code = make_qr_data_uri(url)
    except QRCodeError as e:
        # object and registry entry stay; the link itself is still valid
        upload_failures.labels(reason="qr").inc()
        logger.error("QR generation failed file_id=%s: %s", file_id, e)
        raise HTTPException(status_code=500, detail="QR code generation failed")

    uploads_total.inc()
    logger.info("Upload complete file_id=%s expires_at=%s", file_id, entry.expires_at.isoformat())
    return UploadResponse(
        url=url,
        qrCode=qr_code,
        expiresAt=entry.expires_at,
        fileId=file_id,
        downloadUrl=download_url(request, file_id),
    )
