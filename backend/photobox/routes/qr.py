import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from photobox.dependencies import get_registry
from photobox.routes.download import resolve_link
from photobox.schemas.share import QRCodeResponse
from photobox.services.link_registry import LinkRegistry
from photobox.services.qr import QRCodeError, make_qr_data_uri
from photobox.utils.urls import download_url

logger = logging.getLogger("photobox")

router = APIRouter(tags=["QR"])


@router.get("/qr/{file_id}", response_model=QRCodeResponse)
async def get_qr_code(
    file_id: str,
    request: Request,
    registry: LinkRegistry = Depends(get_registry),
):
    resolve_link(registry, file_id, "qr")

    try:
        qr_code = make_qr_data_uri(download_url(request, file_id))
    except QRCodeError as e:
        logger.error("QR generation failed file_id=%s: %s", file_id, e)
        raise HTTPException(status_code=500, detail="QR code generation failed")
    return QRCodeResponse(qrCode=qr_code)
