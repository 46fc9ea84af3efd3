from datetime import datetime

from pydantic import BaseModel


class UploadResponse(BaseModel):
    url: str
    qrCode: str
    expiresAt: datetime
    fileId: str
    downloadUrl: str


class QRCodeResponse(BaseModel):
    qrCode: str
