from .upload import router as upload_router
from .download import router as download_router
from .qr import router as qr_router
from .preview import router as preview_router
from .health import router as health_router
