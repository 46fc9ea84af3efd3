from typing import AsyncIterator, Optional

from fastapi import Request
from starlette.datastructures import UploadFile

from photobox.core.minio_client import ObjectStore
from photobox.core.minio_client import get_object_store as _get_object_store
from photobox.services.link_registry import LinkRegistry

link_registry = LinkRegistry()


def get_registry() -> LinkRegistry:
    return link_registry


def get_object_store() -> ObjectStore:
    return _get_object_store()


async def get_uploaded_file(request: Request) -> AsyncIterator[Optional[UploadFile]]:
    """The ``file`` form field, or None when it is absent or not a file part."""
    form = await request.form()
    try:
        value = form.get("file")
        yield value if isinstance(value, UploadFile) else None
    finally:
        await form.close()
