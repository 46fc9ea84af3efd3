from __future__ import annotations

import os
import posixpath
import re
import secrets
import tempfile
from datetime import datetime

from fastapi import UploadFile

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")

CHUNK_SIZE = 1024 * 1024


class UploadTooLarge(Exception):
    def __init__(self, limit: int):
        super().__init__(limit)
        self.limit = limit


def new_file_id() -> str:
    return secrets.token_urlsafe(16)


def safe_filename(name: str | None) -> str:
    base = posixpath.basename((name or "").replace("\\", "/")).strip()
    base = _UNSAFE.sub("_", base).strip("._")
    return base or "upload.bin"


def build_storage_key(file_id: str, original_name: str | None, now: datetime) -> str:
    """``<YYYYMMDD>/<file_id>/<epoch-ms>-<name>`` using the UTC date of ``now``."""
    stamp = int(now.timestamp() * 1000)
    return f"{now:%Y%m%d}/{file_id}/{stamp}-{safe_filename(original_name)}"


async def stage_upload(file: UploadFile, max_bytes: int) -> str:
    """Copy the upload into a temporary file and return its path.

    The temporary file is removed when reading fails or before
    :class:`UploadTooLarge` is raised; otherwise removing it is up to the
    caller.
    """
    suffix = "_" + safe_filename(file.filename)
    written = 0
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as tmp:
        temp_path = tmp.name
        try:
            while True:
                chunk = await file.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_bytes:
                    break
                tmp.write(chunk)
        except BaseException:
            tmp.close()
            discard(temp_path)
            raise

    if written > max_bytes:
        discard(temp_path)
        raise UploadTooLarge(max_bytes)
    return temp_path


def discard(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
