from fastapi import Request

from photobox.core.config import settings


def external_base_url(request: Request) -> str:
    if settings.SERVER_URL:
        return settings.SERVER_URL.rstrip("/")

    fwd = request.headers.get("forwarded")
    if fwd:
        proto = host = None
        for part in fwd.split(";"):
            if "=" in part:
                k, v = part.split("=", 1)
                k = k.strip().lower()
                v = v.strip().strip('"')
                if k == "proto":
                    proto = v
                elif k == "host":
                    host = v
        if proto and host:
            return f"{proto}://{host}".rstrip("/")

    proto = request.headers.get("x-forwarded-proto")
    host = request.headers.get("x-forwarded-host") or request.headers.get("host")
    if proto and host:
        return f"{proto}://{host}".rstrip("/")

    return str(request.base_url).rstrip("/")


def build_external_url(request: Request, path: str) -> str:
    base = external_base_url(request)
    if not path.startswith("/"):
        path = "/" + path
    return base + path


def preview_url(request: Request, file_id: str) -> str:
    return build_external_url(request, f"/preview/{file_id}")


def download_url(request: Request, file_id: str) -> str:
    return build_external_url(request, f"/api/file/{file_id}")
