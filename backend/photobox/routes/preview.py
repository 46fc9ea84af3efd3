from __future__ import annotations

import html

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse

from photobox.dependencies import get_registry
from photobox.routes.download import resolve_link
from photobox.services.link_registry import LinkRegistry
from photobox.utils.urls import download_url

router = APIRouter(tags=["Preview"])

_STYLE = """
    :root { --bg:#0b0d10; --card:#151a20; --fg:#e7edf3; --muted:#9fb0c3; }
    html,body { height:100%; }
    body { margin:0; background:var(--bg); color:var(--fg); font-family: ui-sans-serif, system-ui, -apple-system, Segoe UI, Roboto, Helvetica, Arial; }
    .wrap { max-width:720px; margin:0 auto; padding:40px 20px; }
    .card { background:var(--card); border-radius:20px; padding:28px; box-shadow: 0 10px 30px rgba(0,0,0,.25); }
    h1 { font-size:22px; margin:0 0 12px; }
    p { margin: 6px 0; color:var(--muted); }
    img { width:100%; border-radius:12px; margin-top:12px; }
    .row { display:flex; gap:12px; align-items:center; flex-wrap:wrap; margin-top:20px; }
    .btn { text-decoration:none; display:inline-block; padding:12px 18px; border-radius:12px; background:#2a7cff; color:white; font-weight:600; }
    .meta { margin-top:10px; font-size:14px; }
"""


def _page(title: str, body: str) -> str:
    return f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{html.escape(title)}</title>
  <style>{_STYLE}</style>
</head>
<body>
  <div class="wrap">
    <div class="card">
{body}
    </div>
  </div>
</body>
</html>"""


@router.get("/preview/{file_id}", response_class=HTMLResponse)
async def preview_page(file_id: str, request: Request, registry: LinkRegistry = Depends(get_registry)):
    """Landing page behind the QR code: shows the photo and a download button."""
    try:
        entry = resolve_link(registry, file_id, "preview")
    except HTTPException as e:
        if e.status_code == 410:
            body = "      <h1>This photo has expired</h1>\n      <p>Shared photos are only kept available for a limited time.</p>"
        else:
            body = "      <h1>Photo not found</h1>\n      <p>Check the link or scan the QR code again.</p>"
        return HTMLResponse(_page("Photo unavailable", body), status_code=e.status_code,
                            headers={"Cache-Control": "no-store"})

    direct_url = html.escape(download_url(request, file_id))
    body = f"""      <h1>Your photo</h1>
      <img src="{direct_url}" alt="Photo">
      <div class="row">
        <a class="btn" href="{direct_url}" download>Download</a>
      </div>
      <p class="meta">Available until {html.escape(entry.expires_at.strftime('%Y-%m-%d %H:%M UTC'))}</p>"""
    return HTMLResponse(_page("Your photo", body), headers={"Cache-Control": "no-store"})
