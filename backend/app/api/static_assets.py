"""Static Assets - uploaded files and images served with corrected content types.

Invariants:
    - /uploads serves upload_dir, /images serves upload_dir/images
    - *.svg under /images is always image/svg+xml, whatever mimetypes guesses
    - Missing files fall through to the uniform 404 handler
    - Directories are created by the lifespan, so mounting has no filesystem side effects
"""

import os
from pathlib import Path

from fastapi import FastAPI
from starlette.responses import FileResponse, Response
from starlette.staticfiles import StaticFiles
from starlette.types import Scope

SVG_MEDIA_TYPE = "image/svg+xml"


class AssetStaticFiles(StaticFiles):
    """StaticFiles with per-extension content-type overrides."""

    def __init__(self, *args, content_types: dict[str, str] | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.content_types = {
            ext.lower(): media for ext, media in (content_types or {}).items()
        }

    def file_response(
        self,
        full_path: str | os.PathLike[str],
        stat_result: os.stat_result,
        scope: Scope,
        status_code: int = 200,
    ) -> Response:
        response = super().file_response(full_path, stat_result, scope, status_code)
        media_type = self.content_types.get(Path(full_path).suffix.lower())
        if media_type and isinstance(response, FileResponse):
            response.media_type = media_type
            response.headers["content-type"] = media_type
        return response


def mount_static_assets(app: FastAPI, upload_dir: Path) -> None:
    """Mount /uploads and /images under *upload_dir*."""
    app.mount(
        "/uploads",
        AssetStaticFiles(directory=upload_dir, check_dir=False),
        name="uploads",
    )
    app.mount(
        "/images",
        AssetStaticFiles(
            directory=Path(upload_dir) / "images",
            content_types={".svg": SVG_MEDIA_TYPE},
            check_dir=False,
        ),
        name="images",
    )
