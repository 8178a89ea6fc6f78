"""
LawDesk Backend — Uploaded Image Route
========================================

What:  Serves stored post images at /uploads/{path}, the reference format
       persisted in posts.image_url ("uploads/<file>").

Security:
    - Paths are resolved inside UPLOAD_DIR; ../ traversal is rejected (400)
    - Only regular files are served
"""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from lawdesk.exceptions import NotFoundError
from lawdesk.routes.dependencies import get_image_storage
from lawdesk.services.image_storage import ImageStorage

router = APIRouter(tags=["Uploads"])


@router.get(
    "/uploads/{file_path:path}",
    summary="Serve an uploaded post image",
    responses={
        200: {"description": "Image file"},
        404: {"description": "File not found"},
    },
)
async def serve_upload(
    file_path: str,
    images: ImageStorage = Depends(get_image_storage),
) -> FileResponse:
    full_path = images.resolve(file_path)
    if not full_path.is_file():
        raise NotFoundError(resource="file", resource_id=file_path)

    # media_type is guessed from the extension
    return FileResponse(
        path=str(full_path),
        headers={"Cache-Control": "public, max-age=86400"},
    )
