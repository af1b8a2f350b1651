"""
UploadFiles Server - File Display Endpoints

This module serves stored files to browsers and other sites. Responses
carry a permissive CORS header and a content type derived from the file
extension.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse, Response

from dependencies import GetUploadsRoot
from exceptions import UploadFilesError
from file_storage import GetMimeType
from path_validator import ResolvePublicFilePath
from protective_marker import IsReservedName


# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter()

DISPLAY_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def _ServeFile(uploads_root, file_path: str) -> FileResponse:
    """
    Raises:
        HTTPException: 404 when the path is invalid, missing, not a file or
                       names the protective marker
    """
    try:
        resolved, relative = ResolvePublicFilePath(uploads_root, file_path, strip_public_prefix=False)
    except UploadFilesError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    if IsReservedName(relative) or not resolved.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    return FileResponse(
        resolved,
        media_type=GetMimeType(resolved.name),
        headers=DISPLAY_CORS_HEADERS
    )


# ==================== Display Endpoints ====================

@router.get("/api/display/{file_path:path}", tags=["Display"])
async def display_file(file_path: str, uploads_root=Depends(GetUploadsRoot)):
    """Serve a stored file, e.g. /api/display/a/b/x.png"""
    return _ServeFile(uploads_root, file_path)


@router.options("/api/display/{file_path:path}", tags=["Display"])
async def display_preflight(file_path: str):
    """CORS preflight for the display endpoint"""
    return Response(status_code=status.HTTP_200_OK, headers=DISPLAY_CORS_HEADERS)


@router.get("/uploads/{file_path:path}", tags=["Display"])
async def public_file(file_path: str, uploads_root=Depends(GetUploadsRoot)):
    """Serve a stored file under its public URL, e.g. /uploads/a/b/x.png"""
    return _ServeFile(uploads_root, file_path)
