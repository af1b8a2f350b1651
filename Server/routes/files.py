"""
UploadFiles Server - File Endpoints

This module contains endpoints for listing stored files and uploading new
files into a folder.
"""

import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, File as FastAPIFile, Form, HTTPException, Query, UploadFile, status

from auth import RequireRead, RequireWrite
from dependencies import GetConfig, GetUploadsRoot
from exceptions import UploadFilesError
from file_storage import FormatFileSize, ListFiles
from models.api import FileInfo, FileListResponse, FileUploadResponse
from models.infrastructure import UploadCandidate
from routes.errors import ToHttpException
from uploads import StoreUploadBatch


# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter()


# ==================== File Endpoints ====================

@router.get("/api/files", response_model=FileListResponse, tags=["Files"])
async def list_files(
    folder: Optional[str] = Query(None, description="Folder path; omit to list the whole uploads root"),
    access=Depends(RequireRead),
    uploads_root=Depends(GetUploadsRoot)
):
    """
    List stored files of a folder subtree, or of the whole uploads root

    Files are sorted by name. Protective marker files are never listed.

    Raises:
        HTTPException: 400 invalid folder, 404 missing folder
    """
    try:
        folder_path = (folder or "").strip().strip("/") or None
        listing = ListFiles(uploads_root, folder_path)

        files = [
            FileInfo(
                name=entry.name,
                path=entry.PublicUrl(),
                folder=entry.folder,
                size=entry.size,
                size_formatted=FormatFileSize(entry.size),
                type=entry.type,
                modified=entry.modified_utc
            )
            for entry in listing.entries
        ]

        return FileListResponse(
            success=True,
            folder=folder_path,
            files=files,
            total_files=listing.total_count,
            total_size=listing.total_bytes,
            total_size_formatted=FormatFileSize(listing.total_bytes),
            errors=listing.errors
        )

    except HTTPException:
        raise
    except UploadFilesError as e:
        raise ToHttpException(e)
    except Exception as e:
        logger.error(f"Error listing files for {folder or 'uploads root'}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve file list"
        )


@router.post("/api/upload", response_model=FileUploadResponse, tags=["Files"])
async def upload_files(
    folder: str = Form(...),
    files: List[UploadFile] = FastAPIFile(...),
    access=Depends(RequireWrite),
    config=Depends(GetConfig),
    uploads_root=Depends(GetUploadsRoot)
):
    """
    Upload a batch of images into a folder

    The whole batch is validated (type allow-list, size limit) before
    anything is written; each file is stored under a unique generated name.

    Raises:
        HTTPException: 400 invalid folder, empty batch, disallowed type or
                       oversized file; 500 if a write fails (batch rolled back)
    """
    try:
        candidates = []
        for upload in files:
            data = await upload.read()
            candidates.append(UploadCandidate(
                filename=upload.filename or "",
                content_type=upload.content_type or "",
                data=data
            ))

        stored = StoreUploadBatch(uploads_root, folder, candidates, config)
        folder_path = folder.strip().strip("/")

        return FileUploadResponse(
            success=True,
            message=f'{len(stored)} file(s) uploaded to folder "{folder_path}"',
            files=[upload.PublicUrl() for upload in stored]
        )

    except HTTPException:
        raise
    except UploadFilesError as e:
        raise ToHttpException(e)
    except Exception as e:
        logger.error(f"Error uploading files to {folder}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Upload failed"
        )
