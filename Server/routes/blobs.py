"""
UploadFiles Server - Blob Import Endpoints

This module contains the endpoints importing files from the external blob
store: listing, individual or batch import, and remote deletion.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status

from auth import RequireWrite
from blob_bridge import DeleteBlob, ImportBlob, ImportBlobFolder, ListBlobs
from dependencies import GetBlobStore, GetConfig, GetUploadsRoot
from exceptions import UploadFilesError
from file_storage import FormatFileSize
from models.api import BlobImportRequest, BlobInfo, OperationResponse
from routes.errors import ToHttpException, TreeResultResponse


# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter()


# ==================== Blob Endpoints ====================

@router.get("/api/import-blob", tags=["Blobs"])
def list_blobs(access=Depends(RequireWrite), store=Depends(GetBlobStore)):
    """
    List the remote blobs available for import (marker files hidden)

    Raises:
        HTTPException: 502 when the blob store fails, 503 when not configured
    """
    try:
        blobs = ListBlobs(store)
        total_size = sum(blob.size for blob in blobs)

        return {
            "success": True,
            "files": [
                BlobInfo(
                    url=blob.url,
                    pathname=blob.pathname,
                    size=blob.size,
                    size_formatted=FormatFileSize(blob.size),
                    uploaded_at=blob.uploaded_at
                )
                for blob in blobs
            ],
            "total_files": len(blobs),
            "total_size": total_size,
            "total_size_formatted": FormatFileSize(total_size)
        }

    except HTTPException:
        raise
    except UploadFilesError as e:
        raise ToHttpException(e)
    except Exception as e:
        logger.error(f"Error listing blobs: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list blobs"
        )


@router.post("/api/import-blob", tags=["Blobs"])
def import_blob(
    request: BlobImportRequest,
    access=Depends(RequireWrite),
    config=Depends(GetConfig),
    store=Depends(GetBlobStore),
    uploads_root=Depends(GetUploadsRoot)
):
    """
    Import one blob (blob_url) or every blob of a blob folder (batch_import + folder_name)

    Returns:
        Individual: success, file details, deleted_from_blob and a warning
                    when the remote delete failed
        Batch: success, items_processed, errors; responds 500 when nothing
               was imported

    Raises:
        HTTPException: 400 missing parameters or invalid folder, 403 marker
                       file, 502 blob store failure
    """
    try:
        target_folder = (request.target_folder or "").strip().strip("/")
        if not target_folder:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Target folder is required")

        if request.batch_import:
            if not request.folder_name:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Blob folder name is required for a batch import"
                )
            result = ImportBlobFolder(store, uploads_root, request.folder_name, target_folder,
                                      request.delete_after_import, config.merge_collision_policy)
            if result.success:
                message = f'{result.items_processed} file(s) imported into folder "{target_folder}"'
            else:
                message = "No file imported"
            return TreeResultResponse(result, message, deleted_from_blob=request.delete_after_import)

        if not request.blob_url:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Blob URL is required for an individual import"
            )

        imported = ImportBlob(store, uploads_root, request.blob_url, target_folder, request.delete_after_import)
        return {
            "success": True,
            "message": f'File imported into folder "{target_folder}"',
            "file": {
                "name": imported.name,
                "path": imported.PublicUrl(),
                "size": imported.size,
                "size_formatted": FormatFileSize(imported.size)
            },
            "deleted_from_blob": imported.deleted_from_blob,
            "warning": imported.warning
        }

    except HTTPException:
        raise
    except UploadFilesError as e:
        raise ToHttpException(e)
    except Exception as e:
        logger.error(f"Error importing blob: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Blob import failed"
        )


@router.delete("/api/import-blob", response_model=OperationResponse, tags=["Blobs"])
def delete_blob(
    blob_url: Optional[str] = Query(None, description="URL of the blob to delete"),
    access=Depends(RequireWrite),
    store=Depends(GetBlobStore)
):
    """
    Delete one remote blob

    Raises:
        HTTPException: 400 missing URL, 502 blob store failure
    """
    try:
        DeleteBlob(store, blob_url)
        return OperationResponse(success=True, message="Blob deleted")

    except HTTPException:
        raise
    except UploadFilesError as e:
        raise ToHttpException(e)
    except Exception as e:
        logger.error(f"Error deleting blob {blob_url}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Blob deletion failed"
        )
