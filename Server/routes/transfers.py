"""
UploadFiles Server - Import / Export Endpoints

This module contains the endpoints copying between the uploads root and
other directories of the server's filesystem.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, status

from auth import RequireWrite
from dependencies import GetConfig, GetUploadsRoot
from exceptions import UploadFilesError
from file_storage import FormatFileSize
from models.api import ExportRequest, ImportRequest
from routes.errors import ToHttpException, TreeResultResponse
from transfers import ExportToLocal, ImportFromLocal


# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter()


# ==================== Transfer Endpoints ====================

@router.post("/api/import", tags=["Transfers"])
async def import_local(
    request: ImportRequest,
    access=Depends(RequireWrite),
    config=Depends(GetConfig),
    uploads_root=Depends(GetUploadsRoot)
):
    """
    Import a local file or directory into the uploads root

    Returns:
        success, items_processed (files imported), errors; responds 500 when
        nothing could be imported

    Raises:
        HTTPException: 400 missing or disallowed source, invalid target folder
    """
    try:
        result = ImportFromLocal(uploads_root, request.source_path, request.target_folder, config.transfer_roots)
        target_folder = (request.target_folder or "").strip().strip("/")

        if result.success:
            message = f"{result.items_processed} file(s) imported"
        else:
            message = "No file imported"
        return TreeResultResponse(result, message, target_folder=target_folder)

    except HTTPException:
        raise
    except UploadFilesError as e:
        raise ToHttpException(e)
    except Exception as e:
        logger.error(f"Error importing {request.source_path}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Import failed"
        )


@router.post("/api/export", tags=["Transfers"])
async def export_local(
    request: ExportRequest,
    access=Depends(RequireWrite),
    config=Depends(GetConfig),
    uploads_root=Depends(GetUploadsRoot)
):
    """
    Export an uploads folder (or the whole root) to a local directory

    Returns:
        success, items_processed (files exported), pre-flight totals and
        errors; responds 500 when nothing could be exported

    Raises:
        HTTPException: 400 invalid paths or nothing to export, 404 missing
                       source folder, 409 target is a file
    """
    try:
        result, scan = ExportToLocal(uploads_root, request.source_folder, request.target_path, config.transfer_roots)

        if result.success:
            message = f"{result.items_processed} file(s) exported to {request.target_path}"
        else:
            message = "No file exported"
        return TreeResultResponse(
            result, message,
            target_path=request.target_path,
            total_files=len(scan.entries),
            total_size=scan.total_bytes,
            total_size_formatted=FormatFileSize(scan.total_bytes)
        )

    except HTTPException:
        raise
    except UploadFilesError as e:
        raise ToHttpException(e)
    except Exception as e:
        logger.error(f"Error exporting {request.source_folder or 'uploads root'} to {request.target_path}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Export failed"
        )
