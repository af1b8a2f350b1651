"""
UploadFiles Server - Rename / Delete / Move Endpoints

This module contains the endpoints mutating existing folders and files:
- Rename a folder (in place) or an image file
- Delete a folder tree or a single file
- Move a folder (merging into an existing destination) or a file
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status

from auth import RequireWrite
from dependencies import GetConfig, GetUploadsRoot
from exceptions import UploadFilesError
from file_storage import DeleteFile, DeleteFolder, MoveFile, RenameFile, RenameFolder
from models.api import MoveRequest, OperationResponse, RenameRequest
from routes.errors import ToHttpException, TreeResultResponse
from tree_operations import RecursiveMove


# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter()

OPERATION_TYPES = ["folder", "file"]


def _CheckOperationType(operation_type: Optional[str]) -> str:
    if operation_type not in OPERATION_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid type. Must be one of: {', '.join(OPERATION_TYPES)}"
        )
    return operation_type


# ==================== Rename ====================

@router.post("/api/rename", response_model=OperationResponse, tags=["Operations"])
async def rename(
    request: RenameRequest,
    access=Depends(RequireWrite),
    uploads_root=Depends(GetUploadsRoot)
):
    """
    Rename a folder or a file

    A folder keeps its parent folder. A file must be an image and keep its
    extension.

    Raises:
        HTTPException: 400 invalid input, 403 marker file, 404 missing source,
                       409 name already taken
    """
    try:
        operation_type = _CheckOperationType(request.type)
        if not request.old_name or not request.new_name:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing parameters")

        if operation_type == "folder":
            new_path = RenameFolder(uploads_root, request.old_name, request.new_name)
            return OperationResponse(
                success=True,
                message=f'Folder "{request.old_name}" renamed to "{new_path}"'
            )

        new_path = RenameFile(uploads_root, request.old_name, request.new_name)
        return OperationResponse(success=True, message=f'File renamed to "/uploads/{new_path}"')

    except HTTPException:
        raise
    except UploadFilesError as e:
        raise ToHttpException(e)
    except Exception as e:
        logger.error(f"Error renaming {request.type} {request.old_name}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Rename failed"
        )


# ==================== Delete ====================

@router.delete("/api/delete", tags=["Operations"])
async def delete(
    type: Optional[str] = Query(None, description="folder or file"),
    target: Optional[str] = Query(None, description="Folder path, or public file path"),
    file_path: Optional[str] = Query(None, alias="filePath", description="Public file path (implies type=file)"),
    access=Depends(RequireWrite),
    uploads_root=Depends(GetUploadsRoot)
):
    """
    Delete a folder tree or a single file

    Either type + target, or filePath alone for a file.

    Returns:
        Folder: success, items_processed (files deleted) and errors;
                responds 500 when nothing could be deleted
        File: success and message

    Raises:
        HTTPException: 400 invalid input, 403 marker file, 404 missing target
    """
    if file_path:
        type, target = "file", file_path

    try:
        operation_type = _CheckOperationType(type)
        if not target:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing parameters")

        if operation_type == "folder":
            folder_path = target.strip().strip("/")
            result = DeleteFolder(uploads_root, folder_path)
            if result.errors:
                message = f'Folder "{folder_path}" partially deleted'
            else:
                message = f'Folder "{folder_path}" deleted'
            return TreeResultResponse(result, message)

        relative = DeleteFile(uploads_root, target)
        return OperationResponse(success=True, message=f'File "/uploads/{relative}" deleted')

    except HTTPException:
        raise
    except UploadFilesError as e:
        raise ToHttpException(e)
    except Exception as e:
        logger.error(f"Error deleting {type} {target}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Delete failed"
        )


# ==================== Move ====================

@router.post("/api/move", tags=["Operations"])
async def move(
    request: MoveRequest,
    access=Depends(RequireWrite),
    config=Depends(GetConfig),
    uploads_root=Depends(GetUploadsRoot)
):
    """
    Move a folder or a file

    Moving a folder onto an existing folder merges the contents; colliding
    file names follow the configured collision policy.

    Raises:
        HTTPException: 400 invalid input or destination inside the source,
                       403 marker file, 404 missing source, 409 destination
                       exists (file move) or is a file (folder move)
    """
    try:
        operation_type = _CheckOperationType(request.type)
        if not request.source or not request.destination:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Source and destination are required")

        if operation_type == "folder":
            result, merged = RecursiveMove(
                uploads_root, request.source, request.destination, config.merge_collision_policy
            )
            if merged:
                message = f'Contents of "{request.source}" merged into "{request.destination}"'
            else:
                message = f'Folder "{request.source}" moved to "{request.destination}"'
            return TreeResultResponse(
                result, message,
                source=request.source,
                destination=request.destination,
                merged=merged
            )

        new_path = MoveFile(uploads_root, request.source, request.destination)
        return {
            "success": True,
            "message": f'File moved to "/uploads/{new_path}"',
            "source": request.source,
            "destination": f"/uploads/{new_path}"
        }

    except HTTPException:
        raise
    except UploadFilesError as e:
        raise ToHttpException(e)
    except Exception as e:
        logger.error(f"Error moving {request.type} {request.source} -> {request.destination}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Move failed"
        )
