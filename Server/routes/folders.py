"""
UploadFiles Server - Folder Endpoints

This module contains endpoints for listing and creating folders under the
uploads root.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query, status

from auth import RequireRead, RequireWrite
from dependencies import GetUploadsRoot
from exceptions import UploadFilesError
from file_storage import (
    BuildFolderTree,
    CreateFolder,
    ListFolders,
    ListFoldersRecursive
)
from models.api import CreateFolderRequest, OperationResponse
from routes.errors import ToHttpException


# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter()


# ==================== Folder Endpoints ====================

@router.get("/api/folders", tags=["Folders"])
async def list_folders(
    recursive: bool = Query(False, description="List every folder path, not only top-level folders"),
    tree: bool = Query(False, description="Also return the nested folder tree"),
    access=Depends(RequireRead),
    uploads_root=Depends(GetUploadsRoot)
):
    """
    List folders of the uploads root

    Returns:
        dict: folders (names, or relative paths when recursive) and
              optionally the nested tree
    """
    try:
        if recursive or tree:
            folders = ListFoldersRecursive(uploads_root)
        else:
            folders = ListFolders(uploads_root)

        response = {"success": True, "folders": folders}
        if tree:
            response["tree"] = [node.ToDict() for node in BuildFolderTree(folders)]
        return response

    except HTTPException:
        raise
    except UploadFilesError as e:
        raise ToHttpException(e)
    except Exception as e:
        logger.error(f"Error listing folders: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list folders"
        )


@router.post("/api/folders", response_model=OperationResponse, tags=["Folders"])
async def create_folder(
    request: CreateFolderRequest,
    access=Depends(RequireWrite),
    uploads_root=Depends(GetUploadsRoot)
):
    """
    Create a folder (and missing ancestors) with its protective marker

    Raises:
        HTTPException: 400 invalid name, 409 already exists
    """
    try:
        folder_path = request.folder_name.strip().strip("/")
        CreateFolder(uploads_root, folder_path)
        return OperationResponse(success=True, message=f'Folder "{folder_path}" created')

    except HTTPException:
        raise
    except UploadFilesError as e:
        raise ToHttpException(e)
    except Exception as e:
        logger.error(f"Error creating folder {request.folder_name}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create folder"
        )
