"""
UploadFiles Server - Folder Operations API Models

Pydantic models for folder creation, rename and move endpoints.
"""

from pydantic import BaseModel


class CreateFolderRequest(BaseModel):
    """Request model for creating a folder"""
    folder_name: str  # Single name or slash-delimited path, e.g. "films/action"


class RenameRequest(BaseModel):
    """
    Request model for renaming a folder or a file

    type "folder": old_name is a folder path, new_name a single folder name
    type "file": old_name and new_name are public file paths (/uploads/...)
    """
    type: str
    old_name: str
    new_name: str


class MoveRequest(BaseModel):
    """Request model for moving a folder (merging when the destination exists) or a file"""
    source: str
    destination: str
    type: str = "folder"
