"""
UploadFiles Server - File Operations API Models

Pydantic models for file listing and upload endpoints.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class FileInfo(BaseModel):
    """One stored file as returned by the listing"""
    name: str
    path: str  # Public URL path, e.g. "/uploads/a/b/x.png"
    folder: str
    size: int
    size_formatted: str
    type: str
    modified: Optional[datetime] = None


class FileListResponse(BaseModel):
    success: bool
    folder: Optional[str] = None
    files: List[FileInfo]
    total_files: int
    total_size: int
    total_size_formatted: str
    errors: List[str] = []


class FileUploadResponse(BaseModel):
    success: bool
    message: str
    files: List[str]  # Public URL paths of the stored files
