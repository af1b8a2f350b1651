"""
UploadFiles Server - Transfer API Models

Pydantic models for local import and export endpoints.
"""

from typing import Optional

from pydantic import BaseModel


class ImportRequest(BaseModel):
    """Request model for importing a local file or directory"""
    source_path: str
    target_folder: Optional[str] = None  # Empty = uploads root


class ExportRequest(BaseModel):
    """Request model for exporting an uploads folder to a local directory"""
    target_path: str
    source_folder: Optional[str] = None  # Empty = whole uploads root
