"""
UploadFiles Server - Blob Import API Models

Pydantic models for the blob import endpoints.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class BlobInfo(BaseModel):
    """Remote blob as returned by the listing"""
    url: str
    pathname: str
    size: int
    size_formatted: str
    uploaded_at: Optional[datetime] = None


class BlobImportRequest(BaseModel):
    """
    Request model for importing blobs

    Individual import uses blob_url. Batch import (batch_import=True) uses
    folder_name, the blob folder whose blobs are all imported.
    """
    target_folder: str
    blob_url: Optional[str] = None
    folder_name: Optional[str] = None
    batch_import: bool = False
    delete_after_import: bool = False
