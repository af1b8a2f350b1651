"""
UploadFiles Server - Blob Object Model

Dataclasses for objects owned by the external blob store and for blobs
imported into the uploads root.
"""

from datetime import datetime
from dataclasses import dataclass
from typing import Optional


@dataclass
class BlobObject:
    """Remote blob, referenced by URL and never mutated in place"""
    url: str
    pathname: str
    size: int
    uploaded_at: Optional[datetime] = None


@dataclass
class BlobImport:
    """A blob downloaded into the uploads root"""
    name: str
    path: str  # Relative to the uploads root
    size: int
    blob_url: str
    deleted_from_blob: bool = False
    warning: Optional[str] = None

    def PublicUrl(self) -> str:
        return f"/uploads/{self.path}"
