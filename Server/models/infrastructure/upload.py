"""
UploadFiles Server - Upload Models

Dataclasses for files received by the upload endpoint and files stored on disk.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass
class UploadCandidate:
    """A file received in an upload batch, not yet written"""
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class StoredUpload:
    """A file written by the upload batch"""
    name: str  # Unique generated filename
    original_name: str
    path: str  # Relative to the uploads root
    size: int
    absolute_path: Path

    def PublicUrl(self) -> str:
        return f"/uploads/{self.path}"
