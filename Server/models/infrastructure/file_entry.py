"""
UploadFiles Server - File Entry Model

Dataclass describing one stored file found by a scan.
"""

from datetime import datetime
from dataclasses import dataclass


@dataclass
class FileEntry:
    """A regular file under the uploads root"""
    name: str
    path: str  # Relative to the uploads root, e.g. "a/b/x.png"
    folder: str  # Relative folder, "" for files at the root
    size: int
    type: str  # Lower-case extension including the dot, e.g. ".png"
    modified_utc: datetime

    def PublicUrl(self) -> str:
        """URL path under which the file is served"""
        return f"/uploads/{self.path}"
