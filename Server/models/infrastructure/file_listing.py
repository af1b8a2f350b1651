"""
UploadFiles Server - File Listing Model

Dataclass returned by the file registry listing.
"""

from dataclasses import dataclass, field
from typing import List

from models.infrastructure.file_entry import FileEntry


@dataclass
class FileListing:
    """Files of a folder subtree (or of the whole uploads root)"""
    entries: List[FileEntry] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.entries)

    @property
    def total_bytes(self) -> int:
        return sum(entry.size for entry in self.entries)
