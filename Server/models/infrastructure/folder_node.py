"""
UploadFiles Server - Folder Node Model

Dataclass for one node of the folder tree view.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass
class FolderNode:
    """A folder in the tree view; level 0 nodes are forest roots"""
    name: str
    path: str
    level: int
    children: List['FolderNode'] = field(default_factory=list)

    def ToDict(self) -> dict:
        """Nested dictionary representation for JSON responses"""
        return {
            "name": self.name,
            "path": self.path,
            "level": self.level,
            "children": [child.ToDict() for child in self.children]
        }
