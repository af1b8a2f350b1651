"""
UploadFiles Server - Tree Operation Models

Dataclasses used by the recursive tree operations:
- TreeAction: one planned filesystem step (create, copy, move, delete)
- TreePlan: ordered list of actions computed before anything is mutated
- TreeOperationResult: aggregate of processed items, errors and the
  ordered log of executed actions
- TreeScanResult: result of a scan, carrying the file entries found
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from models.infrastructure.file_entry import FileEntry


# Action kinds
CREATE_DIR = "create_dir"
WRITE_MARKER = "write_marker"
COPY_FILE = "copy_file"
MOVE_FILE = "move_file"
DELETE_FILE = "delete_file"
REMOVE_DIR = "remove_dir"


@dataclass
class TreeAction:
    """One filesystem step of a tree operation"""
    kind: str
    source: Optional[Path] = None
    destination: Optional[Path] = None
    counts: bool = False  # Whether success increments items_processed
    succeeded: Optional[bool] = None  # None until executed
    error: Optional[str] = None

    def Target(self) -> Optional[Path]:
        """Path the action acts upon (destination when there is one)"""
        return self.destination if self.destination is not None else self.source


@dataclass
class TreePlan:
    """Ordered actions computed by walking the tree, plus walk errors"""
    actions: List[TreeAction] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def Add(self, kind: str, source: Optional[Path] = None,
            destination: Optional[Path] = None, counts: bool = False) -> TreeAction:
        action = TreeAction(kind=kind, source=source, destination=destination, counts=counts)
        self.actions.append(action)
        return action

    def Extend(self, other: 'TreePlan') -> None:
        self.actions.extend(other.actions)
        self.errors.extend(other.errors)


@dataclass
class TreeOperationResult:
    """
    Aggregate result of a recursive or batch operation

    Best-effort batch semantics: failures are collected, not raised, and
    the operation counts as successful when at least one item was
    processed. An empty tree (nothing to process, nothing failed) also
    succeeds.
    """
    items_processed: int = 0
    errors: List[str] = field(default_factory=list)
    actions: List[TreeAction] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.items_processed > 0 or not self.errors

    def RecordError(self, message: str) -> None:
        self.errors.append(message)

    def Merge(self, other: 'TreeOperationResult') -> None:
        self.items_processed += other.items_processed
        self.errors.extend(other.errors)
        self.actions.extend(other.actions)


@dataclass
class TreeScanResult(TreeOperationResult):
    """Result of a recursive scan"""
    entries: List[FileEntry] = field(default_factory=list)

    @property
    def total_bytes(self) -> int:
        return sum(entry.size for entry in self.entries)
