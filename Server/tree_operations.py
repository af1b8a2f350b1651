"""
UploadFiles Server - Recursive Tree Operations

This module implements the operations that act on whole folder subtrees:
- Recursive delete (depth-first, post-order)
- Recursive copy (marker files regenerated, never copied)
- Recursive move, merging into an existing destination folder
- Recursive scan (file entries with size, type and modification time)

Every operation first walks the tree and computes an ordered TreePlan,
then executes the plan action by action. A failing action is recorded in
the result (best-effort batch semantics) and does not abort its siblings.
Nothing is rolled back: a failure halfway through a delete leaves a
partially emptied tree.
"""

import errno
import logging
import os
import shutil
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from exceptions import (
    UploadFilesConflictError,
    UploadFilesNotFoundError,
    UploadFilesValidationError
)
from models.infrastructure import FileEntry, TreeAction, TreeOperationResult, TreePlan, TreeScanResult
from models.infrastructure.tree_operation import (
    COPY_FILE, CREATE_DIR, DELETE_FILE, MOVE_FILE, REMOVE_DIR, WRITE_MARKER
)
from path_validator import IsSubPath, ResolveFolderPath
from protective_marker import IsReservedName, WriteMarkerFile

logger = logging.getLogger(__name__)


class CollisionPolicy(str, Enum):
    """What happens when a copied or moved file meets an existing file"""
    OVERWRITE = "overwrite"
    RENAME = "rename"  # Keep both: "x.png" becomes "x_1.png", "x_2.png", ...


# ==================== Helpers ====================

def _ListEntries(directory: Path) -> Tuple[List[os.DirEntry], List[os.DirEntry]]:
    """Return (subdirectories, files) of a directory, sorted by name"""
    with os.scandir(directory) as iterator:
        entries = sorted(iterator, key=lambda entry: entry.name)

    directories = []
    files = []
    for entry in entries:
        if entry.is_symlink():
            logger.warning(f"Skipping symbolic link: {entry.path}")
            continue
        if entry.is_dir(follow_symlinks=False):
            directories.append(entry)
        else:
            files.append(entry)
    return directories, files


def _Display(path: Optional[Path], display_root: Optional[Path]) -> str:
    """Path as shown in error messages (relative to display_root when possible)"""
    if path is None:
        return ""
    if display_root is not None:
        try:
            relative = Path(path).relative_to(display_root).as_posix()
            return relative if relative != "." else "/"
        except ValueError:
            pass
    return str(path)


def _Describe(error: OSError) -> str:
    return error.strerror or str(error)


def ResolveCollision(destination: Path, policy: CollisionPolicy) -> Path:
    """
    Pick the destination path for a file according to the collision policy

    Args:
        destination: Desired destination path
        policy: CollisionPolicy

    Returns:
        Path: destination itself (overwrite, or no collision) or the first
              free "<stem>_<n><suffix>" sibling (rename)
    """
    if CollisionPolicy(policy) == CollisionPolicy.OVERWRITE or not destination.exists():
        return destination

    stem = destination.stem
    suffix = destination.suffix
    counter = 1
    while True:
        candidate = destination.with_name(f"{stem}_{counter}{suffix}")
        if not candidate.exists():
            return candidate
        counter += 1


def _MoveSingleFile(source: Path, destination: Path) -> None:
    """Native rename when possible, copy-then-unlink across devices"""
    try:
        os.replace(source, destination)
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise
        shutil.copyfile(source, destination)
        source.unlink()


# ==================== Planning ====================

def PlanDelete(directory: Path) -> TreePlan:
    """
    Compute the ordered actions deleting a directory tree

    Subdirectories are handled first, then the directory's files, then the
    now-empty directory itself. Regular files count toward items_processed;
    marker files are deleted but not counted.

    Args:
        directory: Directory to delete

    Returns:
        TreePlan: Planned actions and walk errors
    """
    plan = TreePlan()
    directory = Path(directory)

    try:
        subdirectories, files = _ListEntries(directory)
    except OSError as e:
        plan.errors.append(f"Cannot read folder {directory}: {_Describe(e)}")
        return plan

    for entry in subdirectories:
        plan.Extend(PlanDelete(Path(entry.path)))

    for entry in files:
        plan.Add(DELETE_FILE, source=Path(entry.path), counts=not IsReservedName(entry.name))

    plan.Add(REMOVE_DIR, source=directory)
    return plan


def PlanCopy(source: Path, destination: Path, write_markers: bool = True) -> TreePlan:
    """
    Compute the ordered actions copying a directory tree

    Args:
        source: Source directory
        destination: Destination directory (created with its ancestors)
        write_markers: Whether a fresh marker is written into every
                       destination directory

    Returns:
        TreePlan: Planned actions and walk errors
    """
    plan = TreePlan()
    source = Path(source)
    destination = Path(destination)

    plan.Add(CREATE_DIR, destination=destination)
    if write_markers:
        plan.Add(WRITE_MARKER, destination=destination)

    try:
        subdirectories, files = _ListEntries(source)
    except OSError as e:
        plan.errors.append(f"Cannot read folder {source}: {_Describe(e)}")
        return plan

    for entry in subdirectories:
        plan.Extend(PlanCopy(Path(entry.path), destination / entry.name, write_markers))

    for entry in files:
        if IsReservedName(entry.name):
            continue
        plan.Add(COPY_FILE, source=Path(entry.path), destination=destination / entry.name, counts=True)

    return plan


def PlanMove(source: Path, destination: Path) -> TreePlan:
    """
    Compute the actions moving the files of a tree into a destination tree

    The destination directories are created (or reused when they exist) and
    receive a regenerated marker. The source tree itself is not removed by
    this plan; see PlanRemoveEmptied.
    """
    plan = TreePlan()
    source = Path(source)
    destination = Path(destination)

    plan.Add(CREATE_DIR, destination=destination)
    plan.Add(WRITE_MARKER, destination=destination)

    try:
        subdirectories, files = _ListEntries(source)
    except OSError as e:
        plan.errors.append(f"Cannot read folder {source}: {_Describe(e)}")
        return plan

    for entry in subdirectories:
        plan.Extend(PlanMove(Path(entry.path), destination / entry.name))

    for entry in files:
        if IsReservedName(entry.name):
            continue
        plan.Add(MOVE_FILE, source=Path(entry.path), destination=destination / entry.name, counts=True)

    return plan


def PlanRemoveEmptied(directory: Path) -> TreePlan:
    """
    Compute the actions removing a tree whose files were moved away

    Only marker files are deleted. A regular file still present (for
    example one written concurrently) makes the enclosing directory removal
    fail instead of being deleted.
    """
    plan = TreePlan()
    directory = Path(directory)

    try:
        subdirectories, files = _ListEntries(directory)
    except OSError as e:
        plan.errors.append(f"Cannot read folder {directory}: {_Describe(e)}")
        return plan

    for entry in subdirectories:
        plan.Extend(PlanRemoveEmptied(Path(entry.path)))

    for entry in files:
        if IsReservedName(entry.name):
            plan.Add(DELETE_FILE, source=Path(entry.path))

    plan.Add(REMOVE_DIR, source=directory)
    return plan


# ==================== Execution ====================

def _ExecuteAction(action: TreeAction, collision_policy: CollisionPolicy) -> None:
    if action.kind == CREATE_DIR:
        action.destination.mkdir(parents=True, exist_ok=True)
    elif action.kind == WRITE_MARKER:
        WriteMarkerFile(action.destination)
    elif action.kind == COPY_FILE:
        action.destination = ResolveCollision(action.destination, collision_policy)
        shutil.copyfile(action.source, action.destination)
    elif action.kind == MOVE_FILE:
        action.destination = ResolveCollision(action.destination, collision_policy)
        _MoveSingleFile(action.source, action.destination)
    elif action.kind == DELETE_FILE:
        action.source.unlink()
    elif action.kind == REMOVE_DIR:
        action.source.rmdir()
    else:
        raise ValueError(f"Unknown tree action: {action.kind}")


_FAILURE_MESSAGES = {
    CREATE_DIR: "Failed to create folder {target}",
    WRITE_MARKER: "Failed to write protective marker in {target}",
    COPY_FILE: "Failed to copy {source}",
    MOVE_FILE: "Failed to move {source}",
    DELETE_FILE: "Failed to delete {source}",
    REMOVE_DIR: "Failed to remove folder {source}",
}


def ExecutePlan(plan: TreePlan,
                collision_policy: CollisionPolicy = CollisionPolicy.OVERWRITE,
                display_root: Optional[Path] = None) -> TreeOperationResult:
    """
    Execute a plan action by action, collecting failures

    Args:
        plan: TreePlan to execute
        collision_policy: Policy for copy/move destinations that already exist
        display_root: Base directory used to shorten paths in error messages

    Returns:
        TreeOperationResult: processed count, errors (walk errors first) and
                             the ordered log of executed actions
    """
    result = TreeOperationResult(errors=list(plan.errors))

    for action in plan.actions:
        try:
            _ExecuteAction(action, collision_policy)
            action.succeeded = True
            if action.counts:
                result.items_processed += 1
        except OSError as e:
            action.succeeded = False
            action.error = _Describe(e)
            message = _FAILURE_MESSAGES[action.kind].format(
                source=_Display(action.source, display_root),
                target=_Display(action.Target(), display_root)
            )
            message = f"{message}: {action.error}"
            result.errors.append(message)
            logger.warning(message)
        result.actions.append(action)

    return result


# ==================== Tree Operations ====================

def RecursiveDelete(directory: Path, display_root: Optional[Path] = None) -> TreeOperationResult:
    """
    Delete a directory and everything below it

    Destructive and irreversible. Failures are reported per entry and do not
    stop the traversal; already deleted entries are not restored.

    Args:
        directory: Directory to delete
        display_root: Base directory for error messages

    Returns:
        TreeOperationResult: items_processed = regular files deleted

    Raises:
        UploadFilesNotFoundError: If the directory does not exist
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise UploadFilesNotFoundError(f"Folder not found: {_Display(directory, display_root)}")

    result = ExecutePlan(PlanDelete(directory), display_root=display_root)
    logger.info(
        f"Recursive delete of {_Display(directory, display_root)}: "
        f"{result.items_processed} file(s) deleted, {len(result.errors)} error(s)"
    )
    return result


def RecursiveCopy(source: Path, destination: Path,
                  collision_policy: CollisionPolicy = CollisionPolicy.OVERWRITE,
                  write_markers: bool = True,
                  display_root: Optional[Path] = None) -> TreeOperationResult:
    """
    Copy a directory tree

    File contents are copied, timestamps are not preserved. Source marker
    files are skipped; when write_markers is set a fresh marker is written
    into every destination directory.

    Args:
        source: Source directory
        destination: Destination directory (created with its ancestors)
        collision_policy: Policy for destination files that already exist
        write_markers: Whether to write markers into destination directories
        display_root: Base directory for error messages

    Returns:
        TreeOperationResult: items_processed = files copied

    Raises:
        UploadFilesNotFoundError: If the source directory does not exist
    """
    source = Path(source)
    destination = Path(destination)
    if not source.is_dir():
        raise UploadFilesNotFoundError(f"Folder not found: {_Display(source, display_root)}")

    plan = PlanCopy(source, destination, write_markers=write_markers)
    result = ExecutePlan(plan, collision_policy, display_root)
    logger.info(
        f"Recursive copy {_Display(source, display_root)} -> {_Display(destination, display_root)}: "
        f"{result.items_processed} file(s) copied, {len(result.errors)} error(s)"
    )
    return result


def RecursiveMove(root: Path, source_path: str, destination_path: str,
                  collision_policy: CollisionPolicy = CollisionPolicy.RENAME) -> Tuple[TreeOperationResult, bool]:
    """
    Move a folder under the uploads root

    When the destination does not exist the folder is recreated there and
    its files are moved (native rename, copy-then-unlink across devices).
    When the destination already exists as a folder the contents are merged
    into it; colliding file names follow collision_policy. The source tree
    is removed only when every file was moved; otherwise it is kept with
    the files that could not be moved and the errors are reported.

    Args:
        root: Uploads root
        source_path: Folder path to move (e.g. "a")
        destination_path: New folder path (e.g. "archive/a")
        collision_policy: Policy for files that already exist in the destination

    Returns:
        Tuple[TreeOperationResult, bool]: (result, merged) where merged tells
                                          whether the destination already existed

    Raises:
        UploadFilesValidationError: Invalid paths, identical paths, or a
                                    destination inside the source
        UploadFilesNotFoundError: If the source folder does not exist
        UploadFilesConflictError: If the destination exists as a file
    """
    root = Path(root).absolute()
    source_path = (source_path or "").strip().strip("/")
    destination_path = (destination_path or "").strip().strip("/")

    source = ResolveFolderPath(root, source_path)
    destination = ResolveFolderPath(root, destination_path)

    # Logical checks happen before any filesystem access
    if source_path == destination_path:
        raise UploadFilesValidationError("Source and destination must be different")
    if IsSubPath(source_path, destination_path):
        raise UploadFilesValidationError("Cannot move a folder into itself or one of its subfolders")

    if not source.is_dir():
        if source.exists():
            raise UploadFilesValidationError(f"Source is not a folder: {source_path}")
        raise UploadFilesNotFoundError(f"Source folder not found: {source_path}")

    if destination.exists() and not destination.is_dir():
        raise UploadFilesConflictError(f"Destination exists and is not a folder: {destination_path}")

    merged = destination.is_dir()

    destination_parent = destination.parent
    if not destination_parent.exists():
        destination_parent.mkdir(parents=True, exist_ok=True)
        WriteMarkerFile(destination_parent)

    result = ExecutePlan(PlanMove(source, destination), CollisionPolicy(collision_policy), root)

    if result.errors:
        result.RecordError(f"Source folder '{source_path}' was kept because some files could not be moved")
        logger.warning(
            f"Move {source_path} -> {destination_path} incomplete: "
            f"{result.items_processed} file(s) moved, {len(result.errors)} error(s)"
        )
        return result, merged

    cleanup = ExecutePlan(PlanRemoveEmptied(source), display_root=root)
    result.Merge(cleanup)

    logger.info(
        f"{'Merged' if merged else 'Moved'} folder {source_path} -> {destination_path}: "
        f"{result.items_processed} file(s), {len(result.errors)} error(s)"
    )
    return result, merged


def RecursiveScan(root: Path, directory: Path) -> TreeScanResult:
    """
    Collect every file below a directory

    Depth-first; marker files are excluded. Entries carry their path
    relative to the uploads root.

    Args:
        root: Uploads root (base of the relative paths)
        directory: Directory to scan (the root itself or a folder inside it)

    Returns:
        TreeScanResult: entries in traversal order, items_processed = len(entries)

    Raises:
        UploadFilesNotFoundError: If the directory does not exist
    """
    root = Path(root).absolute()
    directory = Path(directory).absolute()
    if not directory.is_dir():
        raise UploadFilesNotFoundError(f"Folder not found: {_Display(directory, root)}")

    result = TreeScanResult()
    _ScanInto(result, root, directory)
    result.items_processed = len(result.entries)
    return result


def _ScanInto(result: TreeScanResult, root: Path, directory: Path) -> None:
    try:
        subdirectories, files = _ListEntries(directory)
    except OSError as e:
        result.RecordError(f"Cannot read folder {_Display(directory, root)}: {_Describe(e)}")
        return

    for entry in subdirectories:
        _ScanInto(result, root, Path(entry.path))

    for entry in files:
        if IsReservedName(entry.name):
            continue
        file_path = Path(entry.path)
        try:
            stats = entry.stat(follow_symlinks=False)
        except OSError as e:
            result.RecordError(f"Cannot read file {_Display(file_path, root)}: {_Describe(e)}")
            continue

        relative_path = file_path.relative_to(root).as_posix()
        folder = file_path.parent.relative_to(root).as_posix()
        result.entries.append(FileEntry(
            name=entry.name,
            path=relative_path,
            folder="" if folder == "." else folder,
            size=stats.st_size,
            type=file_path.suffix.lower(),
            modified_utc=datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc)
        ))
