"""
UploadFiles Server - File Storage Management

This module handles the folder and file registries under the uploads root:
- Storage root creation
- Folder listing (flat, recursive, tree view)
- Folder creation, renaming and deletion
- File listing, deletion, renaming and moving
- Size formatting and MIME type lookup

Every folder created here receives the protective marker file.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from exceptions import (
    UploadFilesConflictError,
    UploadFilesNotFoundError,
    UploadFilesReservedError,
    UploadFilesValidationError
)
from models.infrastructure import FileListing, FolderNode, TreeOperationResult
from path_validator import (
    ResolveFolderPath,
    ResolvePublicFilePath,
    ValidateFolderName,
    ValidateFolderPath
)
from protective_marker import IsReservedName, WriteMarkerFile
from tree_operations import RecursiveDelete, RecursiveScan

logger = logging.getLogger(__name__)


# ==================== Storage Configuration ====================

IMAGE_EXTENSIONS = [".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg"]

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".txt": "text/plain",
    ".srt": "text/srt",
    ".vtt": "text/vtt"
}

DEFAULT_MIME_TYPE = "application/octet-stream"

SIZE_UNITS = ["B", "KB", "MB", "GB"]


# ==================== Storage Directory Management ====================

def InitializeStorage(root: Path) -> Path:
    """
    Initialize the uploads root directory

    Args:
        root: Uploads root

    Returns:
        Path: Absolute uploads root
    """
    root_path = Path(root).absolute()

    try:
        root_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"Uploads root directory ready: {root_path}")
    except Exception as e:
        logger.error(f"Failed to initialize storage: {str(e)}")
        raise

    return root_path


# ==================== Folder Registry ====================

def SortFolderPaths(paths: Iterable[str]) -> List[str]:
    """Sort folder paths by depth, then by name"""
    return sorted(paths, key=lambda p: (p.count("/"), p.lower(), p))


def ListFolders(root: Path) -> List[str]:
    """
    List the top-level folders of the uploads root

    Args:
        root: Uploads root

    Returns:
        List[str]: Sorted folder names (empty when the root does not exist)
    """
    root_path = Path(root)
    if not root_path.is_dir():
        return []

    return sorted(
        entry.name for entry in root_path.iterdir()
        if entry.is_dir() and not entry.is_symlink()
    )


def ListFoldersRecursive(root: Path) -> List[str]:
    """
    List every folder below the uploads root

    Args:
        root: Uploads root

    Returns:
        List[str]: Relative folder paths ("a", "a/b", ...) sorted by depth,
                   then by name
    """
    root_path = Path(root).absolute()
    if not root_path.is_dir():
        return []

    folders = []
    for directory, subdirectories, _ in os.walk(root_path):
        current = Path(directory)
        for name in subdirectories:
            if (current / name).is_symlink():
                continue
            folders.append((current / name).relative_to(root_path).as_posix())

    return SortFolderPaths(folders)


def BuildFolderTree(flat_paths: Iterable[str]) -> List[FolderNode]:
    """
    Build the tree view from folder paths

    Single pass: a node is attached to its parent only if the parent was
    seen earlier in the input. Feed paths sorted by depth (SortFolderPaths);
    a path whose parent is missing is dropped from the tree.

    Args:
        flat_paths: Relative folder paths

    Returns:
        List[FolderNode]: Top-level nodes with nested children
    """
    nodes = {}
    roots = []

    for folder_path in flat_paths:
        parts = folder_path.split("/")
        node = FolderNode(name=parts[-1], path=folder_path, level=len(parts) - 1)
        nodes[folder_path] = node

        if len(parts) == 1:
            roots.append(node)
            continue

        parent = nodes.get("/".join(parts[:-1]))
        if parent is None:
            logger.warning(f"Folder tree: parent of '{folder_path}' not seen yet, node dropped")
            continue
        parent.children.append(node)

    return roots


def CreateFolder(root: Path, folder_path: str) -> Path:
    """
    Create a folder (and any missing ancestors) under the uploads root

    Only the leaf folder receives the protective marker.

    Args:
        root: Uploads root
        folder_path: Relative folder path (e.g. "films/action")

    Returns:
        Path: Created folder

    Raises:
        UploadFilesValidationError: If the folder path is invalid
        UploadFilesConflictError: If the folder, or a file with that name, exists
    """
    folder = ResolveFolderPath(root, folder_path)

    if folder.is_dir():
        raise UploadFilesConflictError(f"Folder already exists: {folder_path}")
    if folder.exists():
        raise UploadFilesConflictError(f"A file with this name already exists: {folder_path}")

    folder.mkdir(parents=True)
    WriteMarkerFile(folder)
    logger.info(f"Created folder: {folder_path}")
    return folder


def EnsureFolder(root: Path, folder_path: str) -> Tuple[Path, bool]:
    """
    Create a folder if it does not exist yet

    Args:
        root: Uploads root
        folder_path: Relative folder path

    Returns:
        Tuple[Path, bool]: (folder, created)

    Raises:
        UploadFilesValidationError: If the folder path is invalid
        UploadFilesConflictError: If a file with that name exists
    """
    folder = ResolveFolderPath(root, folder_path)

    if folder.is_dir():
        return folder, False
    if folder.exists():
        raise UploadFilesConflictError(f"A file with this name already exists: {folder_path}")

    folder.mkdir(parents=True, exist_ok=True)
    WriteMarkerFile(folder)
    logger.info(f"Created folder: {folder_path}")
    return folder, True


def RenameFolder(root: Path, folder_path: str, new_name: str) -> str:
    """
    Rename a folder in place (same parent folder)

    Args:
        root: Uploads root
        folder_path: Relative path of the folder to rename
        new_name: New single-segment folder name

    Returns:
        str: New relative folder path

    Raises:
        UploadFilesValidationError: If the path or the new name is invalid
        UploadFilesNotFoundError: If the folder does not exist
        UploadFilesConflictError: If the new name is already taken
    """
    folder = ResolveFolderPath(root, folder_path)
    if not ValidateFolderName(new_name):
        raise UploadFilesValidationError(f"Invalid folder name: {new_name!r}")

    if not folder.is_dir():
        raise UploadFilesNotFoundError(f"Folder not found: {folder_path}")

    target = folder.with_name(new_name)
    if target.exists():
        raise UploadFilesConflictError(f"A folder named '{new_name}' already exists")

    folder.rename(target)
    new_path = target.relative_to(Path(root).absolute()).as_posix()
    logger.info(f"Renamed folder: {folder_path} -> {new_path}")
    return new_path


def DeleteFolder(root: Path, folder_path: str) -> TreeOperationResult:
    """
    Delete a folder and everything below it

    Args:
        root: Uploads root
        folder_path: Relative folder path (the root itself cannot be deleted)

    Returns:
        TreeOperationResult: items_processed = regular files deleted

    Raises:
        UploadFilesValidationError: If the path is invalid or names the root
        UploadFilesNotFoundError: If the folder does not exist
    """
    folder = ResolveFolderPath(root, folder_path)
    if not folder.is_dir():
        raise UploadFilesNotFoundError(f"Folder not found: {folder_path}")

    return RecursiveDelete(folder, display_root=Path(root).absolute())


# ==================== File Registry ====================

def ListFiles(root: Path, folder: Optional[str] = None) -> FileListing:
    """
    List the files of the uploads root or of one folder subtree

    Args:
        root: Uploads root
        folder: Optional relative folder path

    Returns:
        FileListing: Entries sorted by filename, totals and read errors

    Raises:
        UploadFilesValidationError: If the folder path is invalid
        UploadFilesNotFoundError: If the folder does not exist
    """
    root_path = Path(root).absolute()
    if not folder and not root_path.is_dir():
        return FileListing()

    directory = ResolveFolderPath(root_path, folder or "", allow_root=True)
    scan = RecursiveScan(root_path, directory)

    entries = sorted(scan.entries, key=lambda entry: (entry.name, entry.path))
    return FileListing(entries=entries, errors=scan.errors)


def _ResolveExistingFile(root: Path, public_path: str) -> Tuple[Path, str]:
    file_path, relative = ResolvePublicFilePath(root, public_path)
    if IsReservedName(relative):
        raise UploadFilesReservedError("The protective marker file cannot be modified")
    if not file_path.is_file():
        raise UploadFilesNotFoundError(f"File not found: {relative}")
    return file_path, relative


def DeleteFile(root: Path, public_path: str) -> str:
    """
    Delete one stored file

    Args:
        root: Uploads root
        public_path: Public URL path of the file (e.g. "/uploads/a/x.png")

    Returns:
        str: Relative path of the deleted file

    Raises:
        UploadFilesValidationError: If the path escapes the uploads root
        UploadFilesReservedError: If the path names the marker file
        UploadFilesNotFoundError: If the file does not exist
    """
    file_path, relative = _ResolveExistingFile(root, public_path)
    file_path.unlink()
    logger.info(f"Deleted file: {relative}")
    return relative


def RenameFile(root: Path, old_public_path: str, new_public_path: str) -> str:
    """
    Rename an image file

    The source must be an image and the extension cannot change.

    Args:
        root: Uploads root
        old_public_path: Public URL path of the existing file
        new_public_path: Public URL path of the new name

    Returns:
        str: New relative path

    Raises:
        UploadFilesValidationError: Invalid paths, non-image file, or a
                                    changed extension
        UploadFilesReservedError: If either path names the marker file
        UploadFilesNotFoundError: If the source file does not exist
        UploadFilesConflictError: If the new name is already taken
    """
    source, old_relative = _ResolveExistingFile(root, old_public_path)
    target, new_relative = ResolvePublicFilePath(root, new_public_path)
    if IsReservedName(new_relative):
        raise UploadFilesReservedError("The protective marker file name is reserved")

    extension = source.suffix.lower()
    if extension not in IMAGE_EXTENSIONS:
        raise UploadFilesValidationError(f"File type not allowed: {extension or old_relative}")
    if target.suffix.lower() != extension:
        raise UploadFilesValidationError("The file extension cannot be changed")

    if target.exists():
        raise UploadFilesConflictError(f"A file with this name already exists: {new_relative}")
    if not target.parent.is_dir():
        raise UploadFilesNotFoundError(f"Folder not found: {target.parent.relative_to(Path(root).absolute()).as_posix()}")

    source.rename(target)
    logger.info(f"Renamed file: {old_relative} -> {new_relative}")
    return new_relative


def MoveFile(root: Path, source_public_path: str, destination_public_path: str) -> str:
    """
    Move one file to another location under the uploads root

    Args:
        root: Uploads root
        source_public_path: Public URL path of the file
        destination_public_path: Public URL path of the destination

    Returns:
        str: New relative path

    Raises:
        UploadFilesValidationError: If a path is invalid or both are identical
        UploadFilesReservedError: If either path names the marker file
        UploadFilesNotFoundError: If the source file does not exist
        UploadFilesConflictError: If the destination exists
    """
    source, source_relative = _ResolveExistingFile(root, source_public_path)
    target, target_relative = ResolvePublicFilePath(root, destination_public_path)
    if IsReservedName(target_relative):
        raise UploadFilesReservedError("The protective marker file name is reserved")
    if source_relative == target_relative:
        raise UploadFilesValidationError("Source and destination must be different")
    if target.exists():
        raise UploadFilesConflictError(f"Destination already exists: {target_relative}")

    if not target.parent.exists():
        parent_relative = target_relative.rpartition("/")[0]
        if not ValidateFolderPath(parent_relative):
            raise UploadFilesValidationError(f"Invalid destination folder: {parent_relative}")
        target.parent.mkdir(parents=True, exist_ok=True)
        WriteMarkerFile(target.parent)

    os.replace(source, target)
    logger.info(f"Moved file: {source_relative} -> {target_relative}")
    return target_relative


# ==================== Formatting ====================

def FormatFileSize(size: int) -> str:
    """
    Human-readable file size

    Args:
        size: Size in bytes

    Returns:
        str: e.g. "0 B", "512 B", "1.5 KB", "4.88 KB", "2 MB"
    """
    if size <= 0:
        return "0 B"

    index = 0
    value = float(size)
    while value >= 1024 and index < len(SIZE_UNITS) - 1:
        value /= 1024
        index += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {SIZE_UNITS[index]}"


def GetMimeType(filename: str) -> str:
    """
    MIME type served for a stored file

    Args:
        filename: File name or path

    Returns:
        str: Content type from the extension table, application/octet-stream otherwise
    """
    return MIME_TYPES.get(Path(filename).suffix.lower(), DEFAULT_MIME_TYPE)
