"""
UploadFiles Server - Local Import / Export

Copies between the uploads root and other directories of the server's
filesystem:
- Import: a local file or directory tree into an uploads folder
- Export: an uploads folder (or the whole root) to a local directory

Local paths must stay within the configured transfer roots when any are set.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Tuple

from exceptions import (
    UploadFilesConflictError,
    UploadFilesNotFoundError,
    UploadFilesReservedError,
    UploadFilesValidationError
)
from file_storage import EnsureFolder
from models.infrastructure import TreeOperationResult, TreePlan, TreeScanResult
from models.infrastructure.tree_operation import COPY_FILE
from path_validator import IsWithinRoot, ResolveFolderPath, ResolveLocalPath
from protective_marker import IsReservedName
from tree_operations import CollisionPolicy, ExecutePlan, RecursiveCopy, RecursiveScan

logger = logging.getLogger(__name__)


def _ResolveTargetFolder(root: Path, target_folder: Optional[str]) -> Path:
    """Uploads folder receiving an import, created when missing"""
    target_folder = (target_folder or "").strip().strip("/")
    if not target_folder:
        return Path(root).absolute()
    folder, _ = EnsureFolder(root, target_folder)
    return folder


def ImportFromLocal(root: Path, source_path: str, target_folder: Optional[str] = None,
                    allowed_roots: Iterable[str] = ()) -> TreeOperationResult:
    """
    Import a local file or directory into the uploads root

    A file is copied into the target folder under its own name. A directory
    is copied recursively (existing files are overwritten) and every
    destination folder receives a fresh protective marker.

    Args:
        root: Uploads root
        source_path: Local file or directory
        target_folder: Relative uploads folder (empty = the root itself)
        allowed_roots: Directories the source must stay within

    Returns:
        TreeOperationResult: items_processed = files imported

    Raises:
        UploadFilesValidationError: Missing or disallowed source, invalid folder
        UploadFilesReservedError: If the source file is a marker file
    """
    root_path = Path(root).absolute()
    source = ResolveLocalPath(source_path, allowed_roots)

    if not source.exists():
        raise UploadFilesValidationError(f"Source path does not exist: {source_path}")

    # Validate before creating anything
    ResolveFolderPath(root_path, target_folder or "", allow_root=True)

    if source.is_file():
        if IsReservedName(source.name):
            raise UploadFilesReservedError("The protective marker file cannot be imported")
        destination_folder = _ResolveTargetFolder(root_path, target_folder)
        plan = TreePlan()
        plan.Add(COPY_FILE, source=source, destination=destination_folder / source.name, counts=True)
        result = ExecutePlan(plan, CollisionPolicy.OVERWRITE, root_path)
    elif source.is_dir():
        destination_folder = _ResolveTargetFolder(root_path, target_folder)
        result = RecursiveCopy(source, destination_folder, CollisionPolicy.OVERWRITE,
                               write_markers=True, display_root=root_path)
    else:
        raise UploadFilesValidationError(f"Source path must be a file or a folder: {source_path}")

    logger.info(
        f"Imported {result.items_processed} file(s) from {source} "
        f"into /{destination_folder.relative_to(root_path).as_posix().lstrip('.')}"
    )
    return result


def ExportToLocal(root: Path, source_folder: Optional[str], target_path: str,
                  allowed_roots: Iterable[str] = ()) -> Tuple[TreeOperationResult, TreeScanResult]:
    """
    Export an uploads folder (or the whole root) to a local directory

    Marker files are neither copied nor written into the export.

    Args:
        root: Uploads root
        source_folder: Relative uploads folder (empty = the whole root)
        target_path: Local destination directory (created when missing)
        allowed_roots: Directories the target must stay within

    Returns:
        Tuple[TreeOperationResult, TreeScanResult]: copy result and the
                                                    pre-flight scan totals

    Raises:
        UploadFilesValidationError: Invalid paths, a target inside the
                                    uploads root, or nothing to export
        UploadFilesNotFoundError: If the source folder does not exist
        UploadFilesConflictError: If the target exists and is not a folder
    """
    root_path = Path(root).absolute()
    source = ResolveFolderPath(root_path, source_folder or "", allow_root=True)
    target = ResolveLocalPath(target_path, allowed_roots)

    if not source.is_dir():
        raise UploadFilesNotFoundError(f"Source folder not found: {source_folder}")
    if IsWithinRoot(target, root_path):
        raise UploadFilesValidationError("The export target cannot be inside the uploads root")
    if target.exists() and not target.is_dir():
        raise UploadFilesConflictError(f"Export target exists and is not a folder: {target_path}")

    scan = RecursiveScan(root_path, source)
    if not scan.entries:
        raise UploadFilesValidationError("The source folder contains no files to export")

    result = RecursiveCopy(source, target, CollisionPolicy.OVERWRITE, write_markers=False, display_root=root_path)
    logger.info(
        f"Exported {result.items_processed}/{len(scan.entries)} file(s) "
        f"({scan.total_bytes} bytes) to {target}"
    )
    return result, scan
