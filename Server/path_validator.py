"""
UploadFiles Server - Path Validation

This module validates folder names and folder paths supplied by clients and
guards every filesystem path built from user input against escaping the
uploads root.

Folder naming rules:
- Single segment: ^[A-Za-z0-9_-]{1,50}$
- Multi-segment path: ^[A-Za-z0-9_-]+(/[A-Za-z0-9_-]+)*$, at most 200
  characters, every segment at most 50 characters
"""

import os
import re
from pathlib import Path
from typing import Iterable, Tuple, Union

from exceptions import UploadFilesValidationError

PathLike = Union[str, Path]


# ==================== Naming Rules ====================

MAX_FOLDER_NAME_LENGTH = 50
MAX_FOLDER_PATH_LENGTH = 200

FOLDER_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,50}$")
FOLDER_PATH_PATTERN = re.compile(r"^[A-Za-z0-9_-]+(/[A-Za-z0-9_-]+)*$")

PUBLIC_PREFIX = "uploads/"


def ValidateFolderName(name: str) -> bool:
    """
    Check a single folder name segment

    Args:
        name: Folder name (e.g. "films")

    Returns:
        bool: True if name matches ^[A-Za-z0-9_-]{1,50}$
    """
    if not isinstance(name, str):
        return False
    return FOLDER_NAME_PATTERN.fullmatch(name) is not None


def ValidateFolderPath(path: str) -> bool:
    """
    Check a slash-delimited folder path (e.g. "films/action")

    Args:
        path: Relative folder path

    Returns:
        bool: True if the path is well formed, at most 200 characters and
              every segment is a valid folder name
    """
    if not isinstance(path, str) or not path or len(path) > MAX_FOLDER_PATH_LENGTH:
        return False
    if FOLDER_PATH_PATTERN.fullmatch(path) is None:
        return False
    return all(len(segment) <= MAX_FOLDER_NAME_LENGTH for segment in path.split("/"))


def IsSubPath(parent: str, child: str) -> bool:
    """
    Logical containment test on folder path strings

    Used to reject moving a folder into itself or one of its descendants.
    Compares path strings, not filesystem identity.

    Args:
        parent: Folder path (e.g. "a")
        child: Folder path (e.g. "a/b")

    Returns:
        bool: True if child equals parent or lies below it
    """
    parent = parent.strip("/")
    child = child.strip("/")
    return child == parent or child.startswith(parent + "/")


# ==================== Root Containment ====================

def _Normalize(path: PathLike) -> str:
    return os.path.normcase(os.path.realpath(os.path.abspath(str(path))))


def IsWithinRoot(candidate: PathLike, root: PathLike) -> bool:
    """
    Check that a path stays inside the root directory

    Both paths are made absolute and normalized. The candidate must equal
    the root or start with root + separator; a bare string prefix is not
    enough ("uploads-evil" is not inside "uploads").

    Args:
        candidate: Path to check
        root: Root directory

    Returns:
        bool: True if candidate is the root or lies inside it
    """
    candidate_norm = _Normalize(candidate)
    root_norm = _Normalize(root)
    if candidate_norm == root_norm:
        return True
    root_prefix = root_norm if root_norm.endswith(os.sep) else root_norm + os.sep
    return candidate_norm.startswith(root_prefix)


# ==================== Path Resolution ====================

def ResolveFolderPath(root: PathLike, folder_path: str, allow_root: bool = False) -> Path:
    """
    Validate a folder path and resolve it under the uploads root

    Args:
        root: Uploads root
        folder_path: Relative folder path (may be empty when allow_root is set)
        allow_root: Whether an empty path resolves to the root itself

    Returns:
        Path: Absolute folder path

    Raises:
        UploadFilesValidationError: If the path is invalid or escapes the root
    """
    root_path = Path(root).absolute()
    folder_path = (folder_path or "").strip().strip("/")

    if not folder_path:
        if allow_root:
            return root_path
        raise UploadFilesValidationError("Folder path is required")

    if not ValidateFolderPath(folder_path):
        raise UploadFilesValidationError(
            f"Invalid folder path: {folder_path!r}. Use letters, digits, '-' and '_' "
            f"separated by '/' (max {MAX_FOLDER_NAME_LENGTH} characters per folder, "
            f"{MAX_FOLDER_PATH_LENGTH} in total)"
        )

    resolved = root_path.joinpath(*folder_path.split("/"))
    if not IsWithinRoot(resolved, root_path):
        raise UploadFilesValidationError(f"Folder path escapes the uploads root: {folder_path!r}")
    return resolved


def ToRelativePath(public_path: str) -> str:
    """
    Strip the public URL prefix from a file path

    "/uploads/a/x.png", "uploads/a/x.png" and "a/x.png" all become "a/x.png".
    """
    relative = (public_path or "").strip().replace("\\", "/").lstrip("/")
    if relative.startswith(PUBLIC_PREFIX):
        relative = relative[len(PUBLIC_PREFIX):]
    return relative


def ResolvePublicFilePath(root: PathLike, public_path: str,
                          strip_public_prefix: bool = True) -> Tuple[Path, str]:
    """
    Resolve a client-supplied file location under the uploads root

    Args:
        root: Uploads root
        public_path: Public URL path of a file (e.g. "/uploads/a/b/x.png")
        strip_public_prefix: Remove a leading "uploads/" segment. Turn off
                             for paths already relative to the root, where
                             "uploads" is an ordinary folder name.

    Returns:
        Tuple[Path, str]: (absolute path, relative path under root)

    Raises:
        UploadFilesValidationError: If the path is empty or escapes the root
    """
    if not public_path or "\x00" in public_path:
        raise UploadFilesValidationError("File path is required")

    if strip_public_prefix:
        relative = ToRelativePath(public_path)
    else:
        relative = public_path.strip().replace("\\", "/").lstrip("/")
    segments = [segment for segment in relative.split("/") if segment]
    if not segments:
        raise UploadFilesValidationError("File path is required")
    if any(segment in (".", "..") for segment in segments):
        raise UploadFilesValidationError(f"Invalid file path: {public_path!r}")

    root_path = Path(root).absolute()
    resolved = root_path.joinpath(*segments)

    if not IsWithinRoot(resolved, root_path) or _Normalize(resolved) == _Normalize(root_path):
        raise UploadFilesValidationError(f"Invalid file path: {public_path!r}")

    return resolved, "/".join(segments)


def ResolveLocalPath(path: str, allowed_roots: Iterable[PathLike] = ()) -> Path:
    """
    Resolve a server-local path used by import and export

    Args:
        path: Local filesystem path
        allowed_roots: Directories the path must stay within (empty = unrestricted)

    Returns:
        Path: Absolute path

    Raises:
        UploadFilesValidationError: If the path is empty or outside every allowed root
    """
    if not path or not path.strip() or "\x00" in path:
        raise UploadFilesValidationError("Local path is required")

    resolved = Path(path.strip()).expanduser().absolute()
    allowed_roots = list(allowed_roots)
    if allowed_roots and not any(IsWithinRoot(resolved, allowed) for allowed in allowed_roots):
        raise UploadFilesValidationError(f"Local path is outside the allowed transfer roots: {path}")
    return resolved
