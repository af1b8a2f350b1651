"""
UploadFiles Server - Upload Handling

This module stores files received by the upload endpoint:
- Unique filename generation
- Batch validation (type allow-list and size limit) before any write
- Sequential writes with rollback of the batch on a write failure
"""

import logging
import re
import secrets
import string
import time
from pathlib import Path
from typing import Iterable, List

from exceptions import UploadFilesError, UploadFilesValidationError
from file_storage import EnsureFolder
from models.infrastructure import StoredUpload, UploadCandidate
from path_validator import ResolveFolderPath
from server_config import ServerConfig

logger = logging.getLogger(__name__)


RANDOM_TOKEN_LENGTH = 11
RANDOM_TOKEN_ALPHABET = string.ascii_lowercase + string.digits
UNSAFE_FILENAME_CHARACTERS = re.compile(r"[^A-Za-z0-9._-]")


def _SanitizeFilenamePart(value: str) -> str:
    return UNSAFE_FILENAME_CHARACTERS.sub("_", value)


def GenerateUniqueFilename(original: str) -> str:
    """
    Generate a collision-resistant filename for an uploaded file

    Format: <base>_<unix millis>_<random token><extension>, where base and
    extension come from the original name reduced to its last path segment.

    Args:
        original: Filename supplied by the client

    Returns:
        str: e.g. "photo_1718000000000_k3j9x0a1b2c.png"
    """
    name = (original or "").replace("\\", "/").rsplit("/", 1)[-1]
    name = name.lstrip(".")

    base, dot, extension = name.rpartition(".")
    if not dot or not base:
        base, extension = name, ""

    base = _SanitizeFilenamePart(base) or "file"
    extension = _SanitizeFilenamePart(extension)

    timestamp = int(time.time() * 1000)
    token = "".join(secrets.choice(RANDOM_TOKEN_ALPHABET) for _ in range(RANDOM_TOKEN_LENGTH))

    suffix = f".{extension}" if extension else ""
    return f"{base}_{timestamp}_{token}{suffix}"


def ValidateUploadBatch(candidates: List[UploadCandidate], allowed_types: Iterable[str], max_bytes: int) -> None:
    """
    Check every file of a batch before anything is written

    Args:
        candidates: Files received in the request
        allowed_types: Accepted MIME types
        max_bytes: Maximum size of a single file

    Raises:
        UploadFilesValidationError: Empty batch, disallowed type or oversized file
    """
    if not candidates:
        raise UploadFilesValidationError("No files provided")

    allowed = {mime.lower() for mime in allowed_types}
    for candidate in candidates:
        content_type = (candidate.content_type or "").split(";")[0].strip().lower()
        if content_type not in allowed:
            raise UploadFilesValidationError(
                f"File type not allowed: {candidate.content_type or 'unknown'} ({candidate.filename})"
            )
        if candidate.size > max_bytes:
            raise UploadFilesValidationError(
                f"File too large: {candidate.filename} ({candidate.size} bytes, max {max_bytes})"
            )


def StoreUploadBatch(root: Path, folder: str, candidates: List[UploadCandidate],
                     config: ServerConfig) -> List[StoredUpload]:
    """
    Store an upload batch into a folder

    The folder is created (with its marker) when missing. If a write fails
    the files already written by this batch are deleted before the error
    is raised.

    Args:
        root: Uploads root
        folder: Relative target folder
        candidates: Files to store
        config: Server configuration (type allow-list, size limit)

    Returns:
        List[StoredUpload]: Stored files in request order

    Raises:
        UploadFilesValidationError: Invalid folder or batch
        UploadFilesError: If a file cannot be written
    """
    ResolveFolderPath(root, folder)
    ValidateUploadBatch(candidates, config.accepted_upload_types, config.max_upload_bytes)

    folder = folder.strip().strip("/")
    target_folder, _ = EnsureFolder(root, folder)

    stored: List[StoredUpload] = []
    for candidate in candidates:
        unique_name = GenerateUniqueFilename(candidate.filename)
        destination = target_folder / unique_name
        try:
            with open(destination, 'xb') as f:
                f.write(candidate.data)
        except OSError as e:
            logger.error(f"Failed to store upload {candidate.filename}: {e}")
            _RollbackBatch(stored)
            raise UploadFilesError(f"Failed to store {candidate.filename}: {e.strerror or e}") from e

        stored.append(StoredUpload(
            name=unique_name,
            original_name=candidate.filename,
            path=f"{folder}/{unique_name}",
            size=candidate.size,
            absolute_path=destination
        ))

    logger.info(f"Stored {len(stored)} uploaded file(s) in {folder}")
    return stored


def _RollbackBatch(stored: List[StoredUpload]) -> None:
    for upload in stored:
        try:
            upload.absolute_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Rollback could not delete {upload.path}: {e}")
    if stored:
        logger.info(f"Rolled back {len(stored)} file(s) of the failed upload batch")
