"""
UploadFiles Server - Blob Bridge

This module moves files from an external blob store into the uploads root:
- BlobStore: abstract list / fetch / delete interface
- HttpBlobStore: Vercel-Blob-style REST implementation using requests
- Listing, individual import, batch import of a blob folder, deletion

Blobs are never modified in place. Deleting after import is best-effort:
a failed remote delete does not undo the local import.
"""

import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from urllib.parse import unquote, urlparse

import requests

from exceptions import UploadFilesBlobError, UploadFilesReservedError, UploadFilesValidationError
from file_storage import EnsureFolder
from models.infrastructure import BlobImport, BlobObject, TreeOperationResult
from path_validator import ResolveFolderPath
from protective_marker import IsReservedName
from server_config import ServerConfig
from tree_operations import CollisionPolicy, ResolveCollision

logger = logging.getLogger(__name__)


BLOB_LIST_PAGE_SIZE = 1000


# ==================== Blob Store Interface ====================

class BlobStore(ABC):
    """External object store holding files to import"""

    @abstractmethod
    def List(self) -> List[BlobObject]:
        """Return every blob of the store"""

    @abstractmethod
    def Fetch(self, url: str) -> bytes:
        """Download the content of one blob"""

    @abstractmethod
    def Delete(self, url: str) -> None:
        """Delete one blob"""


class HttpBlobStore(BlobStore):
    """
    Blob store reached over the Vercel Blob REST API

    Listing is paginated with a cursor, deletion posts the URL list to
    <api_url>/delete. Downloads are restricted to hosts ending with
    host_suffix so a caller-supplied URL cannot make the server fetch
    arbitrary addresses.
    """

    def __init__(self, token: str, api_url: str, host_suffix: str, timeout: int = 30):
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.host_suffix = host_suffix.lower().lstrip(".")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {token}"})

    def close(self):
        if self.session:
            self.session.close()

    def _Request(self, method: str, url: str, **kwargs) -> requests.Response:
        kwargs.setdefault("timeout", self.timeout)
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.exceptions.Timeout:
            logger.error(f"Blob store request timed out: {method} {url}")
            raise UploadFilesBlobError("Blob store request timed out")
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Cannot connect to blob store: {e}")
            raise UploadFilesBlobError("Cannot connect to the blob store")
        except requests.exceptions.RequestException as e:
            raise UploadFilesBlobError(f"Blob store request error: {str(e)}")

        if response.status_code >= 400:
            logger.error(f"Blob store returned {response.status_code} for {method} {url}: {response.text[:200]}")
            raise UploadFilesBlobError(f"Blob store returned status {response.status_code}")
        return response

    def List(self) -> List[BlobObject]:
        blobs = []
        cursor = None
        while True:
            params = {"limit": BLOB_LIST_PAGE_SIZE}
            if cursor:
                params["cursor"] = cursor
            try:
                data = self._Request("GET", self.api_url, params=params).json()
            except ValueError:
                raise UploadFilesBlobError("Blob store returned an invalid listing")

            for item in data.get("blobs", []):
                blobs.append(BlobObject(
                    url=item["url"],
                    pathname=item.get("pathname", ""),
                    size=int(item.get("size", 0)),
                    uploaded_at=_ParseTimestamp(item.get("uploadedAt"))
                ))

            cursor = data.get("cursor")
            if not data.get("hasMore") or not cursor:
                return blobs

    def IsAllowedUrl(self, url: str) -> bool:
        parsed = urlparse(url)
        host = (parsed.hostname or "").lower()
        if parsed.scheme != "https" or not host:
            return False
        return host == self.host_suffix or host.endswith("." + self.host_suffix)

    def Fetch(self, url: str) -> bytes:
        if not self.IsAllowedUrl(url):
            raise UploadFilesValidationError(f"Blob URL is not served by the blob store: {url}")
        # Public blob URLs are fetched without the API credentials
        try:
            response = requests.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Blob download failed for {url}: {e}")
            raise UploadFilesBlobError(f"Download failed: {str(e)}")
        if response.status_code >= 400:
            raise UploadFilesBlobError(f"Download failed with status {response.status_code}")
        return response.content

    def Delete(self, url: str) -> None:
        self._Request("POST", f"{self.api_url}/delete", json={"urls": [url]})
        logger.info(f"Deleted blob: {url}")


def _ParseTimestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def CreateBlobStore(config: ServerConfig) -> Optional[BlobStore]:
    """
    Build the blob store described by the configuration

    Returns:
        Optional[BlobStore]: None when no blob token is configured
    """
    if not config.blob_token:
        logger.info("No blob token configured - blob import endpoints are disabled")
        return None
    return HttpBlobStore(
        token=config.blob_token,
        api_url=config.blob_api_url,
        host_suffix=config.blob_host_suffix,
        timeout=config.blob_timeout_seconds
    )


# ==================== Blob Operations ====================

def ListBlobs(store: BlobStore) -> List[BlobObject]:
    """List remote blobs, hiding protective marker files"""
    return [blob for blob in store.List() if not IsReservedName(blob.pathname)]


def _FilenameFromUrl(blob_url: str) -> str:
    last_segment = unquote(urlparse(blob_url).path.rstrip("/").rsplit("/", 1)[-1])
    last_segment = last_segment.replace("\\", "/").rsplit("/", 1)[-1]
    if last_segment in ("", ".", ".."):
        return f"imported-{int(time.time() * 1000)}.jpg"
    return last_segment


def ImportBlob(store: BlobStore, root: Path, blob_url: str, target_folder: str,
               delete_after: bool = False) -> BlobImport:
    """
    Download one blob into an uploads folder

    The local filename is the last segment of the blob URL; an existing
    file with that name is overwritten.

    Args:
        store: Blob store
        root: Uploads root
        blob_url: URL of the blob
        target_folder: Relative uploads folder (created when missing)
        delete_after: Delete the blob once stored locally

    Returns:
        BlobImport: Stored file; warning set when the remote delete failed

    Raises:
        UploadFilesValidationError: Missing URL or invalid folder
        UploadFilesReservedError: If the blob is a marker file
        UploadFilesBlobError: If the download fails
    """
    if not blob_url:
        raise UploadFilesValidationError("Blob URL is required")

    filename = _FilenameFromUrl(blob_url)
    if IsReservedName(filename):
        raise UploadFilesReservedError("The protective marker file cannot be imported")

    folder, _ = EnsureFolder(root, target_folder)
    data = store.Fetch(blob_url)

    destination = folder / filename
    destination.write_bytes(data)
    relative = destination.relative_to(Path(root).absolute()).as_posix()
    logger.info(f"Imported blob {blob_url} -> {relative} ({len(data)} bytes)")

    imported = BlobImport(name=filename, path=relative, size=len(data), blob_url=blob_url)

    if delete_after:
        try:
            store.Delete(blob_url)
            imported.deleted_from_blob = True
        except UploadFilesBlobError as e:
            imported.warning = f"File imported but the blob could not be deleted: {e}"
            logger.warning(f"Could not delete blob {blob_url} after import: {e}")

    return imported


def ImportBlobFolder(store: BlobStore, root: Path, prefix: str, target_folder: str,
                     delete_after: bool = False,
                     collision_policy: CollisionPolicy = CollisionPolicy.RENAME) -> TreeOperationResult:
    """
    Download every blob of a blob folder into an uploads folder

    Blobs are downloaded one after another and flattened to their basename.
    A name already written by this batch always gets a "_<n>" suffix; a
    file that existed before the import follows collision_policy. A failing
    blob is recorded and the batch continues.

    Args:
        store: Blob store
        root: Uploads root
        prefix: Blob folder name (blobs whose pathname starts with "<prefix>/")
        target_folder: Relative uploads folder (created when missing)
        delete_after: Delete each blob once stored locally
        collision_policy: Handling of files already in the target folder

    Returns:
        TreeOperationResult: items_processed = blobs imported; unsuccessful
                             when no blob matched or none could be imported
    """
    prefix = (prefix or "").strip().strip("/")
    if not prefix:
        raise UploadFilesValidationError("Blob folder name is required")
    ResolveFolderPath(root, target_folder)

    folder_prefix = prefix + "/"
    matching = [blob for blob in ListBlobs(store) if blob.pathname.startswith(folder_prefix)]

    result = TreeOperationResult()
    if not matching:
        result.RecordError(f"No blob found in folder '{prefix}'")
        return result

    folder, _ = EnsureFolder(root, target_folder)
    written = set()

    for blob in matching:
        requested = folder / _FilenameFromUrl(blob.pathname)
        policy = CollisionPolicy.RENAME if requested in written else collision_policy
        destination = ResolveCollision(requested, policy)
        try:
            data = store.Fetch(blob.url)
            destination.write_bytes(data)
        except (UploadFilesBlobError, UploadFilesValidationError, OSError) as e:
            message = f"Failed to import {blob.pathname}: {e}"
            result.RecordError(message)
            logger.warning(message)
            continue

        written.update([requested, destination])
        result.items_processed += 1
        if delete_after:
            try:
                store.Delete(blob.url)
            except UploadFilesBlobError as e:
                logger.warning(f"Could not delete blob {blob.pathname} after import: {e}")

    logger.info(
        f"Imported {result.items_processed}/{len(matching)} blob(s) from '{prefix}' "
        f"into {target_folder} ({len(result.errors)} error(s))"
    )
    return result


def DeleteBlob(store: BlobStore, blob_url: str) -> None:
    """
    Delete one remote blob

    Raises:
        UploadFilesValidationError: If the URL is missing
        UploadFilesBlobError: If the blob store rejects the request
    """
    if not blob_url:
        raise UploadFilesValidationError("Blob URL is required")
    store.Delete(blob_url)
