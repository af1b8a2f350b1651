"""
Tests for the blob bridge in UploadFiles Server

Blob operations run against the in-memory FakeBlobStore; HttpBlobStore is
exercised with its requests session replaced.
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from blob_bridge import (
    CreateBlobStore,
    DeleteBlob,
    HttpBlobStore,
    ImportBlob,
    ImportBlobFolder,
    ListBlobs
)
from exceptions import UploadFilesBlobError, UploadFilesReservedError, UploadFilesValidationError
from protective_marker import MARKER_FILENAME
from server_config import ServerConfig
from tree_operations import CollisionPolicy


def _Response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    response.text = ""
    return response


# ==================== Listing ====================

def test_list_blobs_hides_markers(blob_store):
    blob_store.Add("photos/a.png", b"a")
    blob_store.Add("photos/.htaccess", b"rules")

    assert [blob.pathname for blob in ListBlobs(blob_store)] == ["photos/a.png"]


# ==================== Individual Import ====================

def test_import_blob(blob_store, uploads_root):
    url = blob_store.Add("photos/a.png", b"image")

    imported = ImportBlob(blob_store, uploads_root, url, "films")

    assert imported.name == "a.png"
    assert imported.path == "films/a.png"
    assert imported.size == 5
    assert imported.PublicUrl() == "/uploads/films/a.png"
    assert not imported.deleted_from_blob
    assert (uploads_root / "films" / "a.png").read_bytes() == b"image"
    assert (uploads_root / "films" / MARKER_FILENAME).exists()
    assert url in blob_store.blobs


def test_import_blob_delete_after(blob_store, uploads_root):
    url = blob_store.Add("a.png", b"image")

    imported = ImportBlob(blob_store, uploads_root, url, "films", delete_after=True)

    assert imported.deleted_from_blob
    assert imported.warning is None
    assert blob_store.deleted == [url]


def test_import_blob_delete_failure_keeps_file(blob_store, uploads_root):
    """Test a failed remote delete is reported as a warning only"""
    url = blob_store.Add("a.png", b"image")
    blob_store.fail_delete = True

    imported = ImportBlob(blob_store, uploads_root, url, "films", delete_after=True)

    assert not imported.deleted_from_blob
    assert "could not be deleted" in imported.warning
    assert (uploads_root / "films" / "a.png").exists()


def test_import_blob_errors(blob_store, uploads_root):
    url = blob_store.Add("a.png", b"image")
    blob_store.fail_fetch.add(url)

    with pytest.raises(UploadFilesBlobError):
        ImportBlob(blob_store, uploads_root, url, "films")
    with pytest.raises(UploadFilesValidationError):
        ImportBlob(blob_store, uploads_root, "", "films")
    with pytest.raises(UploadFilesValidationError):
        ImportBlob(blob_store, uploads_root, url, "../films")
    with pytest.raises(UploadFilesReservedError):
        ImportBlob(blob_store, uploads_root, blob_store.Add(".htaccess", b"x"), "films")


# ==================== Batch Import ====================

def test_import_blob_folder(blob_store, uploads_root):
    blob_store.Add("photos/a.png", b"a")
    blob_store.Add("photos/deep/b.png", b"bb")
    blob_store.Add("photos-other/c.png", b"c")

    result = ImportBlobFolder(blob_store, uploads_root, "photos", "imported", delete_after=True)

    assert result.items_processed == 2
    assert result.success
    # Flattened to basenames
    assert (uploads_root / "imported" / "a.png").read_bytes() == b"a"
    assert (uploads_root / "imported" / "b.png").read_bytes() == b"bb"
    assert not (uploads_root / "imported" / "c.png").exists()
    assert len(blob_store.deleted) == 2


def test_import_blob_folder_same_basename(blob_store, uploads_root):
    """Test blobs sharing a basename are all kept before any blob is deleted"""
    blob_store.Add("photos/a/x.png", b"first")
    blob_store.Add("photos/b/x.png", b"second")

    result = ImportBlobFolder(blob_store, uploads_root, "photos", "imported", delete_after=True)

    assert result.items_processed == 2
    assert (uploads_root / "imported" / "x.png").read_bytes() == b"first"
    assert (uploads_root / "imported" / "x_1.png").read_bytes() == b"second"
    assert len(blob_store.deleted) == 2


def test_import_blob_folder_overwrite_policy(blob_store, uploads_root):
    """Test overwrite replaces existing files but never a file from the same batch"""
    (uploads_root / "imported").mkdir()
    (uploads_root / "imported" / "x.png").write_bytes(b"old")
    blob_store.Add("photos/a/x.png", b"first")
    blob_store.Add("photos/b/x.png", b"second")

    result = ImportBlobFolder(blob_store, uploads_root, "photos", "imported",
                              collision_policy=CollisionPolicy.OVERWRITE)

    assert result.items_processed == 2
    assert (uploads_root / "imported" / "x.png").read_bytes() == b"first"
    assert (uploads_root / "imported" / "x_1.png").read_bytes() == b"second"


def test_import_blob_folder_rename_policy_keeps_existing(blob_store, uploads_root):
    (uploads_root / "imported").mkdir()
    (uploads_root / "imported" / "x.png").write_bytes(b"old")
    blob_store.Add("photos/x.png", b"new")

    ImportBlobFolder(blob_store, uploads_root, "photos", "imported", collision_policy="rename")

    assert (uploads_root / "imported" / "x.png").read_bytes() == b"old"
    assert (uploads_root / "imported" / "x_1.png").read_bytes() == b"new"


def test_import_blob_folder_partial_failure(blob_store, uploads_root):
    """Test one failing blob does not stop the batch"""
    blob_store.Add("photos/a.png", b"a")
    blob_store.fail_fetch.add(blob_store.Add("photos/b.png", b"b"))

    result = ImportBlobFolder(blob_store, uploads_root, "photos", "imported", delete_after=True)

    assert result.items_processed == 1
    assert result.success
    assert any("photos/b.png" in error for error in result.errors)
    assert len(blob_store.deleted) == 1


def test_import_blob_folder_without_match(blob_store, uploads_root):
    blob_store.Add("other/a.png", b"a")

    result = ImportBlobFolder(blob_store, uploads_root, "photos", "imported")

    assert result.items_processed == 0
    assert not result.success
    assert result.errors == ["No blob found in folder 'photos'"]
    assert not (uploads_root / "imported").exists()


def test_import_blob_folder_validation(blob_store, uploads_root):
    with pytest.raises(UploadFilesValidationError):
        ImportBlobFolder(blob_store, uploads_root, "", "imported")
    with pytest.raises(UploadFilesValidationError):
        ImportBlobFolder(blob_store, uploads_root, "photos", "")


def test_delete_blob(blob_store):
    url = blob_store.Add("a.png", b"a")

    DeleteBlob(blob_store, url)

    assert url not in blob_store.blobs
    with pytest.raises(UploadFilesValidationError):
        DeleteBlob(blob_store, "")


# ==================== HTTP Blob Store ====================

def test_create_blob_store():
    assert CreateBlobStore(ServerConfig()) is None

    store = CreateBlobStore(ServerConfig(blob_token="vercel_blob_rw_x"))
    assert isinstance(store, HttpBlobStore)
    assert store.session.headers["Authorization"] == "Bearer vercel_blob_rw_x"
    store.close()


def test_http_blob_store_allowed_urls():
    store = HttpBlobStore("token", "https://blob.vercel-storage.com", "blob.vercel-storage.com")

    assert store.IsAllowedUrl("https://abc.public.blob.vercel-storage.com/a.png")
    assert store.IsAllowedUrl("https://blob.vercel-storage.com/a.png")
    assert not store.IsAllowedUrl("http://abc.public.blob.vercel-storage.com/a.png")
    assert not store.IsAllowedUrl("https://evilblob.vercel-storage.com.attacker.net/a.png")
    assert not store.IsAllowedUrl("https://169.254.169.254/latest/meta-data")

    with pytest.raises(UploadFilesValidationError):
        store.Fetch("https://example.com/a.png")


def test_http_blob_store_list_follows_cursor():
    store = HttpBlobStore("token", "https://blob.vercel-storage.com/", "blob.vercel-storage.com")
    store.session = MagicMock()
    store.session.request.side_effect = [
        _Response(payload={
            "blobs": [{"url": "https://x.blob.vercel-storage.com/a.png", "pathname": "a.png",
                       "size": 3, "uploadedAt": "2024-05-01T10:00:00.000Z"}],
            "hasMore": True,
            "cursor": "next"
        }),
        _Response(payload={
            "blobs": [{"url": "https://x.blob.vercel-storage.com/b.png", "pathname": "b.png", "size": 4}],
            "hasMore": False
        })
    ]

    blobs = store.List()

    assert [blob.pathname for blob in blobs] == ["a.png", "b.png"]
    assert blobs[0].uploaded_at.year == 2024
    assert blobs[1].uploaded_at is None
    second_call = store.session.request.call_args_list[1]
    assert second_call.kwargs["params"]["cursor"] == "next"
    assert second_call.args == ("GET", "https://blob.vercel-storage.com")


def test_http_blob_store_errors():
    store = HttpBlobStore("token", "https://blob.vercel-storage.com", "blob.vercel-storage.com")
    store.session = MagicMock()

    store.session.request.return_value = _Response(status_code=403)
    with pytest.raises(UploadFilesBlobError, match="403"):
        store.Delete("https://x.blob.vercel-storage.com/a.png")

    store.session.request.side_effect = requests.exceptions.ConnectionError("refused")
    with pytest.raises(UploadFilesBlobError, match="connect"):
        store.List()


def test_http_blob_store_delete_payload():
    store = HttpBlobStore("token", "https://blob.vercel-storage.com", "blob.vercel-storage.com")
    store.session = MagicMock()
    store.session.request.return_value = _Response()

    store.Delete("https://x.blob.vercel-storage.com/a.png")

    store.session.request.assert_called_once_with(
        "POST", "https://blob.vercel-storage.com/delete",
        json={"urls": ["https://x.blob.vercel-storage.com/a.png"]},
        timeout=30
    )
