"""
Tests for local import and export in UploadFiles Server
"""

import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from conftest import WriteFile
from exceptions import (
    UploadFilesConflictError,
    UploadFilesNotFoundError,
    UploadFilesReservedError,
    UploadFilesValidationError
)
from protective_marker import MARKER_CONTENT, MARKER_FILENAME, WriteMarkerFile
from transfers import ExportToLocal, ImportFromLocal


@pytest.fixture
def local_dir(tmp_path):
    source = tmp_path / "local"
    WriteFile(source / "one.png", b"1")
    WriteFile(source / "nested" / "two.png", b"22")
    return source


# ==================== Import ====================

def test_import_directory(uploads_root, local_dir):
    """Test a directory tree is copied with markers in every folder"""
    result = ImportFromLocal(uploads_root, str(local_dir), "imported")

    assert result.items_processed == 2
    assert result.success
    assert (uploads_root / "imported" / "one.png").read_bytes() == b"1"
    assert (uploads_root / "imported" / "nested" / "two.png").read_bytes() == b"22"
    assert (uploads_root / "imported" / MARKER_FILENAME).read_text() == MARKER_CONTENT
    assert (uploads_root / "imported" / "nested" / MARKER_FILENAME).exists()


def test_import_directory_overwrites(uploads_root, local_dir):
    WriteFile(uploads_root / "imported" / "one.png", b"old")

    result = ImportFromLocal(uploads_root, str(local_dir), "imported")

    assert result.success
    assert (uploads_root / "imported" / "one.png").read_bytes() == b"1"


def test_import_single_file_into_root(uploads_root, local_dir):
    result = ImportFromLocal(uploads_root, str(local_dir / "one.png"))

    assert result.items_processed == 1
    assert (uploads_root / "one.png").read_bytes() == b"1"


def test_import_errors(uploads_root, local_dir, tmp_path):
    WriteFile(local_dir / MARKER_FILENAME, b"rules")

    with pytest.raises(UploadFilesValidationError, match="does not exist"):
        ImportFromLocal(uploads_root, str(tmp_path / "missing"))
    with pytest.raises(UploadFilesValidationError):
        ImportFromLocal(uploads_root, "")
    with pytest.raises(UploadFilesValidationError):
        ImportFromLocal(uploads_root, str(local_dir), "../escape")
    with pytest.raises(UploadFilesReservedError):
        ImportFromLocal(uploads_root, str(local_dir / MARKER_FILENAME), "a")
    assert not (uploads_root / "a").exists()


def test_import_respects_transfer_roots(uploads_root, local_dir, tmp_path):
    allowed = tmp_path / "allowed"
    allowed.mkdir()

    with pytest.raises(UploadFilesValidationError, match="transfer roots"):
        ImportFromLocal(uploads_root, str(local_dir), "a", allowed_roots=[str(allowed)])

    result = ImportFromLocal(uploads_root, str(local_dir), "a", allowed_roots=[str(tmp_path)])
    assert result.items_processed == 2


# ==================== Export ====================

def test_export_folder(uploads_root, tmp_path):
    """Test an export copies files without any marker"""
    WriteFile(uploads_root / "a" / "x.png", b"x" * 10)
    WriteFile(uploads_root / "a" / "b" / "y.png", b"y" * 5)
    WriteMarkerFile(uploads_root / "a")
    WriteMarkerFile(uploads_root / "a" / "b")
    target = tmp_path / "export"

    result, scan = ExportToLocal(uploads_root, "a", str(target))

    assert result.items_processed == 2
    assert result.success
    assert scan.total_bytes == 15
    assert len(scan.entries) == 2
    assert (target / "x.png").read_bytes() == b"x" * 10
    assert (target / "b" / "y.png").exists()
    assert not (target / MARKER_FILENAME).exists()
    assert not (target / "b" / MARKER_FILENAME).exists()


def test_export_whole_root(uploads_root, tmp_path):
    WriteFile(uploads_root / "top.png")
    WriteFile(uploads_root / "a" / "x.png")

    result, scan = ExportToLocal(uploads_root, None, str(tmp_path / "backup"))

    assert result.items_processed == 2
    assert (tmp_path / "backup" / "a" / "x.png").exists()


def test_export_errors(uploads_root, tmp_path):
    (uploads_root / "empty").mkdir()
    WriteMarkerFile(uploads_root / "empty")
    WriteFile(uploads_root / "a" / "x.png")
    WriteFile(tmp_path / "a-file")

    with pytest.raises(UploadFilesNotFoundError):
        ExportToLocal(uploads_root, "missing", str(tmp_path / "out"))
    with pytest.raises(UploadFilesValidationError, match="inside the uploads root"):
        ExportToLocal(uploads_root, "a", str(uploads_root / "copy"))
    with pytest.raises(UploadFilesConflictError):
        ExportToLocal(uploads_root, "a", str(tmp_path / "a-file"))
    with pytest.raises(UploadFilesValidationError, match="no files"):
        ExportToLocal(uploads_root, "empty", str(tmp_path / "out"))
    assert not (tmp_path / "out").exists()
