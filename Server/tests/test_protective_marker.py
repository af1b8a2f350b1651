"""
Tests for the protective marker file in UploadFiles Server
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from protective_marker import MARKER_CONTENT, MARKER_FILENAME, IsReservedName, WriteMarkerFile


def test_is_reserved_name():
    """Test the marker is recognised by name or as the last path segment"""
    assert IsReservedName(".htaccess")
    assert IsReservedName("a/b/.htaccess")
    assert IsReservedName("/uploads/a/.htaccess")

    assert not IsReservedName("")
    assert not IsReservedName("x.htaccess")
    assert not IsReservedName(".htaccess/x.png")
    assert not IsReservedName("photo.png")


def test_write_marker_file(tmp_path):
    """Test the marker is written and regenerated with the fixed content"""
    marker = WriteMarkerFile(tmp_path)
    assert marker == tmp_path / MARKER_FILENAME
    assert marker.read_text(encoding='utf-8') == MARKER_CONTENT

    marker.write_text("tampered")
    WriteMarkerFile(tmp_path)
    assert marker.read_text(encoding='utf-8') == MARKER_CONTENT


def test_marker_content_directives():
    """Test the marker disables scripts and restricts to images"""
    assert "Options -ExecCGI" in MARKER_CONTENT
    assert "RemoveHandler" in MARKER_CONTENT
    assert "jpg|jpeg|png|gif|webp|svg" in MARKER_CONTENT
    assert "Deny from all" in MARKER_CONTENT
