"""
Tests for folder name/path validation and root containment in UploadFiles Server
"""

import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from exceptions import UploadFilesValidationError
from path_validator import (
    IsSubPath,
    IsWithinRoot,
    ResolveFolderPath,
    ResolveLocalPath,
    ResolvePublicFilePath,
    ToRelativePath,
    ValidateFolderName,
    ValidateFolderPath
)


def test_validate_folder_name():
    """Test single-segment folder names"""
    # Valid
    assert ValidateFolderName("films")
    assert ValidateFolderName("Films_2024-new")
    assert ValidateFolderName("a" * 50)

    # Invalid
    assert not ValidateFolderName("")
    assert not ValidateFolderName("a" * 51)
    assert not ValidateFolderName("films/action")
    assert not ValidateFolderName("..")
    assert not ValidateFolderName("my folder")
    assert not ValidateFolderName("café")
    assert not ValidateFolderName(None)


def test_validate_folder_path():
    """Test slash-delimited folder paths"""
    # Valid
    assert ValidateFolderPath("podcasts")
    assert ValidateFolderPath("podcasts/films/action")

    # Invalid
    assert not ValidateFolderPath("")
    assert not ValidateFolderPath("/podcasts")
    assert not ValidateFolderPath("podcasts/")
    assert not ValidateFolderPath("podcasts//films")
    assert not ValidateFolderPath("../etc")
    assert not ValidateFolderPath("a/./b")
    assert not ValidateFolderPath("/".join(["abcdefghij"] * 19))  # 208 characters
    assert not ValidateFolderPath("ok/" + "x" * 51)


def test_is_sub_path():
    """Test logical containment of folder paths"""
    assert IsSubPath("a", "a/b")
    assert IsSubPath("a", "a/b/c")
    assert IsSubPath("a", "a")
    assert not IsSubPath("a", "ab")
    assert not IsSubPath("a/b", "a")
    assert not IsSubPath("a", "b/a")


def test_is_within_root(tmp_path):
    """Test root containment uses separator-aware prefixes"""
    root = tmp_path / "uploads"
    root.mkdir()

    assert IsWithinRoot(root, root)
    assert IsWithinRoot(root / "a" / "b.png", root)
    assert not IsWithinRoot(tmp_path / "uploads-evil" / "x.png", root)
    assert not IsWithinRoot(root / ".." / "secret.txt", root)


def test_resolve_folder_path(tmp_path):
    """Test folder paths resolve under the root and bad paths are rejected"""
    root = tmp_path / "uploads"
    root.mkdir()

    assert ResolveFolderPath(root, "a/b") == root.absolute() / "a" / "b"
    assert ResolveFolderPath(root, "/a/b/") == root.absolute() / "a" / "b"
    assert ResolveFolderPath(root, "", allow_root=True) == root.absolute()

    with pytest.raises(UploadFilesValidationError):
        ResolveFolderPath(root, "../etc")
    with pytest.raises(UploadFilesValidationError):
        ResolveFolderPath(root, "")


def test_resolve_public_file_path(tmp_path):
    """Test public file paths with and without the /uploads prefix"""
    root = tmp_path / "uploads"
    root.mkdir()

    resolved, relative = ResolvePublicFilePath(root, "/uploads/a/b/x.png")
    assert resolved == root.absolute() / "a" / "b" / "x.png"
    assert relative == "a/b/x.png"

    _, relative = ResolvePublicFilePath(root, "a//x.png")
    assert relative == "a/x.png"

    assert ToRelativePath("/uploads/a/x.png") == "a/x.png"
    assert ToRelativePath("uploads/a/x.png") == "a/x.png"

    # Traversal, empty input and the root itself are rejected
    for bad_path in ["/uploads/../secret.txt", "../../etc/passwd", "", "/uploads/", "a/\x00.png"]:
        with pytest.raises(UploadFilesValidationError):
            ResolvePublicFilePath(root, bad_path)


def test_resolve_root_relative_file_path(tmp_path):
    """Test a folder named uploads is kept when the prefix is not stripped"""
    root = tmp_path / "uploads"
    root.mkdir()

    resolved, relative = ResolvePublicFilePath(root, "uploads/x.png", strip_public_prefix=False)
    assert resolved == root.absolute() / "uploads" / "x.png"
    assert relative == "uploads/x.png"

    _, relative = ResolvePublicFilePath(root, "/uploads/uploads/x.png")
    assert relative == "uploads/x.png"

    with pytest.raises(UploadFilesValidationError):
        ResolvePublicFilePath(root, "../x.png", strip_public_prefix=False)


def test_resolve_public_file_path_rejects_symlink_escape(tmp_path):
    """Test a symlink pointing outside the root is not followed out of it"""
    root = tmp_path / "uploads"
    root.mkdir()
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "secret.txt").write_text("secret")
    (root / "link").symlink_to(outside, target_is_directory=True)

    with pytest.raises(UploadFilesValidationError):
        ResolvePublicFilePath(root, "/uploads/link/secret.txt")


def test_resolve_local_path(tmp_path):
    """Test transfer root restrictions on local paths"""
    allowed = tmp_path / "transfers"
    allowed.mkdir()

    # Unrestricted when no transfer roots are configured
    assert ResolveLocalPath(str(tmp_path / "anywhere")) == (tmp_path / "anywhere").absolute()

    assert ResolveLocalPath(str(allowed / "in"), [str(allowed)]) == (allowed / "in").absolute()
    with pytest.raises(UploadFilesValidationError):
        ResolveLocalPath(str(tmp_path / "elsewhere"), [str(allowed)])
    with pytest.raises(UploadFilesValidationError):
        ResolveLocalPath("  ")
