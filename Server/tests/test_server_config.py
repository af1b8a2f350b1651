"""
Tests for configuration loading in UploadFiles Server
"""

import json
import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from exceptions import UploadFilesConfigurationError
from server_config import DEFAULT_CONFIG, IMAGE_UPLOAD_TYPES, LoadServerConfig, ServerConfig


def test_defaults():
    config = LoadServerConfig(environ={})

    assert config.uploads_root == DEFAULT_CONFIG["uploads_root"]
    assert config.uploads_path.is_absolute()
    assert config.auth_mode == "token"
    assert config.max_upload_bytes == 10 * 1024 * 1024
    assert config.merge_collision_policy == "rename"
    assert config.accepted_upload_types == IMAGE_UPLOAD_TYPES
    assert config.blob_token is None


def test_config_file(tmp_path):
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps({
        "uploads_root": str(tmp_path / "files"),
        "merge_collision_policy": "overwrite",
        "unknown_key": True
    }))

    config = LoadServerConfig(str(config_file), environ={})

    assert config.uploads_path == tmp_path / "files"
    assert config.merge_collision_policy == "overwrite"


def test_missing_config_file_uses_defaults(tmp_path):
    config = LoadServerConfig(str(tmp_path / "missing.json"), environ={})
    assert config.port == DEFAULT_CONFIG["port"]


def test_environment_overrides_file(tmp_path):
    """Test environment variables win over the configuration file"""
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps({"write_token": "from-file"}))
    environ = {
        "UPLOADFILES_CONFIG": str(config_file),
        "UPLOADFILES_WRITE_TOKEN": "from-env",
        "UPLOADFILES_SIMPLE_TOKEN": "reader",
        "UPLOADFILES_MAX_UPLOAD_MB": "2.5",
        "UPLOADFILES_EXTRA_UPLOAD_TYPES": "text/plain, text/vtt",
        "UPLOADFILES_TRANSFER_ROOTS": "/srv/a,/srv/b",
        "BLOB_READ_WRITE_TOKEN": "blob",
        "UPLOADFILES_PORT": "9000",
        "UPLOADFILES_LOG_LEVEL": ""
    }

    config = LoadServerConfig(environ=environ)

    assert config.write_token == "from-env"
    assert config.read_token == "reader"
    assert config.max_upload_bytes == int(2.5 * 1024 * 1024)
    assert config.accepted_upload_types[-2:] == ["text/plain", "text/vtt"]
    assert config.transfer_roots == ["/srv/a", "/srv/b"]
    assert config.blob_token == "blob"
    assert config.port == 9000
    assert config.log_level == "INFO"


def test_invalid_values(tmp_path):
    with pytest.raises(UploadFilesConfigurationError):
        LoadServerConfig(environ={"UPLOADFILES_PORT": "not-a-number"})
    with pytest.raises(UploadFilesConfigurationError):
        LoadServerConfig(environ={"UPLOADFILES_AUTH_MODE": "oauth"})
    with pytest.raises(UploadFilesConfigurationError):
        LoadServerConfig(environ={"UPLOADFILES_COLLISION_POLICY": "skip"})

    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(UploadFilesConfigurationError):
        LoadServerConfig(str(broken), environ={})

    not_an_object = tmp_path / "list.json"
    not_an_object.write_text("[1, 2]")
    with pytest.raises(UploadFilesConfigurationError):
        LoadServerConfig(str(not_an_object), environ={})


def test_server_config_normalizes_case():
    config = ServerConfig(auth_mode="PASSWORD", merge_collision_policy="Overwrite")
    assert config.auth_mode == "password"
    assert config.merge_collision_policy == "overwrite"
