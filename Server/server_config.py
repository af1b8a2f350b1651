"""
UploadFiles Server - Configuration

This module builds the single configuration object used by the server.
Values are resolved once at startup from:
1. Built-in defaults (DEFAULT_CONFIG)
2. An optional JSON configuration file
3. Environment variables

Route handlers never read the process environment; they receive the
ServerConfig stored on the application state.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ValidationError, field_validator

from exceptions import UploadFilesConfigurationError

logger = logging.getLogger(__name__)


# ==================== Defaults ====================

IMAGE_UPLOAD_TYPES = [
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/svg+xml"
]

AUTH_MODES = ["token", "password"]
COLLISION_POLICIES = ["overwrite", "rename"]

DEFAULT_CONFIG = {
    "uploads_root": "public/uploads",
    "auth_mode": "token",
    "write_token": None,
    "read_token": None,
    "username": None,
    "password": None,
    "max_upload_bytes": 10 * 1024 * 1024,  # 10 MiB per file
    "allowed_upload_types": IMAGE_UPLOAD_TYPES,
    "extra_upload_types": [],
    "merge_collision_policy": "rename",
    "transfer_roots": [],
    "blob_token": None,
    "blob_api_url": "https://blob.vercel-storage.com",
    "blob_host_suffix": "blob.vercel-storage.com",
    "blob_timeout_seconds": 30,
    "cors_allowed_origins": ["*"],
    "log_dir": "logs",
    "log_level": "INFO",
    "host": "0.0.0.0",
    "port": 8000
}


def _SplitList(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


# Environment variable -> (config key, converter)
ENVIRONMENT_OVERRIDES = {
    "UPLOADS_ROOT": ("uploads_root", str),
    "UPLOADFILES_AUTH_MODE": ("auth_mode", str),
    "UPLOADFILES_WRITE_TOKEN": ("write_token", str),
    "UPLOADFILES_SIMPLE_TOKEN": ("read_token", str),
    "UPLOADFILES_USER": ("username", str),
    "UPLOADFILES_PASSWORD": ("password", str),
    "UPLOADFILES_MAX_UPLOAD_MB": ("max_upload_bytes", lambda v: int(float(v) * 1024 * 1024)),
    "UPLOADFILES_EXTRA_UPLOAD_TYPES": ("extra_upload_types", _SplitList),
    "UPLOADFILES_COLLISION_POLICY": ("merge_collision_policy", str),
    "UPLOADFILES_TRANSFER_ROOTS": ("transfer_roots", _SplitList),
    "BLOB_READ_WRITE_TOKEN": ("blob_token", str),
    "UPLOADFILES_CORS_ORIGINS": ("cors_allowed_origins", _SplitList),
    "UPLOADFILES_LOG_DIR": ("log_dir", str),
    "UPLOADFILES_LOG_LEVEL": ("log_level", str),
    "UPLOADFILES_HOST": ("host", str),
    "UPLOADFILES_PORT": ("port", int),
}


# ==================== Configuration Model ====================

class ServerConfig(BaseModel):
    """Resolved server configuration"""
    uploads_root: str = DEFAULT_CONFIG["uploads_root"]
    auth_mode: str = DEFAULT_CONFIG["auth_mode"]
    write_token: Optional[str] = None
    read_token: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    max_upload_bytes: int = DEFAULT_CONFIG["max_upload_bytes"]
    allowed_upload_types: List[str] = IMAGE_UPLOAD_TYPES
    extra_upload_types: List[str] = []
    merge_collision_policy: str = DEFAULT_CONFIG["merge_collision_policy"]
    transfer_roots: List[str] = []
    blob_token: Optional[str] = None
    blob_api_url: str = DEFAULT_CONFIG["blob_api_url"]
    blob_host_suffix: str = DEFAULT_CONFIG["blob_host_suffix"]
    blob_timeout_seconds: int = DEFAULT_CONFIG["blob_timeout_seconds"]
    cors_allowed_origins: List[str] = ["*"]
    log_dir: str = DEFAULT_CONFIG["log_dir"]
    log_level: str = DEFAULT_CONFIG["log_level"]
    host: str = DEFAULT_CONFIG["host"]
    port: int = DEFAULT_CONFIG["port"]

    @field_validator("auth_mode")
    @classmethod
    def check_auth_mode(cls, value: str) -> str:
        value = value.lower()
        if value not in AUTH_MODES:
            raise ValueError(f"auth_mode must be one of {AUTH_MODES}")
        return value

    @field_validator("merge_collision_policy")
    @classmethod
    def check_collision_policy(cls, value: str) -> str:
        value = value.lower()
        if value not in COLLISION_POLICIES:
            raise ValueError(f"merge_collision_policy must be one of {COLLISION_POLICIES}")
        return value

    @field_validator("max_upload_bytes")
    @classmethod
    def check_max_upload_bytes(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("max_upload_bytes must be positive")
        return value

    @property
    def uploads_path(self) -> Path:
        """Absolute UploadsRoot path"""
        return Path(self.uploads_root).absolute()

    @property
    def accepted_upload_types(self) -> List[str]:
        """Allow-list of MIME types accepted by the upload endpoint"""
        return list(self.allowed_upload_types) + [
            mime for mime in self.extra_upload_types if mime not in self.allowed_upload_types
        ]


# ==================== Loading ====================

def LoadServerConfig(config_file: Optional[str] = None,
                     environ: Optional[Mapping[str, str]] = None) -> ServerConfig:
    """
    Resolve the server configuration

    Args:
        config_file: Optional path to a JSON configuration file. Missing keys
                     fall back to DEFAULT_CONFIG. A missing file is not an error.
        environ: Environment mapping (defaults to os.environ)

    Returns:
        ServerConfig: Validated configuration

    Raises:
        UploadFilesConfigurationError: If a value cannot be parsed or validated
    """
    if environ is None:
        environ = os.environ

    values: Dict[str, Any] = dict(DEFAULT_CONFIG)

    if config_file is None:
        config_file = environ.get("UPLOADFILES_CONFIG")

    if config_file:
        config_path = Path(config_file)
        if config_path.exists():
            logger.debug(f"Loading configuration from {config_path}")
            try:
                with open(config_path, 'r', encoding='utf-8') as f:
                    file_values = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                raise UploadFilesConfigurationError(f"Cannot read configuration file {config_path}: {e}")
            if not isinstance(file_values, dict):
                raise UploadFilesConfigurationError(f"Configuration file {config_path} must contain a JSON object")
            unknown = set(file_values) - set(DEFAULT_CONFIG)
            if unknown:
                logger.warning(f"Ignoring unknown configuration keys: {', '.join(sorted(unknown))}")
            values.update({k: v for k, v in file_values.items() if k in DEFAULT_CONFIG})
        else:
            logger.info(f"Configuration file not found, using defaults: {config_path}")

    for env_name, (key, converter) in ENVIRONMENT_OVERRIDES.items():
        raw = environ.get(env_name)
        if raw is None or raw == "":
            continue
        try:
            values[key] = converter(raw)
        except ValueError:
            raise UploadFilesConfigurationError(f"Invalid value for {env_name}: {raw!r}")

    try:
        config = ServerConfig(**values)
    except ValidationError as e:
        raise UploadFilesConfigurationError(f"Invalid configuration: {e}")

    if config.auth_mode == "token" and not config.write_token:
        logger.warning("No write token configured - every protected endpoint will reject requests")
    if config.auth_mode == "password" and not (config.username and config.password):
        logger.warning("Password authentication selected but username/password are not configured")

    return config
