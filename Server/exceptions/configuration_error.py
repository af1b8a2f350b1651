"""
UploadFiles Server - Configuration Error Exception
"""

from .uploadfiles_error import UploadFilesError


class UploadFilesConfigurationError(UploadFilesError):
    """Exception for missing or invalid server configuration."""
    pass
