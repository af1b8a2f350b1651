"""
UploadFiles Server - Blob Error Exception

Raised when the external blob store cannot be reached or answers with an error.
"""

from .uploadfiles_error import UploadFilesError


class UploadFilesBlobError(UploadFilesError):
    """Exception for blob store failures."""
    pass
