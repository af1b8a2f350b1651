"""
UploadFiles Server - Reserved Error Exception

Raised when an operation targets the protective marker file.
"""

from .uploadfiles_error import UploadFilesError


class UploadFilesReservedError(UploadFilesError):
    """Exception for operations on reserved files."""
    pass
