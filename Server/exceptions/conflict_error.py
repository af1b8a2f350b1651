"""
UploadFiles Server - Conflict Error Exception

Raised when the target of an operation already exists where uniqueness is required.
"""

from .uploadfiles_error import UploadFilesError


class UploadFilesConflictError(UploadFilesError):
    """Exception for an already existing target."""
    pass
