"""
UploadFiles Server - Validation Error Exception

Raised when a request is rejected before any filesystem I/O
(bad folder name, missing parameter, disallowed file type, ...).
"""

from .uploadfiles_error import UploadFilesError


class UploadFilesValidationError(UploadFilesError):
    """Exception for invalid input."""
    pass
