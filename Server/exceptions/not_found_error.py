"""
UploadFiles Server - Not Found Error Exception
"""

from .uploadfiles_error import UploadFilesError


class UploadFilesNotFoundError(UploadFilesError):
    """Exception for a missing file or folder."""
    pass
