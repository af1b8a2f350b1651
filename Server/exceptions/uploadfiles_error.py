"""
UploadFiles Server - Base Error Exception

Base exception class for all server-side errors.
"""


class UploadFilesError(Exception):
    """Base exception for UploadFiles errors."""
    pass
