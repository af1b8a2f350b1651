"""
UploadFiles Server - Exceptions Package

Contains all exception classes raised by the storage, tree and blob modules.
Route handlers translate them into HTTP responses (see routes/errors.py).
"""

from .uploadfiles_error import UploadFilesError
from .validation_error import UploadFilesValidationError
from .not_found_error import UploadFilesNotFoundError
from .conflict_error import UploadFilesConflictError
from .reserved_error import UploadFilesReservedError
from .blob_error import UploadFilesBlobError
from .configuration_error import UploadFilesConfigurationError

__all__ = [
    'UploadFilesError',
    'UploadFilesValidationError',
    'UploadFilesNotFoundError',
    'UploadFilesConflictError',
    'UploadFilesReservedError',
    'UploadFilesBlobError',
    'UploadFilesConfigurationError'
]
