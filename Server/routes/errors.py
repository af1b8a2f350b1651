"""
UploadFiles Server - Route Error Mapping

Translates storage, tree and blob exceptions into HTTP errors.
"""

import logging

from fastapi import HTTPException, status
from fastapi.responses import JSONResponse

from exceptions import (
    UploadFilesBlobError,
    UploadFilesConfigurationError,
    UploadFilesConflictError,
    UploadFilesError,
    UploadFilesNotFoundError,
    UploadFilesReservedError,
    UploadFilesValidationError
)
from models.api import TreeOperationResponse
from models.infrastructure import TreeOperationResult

logger = logging.getLogger(__name__)


# Most specific classes first
ERROR_STATUS_CODES = [
    (UploadFilesValidationError, status.HTTP_400_BAD_REQUEST),
    (UploadFilesNotFoundError, status.HTTP_404_NOT_FOUND),
    (UploadFilesConflictError, status.HTTP_409_CONFLICT),
    (UploadFilesReservedError, status.HTTP_403_FORBIDDEN),
    (UploadFilesBlobError, status.HTTP_502_BAD_GATEWAY),
    (UploadFilesConfigurationError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def ToHttpException(error: UploadFilesError) -> HTTPException:
    """
    Map an UploadFiles exception to an HTTPException

    Args:
        error: Exception raised by a core module

    Returns:
        HTTPException: 400/404/409/403/502/503, or 500 for the base class
    """
    for error_class, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_class):
            return HTTPException(status_code=status_code, detail=str(error))
    logger.error(f"Unhandled storage error: {error}")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error) or "Internal error")


def TreeResultResponse(result: TreeOperationResult, message: str, **extra) -> JSONResponse:
    """
    JSON response for a recursive or batch operation

    An unsuccessful batch (nothing processed and at least one error)
    responds 500 with the same body.
    """
    body = TreeOperationResponse(
        success=result.success,
        message=message,
        items_processed=result.items_processed,
        errors=result.errors
    ).model_dump()
    body.update(extra)
    status_code = status.HTTP_200_OK if result.success else status.HTTP_500_INTERNAL_SERVER_ERROR
    return JSONResponse(status_code=status_code, content=body)
