"""
UploadFiles Server - Request Dependencies

FastAPI dependencies resolving the objects built at startup and stored on
the application state (configuration, authenticator, blob store).
"""

from pathlib import Path

from fastapi import HTTPException, Request, status


def GetConfig(request: Request):
    """ServerConfig of the running application"""
    return request.app.state.config


def GetUploadsRoot(request: Request) -> Path:
    """Absolute uploads root"""
    return request.app.state.config.uploads_path


def GetAuthenticator(request: Request):
    """Authenticator selected by the configuration"""
    return request.app.state.authenticator


def GetBlobStore(request: Request):
    """
    Configured blob store

    Raises:
        HTTPException: 503 when no blob token is configured
    """
    store = getattr(request.app.state, "blob_store", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Blob store is not configured"
        )
    return store
