"""
UploadFiles Server - Authentication Endpoints

This module contains the legacy login endpoint exchanging the configured
username and password for the shared write token.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, status

from models.auth import LoginRequest, LoginResponse
from auth import UsernamePasswordAuthenticator
from dependencies import GetConfig


# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter()


# ==================== Authentication Endpoints ====================

@router.post("/auth/login", response_model=LoginResponse, tags=["Authentication"])
async def login(login_request: LoginRequest, config=Depends(GetConfig)):
    """
    Verify the legacy credentials and return the shared write token

    The token does not expire and is the same for every client.

    Args:
        login_request: Username and password

    Returns:
        LoginResponse: Write token to send as "Authorization: Bearer <token>"

    Raises:
        HTTPException: 503 if login is not configured, 401 if credentials are invalid
    """
    if not (config.username and config.password and config.write_token):
        logger.warning("Login attempted but credentials or write token are not configured")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Login is not configured on this server"
        )

    verifier = UsernamePasswordAuthenticator(config.username, config.password)
    if not verifier.VerifyCredentials(login_request.username, login_request.password):
        logger.warning("Login failed: invalid credentials")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.info("Login successful")

    return LoginResponse(
        token=config.write_token,
        message="Login successful"
    )
