"""
UploadFiles Server - Authentication Utilities

This module provides authentication functionality including:
- Shared-secret bearer token authentication (write and read tokens)
- Legacy username/password authentication (HTTP Basic)
- Access-level dependencies for protected routes

Security Requirements:
- Secrets are compared in constant time
- An empty or unconfigured secret never grants access
- Presented secrets are never logged
"""

import base64
import binascii
import logging
import secrets
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from fastapi import Depends, HTTPException, Request, status

from dependencies import GetAuthenticator
from server_config import ServerConfig

logger = logging.getLogger(__name__)


class AccessLevel(str, Enum):
    """Access granted by a credential; WRITE implies READ"""
    READ = "read"
    WRITE = "write"


def _SecretsMatch(presented: Optional[str], expected: Optional[str]) -> bool:
    if not presented or not expected:
        return False
    return secrets.compare_digest(presented.encode('utf-8'), expected.encode('utf-8'))


def _ParseAuthorization(authorization_header: Optional[str], scheme: str) -> Optional[str]:
    """Return the credentials part of 'Authorization: <scheme> <credentials>'"""
    if not authorization_header:
        return None
    presented_scheme, _, credentials = authorization_header.strip().partition(" ")
    if presented_scheme.lower() != scheme.lower() or not credentials.strip():
        return None
    return credentials.strip()


# ==================== Authenticators ====================

class Authenticator(ABC):
    """Turns an Authorization header into an access level"""

    scheme = "Bearer"

    @abstractmethod
    def Authenticate(self, authorization_header: Optional[str]) -> Optional[AccessLevel]:
        """
        Args:
            authorization_header: Raw Authorization header value

        Returns:
            Optional[AccessLevel]: Granted level, None when rejected
        """


class SharedTokenAuthenticator(Authenticator):
    """Bearer token compared against the configured write and read tokens"""

    scheme = "Bearer"

    def __init__(self, write_token: Optional[str], read_token: Optional[str] = None):
        self.write_token = write_token
        self.read_token = read_token

    def Authenticate(self, authorization_header: Optional[str]) -> Optional[AccessLevel]:
        token = _ParseAuthorization(authorization_header, self.scheme)
        if token is None:
            return None
        if _SecretsMatch(token, self.write_token):
            return AccessLevel.WRITE
        if _SecretsMatch(token, self.read_token):
            return AccessLevel.READ
        return None


class UsernamePasswordAuthenticator(Authenticator):
    """HTTP Basic credentials compared against the legacy username and password"""

    scheme = "Basic"

    def __init__(self, username: Optional[str], password: Optional[str]):
        self.username = username
        self.password = password

    def VerifyCredentials(self, username: Optional[str], password: Optional[str]) -> bool:
        # Both comparisons always run
        username_ok = _SecretsMatch(username, self.username)
        password_ok = _SecretsMatch(password, self.password)
        return username_ok and password_ok

    def Authenticate(self, authorization_header: Optional[str]) -> Optional[AccessLevel]:
        credentials = _ParseAuthorization(authorization_header, self.scheme)
        if credentials is None:
            return None
        try:
            decoded = base64.b64decode(credentials, validate=True).decode('utf-8')
        except (binascii.Error, UnicodeDecodeError):
            return None
        username, separator, password = decoded.partition(":")
        if not separator:
            return None
        return AccessLevel.WRITE if self.VerifyCredentials(username, password) else None


def CreateAuthenticator(config: ServerConfig) -> Authenticator:
    """
    Build the authenticator selected by config.auth_mode

    Args:
        config: Server configuration

    Returns:
        Authenticator: SharedTokenAuthenticator ("token") or
                       UsernamePasswordAuthenticator ("password")
    """
    if config.auth_mode == "password":
        return UsernamePasswordAuthenticator(config.username, config.password)
    return SharedTokenAuthenticator(config.write_token, config.read_token)


# ==================== Authentication Dependencies ====================

def RequireAccess(level: AccessLevel):
    """
    Dependency factory to create an access checking dependency

    Args:
        level: Access level required by the route

    Returns:
        Dependency function returning the granted AccessLevel

    Usage:
        @router.post("/api/folders")
        async def create_folder(access: AccessLevel = Depends(RequireWrite)):
            ...
    """
    def access_checker(request: Request,
                       authenticator: Authenticator = Depends(GetAuthenticator)) -> AccessLevel:
        """
        Raises:
            HTTPException: 401 when credentials are missing or rejected,
                           403 when they grant less than the required level
        """
        granted = authenticator.Authenticate(request.headers.get("Authorization"))

        if granted is None:
            logger.warning(f"Rejected credentials for {request.method} {request.url.path}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authentication required",
                headers={"WWW-Authenticate": authenticator.scheme},
            )

        if level == AccessLevel.WRITE and granted != AccessLevel.WRITE:
            logger.warning(f"Read-only credentials used for {request.method} {request.url.path}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Permission denied. Required access: write"
            )

        return granted

    return access_checker


# Convenience dependencies for common access levels
RequireRead = RequireAccess(AccessLevel.READ)
RequireWrite = RequireAccess(AccessLevel.WRITE)
