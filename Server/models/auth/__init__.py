"""
UploadFiles Server - Auth Models Package

This package contains Pydantic models for authentication endpoints.
"""

from models.auth.login_request import LoginRequest
from models.auth.login_response import LoginResponse

__all__ = [
    'LoginRequest',
    'LoginResponse',
]
