"""
UploadFiles Server - Login Response Model

Pydantic model for login endpoint response.
"""

from pydantic import BaseModel


class LoginResponse(BaseModel):
    """Response model for login endpoint"""
    token: str  # Shared write token, sent back as "Authorization: Bearer <token>"
    message: str
