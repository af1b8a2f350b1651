"""
UploadFiles Server - Operation Response Models

Pydantic models shared by mutating endpoints.
"""

from typing import List

from pydantic import BaseModel


class OperationResponse(BaseModel):
    success: bool
    message: str


class TreeOperationResponse(OperationResponse):
    """Response of a recursive or batch operation"""
    items_processed: int
    errors: List[str] = []
