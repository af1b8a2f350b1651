"""
UploadFiles Server - Status Endpoints

This module contains the health check endpoint.
"""

from datetime import datetime, timezone
from fastapi import APIRouter, Depends

from dependencies import GetUploadsRoot


# Create router instance
router = APIRouter()


# ==================== Health Check Endpoint ====================

@router.get("/health", tags=["Status"])
async def health_check(uploads_root=Depends(GetUploadsRoot)):
    """
    Health check endpoint to verify server is running

    Returns:
        dict: Server status information
    """
    return {
        "status": "healthy",
        "service": "UploadFiles Server",
        "version": "1.0.0",
        "uploads_root_ready": uploads_root.is_dir(),
        "timestamp_utc": datetime.now(timezone.utc).isoformat()
    }
