"""
UploadFiles Server - API Models Package

This package contains Pydantic models for all API endpoints.
"""

from models.api.operation_response import OperationResponse, TreeOperationResponse
from models.api.folder_operations import CreateFolderRequest, RenameRequest, MoveRequest
from models.api.file_operations import FileInfo, FileListResponse, FileUploadResponse
from models.api.transfer_operations import ImportRequest, ExportRequest
from models.api.blob_operations import BlobInfo, BlobImportRequest

__all__ = [
    'OperationResponse',
    'TreeOperationResponse',
    'CreateFolderRequest',
    'RenameRequest',
    'MoveRequest',
    'FileInfo',
    'FileListResponse',
    'FileUploadResponse',
    'ImportRequest',
    'ExportRequest',
    'BlobInfo',
    'BlobImportRequest',
]
