"""
UploadFiles Server - Infrastructure Models Package

This package contains dataclass models shared by the storage, tree, upload
and blob modules.
"""

from models.infrastructure.file_entry import FileEntry
from models.infrastructure.folder_node import FolderNode
from models.infrastructure.blob_object import BlobObject, BlobImport
from models.infrastructure.file_listing import FileListing
from models.infrastructure.upload import UploadCandidate, StoredUpload
from models.infrastructure.tree_operation import (
    TreeAction,
    TreePlan,
    TreeOperationResult,
    TreeScanResult
)

__all__ = [
    'FileEntry',
    'FolderNode',
    'BlobObject',
    'BlobImport',
    'FileListing',
    'UploadCandidate',
    'StoredUpload',
    'TreeAction',
    'TreePlan',
    'TreeOperationResult',
    'TreeScanResult',
]
