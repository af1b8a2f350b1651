"""
UploadFiles Server - Models Package

This package contains all data models for the UploadFiles server:
- auth: Authentication-related Pydantic models
- api: API endpoint Pydantic models
- infrastructure: Dataclass models for storage, tree and blob components
"""

# Re-export all models for convenient importing
from models.auth import *
from models.api import *
from models.infrastructure import *
