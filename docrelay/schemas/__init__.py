"""
Schemas Package
"""
from docrelay.schemas.admin import (
    AccessKeyCreate, AccessKeyResponse,
    ProjectCreate, ProjectResponse,
    DeleteResponse, ProjectDeleteResponse, RelayStatus
)

__all__ = [
    "AccessKeyCreate", "AccessKeyResponse",
    "ProjectCreate", "ProjectResponse",
    "DeleteResponse", "ProjectDeleteResponse", "RelayStatus",
]
