"""
Admin Control Plane Schemas
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional, Union
from datetime import datetime


class AccessKeyCreate(BaseModel):
    name: Optional[str] = None
    projectId: Optional[str] = None


class AccessKeyResponse(BaseModel):
    """Credential as shown to administrators."""
    id: str
    label: str = Field(serialization_alias="name")
    token: str = Field(serialization_alias="key")
    scope: Optional[str] = Field(None, serialization_alias="projectId")
    created_at: Optional[datetime] = Field(None, serialization_alias="createdAt")

    class Config:
        from_attributes = True


class ProjectCreate(BaseModel):
    name: Optional[str] = None
    credentials: Optional[Union[str, Dict[str, Any]]] = None


class ProjectResponse(BaseModel):
    """Project listing entry. Connection credentials are never included."""
    id: str
    name: str
    created_at: Optional[datetime] = Field(None, serialization_alias="createdAt")

    class Config:
        from_attributes = True


class DeleteResponse(BaseModel):
    message: str


class ProjectDeleteResponse(DeleteResponse):
    orphanedKeys: int = 0


class RelayStatus(BaseModel):
    authMode: str
    multiProject: bool
    defaultProjectId: Optional[str] = None
    adminConfigured: bool
    cachedProjects: List[str] = []
