"""
Admin API - Backing project registry
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import List, Optional
import structlog

from docrelay.core.errors import AdminOperationError, BadRequestError
from docrelay.core.security import require_admin_secret
from docrelay.database import get_app_db
from docrelay.schemas.admin import ProjectCreate, ProjectResponse, ProjectDeleteResponse
from docrelay.services.credential_store import CredentialStore
from docrelay.services.project_registry import ProjectRegistry

router = APIRouter(dependencies=[Depends(require_admin_secret)])
logger = structlog.get_logger()


@router.get("", response_model=List[ProjectResponse])
async def list_projects(db: Session = Depends(get_app_db)):
    """List registered projects (id, name, createdAt)."""
    try:
        return ProjectRegistry(db).list()
    except SQLAlchemyError as e:
        logger.error("list_projects_failed", error=str(e))
        raise AdminOperationError("Failed to list projects", details=str(e))


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(body: ProjectCreate, db: Session = Depends(get_app_db)):
    """
    Register a backing project from its connection credentials.

    ``credentials`` is a JSON object (or its string form) carrying
    ``project_id`` and ``connection_string``. The project id becomes the
    record id.
    """
    if not body.name or not body.credentials:
        raise BadRequestError("Missing required fields: name, credentials")

    try:
        return ProjectRegistry(db).create(body.name, body.credentials)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("create_project_failed", error=str(e))
        raise AdminOperationError("Failed to add project", details=str(e))


@router.delete("", response_model=ProjectDeleteResponse)
async def delete_project(
    id: Optional[str] = Query(None),
    db: Session = Depends(get_app_db)
):
    """
    Deregister a project. Keys scoped to it are kept but stop working;
    ``orphanedKeys`` reports how many.
    """
    if not id:
        raise BadRequestError("Missing project ID in query parameter")

    try:
        orphaned = CredentialStore(db).count_for_project(id)
        ProjectRegistry(db).delete(id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("delete_project_failed", project_id=id, error=str(e))
        raise AdminOperationError("Failed to delete project", details=str(e))

    if orphaned:
        logger.warning("project_deleted_with_keys", project_id=id, orphaned_keys=orphaned)

    return {"message": "Project deleted successfully", "orphanedKeys": orphaned}
