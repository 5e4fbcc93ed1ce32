"""
Admin API - Access key management
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import List, Optional
import structlog

from docrelay.config import Settings, get_settings
from docrelay.core.errors import AdminOperationError, BadRequestError
from docrelay.core.security import require_admin_secret
from docrelay.database import get_app_db
from docrelay.schemas.admin import AccessKeyCreate, AccessKeyResponse, DeleteResponse
from docrelay.services.credential_store import CredentialStore
from docrelay.services.project_registry import ProjectRegistry

router = APIRouter(dependencies=[Depends(require_admin_secret)])
logger = structlog.get_logger()


@router.get("", response_model=List[AccessKeyResponse])
async def list_keys(db: Session = Depends(get_app_db)):
    """List every access key."""
    try:
        return CredentialStore(db).list()
    except SQLAlchemyError as e:
        logger.error("list_keys_failed", error=str(e))
        raise AdminOperationError("Internal Server Error", details=str(e))


@router.post("", response_model=AccessKeyResponse, status_code=status.HTTP_201_CREATED)
async def create_key(
    body: AccessKeyCreate,
    db: Session = Depends(get_app_db),
    settings: Settings = Depends(get_settings)
):
    """
    Create an access key. In multi-project mode ``projectId`` is required and
    must name a registered project; otherwise keys are unrestricted.
    """
    if not body.name:
        raise BadRequestError("Missing required field: name")

    scope: Optional[str] = None
    if settings.MULTI_PROJECT:
        if not body.projectId:
            raise BadRequestError("Missing required field: projectId")
        scope = body.projectId

    try:
        if scope and ProjectRegistry(db).get(scope) is None:
            raise BadRequestError(f"Unknown project: {scope}")
        return CredentialStore(db).create(body.name, scope)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("create_key_failed", error=str(e))
        raise AdminOperationError("Internal Server Error", details=str(e))


@router.delete("", response_model=DeleteResponse)
async def delete_key(
    id: Optional[str] = Query(None),
    db: Session = Depends(get_app_db)
):
    """Revoke an access key. It stops authorizing immediately."""
    if not id:
        raise BadRequestError("Missing key ID in query parameter")

    try:
        CredentialStore(db).delete(id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("delete_key_failed", credential_id=id, error=str(e))
        raise AdminOperationError("Internal Server Error", details=str(e))

    return {"message": "Key deleted successfully"}
