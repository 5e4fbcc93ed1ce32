"""
Proxy API
Single endpoint forwarding document operations to the caller's backing project
"""
from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from docrelay.config import Settings, get_settings
from docrelay.connections.connection_manager import ConnectionManager, get_connection_manager
from docrelay.core.security import BearerTokenResolver, credential_name, extract_credential
from docrelay.database import get_app_db
from docrelay.services.credential_store import CredentialStore
from docrelay.services.operation_router import OperationRouter

router = APIRouter()


def build_operation_router(db: Session, connections: ConnectionManager, settings: Settings) -> OperationRouter:
    """Router for one request, wired to the resolver of this deployment mode."""
    if settings.uses_bearer_tokens:
        resolver = BearerTokenResolver(
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
            project_claim=settings.JWT_PROJECT_CLAIM
        )
    else:
        resolver = CredentialStore(db)

    return OperationRouter(
        resolver,
        connections,
        default_project_id=settings.get_default_project_id(),
        collection_limit=settings.GET_COLLECTION_LIMIT,
        credential_name=credential_name(settings)
    )


@router.post("")
async def proxy_operation(
    request: Request,
    db: Session = Depends(get_app_db),
    connections: ConnectionManager = Depends(get_connection_manager),
    settings: Settings = Depends(get_settings)
):
    """
    Execute a document operation.

    Body: ``{"operation": str, "path": [str, ...], "payload": {...}}`` where
    operation is one of getDoc, getCollection, addDoc, setDoc, updateDoc,
    deleteDoc. The credential header selects the backing project.
    """
    token = extract_credential(request, settings)
    raw_body = await request.body()
    operation_router = build_operation_router(db, connections, settings)
    return await run_in_threadpool(operation_router.execute, token, raw_body)
