"""
Admin API - Relay status
"""
from fastapi import APIRouter, Depends

from docrelay.config import Settings, get_settings
from docrelay.connections.connection_manager import ConnectionManager, get_connection_manager
from docrelay.core.security import require_admin_secret
from docrelay.schemas.admin import RelayStatus

router = APIRouter(dependencies=[Depends(require_admin_secret)])


@router.get("", response_model=RelayStatus)
async def relay_status(
    settings: Settings = Depends(get_settings),
    connections: ConnectionManager = Depends(get_connection_manager)
):
    """Deployment mode, default project and projects with a live handle."""
    return RelayStatus(
        authMode="bearer" if settings.uses_bearer_tokens else "api_key",
        multiProject=settings.MULTI_PROJECT,
        defaultProjectId=settings.get_default_project_id(),
        adminConfigured=bool(settings.ADMIN_SECRET_KEY),
        cachedProjects=connections.cached_projects()
    )
