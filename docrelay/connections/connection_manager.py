"""
Connection Manager - One live document handle per backing project
"""
from typing import Any, Callable, Dict, List
from sqlalchemy.exc import SQLAlchemyError
import structlog

from docrelay.config import settings
from docrelay.connections.connectors.base_connector import BaseConnector
from docrelay.connections.connectors.mongodb_connector import MongoDBConnector
from docrelay.core.errors import ConnectionUnavailableError
from docrelay.database import AppSessionLocal
from docrelay.services.project_registry import ProjectRegistry, PROJECT_ID_FIELD

logger = structlog.get_logger()

HandleFactory = Callable[[Dict[str, Any]], BaseConnector]


def default_handle_factory(credentials: Dict[str, Any]) -> BaseConnector:
    return MongoDBConnector.from_credentials(
        credentials,
        pool_size=settings.BACKING_POOL_SIZE,
        timeout=settings.BACKING_TIMEOUT_SECONDS
    )


class ConnectionManager:
    """
    Process-wide cache of backing-project handles.

    Handles are created lazily on first use and kept for the life of the
    process. Entries are only ever added; edits to a project's credentials
    take effect after a restart, but a cached handle stops serving as soon as
    its project is deregistered. Two requests racing on an uncached project
    may both build a handle; the first one stored wins and the other is
    closed, so the cache holds exactly one entry per project.
    """

    def __init__(self, session_factory: Callable = AppSessionLocal, handle_factory: HandleFactory = default_handle_factory):
        self._session_factory = session_factory
        self._handle_factory = handle_factory
        self._handles: Dict[str, BaseConnector] = {}

    def handle_for(self, project_id: str) -> BaseConnector:
        """
        Get or create the handle for a backing project.

        Raises:
            ConnectionUnavailableError: project unknown, credentials unusable,
                or the client could not be constructed. Nothing is cached.
        """
        handle = self._handles.get(project_id)
        if handle is not None:
            self._ensure_registered(project_id)
            return handle

        handle = self._create_handle(project_id)
        cached = self._handles.setdefault(project_id, handle)
        if cached is not handle:
            # Lost a construction race
            handle.disconnect()
        else:
            logger.info("connection_handle_created", project_id=project_id)
        return cached

    def _ensure_registered(self, project_id: str) -> None:
        """The registry is re-read on every call so deregistration applies immediately."""
        try:
            with self._session_factory() as db:
                registered = ProjectRegistry(db).get(project_id) is not None
        except SQLAlchemyError as e:
            logger.error("connection_unavailable", project_id=project_id, reason=str(e))
            raise ConnectionUnavailableError(project_id, str(e)) from e

        if not registered:
            logger.warning("connection_unavailable", project_id=project_id, reason="project_deregistered")
            raise ConnectionUnavailableError(project_id, "Project is no longer registered")

    def _create_handle(self, project_id: str) -> BaseConnector:
        if not project_id:
            logger.error("connection_unavailable", project_id=project_id, reason="no_project")
            raise ConnectionUnavailableError(project_id, "No project configured")

        try:
            with self._session_factory() as db:
                registry = ProjectRegistry(db)
                descriptor = registry.get(project_id)
                if descriptor is None:
                    raise LookupError(f"Project configuration for '{project_id}' not found.")
                credentials = registry.load_credentials(descriptor)

            if credentials[PROJECT_ID_FIELD] != project_id:
                raise ValueError(
                    f"Credentials belong to project '{credentials[PROJECT_ID_FIELD]}'"
                )
            return self._handle_factory(credentials)
        except Exception as e:
            logger.error("connection_unavailable", project_id=project_id, reason=str(e))
            raise ConnectionUnavailableError(project_id, str(e)) from e

    def cached_projects(self) -> List[str]:
        """Project ids with a live handle."""
        return sorted(self._handles.keys())

    def close_all(self) -> None:
        """Close every handle. Only used at process shutdown."""
        for project_id in list(self._handles.keys()):
            handle = self._handles.pop(project_id, None)
            if handle is not None:
                handle.disconnect()
        logger.info("connection_handles_closed")


# Global connection manager instance
connection_manager = ConnectionManager()


def get_connection_manager() -> ConnectionManager:
    """FastAPI dependency returning the process-wide connection manager."""
    return connection_manager
