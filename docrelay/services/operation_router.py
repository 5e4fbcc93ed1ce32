"""
Operation Router
Validates proxy requests, resolves the caller's project and dispatches the
document operation against that project's handle.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, TYPE_CHECKING
import json
import time

import structlog

from docrelay.core.errors import (
    RelayError,
    MissingCredentialError,
    InvalidCredentialError,
    MalformedBodyError,
    MissingFieldsError,
    UnsupportedOperationError,
    InvalidPathError,
    InvalidPayloadError,
    BackingOperationError,
)
from docrelay.core.security import ScopeResult

if TYPE_CHECKING:
    from docrelay.connections.connection_manager import ConnectionManager

logger = structlog.get_logger()

GET_DOC = "getDoc"
GET_COLLECTION = "getCollection"
ADD_DOC = "addDoc"
SET_DOC = "setDoc"
UPDATE_DOC = "updateDoc"
DELETE_DOC = "deleteDoc"

SUPPORTED_OPERATIONS = (GET_DOC, GET_COLLECTION, ADD_DOC, SET_DOC, UPDATE_DOC, DELETE_DOC)
COLLECTION_OPERATIONS = frozenset({GET_COLLECTION, ADD_DOC})


class CredentialResolver(Protocol):
    def resolve(self, token: str) -> Optional[ScopeResult]:
        ...


@dataclass
class OperationRequest:
    """A validated proxy request."""
    operation: str
    path: List[str]
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def path_string(self) -> str:
        return "/".join(self.path)


def parse_operation_request(raw_body: bytes) -> OperationRequest:
    """
    Parse and validate a request body.

    Checks run in order and the first failure wins: well-formed JSON,
    required fields, known operation, path shape, payload type.
    """
    try:
        body = json.loads(raw_body)
    except (ValueError, TypeError):
        raise MalformedBodyError()

    if not isinstance(body, dict):
        body = {}

    operation = body.get("operation")
    path = body.get("path")
    payload = body.get("payload")

    if not operation or not isinstance(path, list) or len(path) == 0:
        raise MissingFieldsError()

    if not isinstance(operation, str) or operation not in SUPPORTED_OPERATIONS:
        raise UnsupportedOperationError(operation)

    for segment in path:
        if not isinstance(segment, str) or not segment or "/" in segment:
            raise InvalidPathError(operation)

    is_collection_path = len(path) % 2 == 1
    if is_collection_path != (operation in COLLECTION_OPERATIONS):
        raise InvalidPathError(operation)

    if payload is None:
        payload = {}
    elif not isinstance(payload, dict):
        raise InvalidPayloadError()

    return OperationRequest(operation=operation, path=list(path), payload=payload)


class OperationRouter:
    """
    Executes one proxy request.

    The target project comes only from the credential's scope: a scoped
    credential always runs against its own project, an unrestricted one
    against the default project. The request body never selects a project.
    """

    def __init__(
        self,
        resolver: CredentialResolver,
        connections: "ConnectionManager",
        default_project_id: Optional[str] = None,
        collection_limit: Optional[int] = None,
        credential_name: str = "API Key",
    ):
        self._resolver = resolver
        self._connections = connections
        self._default_project_id = default_project_id
        self._collection_limit = collection_limit
        self._credential_name = credential_name

    def execute(self, token: Optional[str], raw_body: bytes) -> Any:
        """
        Authenticate, validate and run a proxy request.

        Returns the operation-specific JSON-safe result.

        Raises:
            RelayError: every failure, already mapped to its status and message
        """
        if not token:
            raise MissingCredentialError(self._credential_name)

        scope = self._resolver.resolve(token)
        if scope is None:
            raise InvalidCredentialError(self._credential_name)

        request = parse_operation_request(raw_body)
        project_id = self.project_for(scope)
        handle = self._connections.handle_for(project_id)

        start_time = time.time()
        try:
            result = self._dispatch(handle, request)
        except RelayError:
            raise
        except Exception as e:
            logger.error(
                "proxy_operation_failed",
                project_id=project_id,
                operation=request.operation,
                path=request.path_string,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise BackingOperationError() from e

        logger.info(
            "proxy_operation",
            project_id=project_id,
            operation=request.operation,
            path=request.path_string,
            duration_ms=int((time.time() - start_time) * 1000),
        )
        return result

    def project_for(self, scope: ScopeResult) -> Optional[str]:
        if scope.is_unrestricted:
            return self._default_project_id
        return scope.project_id

    def _dispatch(self, handle, request: OperationRequest) -> Any:
        operation = request.operation
        path = request.path

        if operation == GET_DOC:
            return handle.get_document(path)
        elif operation == GET_COLLECTION:
            return handle.list_documents(path, limit=self._collection_limit)
        elif operation == ADD_DOC:
            return {"id": handle.add_document(path, request.payload)}
        elif operation == SET_DOC:
            return {"id": handle.set_document(path, request.payload)}
        elif operation == UPDATE_DOC:
            handle.update_document(path, request.payload)
            return {"success": True}
        elif operation == DELETE_DOC:
            handle.delete_document(path)
            return {"success": True}

        raise UnsupportedOperationError(operation)
