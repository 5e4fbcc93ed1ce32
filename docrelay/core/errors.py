"""
Relay error taxonomy.

Every error raised at the operation boundary is a RelayError and carries the
HTTP status and the short ``error`` string shown to the caller. Verbose
``details`` are only attached by the admin endpoints.
"""
from typing import Any, Dict, Optional


class RelayError(Exception):
    """Base class for errors converted to JSON responses."""
    status_code: int = 500
    error: str = "An internal server error occurred."

    def __init__(self, error: Optional[str] = None, details: Optional[str] = None):
        if error is not None:
            self.error = error
        self.details = details
        super().__init__(self.error)

    def to_response(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error}
        if self.details:
            body["details"] = self.details
        return body


# ============================================================================
# 401
# ============================================================================

class UnauthorizedError(RelayError):
    """Missing or invalid credential, or admin secret mismatch."""
    status_code = 401
    error = "Unauthorized"


class MissingCredentialError(UnauthorizedError):
    def __init__(self, credential_name: str = "API Key"):
        super().__init__(f"Unauthorized: Missing {credential_name}.")


class InvalidCredentialError(UnauthorizedError):
    def __init__(self, credential_name: str = "API Key"):
        super().__init__(f"Unauthorized: Invalid {credential_name}.")


# ============================================================================
# 400
# ============================================================================

class BadRequestError(RelayError):
    status_code = 400
    error = "Bad request"


class MalformedBodyError(BadRequestError):
    error = "Invalid JSON body"


class MissingFieldsError(BadRequestError):
    error = "Missing required fields: operation, path"


class UnsupportedOperationError(BadRequestError):
    def __init__(self, operation: Any):
        self.operation = operation
        super().__init__(f"Unsupported operation: {operation}")


class InvalidPathError(BadRequestError):
    def __init__(self, operation: str):
        super().__init__(f"Invalid path for {operation}")


class InvalidPayloadError(BadRequestError):
    error = "Invalid payload: expected an object"


class InvalidCredentialFormatError(BadRequestError):
    error = "Invalid JSON credentials format"


class MissingProjectIdentifierError(BadRequestError):
    error = "`project_id` missing from credentials"


# ============================================================================
# 500
# ============================================================================

class ConnectionUnavailableError(RelayError):
    """Backing project missing, misconfigured, or its client failed to build."""
    error = "Backing project unavailable."

    def __init__(self, project_id: Optional[str], reason: Optional[str] = None):
        self.project_id = project_id
        self.reason = reason
        super().__init__()


class ControlPlaneUnavailableError(RelayError):
    """Credential or project tables could not be read; detail stays server-side."""


class BackingOperationError(RelayError):
    """Failure reported by the backing database; detail stays server-side."""


class AdminOperationError(RelayError):
    """Control-plane failure surfaced to administrators with details."""


# Raised by document handles, wrapped into BackingOperationError by the router
class DocumentNotFoundError(LookupError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"No document to update: {path}")
