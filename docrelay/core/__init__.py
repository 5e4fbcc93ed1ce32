"""
Core Package
"""
from docrelay.core.errors import (
    RelayError, UnauthorizedError, MissingCredentialError, InvalidCredentialError,
    BadRequestError, MalformedBodyError, MissingFieldsError, UnsupportedOperationError,
    InvalidPathError, InvalidPayloadError, InvalidCredentialFormatError,
    MissingProjectIdentifierError, ConnectionUnavailableError, ControlPlaneUnavailableError,
    BackingOperationError, AdminOperationError, DocumentNotFoundError
)
from docrelay.core.security import (
    ScopeResult, BearerTokenResolver, extract_credential, credential_name,
    is_admin_secret_valid, require_admin_secret
)

__all__ = [
    # Errors
    "RelayError", "UnauthorizedError", "MissingCredentialError", "InvalidCredentialError",
    "BadRequestError", "MalformedBodyError", "MissingFieldsError", "UnsupportedOperationError",
    "InvalidPathError", "InvalidPayloadError", "InvalidCredentialFormatError",
    "MissingProjectIdentifierError", "ConnectionUnavailableError", "ControlPlaneUnavailableError",
    "BackingOperationError",
    "AdminOperationError", "DocumentNotFoundError",
    # Security
    "ScopeResult", "BearerTokenResolver", "extract_credential", "credential_name",
    "is_admin_secret_valid", "require_admin_secret",
]
