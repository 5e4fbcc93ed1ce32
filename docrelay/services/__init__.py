"""
Services Package
"""
from docrelay.services.credential_store import CredentialStore
from docrelay.services.project_registry import ProjectRegistry, parse_connection_credentials
from docrelay.services.operation_router import (
    OperationRouter,
    OperationRequest,
    parse_operation_request,
    SUPPORTED_OPERATIONS,
)

__all__ = [
    "CredentialStore",
    "ProjectRegistry",
    "parse_connection_credentials",
    "OperationRouter",
    "OperationRequest",
    "parse_operation_request",
    "SUPPORTED_OPERATIONS",
]
