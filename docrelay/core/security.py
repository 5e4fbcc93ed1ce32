"""
Credential checks shared by the proxy and admin endpoints.
"""
from dataclasses import dataclass
from typing import Optional
import hmac

from fastapi import Depends, Header, Request
from jose import jwt, JWTError
import structlog

from docrelay.config import Settings, get_settings
from docrelay.core.errors import UnauthorizedError

logger = structlog.get_logger()

API_KEY_HEADER = "X-API-Key"
ADMIN_SECRET_HEADER = "X-Admin-Secret"


@dataclass(frozen=True)
class ScopeResult:
    """Authorization scope bound to a credential. ``project_id=None`` is unrestricted."""
    project_id: Optional[str] = None
    subject: Optional[str] = None

    @property
    def is_unrestricted(self) -> bool:
        return self.project_id is None


class BearerTokenResolver:
    """Resolves signed identity tokens (JWT) to a scope."""

    def __init__(self, secret_key: Optional[str], algorithm: str = "HS256", project_claim: str = "project_id"):
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._project_claim = project_claim

    def resolve(self, token: str) -> Optional[ScopeResult]:
        if not self._secret_key:
            logger.warning("bearer_secret_not_configured")
            return None
        try:
            claims = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JWTError as e:
            logger.info("bearer_token_rejected", reason=str(e))
            return None
        project_id = claims.get(self._project_claim)
        return ScopeResult(
            project_id=str(project_id) if project_id else None,
            subject=claims.get("sub"),
        )


def credential_name(settings: Settings) -> str:
    """Name of the credential in client-facing error messages."""
    return "bearer token" if settings.uses_bearer_tokens else "API Key"


def extract_credential(request: Request, settings: Settings) -> Optional[str]:
    """Read the client credential from the header used by this deployment."""
    if not settings.uses_bearer_tokens:
        return request.headers.get(API_KEY_HEADER) or None

    authorization = request.headers.get("Authorization")
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def is_admin_secret_valid(provided: Optional[str], expected: Optional[str]) -> bool:
    """Exact match against the server-held secret; an unset secret never matches."""
    if not expected or provided is None:
        return False
    return hmac.compare_digest(provided.encode(), expected.encode())


async def require_admin_secret(
    x_admin_secret: Optional[str] = Header(None, alias=ADMIN_SECRET_HEADER),
    settings: Settings = Depends(get_settings),
) -> None:
    """FastAPI dependency guarding every admin endpoint."""
    if not is_admin_secret_valid(x_admin_secret, settings.ADMIN_SECRET_KEY):
        if not settings.ADMIN_SECRET_KEY:
            logger.warning("admin_request_rejected", reason="admin_secret_not_configured")
        raise UnauthorizedError()
