"""
Credential Store
API keys accepted by the proxy endpoint and the scope each one grants
"""
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import structlog

from docrelay.core.errors import ControlPlaneUnavailableError
from docrelay.core.security import ScopeResult
from docrelay.models.credential import AccessCredential, generate_token

logger = structlog.get_logger()


class CredentialStore:
    """
    Lookup and administration of AccessCredential records.

    Every ``resolve`` reads the table, so a deleted key stops authorizing on
    the next request. There is no update: rotation is delete + create.
    """

    def __init__(self, db: Session):
        self.db = db

    def resolve(self, token: str) -> Optional[ScopeResult]:
        """
        Exact-match lookup of a token. Returns None when unknown.

        Raises:
            ControlPlaneUnavailableError: the credential table could not be read
        """
        if not token:
            return None
        try:
            record = self.db.query(AccessCredential).filter(
                AccessCredential.token == token
            ).first()
        except SQLAlchemyError as e:
            logger.error("credential_lookup_failed", error=str(e))
            raise ControlPlaneUnavailableError() from e

        if record is None:
            return None
        return ScopeResult(project_id=record.scope, subject=record.id)

    def create(self, label: str, scope: Optional[str] = None) -> AccessCredential:
        """Create a credential with a server-generated token."""
        record = AccessCredential(label=label, scope=scope, token=generate_token())
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        logger.info("credential_created", credential_id=record.id, scope=scope)
        return record

    def list(self) -> List[AccessCredential]:
        return self.db.query(AccessCredential).order_by(AccessCredential.created_at).all()

    def delete(self, credential_id: str) -> bool:
        deleted = self.db.query(AccessCredential).filter(
            AccessCredential.id == credential_id
        ).delete(synchronize_session=False)
        self.db.commit()
        if deleted:
            logger.info("credential_revoked", credential_id=credential_id)
        return bool(deleted)

    def count_for_project(self, project_id: str) -> int:
        """Number of credentials scoped to a project."""
        return self.db.query(AccessCredential).filter(
            AccessCredential.scope == project_id
        ).count()
