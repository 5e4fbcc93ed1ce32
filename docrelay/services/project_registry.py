"""
Project Registry
Backing-project connection descriptors, stored in the control-plane database
"""
from typing import Any, Dict, List, Optional, Union
import json

from sqlalchemy.orm import Session
import structlog

from docrelay.core.crypto import encrypt_value, decrypt_value
from docrelay.core.errors import InvalidCredentialFormatError, MissingProjectIdentifierError
from docrelay.models.project import ProjectDescriptor

logger = structlog.get_logger()

PROJECT_ID_FIELD = "project_id"


def parse_connection_credentials(credentials: Union[str, Dict[str, Any]]) -> Dict[str, Any]:
    """
    Parse a connection credential blob and check its embedded project id.

    Raises:
        InvalidCredentialFormatError: blob is not a JSON object
        MissingProjectIdentifierError: blob has no ``project_id``
    """
    if isinstance(credentials, str):
        try:
            parsed = json.loads(credentials)
        except ValueError:
            raise InvalidCredentialFormatError()
    else:
        parsed = credentials

    if not isinstance(parsed, dict):
        raise InvalidCredentialFormatError()

    project_id = parsed.get(PROJECT_ID_FIELD)
    if not project_id or not isinstance(project_id, str):
        raise MissingProjectIdentifierError()

    return parsed


class ProjectRegistry:
    """CRUD over ProjectDescriptor records."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, project_id: str) -> Optional[ProjectDescriptor]:
        return self.db.query(ProjectDescriptor).filter(
            ProjectDescriptor.id == project_id
        ).first()

    def list(self) -> List[ProjectDescriptor]:
        return self.db.query(ProjectDescriptor).order_by(ProjectDescriptor.created_at).all()

    def create(self, name: str, connection_credentials: Union[str, Dict[str, Any]]) -> ProjectDescriptor:
        """
        Register a backing project. The id is taken from the credentials;
        registering an existing id replaces its record.
        """
        parsed = parse_connection_credentials(connection_credentials)
        project_id = parsed[PROJECT_ID_FIELD]
        encrypted = encrypt_value(json.dumps(parsed))

        descriptor = self.get(project_id)
        if descriptor:
            descriptor.name = name
            descriptor.encrypted_credentials = encrypted
            logger.info("project_replaced", project_id=project_id)
        else:
            descriptor = ProjectDescriptor(
                id=project_id,
                name=name,
                encrypted_credentials=encrypted
            )
            self.db.add(descriptor)
            logger.info("project_registered", project_id=project_id)

        self.db.commit()
        self.db.refresh(descriptor)
        return descriptor

    def delete(self, project_id: str) -> bool:
        """Remove a project. Credentials scoped to it are left untouched."""
        deleted = self.db.query(ProjectDescriptor).filter(
            ProjectDescriptor.id == project_id
        ).delete(synchronize_session=False)
        self.db.commit()
        if deleted:
            logger.info("project_deleted", project_id=project_id)
        return bool(deleted)

    @staticmethod
    def load_credentials(descriptor: ProjectDescriptor) -> Dict[str, Any]:
        """
        Decrypt and parse the stored credential blob.

        Raises:
            InvalidCredentialFormatError: stored value cannot be decrypted or parsed
            MissingProjectIdentifierError: stored blob lost its ``project_id``
        """
        decrypted = decrypt_value(descriptor.encrypted_credentials)
        if decrypted is None:
            raise InvalidCredentialFormatError("Stored credentials could not be decrypted")
        return parse_connection_credentials(decrypted)
