# Test Configuration
import copy
import os
from typing import Any, Dict, List, Optional, Sequence

from cryptography.fernet import Fernet

# Must be set before docrelay.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENCRYPTION_KEY"] = Fernet.generate_key().decode()
os.environ.pop("ADMIN_SECRET_KEY", None)
os.environ.pop("DEFAULT_PROJECT_CREDENTIALS", None)

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from docrelay.config import Settings
from docrelay.connections.connection_manager import ConnectionManager
from docrelay.connections.connectors.base_connector import (
    BaseConnector,
    collection_name,
    split_document_path,
)
from docrelay.connections.connectors.mongodb_connector import generate_document_id, merge_fields
from docrelay.core.errors import DocumentNotFoundError
from docrelay.database import Base
from docrelay.services.project_registry import ProjectRegistry
from docrelay import models  # noqa: F401

TEST_ADMIN_SECRET = "test-admin-secret"
TEST_CONNECTION_STRING = "mongodb://localhost:27017"


class FakeDocumentConnector(BaseConnector):
    """In-memory document handle standing in for a backing MongoDB project."""

    def __init__(self, project_id: str, connection_string: str = TEST_CONNECTION_STRING):
        super().__init__(project_id, connection_string)
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.calls: List[tuple] = []
        self.closed = False

    def connect(self) -> None:
        self._connection = object()

    def disconnect(self) -> None:
        self._connection = None
        self.closed = True

    def _docs(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self.collections.setdefault(name, {})

    def get_document(self, path: Sequence[str]):
        self.calls.append(("get_document", tuple(path)))
        coll, doc_id = split_document_path(path)
        data = self._docs(coll).get(doc_id)
        if data is None:
            return None
        return {"id": doc_id, **copy.deepcopy(data)}

    def list_documents(self, path: Sequence[str], limit: Optional[int] = None):
        self.calls.append(("list_documents", tuple(path), limit))
        docs = [{"id": doc_id, **copy.deepcopy(data)} for doc_id, data in self._docs(collection_name(path)).items()]
        return docs[:limit] if limit else docs

    def add_document(self, path: Sequence[str], data):
        self.calls.append(("add_document", tuple(path)))
        doc_id = generate_document_id()
        self._docs(collection_name(path))[doc_id] = copy.deepcopy(data)
        return doc_id

    def set_document(self, path: Sequence[str], data):
        self.calls.append(("set_document", tuple(path)))
        coll, doc_id = split_document_path(path)
        merge_fields(self._docs(coll).setdefault(doc_id, {}), data)
        return doc_id

    def update_document(self, path: Sequence[str], data) -> None:
        self.calls.append(("update_document", tuple(path)))
        coll, doc_id = split_document_path(path)
        doc = self._docs(coll).get(doc_id)
        if doc is None:
            raise DocumentNotFoundError("/".join(path))
        doc.update(copy.deepcopy(data))

    def delete_document(self, path: Sequence[str]) -> None:
        self.calls.append(("delete_document", tuple(path)))
        coll, doc_id = split_document_path(path)
        self._docs(coll).pop(doc_id, None)


class FakeHandleFactory:
    """Handle factory recording every handle it builds."""

    def __init__(self):
        self.created: List[FakeDocumentConnector] = []

    def __call__(self, credentials: Dict[str, Any]) -> FakeDocumentConnector:
        handle = FakeDocumentConnector(credentials["project_id"], credentials.get("connection_string"))
        handle.connect()
        self.created.append(handle)
        return handle


def project_credentials(project_id: str, **extra) -> Dict[str, Any]:
    return {"project_id": project_id, "connection_string": TEST_CONNECTION_STRING, **extra}


@pytest.fixture
def engine():
    """In-memory control-plane database shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def handle_factory():
    return FakeHandleFactory()


@pytest.fixture
def connections(session_factory, handle_factory):
    return ConnectionManager(session_factory=session_factory, handle_factory=handle_factory)


@pytest.fixture
def register_project(db):
    """Register a backing project in the control-plane database."""
    def _register(project_id: str, name: Optional[str] = None):
        return ProjectRegistry(db).create(name or project_id, project_credentials(project_id))
    return _register


@pytest.fixture
def test_settings():
    return Settings(
        ADMIN_SECRET_KEY=TEST_ADMIN_SECRET,
        AUTH_MODE="api_key",
        MULTI_PROJECT=True,
        DEFAULT_PROJECT_ID=None,
        GET_COLLECTION_LIMIT=None
    )


@pytest.fixture
def client(session_factory, connections, test_settings):
    """Test client wired to the in-memory control plane and fake handles."""
    from fastapi.testclient import TestClient
    from docrelay.main import app
    from docrelay.config import get_settings
    from docrelay.connections.connection_manager import get_connection_manager
    from docrelay.database import get_app_db

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_app_db] = _get_db
    app.dependency_overrides[get_connection_manager] = lambda: connections
    app.dependency_overrides[get_settings] = lambda: test_settings

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"X-Admin-Secret": TEST_ADMIN_SECRET}
