"""
MongoDB Connector
Implements BaseConnector for MongoDB-backed projects
"""
from pymongo import MongoClient
from bson import ObjectId
from typing import List, Dict, Any, Optional, Sequence
from datetime import datetime
import copy
import secrets
import string

from docrelay.connections.connectors.base_connector import (
    BaseConnector,
    Document,
    collection_name,
    split_document_path,
)
from docrelay.core.errors import DocumentNotFoundError

AUTO_ID_ALPHABET = string.ascii_letters + string.digits
AUTO_ID_LENGTH = 20


def generate_document_id() -> str:
    """20-character alphanumeric id for documents created by addDoc."""
    return "".join(secrets.choice(AUTO_ID_ALPHABET) for _ in range(AUTO_ID_LENGTH))


def merge_fields(target: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep-merge ``data`` into ``target`` in place and return it.

    Nested maps are merged key by key; any other value (including an empty
    map) replaces what was there. Keys are taken literally, so dotted or
    ``$``-prefixed names are stored as given, the same as with addDoc.
    """
    for key, value in data.items():
        if isinstance(value, dict) and value and isinstance(target.get(key), dict):
            merge_fields(target[key], value)
        else:
            target[key] = copy.deepcopy(value)
    return target


def serialize_value(value):
    if isinstance(value, ObjectId):
        return str(value)
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [serialize_value(item) for item in value]
    else:
        return value


def serialize_document(raw: Dict[str, Any]) -> Document:
    """MongoDB document -> ``{id, ...data}`` with JSON-safe values."""
    data = dict(raw)
    doc_id = data.pop("_id")
    return {"id": serialize_value(doc_id), **serialize_value(data)}


class MongoDBConnector(BaseConnector):
    """MongoDB connector implementation"""

    def __init__(
        self,
        project_id: str,
        connection_string: str,
        database: Optional[str] = None,
        pool_size: int = 5,
        timeout: int = 30
    ):
        super().__init__(project_id, connection_string, pool_size, timeout)
        self.client: Optional[MongoClient] = None
        self.db = None
        self._db_name = database

    @classmethod
    def from_credentials(cls, credentials: Dict[str, Any], pool_size: int = 5, timeout: int = 30) -> "MongoDBConnector":
        """
        Build and connect a connector from a parsed credential blob.

        Expected keys: ``project_id``, ``connection_string`` and optionally
        ``database``, ``pool_size``, ``timeout_seconds``.
        """
        connection_string = credentials.get("connection_string")
        if not connection_string:
            raise ConnectionError("`connection_string` missing from credentials")

        connector = cls(
            project_id=credentials["project_id"],
            connection_string=connection_string,
            database=credentials.get("database"),
            pool_size=int(credentials.get("pool_size", pool_size)),
            timeout=int(credentials.get("timeout_seconds", timeout)),
        )
        connector.connect()
        return connector

    def connect(self):
        """Establish MongoDB connection"""
        try:
            self.client = MongoClient(
                self.connection_string,
                serverSelectionTimeoutMS=self.timeout * 1000,
                connectTimeoutMS=self.timeout * 1000,
                socketTimeoutMS=self.timeout * 1000,
                maxPoolSize=self.pool_size
            )

            if self._db_name:
                self.db = self.client[self._db_name]
            else:
                # URI default database, else one database per project
                self.db = self.client.get_default_database(default=self.project_id)
                self._db_name = self.db.name

            self._connection = self.client  # Set for is_connected() check
        except Exception as e:
            raise ConnectionError(f"Failed to connect to MongoDB: {str(e)}")

    def disconnect(self):
        """Close MongoDB connection"""
        if self.client:
            self.client.close()
            self.client = None
            self.db = None
            self._connection = None

    def _collection(self, name: str):
        if self.db is None:
            self.connect()
        return self.db[name]

    def get_document(self, path: Sequence[str]) -> Optional[Document]:
        coll_name, doc_id = split_document_path(path)
        raw = self._collection(coll_name).find_one({"_id": doc_id})
        if raw is None:
            return None
        return serialize_document(raw)

    def list_documents(self, path: Sequence[str], limit: Optional[int] = None) -> List[Document]:
        cursor = self._collection(collection_name(path)).find({})
        if limit:
            cursor = cursor.limit(limit)
        return [serialize_document(raw) for raw in cursor]

    def add_document(self, path: Sequence[str], data: Document) -> str:
        doc_id = generate_document_id()
        self._collection(collection_name(path)).insert_one({**data, "_id": doc_id})
        return doc_id

    def set_document(self, path: Sequence[str], data: Document) -> str:
        coll_name, doc_id = split_document_path(path)
        collection = self._collection(coll_name)

        existing = collection.find_one({"_id": doc_id}) or {}
        existing.pop("_id", None)
        merged = merge_fields(existing, data)
        merged.pop("_id", None)

        # Whole-document write so field names are stored literally
        collection.replace_one({"_id": doc_id}, {"_id": doc_id, **merged}, upsert=True)
        return doc_id

    def update_document(self, path: Sequence[str], data: Document) -> None:
        coll_name, doc_id = split_document_path(path)
        collection = self._collection(coll_name)

        if not data:
            if collection.find_one({"_id": doc_id}, {"_id": 1}) is None:
                raise DocumentNotFoundError("/".join(path))
            return

        # Top-level keys replace fields; dotted keys address nested fields
        result = collection.update_one({"_id": doc_id}, {"$set": data})
        if result.matched_count == 0:
            raise DocumentNotFoundError("/".join(path))

    def delete_document(self, path: Sequence[str]) -> None:
        coll_name, doc_id = split_document_path(path)
        self._collection(coll_name).delete_one({"_id": doc_id})
