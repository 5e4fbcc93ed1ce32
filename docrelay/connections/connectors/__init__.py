"""
Connectors Package - Backing document database implementations
"""
from docrelay.connections.connectors.base_connector import (
    BaseConnector,
    Document,
    collection_name,
    split_document_path,
)
from docrelay.connections.connectors.mongodb_connector import MongoDBConnector

__all__ = [
    "BaseConnector",
    "Document",
    "collection_name",
    "split_document_path",
    "MongoDBConnector",
]
