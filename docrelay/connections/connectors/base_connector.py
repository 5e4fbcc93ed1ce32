"""
Base Connector Interface for backing document databases
All document connectors must implement this interface
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple


Document = Dict[str, Any]


def collection_name(path: Sequence[str]) -> str:
    """Collection path segments -> collection name (``users/u1/posts``)."""
    if len(path) % 2 != 1:
        raise ValueError(f"Not a collection path: {'/'.join(path)}")
    return "/".join(path)


def split_document_path(path: Sequence[str]) -> Tuple[str, str]:
    """Document path segments -> (collection name, document id)."""
    if not path or len(path) % 2 != 0:
        raise ValueError(f"Not a document path: {'/'.join(path)}")
    return "/".join(path[:-1]), path[-1]


class BaseConnector(ABC):
    """
    Abstract base class for document connectors.

    A connector is the live handle the relay keeps for one backing project.
    Paths alternate collection and document segments; odd-length paths name a
    collection and even-length paths name a document.
    """

    def __init__(self, project_id: str, connection_string: str, pool_size: int = 5, timeout: int = 30):
        """
        Initialize connector.

        Args:
            project_id: Backing project identifier
            connection_string: Database connection string
            pool_size: Connection pool size
            timeout: Request timeout in seconds
        """
        self.project_id = project_id
        self.connection_string = connection_string
        self.pool_size = pool_size
        self.timeout = timeout
        self._connection = None

    @abstractmethod
    def connect(self) -> None:
        """
        Establish the client session.

        Raises:
            ConnectionError: If the client cannot be constructed
        """
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Close the client session and cleanup resources."""
        pass

    @abstractmethod
    def get_document(self, path: Sequence[str]) -> Optional[Document]:
        """Read one document as ``{id, ...data}``, or None when absent."""
        pass

    @abstractmethod
    def list_documents(self, path: Sequence[str], limit: Optional[int] = None) -> List[Document]:
        """Read every document of a collection (unordered)."""
        pass

    @abstractmethod
    def add_document(self, path: Sequence[str], data: Document) -> str:
        """Insert a document with a generated id and return the id."""
        pass

    @abstractmethod
    def set_document(self, path: Sequence[str], data: Document) -> str:
        """Upsert a document, merging into existing fields. Returns the id."""
        pass

    @abstractmethod
    def update_document(self, path: Sequence[str], data: Document) -> None:
        """
        Partially update an existing document.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        pass

    @abstractmethod
    def delete_document(self, path: Sequence[str]) -> None:
        """Delete a document; deleting an absent document is not an error."""
        pass

    def is_connected(self) -> bool:
        """Check if currently connected."""
        return self._connection is not None
