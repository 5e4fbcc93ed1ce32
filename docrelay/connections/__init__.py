"""
Connections Package - Backing project handle management
"""
from docrelay.connections.connection_manager import (
    connection_manager,
    ConnectionManager,
    get_connection_manager,
)

__all__ = [
    "connection_manager",
    "ConnectionManager",
    "get_connection_manager",
]
