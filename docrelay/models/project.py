"""
Project Descriptor Model - Backing project connection registry
"""
from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.sql import func

from docrelay.database import Base


class ProjectDescriptor(Base):
    """
    Backing project registered with the relay.

    ``id`` is the project identifier embedded in the connection credentials.
    The credential blob is stored encrypted and never serialized to clients.
    """
    __tablename__ = "proxy_projects"

    id = Column(String(255), primary_key=True)
    name = Column(String(255), nullable=False)
    encrypted_credentials = Column(Text, nullable=False)  # Encrypted at rest

    created_at = Column(DateTime(timezone=True), server_default=func.now())
