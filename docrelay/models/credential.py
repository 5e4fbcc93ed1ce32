"""
Access Credential Model - Client keys for the proxy endpoint
"""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
import secrets

from docrelay.database import Base

TOKEN_PREFIX = "proxy_"
TOKEN_BYTES = 24  # 32 URL-safe characters, 192 bits


def generate_record_id() -> str:
    """Opaque identifier for control-plane records."""
    return secrets.token_urlsafe(15)


def generate_token() -> str:
    """Client-facing API key, always generated server-side."""
    return f"{TOKEN_PREFIX}{secrets.token_urlsafe(TOKEN_BYTES)}"


class AccessCredential(Base):
    """API key mapping a token to a project scope (NULL scope = unrestricted)."""
    __tablename__ = "proxy_api_keys"

    id = Column(String(64), primary_key=True, default=generate_record_id)
    label = Column(String(255), nullable=False)
    token = Column(String(128), nullable=False, unique=True, index=True, default=generate_token)
    scope = Column(String(255), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
