"""
Document Relay - Configuration
"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional
import json


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application
    APP_NAME: str = "Document Relay"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Control-plane database (credentials + project registry)
    DATABASE_URL: str = "sqlite:///./data/relay.db"

    # Admin control plane. Unset means every admin request is rejected.
    ADMIN_SECRET_KEY: Optional[str] = None

    # Deployment mode: "api_key" (X-API-Key header) or "bearer" (Authorization: Bearer <jwt>)
    AUTH_MODE: str = "api_key"
    MULTI_PROJECT: bool = True

    # Project used for credentials with unrestricted scope
    DEFAULT_PROJECT_ID: Optional[str] = None
    # Connection credential blob registered at startup (single-project deployments)
    DEFAULT_PROJECT_CREDENTIALS: Optional[str] = None

    # Bearer mode
    JWT_SECRET_KEY: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    JWT_PROJECT_CLAIM: str = "project_id"

    # Encryption of stored connection credentials
    ENCRYPTION_KEY: Optional[str] = None
    ENCRYPTION_KEY_FILE: str = "./data/encryption.key"

    # getCollection cap; None reads the whole collection
    GET_COLLECTION_LIMIT: Optional[int] = None

    # Backing client defaults, overridable per project in the credential blob
    BACKING_TIMEOUT_SECONDS: int = 30
    BACKING_POOL_SIZE: int = 5

    # CORS
    CORS_ORIGINS: list = ["http://localhost:9002", "http://localhost:3000"]

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def uses_bearer_tokens(self) -> bool:
        return self.AUTH_MODE.lower() == "bearer"

    def get_default_project_id(self) -> Optional[str]:
        """Get the default project, falling back to the bootstrap credential blob."""
        if self.DEFAULT_PROJECT_ID:
            return self.DEFAULT_PROJECT_ID
        if not self.DEFAULT_PROJECT_CREDENTIALS:
            return None
        try:
            blob = json.loads(self.DEFAULT_PROJECT_CREDENTIALS)
        except ValueError:
            return None
        if not isinstance(blob, dict):
            return None
        return blob.get("project_id") or None


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
