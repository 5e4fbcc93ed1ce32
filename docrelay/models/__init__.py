"""
Models Package - Export all SQLAlchemy models
"""
from docrelay.models.credential import AccessCredential, generate_token, generate_record_id
from docrelay.models.project import ProjectDescriptor

__all__ = [
    "AccessCredential",
    "ProjectDescriptor",
    "generate_token",
    "generate_record_id",
]
