"""
API Package
"""
from docrelay.api import proxy, keys, projects, status

__all__ = ["proxy", "keys", "projects", "status"]
