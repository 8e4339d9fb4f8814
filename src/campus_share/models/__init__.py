# src/campus_share/models/__init__.py
"""SQLAlchemy models for the CampusShare application."""

from .resource import Resource, ResourceVote
from .user import User

__all__ = [
    "Resource", "ResourceVote",
    "User",
]
