"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .common import MessageResponse, Pagination
from .resource import ResourceCreate, ResourceResponse
from .user import LoginRequest, RegisterRequest, UserResponse
from .vote import VoteRequest, VoteResponse

__all__ = [
    "MessageResponse", "Pagination",
    "ResourceCreate", "ResourceResponse",
    "LoginRequest", "RegisterRequest", "UserResponse",
    "VoteRequest", "VoteResponse",
]
