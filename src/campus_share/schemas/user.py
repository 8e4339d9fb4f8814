"""User-related Pydantic schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import Field

from campus_share.schemas.common import CamelModel, Pagination

class RegisterRequest(CamelModel):
    """Registration payload; field rules are enforced by the credential store."""

    name: str = Field(..., description="Display name (2-100 characters)")
    email: str = Field(..., description="Login email, matched case-insensitively")
    password: str = Field(..., description="Plaintext password (at least 6 characters)")
    department: str = Field(..., description="Academic department")

class LoginRequest(CamelModel):
    email: str
    password: str

class UserSummary(CamelModel):
    """Public view of a user embedded in other payloads."""

    id: int
    name: str
    email: str
    department: str

class UserResponse(UserSummary):
    role: str
    created_at: datetime

class AuthResponse(CamelModel):
    token: str = Field(..., description="JWT bearer token")
    user: UserResponse

class UserEnvelope(CamelModel):
    user: UserResponse

class ProfileUpdateRequest(CamelModel):
    """Schema for updating the caller's own profile."""

    name: str | None = Field(None, description="New display name (2-100 characters)")
    department: str | None = Field(None, description="New department (1-100 characters)")

class RoleUpdateRequest(CamelModel):
    role: str = Field(..., description='"user" or "admin"')

class RoleUpdateResponse(CamelModel):
    user: UserResponse
    message: str = "User role updated successfully"

class UserListResponse(CamelModel):
    users: list[UserResponse]
    pagination: Pagination

class VoterSummary(CamelModel):
    id: int
    name: str
    email: str
