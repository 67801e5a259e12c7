"""Pydantic schemas for the authenticated caller."""

from uuid import UUID

from pydantic import BaseModel, Field

from learntrack.auth.permissions import UserRole


class AuthenticatedUser(BaseModel):
    """Identity resolved from a verified access token."""

    id: UUID = Field(..., description="User UUID (token subject)")
    role: UserRole = Field(default=UserRole.USER, description="User role")
