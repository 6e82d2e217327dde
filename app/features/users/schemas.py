"""
Pydantic schemas for user requests and responses.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field

from app.features.permissions.constants import Permission, Role


class UserBase(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=255)


class UserUpdate(BaseModel):
    """Profile fields a user may change on their own record."""
    name: str | None = Field(None, min_length=1, max_length=255)


class RoleAssignment(BaseModel):
    role: Role


class PermissionAssignment(BaseModel):
    """Replace a user's explicit grants. null clears them."""
    permissions: Optional[List[Permission]] = None


class UserResponse(UserBase):
    id: str
    role: str
    permissions: Optional[List[str]] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserPublic(BaseModel):
    """Public user information (limited fields)."""
    id: str
    name: str

    model_config = {"from_attributes": True}
