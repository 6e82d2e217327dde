"""
Pydantic schemas for permission checks.

Caller is the snapshot of a user record the evaluator works on. GrantContext is
what a guard attaches to request.state after allowing a request.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.features.permissions.constants import DEFAULT_RESOURCE_LABEL


class Caller(BaseModel):
    """Authenticated principal as seen by the evaluator."""
    id: str
    email: str = ""
    role: Optional[str] = None
    # Explicit per-caller grants; None means the caller has none
    permissions: Optional[frozenset[str]] = None

    model_config = ConfigDict(from_attributes=True, frozen=True)

    @field_validator("id", mode="before")
    @classmethod
    def id_as_text(cls, v: Any) -> str:
        return str(v)

    @field_validator("permissions", mode="before")
    @classmethod
    def drop_malformed_permissions(cls, v: Any) -> Optional[frozenset[str]]:
        """Anything other than a collection of strings counts as no explicit grants."""
        if not isinstance(v, (list, tuple, set, frozenset)):
            return None
        if not all(isinstance(p, str) for p in v):
            return None
        return frozenset(v)


class CallerSummary(BaseModel):
    id: str
    email: str
    role: Optional[str] = None


class GrantContext(BaseModel):
    """Attached to request.state.permissions when a guard allows a request."""
    user: CallerSummary
    granted: List[str] = []
    resource: str = DEFAULT_RESOURCE_LABEL


# ============================================================================
# API Schemas
# ============================================================================

class PermissionCheckRequest(BaseModel):
    """Ask whether the current caller satisfies a requirement set."""
    permissions: List[str] = Field(default_factory=list, description="Required permission identifiers")
    resource: Optional[str] = Field(None, description="Resource label, 'own' for self-scoped access")
    allow_owner: bool = Field(False, description="Let the resource owner through regardless of permissions")
    target_id: Optional[str] = Field(None, description="Identifier of the targeted user for ownership checks")


class PermissionCheckResponse(BaseModel):
    allowed: bool
    reason: str
    required: List[str]
    resource: str


class RoleTableResponse(BaseModel):
    roles: Dict[str, List[str]]
    admin_roles: List[str]


class CatalogResponse(BaseModel):
    permissions: List[str]


class EffectivePermissionsResponse(BaseModel):
    """Permissions the current caller holds. ["*"] means all."""
    user_id: str
    role: Optional[str]
    explicit_permissions: List[str] = []
    role_permissions: List[str] = []
    effective_permissions: List[str] = []
    is_admin: bool = False
