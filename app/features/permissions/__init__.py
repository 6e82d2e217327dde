"""
Permission resolution for API routes.

Role-based grants with an admin bypass, self-ownership bypass and explicit
per-user grants. Guards live in app.features.permissions.dependencies.
"""
from app.features.permissions.constants import (  # noqa: F401
    ADMIN_ROLES,
    ALL_PERMISSIONS,
    Permission,
    Role,
)
from app.features.permissions.roles import (  # noqa: F401
    ALL,
    DEFAULT_ROLE_PERMISSIONS,
    AllGrant,
    ExplicitGrant,
    RolePermissionTable,
    get_role_table,
    replace_role_table,
)
