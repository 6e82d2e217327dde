"""
Permission catalog and role names.

Permission identifiers are "<action>:<domain>" strings. They are stable: a value
is never reused for a different capability.
"""
from enum import Enum


class Permission(str, Enum):
    # Own account
    READ_OWN = "read:own"
    UPDATE_OWN = "update:own"
    DELETE_OWN = "delete:own"

    # Products
    READ_PRODUCTS = "read:products"
    CREATE_PRODUCTS = "create:products"
    UPDATE_PRODUCTS = "update:products"
    DELETE_PRODUCTS = "delete:products"

    # Orders
    READ_ORDERS = "read:orders"
    CREATE_ORDERS = "create:orders"
    UPDATE_ORDERS = "update:orders"
    DELETE_ORDERS = "delete:orders"

    # Any resource
    READ_ALL = "read:all"
    CREATE_ALL = "create:all"
    UPDATE_ALL = "update:all"
    DELETE_ALL = "delete:all"

    # User management
    MANAGE_USERS = "manage:users"
    ASSIGN_ROLES = "assign:roles"

    def __str__(self) -> str:
        return self.value


class Role(str, Enum):
    USER = "user"
    MODERATOR = "moderator"
    MANAGER = "manager"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"

    def __str__(self) -> str:
        return self.value


# Roles that bypass explicit and role-derived checks
ADMIN_ROLES: frozenset[str] = frozenset({Role.ADMIN.value, Role.SUPERADMIN.value})

ALL_PERMISSIONS: frozenset[str] = frozenset(p.value for p in Permission)

# Resource label that marks a self-scoped request
OWN_RESOURCE = "own"

# Label used in responses when a guard has no resource configured
DEFAULT_RESOURCE_LABEL = "general"
