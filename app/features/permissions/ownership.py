"""
Ownership resolution for self-scoped requests.
"""
from typing import Any, Optional

from starlette.requests import Request

from app.features.permissions.schemas import Caller


# Path parameters that name the targeted user, in lookup order
TARGET_PATH_PARAMS = ("user_id", "id")


def extract_target_id(request: Request) -> Optional[str]:
    for name in TARGET_PATH_PARAMS:
        value = request.path_params.get(name)
        if value:
            return str(value)
    return None


def resolve_ownership(caller: Caller, target_id: Optional[Any]) -> bool:
    """True if target_id is present and names the caller."""
    if target_id is None:
        return False
    target = str(target_id)
    return bool(target) and target == caller.id
