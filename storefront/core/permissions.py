# storefront/core/permissions.py

"""
Permission gate for product review operations.

The gate is injected into routes through ``get_permission_gate`` so the
authorization policy can be swapped without touching route or service code
(tests replace it through ``app.dependency_overrides``).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Set
import logging

from fastapi import Depends, Request

from .auth import User, get_current_user_optional
from .config import settings
from .exceptions import AuthenticationError

logger = logging.getLogger(__name__)


class ReviewAction(str, Enum):
    """Actions the gate is asked about"""

    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class AuthorizationContext:
    """Who is asking, and about which product/review."""

    user: Optional[User]
    product_id: Optional[int] = None
    review_id: Optional[int] = None


class PermissionGate:
    """Binary authorization decision per action."""

    def authorize(self, action: ReviewAction, context: AuthorizationContext) -> bool:
        raise NotImplementedError


PERMISSION_ROLE_MAP: Dict[str, List[str]] = {
    "product_reviews:read": ["admin", "shop_manager"],
    "product_reviews:create": ["admin", "shop_manager"],
    "product_reviews:update": ["admin", "shop_manager"],
    "product_reviews:delete": ["admin", "shop_manager"],
}


class RolePermissionGate(PermissionGate):
    """Allow an action when the caller holds a role mapped to it."""

    def __init__(
        self,
        role_map: Optional[Dict[str, List[str]]] = None,
        allow_admin: Optional[bool] = None,
    ):
        self.role_map = role_map if role_map is not None else PERMISSION_ROLE_MAP
        self.allow_admin = (
            settings.rbac_admin_override_enabled if allow_admin is None else allow_admin
        )

    def authorize(self, action: ReviewAction, context: AuthorizationContext) -> bool:
        user = context.user
        if user is None or not user.is_active:
            return False

        if self.allow_admin and user.has_role("admin"):
            return True

        allowed_roles = set(self.role_map.get(f"product_reviews:{action.value}", []))
        return bool(allowed_roles & set(user.roles or []))


_default_gate = RolePermissionGate()


def get_permission_gate() -> PermissionGate:
    """FastAPI dependency returning the active permission gate."""
    return _default_gate


_DENIAL_MESSAGES = {
    ReviewAction.READ: "Sorry, you cannot view this resource.",
    ReviewAction.CREATE: "Sorry, you are not allowed to create resources.",
    ReviewAction.UPDATE: "Sorry, you cannot edit this resource.",
    ReviewAction.DELETE: "Sorry, you cannot delete this resource.",
}


def ensure_authorized(
    gate: PermissionGate, action: ReviewAction, context: AuthorizationContext
) -> None:
    """Raise 401 unless the gate allows ``action``."""
    if gate.authorize(action, context):
        return

    caller = context.user.username if context.user else "anonymous"
    logger.warning(
        f"Denied {action.value} on product {context.product_id} "
        f"review {context.review_id} for {caller}"
    )
    raise AuthenticationError(
        _DENIAL_MESSAGES[action], error_code=f"CANNOT_{action.value.upper()}"
    )


def _path_int(request: Request, name: str) -> Optional[int]:
    value = request.path_params.get(name)
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def require_review_permission(action: ReviewAction):
    """Build a route dependency enforcing ``action`` through the gate."""

    async def dependency(
        request: Request,
        user: Optional[User] = Depends(get_current_user_optional),
        gate: PermissionGate = Depends(get_permission_gate),
    ) -> Optional[User]:
        context = AuthorizationContext(
            user=user,
            product_id=_path_int(request, "product_id"),
            review_id=_path_int(request, "review_id"),
        )
        ensure_authorized(gate, action, context)
        return user

    return dependency


async def _batch_sections(request: Request) -> Set[str]:
    # Raw body; the route validates it after authorization
    try:
        body = await request.json()
    except ValueError:
        return set()
    if not isinstance(body, dict):
        return set()
    return {section for section in ("create", "update", "delete") if body.get(section)}


async def require_batch_permission(
    request: Request,
    user: Optional[User] = Depends(get_current_user_optional),
    gate: PermissionGate = Depends(get_permission_gate),
) -> Optional[User]:
    """
    Authorize a batch request before its body is validated.

    Update permission is always required; create and delete permission
    are required when the body carries those sections.
    """
    context = AuthorizationContext(user=user, product_id=_path_int(request, "product_id"))
    ensure_authorized(gate, ReviewAction.UPDATE, context)

    sections = await _batch_sections(request)
    for action in (ReviewAction.CREATE, ReviewAction.DELETE):
        if action.value in sections:
            ensure_authorized(gate, action, context)
    return user
