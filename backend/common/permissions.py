from __future__ import annotations
from typing import Any, Dict, Iterable, Optional, Union

from rest_framework.permissions import BasePermission

# Role names stored on identity.User.role
USER = "user"
TECHNICIAN = "technician"
MANAGER = "manager"
ADMIN = "admin"

ALL_ROLES = frozenset({USER, TECHNICIAN, MANAGER, ADMIN})
STAFF_ROLES = frozenset({TECHNICIAN, MANAGER, ADMIN})
MANAGEMENT_ROLES = frozenset({MANAGER, ADMIN})
ADMIN_ONLY = frozenset({ADMIN})

# Marker for actions open to anonymous callers
PUBLIC = "public"

RoleRule = Union[str, Iterable[str], Dict[str, Any]]


def role_of(user) -> Optional[str]:
    """Effective role of a request user; superusers and staff always count as admin."""
    if not user or not getattr(user, "is_authenticated", False):
        return None
    if getattr(user, "is_superuser", False) or getattr(user, "is_staff", False):
        return ADMIN
    return getattr(user, "role", None) or USER


def has_role(user, *roles: str) -> bool:
    role = role_of(user)
    if role is None:
        return False
    return role == ADMIN or role in roles


class RolePermission(BasePermission):
    """
    Per-action role gate driven by `view.role_rules`:

        role_rules = {
            "list": ALL_ROLES,
            "retrieve": STAFF_ROLES,
            "create": PUBLIC,
            "comments": {"GET": ALL_ROLES, "POST": {"user", "technician"}},
            "*": ADMIN_ONLY,   # fallback for anything not listed
        }

    Admins pass every gate. Actions with no rule and no "*" fallback are admin-only.
    """
    message = "Your role does not allow this action."

    def _rule_for(self, request, view) -> Optional[RoleRule]:
        rules: Dict[str, RoleRule] = getattr(view, "role_rules", {}) or {}
        action = getattr(view, "action", None)
        rule = rules.get(action) if action else None
        if rule is None:
            rule = rules.get("*")
        if isinstance(rule, dict):
            rule = rule.get(request.method, rule.get("*"))
        return rule

    def has_permission(self, request, view):
        if request.method == "OPTIONS":
            return True
        rule = self._rule_for(request, view)
        if rule == PUBLIC:
            return True
        role = role_of(request.user)
        if role is None:
            return False
        if role == ADMIN:
            return True
        if rule is None:
            return False
        return role in set(rule)
