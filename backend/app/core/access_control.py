"""Access Control — single decision function mapping (role, actor, owner, operation) to allow/deny.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Every deny carries a human-readable reason; callers surface it as Forbidden
    - Role checks happen ONLY here — handlers never compare role strings themselves

Design Decisions:
    - Return AccessDecision (not exceptions): the shell decides how a deny is
      reported, keeping the rules testable without mocks
    - role_gate() is the role-only half of decide(), used before the resource is
      loaded; decide() always applies the owner rule, so an unowned product
      (vendor deleted) is mutable by admins only
    - Role reassignment is filtered, not rejected: a non-admin role field is dropped
      while the rest of the update still applies
"""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from app.core.domain_types import Role


class Operation(str, Enum):
    """Protected operations, grouped by the rule that governs them."""
    # admin only
    CREATE_CATEGORY = "create-category"
    UPDATE_CATEGORY = "update-category"
    DELETE_CATEGORY = "delete-category"
    LIST_USERS = "list-users"
    ASSIGN_ROLE = "assign-role"
    # vendor or admin; update/delete additionally owner-or-admin
    CREATE_PRODUCT = "create-product"
    UPDATE_PRODUCT = "update-product"
    DELETE_PRODUCT = "delete-product"
    # self or admin
    UPDATE_USER = "update-user"
    DELETE_USER = "delete-user"


class Decision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of decide(). reason is set on every DENY."""
    decision: Decision
    reason: str | None = None

    @property
    def allowed(self) -> bool:
        return self.decision is Decision.ALLOW


ADMIN_ONLY = frozenset({
    Operation.CREATE_CATEGORY,
    Operation.UPDATE_CATEGORY,
    Operation.DELETE_CATEGORY,
    Operation.LIST_USERS,
    Operation.ASSIGN_ROLE,
})
VENDOR_OR_ADMIN = frozenset({
    Operation.CREATE_PRODUCT,
    Operation.UPDATE_PRODUCT,
    Operation.DELETE_PRODUCT,
})
OWNED_PRODUCT_MUTATIONS = frozenset({
    Operation.UPDATE_PRODUCT,
    Operation.DELETE_PRODUCT,
})
SELF_OR_ADMIN = frozenset({
    Operation.UPDATE_USER,
    Operation.DELETE_USER,
})

_ALLOW = AccessDecision(Decision.ALLOW)

_DENY_REASONS = {
    Operation.UPDATE_PRODUCT: "Not authorized to update this product",
    Operation.DELETE_PRODUCT: "Not authorized to delete this product",
    Operation.UPDATE_USER: "Not authorized to update this user",
    Operation.DELETE_USER: "Not authorized to delete this user",
}


def _deny(reason: str) -> AccessDecision:
    return AccessDecision(Decision.DENY, reason)


def _is_owner(actor_id: UUID | None, owner_id: UUID | None) -> bool:
    return actor_id is not None and owner_id is not None and actor_id == owner_id


def role_gate(actor_role: Role, operation: Operation) -> AccessDecision:
    """Role-only check. Self-or-admin operations pass the gate for every role."""
    role = Role(actor_role)
    if operation in ADMIN_ONLY and role is not Role.ADMIN:
        return _deny("Not authorized as admin")
    if operation in VENDOR_OR_ADMIN and role not in (Role.VENDOR, Role.ADMIN):
        return _deny("Not authorized as vendor")
    return _ALLOW


def decide(
    actor_role: Role,
    actor_id: UUID | None,
    resource_owner_id: UUID | None,
    operation: Operation,
) -> AccessDecision:
    """Decide whether actor may perform operation on a resource owned by resource_owner_id."""
    role = Role(actor_role)
    gate = role_gate(role, operation)
    if not gate.allowed:
        return gate

    if operation in OWNED_PRODUCT_MUTATIONS or operation in SELF_OR_ADMIN:
        if role is Role.ADMIN or _is_owner(actor_id, resource_owner_id):
            return _ALLOW
        return _deny(_DENY_REASONS[operation])

    return _ALLOW


def filter_role_change(
    actor_role: Role, requested_role: Role | None,
) -> Role | None:
    """Return the role to apply during a user update, or None to leave it unchanged.

    Non-admin role requests are silently dropped (not rejected).
    """
    if requested_role is None:
        return None
    if not role_gate(actor_role, Operation.ASSIGN_ROLE).allowed:
        return None
    return Role(requested_role)
