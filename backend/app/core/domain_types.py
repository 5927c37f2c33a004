"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, CategoryId, ProductId, CartId wrap UUIDs — never use bare UUID in domain logic
    - Role is a closed enum: customer, vendor, admin (default customer)
    - A line item's quantity is always >= 1 once stored

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders, compare equal to DB strings
"""

from enum import Enum
from typing import NewType, TypedDict
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
CategoryId = NewType("CategoryId", UUID)
ProductId = NewType("ProductId", UUID)
CartId = NewType("CartId", UUID)


# ─── Value Types ─────────────────────────────────────────────────

class LineItem(TypedDict):
    """One cart entry as persisted in the cart's JSON column."""
    product_id: str
    quantity: int


# ─── Enums ───────────────────────────────────────────────────────

class Role(str, Enum):
    """User roles — maps to DB `role` column."""
    CUSTOMER = "customer"
    VENDOR = "vendor"
    ADMIN = "admin"


DEFAULT_ROLE = Role.CUSTOMER
SELF_ASSIGNABLE_ROLES = frozenset({Role.CUSTOMER, Role.VENDOR})
