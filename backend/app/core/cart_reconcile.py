"""Cart Reconciliation — pure line-item transitions for add, update, remove and clear.

Invariants:
    - All functions are PURE: no IO, no async, no DB, input lists never mutated
    - At most one line item per distinct product id; order is insertion order
    - Every stored quantity is >= 1 — an update to <= 0 removes the item
    - Product ids are matched by identifier value (same_identifier), never identity
    - Return (items, None) on success, (original items, CartFailure) on violation

Design Decisions:
    - Return failures (not exceptions): the async shell maps a CartFailure to the
      matching StorefrontError once, after deciding whether to retry the write
    - Add merges (accumulates), update replaces — repeated adds never overwrite
    - Missing-cart failures are decided by the shell (it owns the store lookup);
      these functions only see the item list
"""

from dataclasses import dataclass
from enum import Enum

from app.core.domain_types import LineItem
from app.core.identifiers import same_identifier

DEFAULT_ADD_QUANTITY = 1


class CartFailureKind(str, Enum):
    """Failure classes — mapped to HTTP status by the shell."""
    MISSING_ARGUMENT = "missing_argument"
    INVALID_QUANTITY = "invalid_quantity"
    ITEM_NOT_IN_CART = "item_not_in_cart"


@dataclass(frozen=True)
class CartFailure:
    kind: CartFailureKind
    message: str


CartResult = tuple[list[LineItem], CartFailure | None]


def find_line_item(items: list[LineItem], product_id: str) -> int:
    """Index of the line item for product_id, or -1."""
    for index, item in enumerate(items):
        if same_identifier(item["product_id"], product_id):
            return index
    return -1


def _copy(items: list[LineItem]) -> list[LineItem]:
    return [LineItem(product_id=i["product_id"], quantity=i["quantity"]) for i in items]


def _canonical(product_id: str) -> str:
    """Stored form of a product id: lower-case hyphenated UUID text."""
    return str(product_id).lower()


def resolve_add_quantity(quantity: int | None) -> int:
    """Absent quantity means 1."""
    return DEFAULT_ADD_QUANTITY if quantity is None else quantity


def apply_add(
    items: list[LineItem], product_id: str, quantity: int | None = None,
) -> CartResult:
    """Merge-add: increment an existing line item or append a new one."""
    amount = resolve_add_quantity(quantity)
    if amount <= 0:
        return items, CartFailure(
            CartFailureKind.INVALID_QUANTITY, "Quantity must be a positive integer",
        )
    new_items = _copy(items)
    index = find_line_item(new_items, product_id)
    if index > -1:
        new_items[index]["quantity"] += amount
    else:
        new_items.append(
            LineItem(product_id=_canonical(product_id), quantity=amount),
        )
    return new_items, None


def check_update_arguments(
    product_id: str | None, quantity: int | None,
) -> CartFailure | None:
    """Both are required. quantity is checked for definedness, so 0 is valid."""
    if not product_id or quantity is None:
        return CartFailure(
            CartFailureKind.MISSING_ARGUMENT,
            "Please provide productId and quantity",
        )
    return None


def apply_update(
    items: list[LineItem], product_id: str | None, quantity: int | None,
) -> CartResult:
    """Replace a line item's quantity; quantity <= 0 removes the item."""
    error = check_update_arguments(product_id, quantity)
    if error:
        return items, error
    index = find_line_item(items, product_id)  # type: ignore[arg-type]
    if index == -1:
        return items, CartFailure(
            CartFailureKind.ITEM_NOT_IN_CART, "Product not in cart",
        )
    new_items = _copy(items)
    if quantity <= 0:  # type: ignore[operator]
        del new_items[index]
    else:
        new_items[index]["quantity"] = quantity  # type: ignore[typeddict-item]
    return new_items, None


def apply_remove(items: list[LineItem], product_id: str | None) -> CartResult:
    """Delete one line item, preserving the order of the rest."""
    if not product_id:
        return items, CartFailure(
            CartFailureKind.MISSING_ARGUMENT, "Please provide productId",
        )
    index = find_line_item(items, product_id)
    if index == -1:
        return items, CartFailure(
            CartFailureKind.ITEM_NOT_IN_CART, "Product not in cart",
        )
    new_items = _copy(items)
    del new_items[index]
    return new_items, None


def apply_clear(items: list[LineItem]) -> CartResult:
    """Empty the list. The cart itself persists."""
    return [], None
