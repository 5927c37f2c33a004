"""Serializers — ORM rows to camelCase JSON payloads.

Invariants:
    - User payloads never include the credential digest
    - Product references resolve to compact objects: categoryId → {id, name, description},
      vendorId → {id, username}; a dangling reference serializes as null
    - Cart line items resolve productId → {id, name, price, description}, or null when
      the product has since been deleted
    - Identifiers and timestamps are strings (UUID str, ISO-8601)
"""

from datetime import datetime
from uuid import UUID

from app.core.identifiers import parse_identifier
from app.models.category import Category
from app.models.product import Product
from app.models.user import User
from app.services.cart_reconciler import CartView
from app.services.catalog import ProductView


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _id(value: UUID | None) -> str | None:
    return str(value) if value else None


def user_out(user: User) -> dict:
    return {
        "id": str(user.id),
        "username": user.username,
        "email": user.email,
        "role": user.role,
        "createdAt": _iso(user.created_at),
        "updatedAt": _iso(user.updated_at),
    }


def auth_out(user: User, token: str) -> dict:
    return {**user_out(user), "token": token}


def category_out(category: Category) -> dict:
    return {
        "id": str(category.id),
        "name": category.name,
        "description": category.description,
        "createdAt": _iso(category.created_at),
        "updatedAt": _iso(category.updated_at),
    }


def product_out(product: Product, view: ProductView | None = None) -> dict:
    """Serialize a product; with a view, its category and vendor references are resolved."""
    category_ref: object = _id(product.category_id)
    vendor_ref: object = _id(product.vendor_id)
    if view is not None:
        category = view.categories.get(product.category_id)
        vendor = view.vendors.get(product.vendor_id)
        category_ref = (
            {"id": str(category.id), "name": category.name,
             "description": category.description}
            if category else None
        )
        vendor_ref = (
            {"id": str(vendor.id), "username": vendor.username}
            if vendor else None
        )
    return {
        "id": str(product.id),
        "name": product.name,
        "price": product.price,
        "description": product.description,
        "categoryId": category_ref,
        "vendorId": vendor_ref,
        "inStock": product.in_stock,
        "quantity": product.quantity,
        "createdAt": _iso(product.created_at),
        "updatedAt": _iso(product.updated_at),
    }


def product_list_out(view: ProductView) -> list[dict]:
    return [product_out(p, view) for p in view.products]


def cart_out(view: CartView) -> dict:
    if view.cart is None:
        return {"userId": str(view.user_id), "products": []}
    items = []
    for item in view.items:
        product = view.products.get(parse_identifier(item["product_id"]))
        items.append({
            "productId": (
                {"id": str(product.id), "name": product.name,
                 "price": product.price, "description": product.description}
                if product else None
            ),
            "quantity": item["quantity"],
        })
    return {
        "id": str(view.cart.id),
        "userId": str(view.cart.user_id),
        "products": items,
        "createdAt": _iso(view.cart.created_at),
        "updatedAt": _iso(view.cart.updated_at),
    }
