"""Cart Routes — the authenticated user's own cart.

Invariants:
    - The acting user's id is captured before the reconciler runs: a retry
      rolls the session back and expires the loaded User row
    - GET never 404s; a user without a cart gets {userId, products: []}
"""

from fastapi import APIRouter, Depends

from app.api.dependencies import get_cart_reconciler, get_current_user
from app.api.serializers import cart_out
from app.core.domain_types import UserId
from app.models.user import User
from app.schemas.cart import CartAdd, CartRemove, CartUpdate
from app.schemas.envelope import envelope
from app.services.cart_reconciler import CartReconciler

router = APIRouter(prefix="/api/v1/cart", tags=["cart"])


@router.get("")
async def get_cart(
    current_user: User = Depends(get_current_user),
    carts: CartReconciler = Depends(get_cart_reconciler),
):
    view = await carts.get(UserId(current_user.id))
    return envelope(data=cart_out(view))


@router.post("/add")
async def add_to_cart(
    body: CartAdd,
    current_user: User = Depends(get_current_user),
    carts: CartReconciler = Depends(get_cart_reconciler),
):
    user_id = UserId(current_user.id)
    view = await carts.add(user_id, body.product_id, body.quantity)
    return envelope(
        data=cart_out(view), message="Product added to cart successfully",
    )


@router.put("/update")
async def update_cart_item(
    body: CartUpdate,
    current_user: User = Depends(get_current_user),
    carts: CartReconciler = Depends(get_cart_reconciler),
):
    user_id = UserId(current_user.id)
    view = await carts.update(user_id, body.product_id, body.quantity)
    return envelope(
        data=cart_out(view), message="Cart item updated successfully",
    )


@router.delete("/remove")
async def remove_from_cart(
    body: CartRemove,
    current_user: User = Depends(get_current_user),
    carts: CartReconciler = Depends(get_cart_reconciler),
):
    user_id = UserId(current_user.id)
    view = await carts.remove(user_id, body.product_id)
    return envelope(
        data=cart_out(view), message="Product removed from cart successfully",
    )


@router.delete("/clear")
async def clear_cart(
    current_user: User = Depends(get_current_user),
    carts: CartReconciler = Depends(get_cart_reconciler),
):
    user_id = UserId(current_user.id)
    view = await carts.clear(user_id)
    return envelope(data=cart_out(view), message="Cart cleared successfully")
