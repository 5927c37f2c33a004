"""Cart Schemas — add, update and remove payloads.

Invariants:
    - Fields are optional at this layer: presence and definedness are decided by
      the cart reconciler, so an explicit quantity of 0 survives validation
"""

from pydantic import StrictInt

from app.schemas.base import CamelModel


class CartAdd(CamelModel):
    product_id: str | None = None
    quantity: StrictInt | None = None


class CartUpdate(CamelModel):
    product_id: str | None = None
    quantity: StrictInt | None = None


class CartRemove(CamelModel):
    product_id: str | None = None
