"""Cart ORM — one per user, line items stored as a JSON list.

Invariants:
    - user_id is unique: at most one cart per user
    - products holds [{"product_id": str, "quantity": int}] in insertion order,
      at most one entry per product, every quantity >= 1
    - version increments on every write; stale writes raise StaleDataError

Design Decisions:
    - JSON column for line items: the cart is read and written as one document,
      matching the reconciliation model (load, apply pure transition, write back)
    - version_id_col gives compare-and-swap on UPDATE without explicit locking
    - products list is always REPLACED, never mutated in place, so the ORM sees
      the change without MutableList tracking
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, JSON
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Cart(Base):
    __tablename__ = "carts"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    products: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow,
    )

    __mapper_args__ = {"version_id_col": version}
