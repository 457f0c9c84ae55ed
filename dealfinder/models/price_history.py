"""
DealFinder - Price History Model

Append-only log of price points per product. Never updated; a new row is
added only when the price moved significantly since the last one.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import BOOLEAN, FLOAT, TIMESTAMP, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from dealfinder.models.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PriceHistory(Base):
    """
    Price snapshot for one product.

    Index (product_id, recorded_at) supports the windowed history and stats
    queries in engine/price_history.py.
    """

    __tablename__ = "price_history"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    product_id: Mapped[str] = mapped_column(String, nullable=False)
    product_url: Mapped[str] = mapped_column(String, nullable=False, default="")
    retailer: Mapped[str] = mapped_column(String, nullable=False)
    price: Mapped[float] = mapped_column(FLOAT, nullable=False)
    currency: Mapped[str] = mapped_column(String, nullable=False, default="USD")
    recorded_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        default=_utcnow,
        nullable=False,
        comment="UTC timestamp of when this price was recorded",
    )
    is_on_sale: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, default=False)
    original_price: Mapped[float | None] = mapped_column(FLOAT, nullable=True)
    discount_percentage: Mapped[float | None] = mapped_column(
        FLOAT, nullable=True, comment="0-100, set when original_price > price"
    )
    availability: Mapped[str] = mapped_column(
        String, nullable=False, default="in_stock", comment="in_stock | out_of_stock | limited"
    )

    __table_args__ = (
        Index("ix_price_history_product_recorded", "product_id", "recorded_at"),
        Index("ix_price_history_retailer_recorded", "retailer", "recorded_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<PriceHistory product_id={self.product_id!r} price={self.price} "
            f"at={self.recorded_at}>"
        )
