"""
DealFinder - Product Model

Persisted canonical products. Rows are inserted by the search merge policy
after a live scrape and read back as the cache for later searches.
Never updated after insert; price changes go to price_history.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import FLOAT, INTEGER, TIMESTAMP, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from dealfinder.models.base import Base


class ProductRecord(Base):
    """
    One scraped product listing.

    The id is "{retailer}-{epoch_ms}-{random}" as generated at scrape time.
    Concurrent scrapes of the same query may insert overlapping products;
    there is no dedup on (retailer, product_url).
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(
        String, primary_key=True, comment="{retailer}-{epoch_ms}-{random}"
    )
    title: Mapped[str] = mapped_column(String, nullable=False)
    brand: Mapped[str] = mapped_column(
        String, nullable=False, comment="Leading word of the title, or 'Unknown'"
    )
    price: Mapped[float] = mapped_column(FLOAT, nullable=False)
    image_url: Mapped[str] = mapped_column(String, nullable=False, default="")
    product_url: Mapped[str] = mapped_column(String, nullable=False, default="")
    retailer: Mapped[str] = mapped_column(String, nullable=False)
    rating: Mapped[float | None] = mapped_column(
        FLOAT, nullable=True, comment="0-5 stars"
    )
    review_count: Mapped[int | None] = mapped_column(INTEGER, nullable=True)
    quality_score: Mapped[float | None] = mapped_column(
        FLOAT, nullable=True, comment="0-10 heuristic ranking signal"
    )
    date_scraped: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_products_brand", "brand"),
        Index("ix_products_price", "price"),
        Index("ix_products_quality_score", "quality_score"),
        Index("ix_products_retailer", "retailer"),
    )

    def __repr__(self) -> str:
        return (
            f"<ProductRecord id={self.id!r} retailer={self.retailer!r} "
            f"price={self.price} quality={self.quality_score}>"
        )
