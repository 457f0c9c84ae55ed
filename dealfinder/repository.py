"""
DealFinder - Product Repository

Thin async repository over the products table. The search merge policy
reads its cache through here and persists freshly scraped products.

No locking: concurrent searches may insert overlapping products.
"""

from __future__ import annotations

from typing import Any, Sequence

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from dealfinder.config import settings
from dealfinder.models.product import ProductRecord
from dealfinder.scraper import Product

logger = structlog.get_logger(__name__)


class ProductRepository:
    """
    Product store access for one AsyncSession.

    Usage:
        async with session_factory() as session:
            repo = ProductRepository(session)
            cached = await repo.search("tank top", max_price=30)
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def search(
        self,
        query: str,
        min_price: float | None = None,
        max_price: float | None = None,
        min_quality_score: float | None = None,
        limit: int | None = None,
    ) -> list[Product]:
        """
        Case-insensitive title match plus optional price/quality filters.

        Ordered by quality score (desc, unscored last) then price (asc).
        """
        stmt = select(ProductRecord).where(
            ProductRecord.title.icontains(query, autoescape=True)
        )
        if min_price is not None:
            stmt = stmt.where(ProductRecord.price >= min_price)
        if max_price is not None:
            stmt = stmt.where(ProductRecord.price <= max_price)
        if min_quality_score is not None:
            stmt = stmt.where(ProductRecord.quality_score >= min_quality_score)

        stmt = stmt.order_by(
            ProductRecord.quality_score.desc().nulls_last(),
            ProductRecord.price.asc(),
        ).limit(limit or settings.SEARCH_RESULT_LIMIT)

        result = await self.session.execute(stmt)
        return [Product.model_validate(row) for row in result.scalars().all()]

    async def insert_many(self, products: Sequence[Product]) -> int:
        """Insert products as new rows. Returns the number inserted."""
        if not products:
            return 0

        self.session.add_all(
            ProductRecord(**product.model_dump(by_alias=False)) for product in products
        )
        await self.session.commit()

        logger.info("products_persisted", count=len(products), source="repository")
        return len(products)

    async def get_by_url(self, product_url: str) -> Product | None:
        """
        First-scraped product with this URL, if any.

        Re-scrapes of a listing get new ids; the first row is the stable
        identity that price history is recorded under.
        """
        stmt = (
            select(ProductRecord)
            .where(ProductRecord.product_url == product_url)
            .order_by(ProductRecord.date_scraped.asc(), ProductRecord.id.asc())
            .limit(1)
        )
        record = (await self.session.execute(stmt)).scalar_one_or_none()
        return Product.model_validate(record) if record is not None else None

    async def get_filters(self) -> dict[str, Any]:
        """Distinct brands and retailers plus the overall price range."""
        brands = (
            await self.session.execute(
                select(ProductRecord.brand).distinct().order_by(ProductRecord.brand)
            )
        ).scalars().all()
        retailers = (
            await self.session.execute(
                select(ProductRecord.retailer).distinct().order_by(ProductRecord.retailer)
            )
        ).scalars().all()
        min_price, max_price = (
            await self.session.execute(
                select(func.min(ProductRecord.price), func.max(ProductRecord.price))
            )
        ).one()

        if min_price is None:
            price_range = {"min_price": 0.0, "max_price": 1000.0}
        else:
            price_range = {"min_price": float(min_price), "max_price": float(max_price)}

        return {
            "brands": list(brands),
            "retailers": list(retailers),
            "price_range": price_range,
        }
