"""
DealFinder - Price History Tracking

Append-only price points per product, plus windowed history and summary
statistics.

A new point is written only when there is no previous point or the price
moved by more than PRICE_CHANGE_MIN_ABSOLUTE dollars or more than
PRICE_CHANGE_MIN_RATIO of the last recorded price.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Sequence

import structlog
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dealfinder.config import Availability, settings
from dealfinder.models.price_history import PriceHistory
from dealfinder.repository import ProductRepository
from dealfinder.scraper import Product

logger = structlog.get_logger(__name__)


class PriceStats(BaseModel):
    """Summary of a product's price over a window."""
    current_price: float
    min_price: float
    max_price: float
    avg_price: float
    price_range: float
    price_change: float
    price_change_percentage: float
    data_points: int
    last_updated: datetime


def is_significant_change(previous: float, current: float) -> bool:
    """True when ``current`` differs from ``previous`` by > $1 or > 1%."""
    diff = abs(current - previous)
    if diff > settings.PRICE_CHANGE_MIN_ABSOLUTE:
        return True
    if previous == 0:
        return diff > 0
    return diff / abs(previous) > settings.PRICE_CHANGE_MIN_RATIO


def _discount_percentage(price: float, original_price: float | None) -> float | None:
    if original_price and price < original_price:
        return (original_price - price) / original_price * 100
    return None


async def track_price_change(
    session: AsyncSession,
    product_id: str,
    price: float,
    product_url: str,
    retailer: str,
    is_on_sale: bool = False,
    original_price: float | None = None,
    availability: Availability = Availability.IN_STOCK,
) -> PriceHistory | None:
    """
    Record a price point if it differs enough from the latest one.

    Returns:
        The new PriceHistory row, or None when the change was insignificant.
    """
    latest = (
        await session.execute(
            select(PriceHistory)
            .where(PriceHistory.product_id == product_id)
            .order_by(PriceHistory.recorded_at.desc())
            .limit(1)
        )
    ).scalar_one_or_none()

    if latest is not None and not is_significant_change(latest.price, price):
        return None

    entry = PriceHistory(
        product_id=product_id,
        product_url=product_url,
        retailer=retailer,
        price=price,
        currency=settings.DEFAULT_CURRENCY,
        recorded_at=datetime.now(timezone.utc),
        is_on_sale=is_on_sale,
        original_price=original_price,
        discount_percentage=_discount_percentage(price, original_price),
        availability=availability.value,
    )
    session.add(entry)
    await session.commit()

    logger.debug(
        "price_point_recorded",
        product_id=product_id,
        price=price,
        previous_price=latest.price if latest is not None else None,
        source="price_history",
    )
    return entry


async def resolve_history_id(repo: ProductRepository, product: Product) -> str:
    """Id of the first stored product with the same URL, else the product's own id."""
    if not product.product_url:
        return product.id
    first_seen = await repo.get_by_url(product.product_url)
    if first_seen is None or first_seen.retailer != product.retailer:
        return product.id
    return first_seen.id


async def record_scraped_prices(session: AsyncSession, products: Sequence[Product]) -> int:
    """
    Track the scraped price of every product. Returns points written.

    Points for a re-scraped listing go under the id its URL was first stored
    with, so the significant-change rule compares across scrapes.
    """
    repo = ProductRepository(session)
    written = 0
    for product in products:
        entry = await track_price_change(
            session,
            product_id=await resolve_history_id(repo, product),
            price=product.price,
            product_url=product.product_url,
            retailer=product.retailer,
        )
        if entry is not None:
            written += 1
    return written


async def get_price_history(
    session: AsyncSession,
    product_id: str,
    days: int | None = None,
) -> list[PriceHistory]:
    """Price points for the last ``days`` days, oldest first."""
    days = days or settings.PRICE_HISTORY_DEFAULT_DAYS
    cutoff = datetime.now(timezone.utc) - timedelta(days=days)

    result = await session.execute(
        select(PriceHistory)
        .where(PriceHistory.product_id == product_id)
        .where(PriceHistory.recorded_at >= cutoff)
        .order_by(PriceHistory.recorded_at.asc())
    )
    return list(result.scalars().all())


async def get_price_stats(
    session: AsyncSession,
    product_id: str,
    days: int | None = None,
) -> PriceStats | None:
    """Current/min/max/avg and change over the window, or None without data."""
    history = await get_price_history(session, product_id, days)
    if not history:
        return None

    prices = [point.price for point in history]
    first, current = prices[0], prices[-1]
    change = current - first

    return PriceStats(
        current_price=current,
        min_price=min(prices),
        max_price=max(prices),
        avg_price=sum(prices) / len(prices),
        price_range=max(prices) - min(prices),
        price_change=change,
        price_change_percentage=(change / first * 100) if first else 0.0,
        data_points=len(history),
        last_updated=history[-1].recorded_at,
    )
