"""
DealFinder - Search Merge Policy

Cache-first product search:
1. Query the product store (filters applied, quality desc / price asc, cap 20)
2. >= CACHE_HIT_THRESHOLD matches -> return them, source="cache"
3. Otherwise scrape every requested retailer concurrently
4. Persist fresh products and record their prices
5. Merge, re-filter, re-sort, cap, source="mixed"
"""

from __future__ import annotations

import asyncio
from typing import Any, Iterable

import structlog
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from dealfinder.config import SearchSource, settings
from dealfinder.engine.price_history import record_scraped_prices
from dealfinder.repository import ProductRepository
from dealfinder.scraper import Product
from dealfinder.scraper.runner import scraper_runner

logger = structlog.get_logger(__name__)

NO_RESULTS_MESSAGE = "No products found. Try a different search term."


class SearchQuery(BaseModel):
    """Parameters of one product search."""
    query: str
    min_price: float | None = None
    max_price: float | None = None
    min_quality_score: float | None = None
    retailers: list[str] = Field(default_factory=lambda: [settings.DEFAULT_RETAILER])

    @field_validator("query")
    @classmethod
    def _query_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Search query is required")
        return value


class SearchResponse(BaseModel):
    """Response body for GET /api/products/search."""
    success: bool = True
    products: list[Product] = Field(default_factory=list)
    source: SearchSource

    @property
    def message(self) -> str | None:
        return NO_RESULTS_MESSAGE if not self.products else None


def matches_filters(product: Product, query: SearchQuery) -> bool:
    """Price range and minimum quality check; unscored products fail a quality floor."""
    if query.min_price is not None and product.price < query.min_price:
        return False
    if query.max_price is not None and product.price > query.max_price:
        return False
    if query.min_quality_score is not None:
        if product.quality_score is None or product.quality_score < query.min_quality_score:
            return False
    return True


def rank_products(products: Iterable[Product]) -> list[Product]:
    """Quality score descending (missing counts as 0), then price ascending."""
    return sorted(products, key=lambda p: (-(p.quality_score or 0.0), p.price))


async def search(
    session: AsyncSession,
    query: SearchQuery,
    scraper: Any = None,
) -> SearchResponse:
    """
    Run a merged cache + live-scrape search.

    Args:
        session: Async session for the product store.
        query: Validated search parameters.
        scraper: Object exposing ``search_products(query, retailer)``;
            defaults to the module-level ScraperRunner.

    Returns:
        SearchResponse tagged "cache" or "mixed".
    """
    scraper = scraper or scraper_runner
    repo = ProductRepository(session)
    limit = settings.SEARCH_RESULT_LIMIT

    cached = await repo.search(
        query.query,
        min_price=query.min_price,
        max_price=query.max_price,
        min_quality_score=query.min_quality_score,
        limit=limit,
    )

    if len(cached) >= settings.CACHE_HIT_THRESHOLD:
        logger.info("search_cache_hit", query=query.query, cached=len(cached), source="search")
        return SearchResponse(products=cached, source=SearchSource.CACHE)

    logger.info(
        "search_cache_miss",
        query=query.query,
        cached=len(cached),
        retailers=query.retailers,
        source="search",
    )

    results = await asyncio.gather(
        *(scraper.search_products(query.query, retailer) for retailer in query.retailers)
    )

    fresh: list[Product] = []
    for retailer, result in zip(query.retailers, results):
        if result.success:
            fresh.extend(result.products)
        else:
            logger.warning(
                "search_retailer_failed",
                retailer=retailer,
                error=result.error,
                source="search",
            )

    if fresh:
        await repo.insert_many(fresh)
        await record_scraped_prices(session, fresh)

    merged = [p for p in [*cached, *fresh] if matches_filters(p, query)]
    ranked = rank_products(merged)[:limit]

    logger.info(
        "search_complete",
        query=query.query,
        cached=len(cached),
        scraped=len(fresh),
        returned=len(ranked),
        source="search",
    )
    return SearchResponse(products=ranked, source=SearchSource.MIXED)
