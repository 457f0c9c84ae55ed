"""DealFinder - Scraper Layer"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Product(BaseModel):
    """Canonical product record, serialized with camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: str
    title: str
    brand: str
    price: float
    image_url: str = ""
    product_url: str = ""
    retailer: str
    rating: float | None = None
    review_count: int | None = None
    quality_score: float | None = None
    date_scraped: datetime


class ScrapingResult(BaseModel):
    """
    Outcome of one retailer scrape.

    Either success with a (possibly empty) product list, or a structural
    failure with an error message. Never partially successful.
    """

    success: bool
    products: list[Product] = Field(default_factory=list)
    error: str | None = None

    @classmethod
    def ok(cls, products: list[Product]) -> ScrapingResult:
        return cls(success=True, products=products)

    @classmethod
    def failed(cls, error: str) -> ScrapingResult:
        return cls(success=False, error=error)
