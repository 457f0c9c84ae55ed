"""
DealFinder - Shared pytest Fixtures & Configuration

Provides common fixtures for all test modules:
- In-memory SQLite async session (aiosqlite)
- Fake listing elements standing in for Playwright ElementHandles
- Sample retailer config
- Async test support via pytest-asyncio
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from dealfinder.models import Base
from dealfinder.retailers import RetailerConfig, RetailerSelectors, get_retailer_config
from dealfinder.scraper import Product


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

pytest_plugins = ("pytest_asyncio",)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Async database session on in-memory SQLite.

    Creates a fresh database for each test, ensuring isolation.
    """
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    await engine.dispose()


# ---------------------------------------------------------------------------
# Fake DOM
# ---------------------------------------------------------------------------


class FakeElement:
    """Minimal stand-in for a Playwright ElementHandle leaf."""

    def __init__(self, text: str | None = None, attrs: dict[str, str] | None = None) -> None:
        self._text = text
        self._attrs = attrs or {}

    async def text_content(self) -> str | None:
        return self._text

    async def get_attribute(self, name: str) -> str | None:
        return self._attrs.get(name)


class FakeListing:
    """Listing container: maps selectors to child elements."""

    def __init__(self, children: dict[str, FakeElement] | None = None, broken: bool = False) -> None:
        self._children = children or {}
        self._broken = broken
        self.queried: list[str] = []

    async def query_selector(self, selector: str) -> FakeElement | None:
        self.queried.append(selector)
        if self._broken:
            raise RuntimeError("Element is not attached to the DOM")
        return self._children.get(selector)


def make_listing(
    config: RetailerConfig,
    title: str | None = "Hanes Women's Tank Top",
    price: str | None = "$12.99",
    rating: str | None = "4.5 out of 5 stars",
    reviews: str | None = "1,024",
    image: str | None = "https://img.example.com/tank.jpg",
    link: str | None = "https://shop.example.com/p/tank",
) -> FakeListing:
    """Build a FakeListing whose children sit under the config's selectors."""
    s = config.selectors
    children: dict[str, FakeElement] = {}
    if title is not None:
        children[s.title] = FakeElement(text=title)
    if price is not None:
        children[s.price] = FakeElement(text=price)
    if rating is not None:
        children[s.rating] = FakeElement(text=rating)
    if reviews is not None:
        children[s.review_count] = FakeElement(text=reviews)
    if image is not None:
        children[s.image] = FakeElement(attrs={"src": image})
    if link is not None:
        children[s.link] = FakeElement(attrs={"href": link})
    return FakeListing(children)


@pytest.fixture
def amazon_config() -> RetailerConfig:
    return get_retailer_config("amazon")


@pytest.fixture
def sparse_config() -> RetailerConfig:
    """Config with only title and price selectors."""
    return RetailerConfig(
        name="sparse",
        base_url="https://sparse.example.com",
        search_path="/search?q=",
        selectors=RetailerSelectors(
            products=".item",
            title=".name",
            price=".cost",
        ),
    )


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


def make_product(
    id: str = "amazon-1700000000000-abc123xyz",
    title: str = "Hanes Women's Tank Top",
    price: float = 12.99,
    quality_score: float | None = 7.5,
    retailer: str = "amazon",
    brand: str = "Hanes",
    product_url: str = "https://shop.example.com/p/tank",
) -> Product:
    return Product(
        id=id,
        title=title,
        brand=brand,
        price=price,
        image_url="",
        product_url=product_url,
        retailer=retailer,
        rating=4.5,
        review_count=100,
        quality_score=quality_score,
        date_scraped=datetime.now(timezone.utc),
    )


@pytest.fixture
def product_factory() -> Any:
    return make_product


@pytest.fixture
def listing_factory() -> Any:
    return make_listing
