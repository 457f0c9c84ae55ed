"""
DealFinder - Retailer Configuration Registry

Static per-retailer descriptors: base URL, search path and the CSS selectors
used to pull listing fields out of a search-results page.

Configs are frozen values built once at import time and passed explicitly
to the navigator and normalizer. Nothing mutates them per request.
"""

from __future__ import annotations

from urllib.parse import quote

from pydantic import BaseModel, ConfigDict

from dealfinder.scraper.errors import RetailerNotConfiguredError


class RetailerSelectors(BaseModel):
    """CSS selectors for one retailer. A missing selector always extracts ''."""

    model_config = ConfigDict(frozen=True)

    products: str | None = None
    title: str | None = None
    price: str | None = None
    rating: str | None = None
    review_count: str | None = None
    image: str | None = None
    link: str | None = None


class RetailerConfig(BaseModel):
    """Immutable description of one supported retailer."""

    model_config = ConfigDict(frozen=True)

    name: str
    base_url: str
    search_path: str
    selectors: RetailerSelectors

    def search_url(self, query: str) -> str:
        """Build the search URL, percent-encoding the query like encodeURIComponent."""
        return f"{self.base_url}{self.search_path}{quote(query, safe='')}"


_RETAILERS: dict[str, RetailerConfig] = {
    "amazon": RetailerConfig(
        name="amazon",
        base_url="https://www.amazon.com",
        search_path="/s?k=",
        selectors=RetailerSelectors(
            products='div[data-component-type="s-search-result"]',
            title="h2 a.a-link-normal span",
            price="span.a-price span.a-offscreen",
            rating='span[aria-label*="stars"]',
            review_count='span[aria-label*="stars"] + span.a-size-base',
            image="img.s-image",
            link="h2 a.a-link-normal",
        ),
    ),
    "target": RetailerConfig(
        name="target",
        base_url="https://www.target.com",
        search_path="/s?searchTerm=",
        selectors=RetailerSelectors(
            products='div[data-test="product-card"]',
            title='[data-test="product-title"]',
            price='[data-test="product-price"]',
            rating='[data-test="product-rating"]',
            review_count='[data-test="product-reviews-count"]',
            image='[data-test="product-image"] img',
            link='[data-test="product-card-link"]',
        ),
    ),
}


def get_retailer_config(name: str) -> RetailerConfig:
    """
    Look up the config for a retailer.

    Raises:
        RetailerNotConfiguredError: if no config exists for ``name``.
    """
    try:
        return _RETAILERS[name]
    except KeyError:
        raise RetailerNotConfiguredError(name) from None


def supported_retailers() -> list[str]:
    """Names of every configured retailer, sorted."""
    return sorted(_RETAILERS)
