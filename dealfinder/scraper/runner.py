"""
DealFinder - Scraper Runner (Orchestrator)

Single entry point for live scraping: search_products(query, retailer).

Flow per call:
1. Resolve the retailer config (unknown retailer -> failed result, no browser)
2. open -> navigate -> await listings -> settle
3. Normalize every listing; drop the ones that fail
4. Close the browser session on every exit path

Only session-level failures produce success=False. Listings that fail to
extract are logged and dropped, so an empty product list is a valid success.
"""

from __future__ import annotations

from typing import Any, Callable

import structlog

from dealfinder.config import settings
from dealfinder.retailers import RetailerConfig, get_retailer_config
from dealfinder.scraper import Product, ScrapingResult
from dealfinder.scraper.errors import RetailerNotConfiguredError
from dealfinder.scraper.navigator import PageNavigator
from dealfinder.scraper.normalizer import normalize_listing

logger = structlog.get_logger(__name__)


class ScraperRunner:
    """
    Runs one retailer search through a fresh browser session.

    Usage:
        runner = ScraperRunner()
        result = await runner.search_products("blue tank top", "amazon")
    """

    def __init__(
        self,
        navigator_factory: Callable[[RetailerConfig], Any] = PageNavigator,
    ) -> None:
        self._navigator_factory = navigator_factory

    async def search_products(
        self,
        query: str,
        retailer_name: str | None = None,
    ) -> ScrapingResult:
        """
        Scrape one retailer's search results for ``query``.

        Args:
            query: Free-text search, URL-encoded into the retailer's search path.
            retailer_name: Registry key; defaults to settings.DEFAULT_RETAILER.

        Returns:
            ScrapingResult. Never raises.
        """
        retailer_name = retailer_name or settings.DEFAULT_RETAILER

        try:
            config = get_retailer_config(retailer_name)
        except RetailerNotConfiguredError as e:
            logger.warning("scraper_unknown_retailer", retailer=retailer_name, source="scraper_runner")
            return ScrapingResult.failed(str(e))

        products_selector = config.selectors.products
        if not products_selector:
            logger.warning(
                "scraper_no_products_selector",
                retailer=retailer_name,
                source="scraper_runner",
            )
            return ScrapingResult.ok([])

        url = config.search_url(query)
        navigator = self._navigator_factory(config)

        logger.info("scraper_search_started", retailer=retailer_name, url=url, source="scraper_runner")

        try:
            await navigator.open()
            await navigator.navigate(url)
            await navigator.await_listings(products_selector)
            await navigator.settle()
            handles = await navigator.query_listings(products_selector)
            products = await self._normalize_all(handles, config, retailer_name)
        except Exception as e:
            logger.error(
                "scraper_search_failed",
                retailer=retailer_name,
                url=url,
                error=str(e),
                error_type=type(e).__name__,
                source="scraper_runner",
            )
            await navigator.diagnostic_capture("failure")
            return ScrapingResult.failed(f"Failed to scrape products from {retailer_name}")
        finally:
            await navigator.close()

        logger.info(
            "scraper_search_complete",
            retailer=retailer_name,
            listings_found=len(handles),
            products_extracted=len(products),
            source="scraper_runner",
        )
        return ScrapingResult.ok(products)

    async def _normalize_all(
        self,
        handles: list[Any],
        config: RetailerConfig,
        retailer_name: str,
    ) -> list[Product]:
        """Normalize listings in document order, dropping any that fail."""
        products: list[Product] = []
        for index, handle in enumerate(handles):
            try:
                product = await normalize_listing(handle, config, retailer_name)
            except Exception as e:
                logger.warning(
                    "listing_extraction_failed",
                    retailer=retailer_name,
                    index=index,
                    error=str(e),
                    source="scraper_runner",
                )
                continue
            if product is None:
                logger.debug("listing_dropped", retailer=retailer_name, index=index, source="scraper_runner")
                continue
            products.append(product)
        return products


scraper_runner = ScraperRunner()


async def search_products(query: str, retailer_name: str | None = None) -> ScrapingResult:
    """Module-level entry point bound to the default runner."""
    return await scraper_runner.search_products(query, retailer_name)
