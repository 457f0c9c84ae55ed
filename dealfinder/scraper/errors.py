"""
DealFinder - Scraper Exceptions

Only structural (session-level) failures are exceptions. Per-listing
extraction problems never raise; they shrink the product list instead.
"""

from __future__ import annotations


class ScraperError(Exception):
    """Base class for every scraping-core failure."""


class RetailerNotConfiguredError(ScraperError):
    """Requested retailer has no entry in the registry."""

    def __init__(self, retailer: str) -> None:
        self.retailer = retailer
        super().__init__(f"Retailer {retailer} not configured")


class BrowserLaunchError(ScraperError):
    """Browser process or page could not be created."""


class NavigationError(ScraperError):
    """Search page could not be loaded within the retry budget."""


class ContentWaitError(ScraperError):
    """Listings never became visible within the retry budget."""
