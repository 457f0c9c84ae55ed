"""
DealFinder - Product Normalizer

Turns one listing element into a canonical Product, or None when the
listing is missing a mandatory field (title or a parseable positive price).
No I/O beyond reading the element handle.
"""

from __future__ import annotations

import math
import random
import re
import string
import time
from datetime import datetime, timezone
from typing import Any

import structlog

from dealfinder.config import settings
from dealfinder.engine.quality import calculate_quality_score
from dealfinder.retailers import RetailerConfig
from dealfinder.scraper import Product
from dealfinder.scraper.extract import (
    extract_attribute,
    extract_text,
    parse_price,
    parse_rating,
    parse_review_count,
)

logger = structlog.get_logger(__name__)

UNKNOWN_BRAND = "Unknown"

_BRAND_RE = re.compile(r"^([A-Za-z]+)")
_ID_ALPHABET = string.ascii_lowercase + string.digits


def derive_brand(title: str) -> str:
    """Leading alphabetic run of the title ('Levi's 501' -> 'Levi')."""
    match = _BRAND_RE.match(title)
    return match.group(1) if match else UNKNOWN_BRAND


def generate_product_id(retailer: str) -> str:
    """'{retailer}-{epoch_ms}-{9 random base36 chars}' for freshly scraped products."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"{retailer}-{int(time.time() * 1000)}-{suffix}"


async def normalize_listing(
    handle: Any,
    config: RetailerConfig,
    retailer: str,
) -> Product | None:
    """
    Extract and normalize one listing.

    Args:
        handle: Element handle for a single listing container.
        config: Retailer config supplying the field selectors.
        retailer: Name recorded on the product.

    Returns:
        Product, or None when title is blank or price does not parse.
    """
    selectors = config.selectors

    title = await extract_text(handle, selectors.title)
    price_text = await extract_text(handle, selectors.price)
    rating_text = await extract_text(handle, selectors.rating)
    review_text = await extract_text(handle, selectors.review_count)
    image_url = await extract_attribute(handle, selectors.image, "src")
    product_url = await extract_attribute(handle, selectors.link, "href")

    price = parse_price(price_text)
    if not title or math.isnan(price) or price <= 0:
        logger.debug(
            "listing_rejected",
            retailer=retailer,
            has_title=bool(title),
            price_text=price_text,
            source="normalizer",
        )
        return None

    rating = parse_rating(rating_text)
    if rating is not None and rating > settings.QUALITY_RATING_SCALE:
        # Picked up some other number (e.g. a review count) from the rating node
        rating = None
    review_count = parse_review_count(review_text)
    brand = derive_brand(title)

    return Product(
        id=generate_product_id(retailer),
        title=title,
        brand=brand,
        price=price,
        image_url=image_url,
        product_url=product_url,
        retailer=retailer,
        rating=rating,
        review_count=review_count,
        quality_score=calculate_quality_score(rating or 0.0, review_count, brand),
        date_scraped=datetime.now(timezone.utc),
    )
