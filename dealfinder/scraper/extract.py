"""
DealFinder - Field Extractor

Pulls text and attribute values out of one listing element and coerces the
raw strings into typed values.

Lookups never raise: third-party markup changes constantly, and a missing
or broken field must not abort the whole listing. Every failure collapses
to the empty string.
"""

from __future__ import annotations

import math
import re
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

_PRICE_STRIP_RE = re.compile(r"[^0-9.]")
_LEADING_FLOAT_RE = re.compile(r"^(\d+\.?\d*|\.\d+)")
_FIRST_NUMBER_RE = re.compile(r"\d+(\.\d+)?")
_NON_DIGIT_RE = re.compile(r"\D")


async def extract_text(handle: Any, selector: str | None) -> str:
    """Trimmed text content of the first match of ``selector`` inside ``handle``."""
    if not selector:
        return ""
    try:
        element = await handle.query_selector(selector)
        if element is None:
            return ""
        return (await element.text_content() or "").strip()
    except Exception as e:
        logger.debug("extract_text_failed", selector=selector, error=str(e), source="extractor")
        return ""


async def extract_attribute(handle: Any, selector: str | None, attribute: str) -> str:
    """Value of ``attribute`` on the first match of ``selector`` inside ``handle``."""
    if not selector:
        return ""
    try:
        element = await handle.query_selector(selector)
        if element is None:
            return ""
        return await element.get_attribute(attribute) or ""
    except Exception as e:
        logger.debug(
            "extract_attribute_failed",
            selector=selector,
            attribute=attribute,
            error=str(e),
            source="extractor",
        )
        return ""


def parse_price(text: str) -> float:
    """
    Parse a price like '$1,299.99' to 1299.99.

    Every character that is not a digit or '.' is dropped, then the leading
    float is read. Returns NaN when nothing numeric remains; callers must
    reject the listing rather than default to 0.
    """
    cleaned = _PRICE_STRIP_RE.sub("", text or "")
    match = _LEADING_FLOAT_RE.match(cleaned)
    if not match:
        return math.nan
    return float(match.group(1))


def parse_rating(text: str) -> float | None:
    """First number in the text ('4.5 out of 5 stars' -> 4.5), or None."""
    match = _FIRST_NUMBER_RE.search(text or "")
    if not match:
        return None
    return float(match.group())


def parse_review_count(text: str) -> int:
    """Digits only ('1,024 ratings' -> 1024). No digits means 0 reviews."""
    digits = _NON_DIGIT_RE.sub("", text or "")
    if not digits:
        return 0
    return int(digits)
