"""
DealFinder - Quality Score

Coarse 0-10 ranking signal for a listing:
- rating contribution:  (rating / 5) * 5          -> 0..5
- review contribution:  min(log10(reviews) * 0.8, 3)  -> 0..3
- brand contribution:   2 if brand mentions "premium", else 1

The sum is capped at 10 and clamped to [0, 10].
"""

from __future__ import annotations

import math

from dealfinder.config import settings


def calculate_quality_score(rating: float, review_count: int, brand: str) -> float:
    """
    Score a listing from its rating, review volume and brand.

    Args:
        rating: Star rating on a 0-5 scale (pass 0 when unknown).
        review_count: Number of reviews (pass 0 when unknown).
        brand: Brand string; only the "premium" keyword matters.

    Returns:
        Float in [0, 10]. Never NaN: zero or negative review counts
        contribute nothing instead of log10's -inf.
    """
    scale = settings.QUALITY_RATING_SCALE
    # Multiply-then-divide kept as the weighting hook for the rating term
    rating_score = (rating / scale) * scale

    if review_count <= 0:
        review_score = 0.0
    else:
        review_score = min(
            math.log10(review_count) * settings.QUALITY_REVIEW_WEIGHT,
            settings.QUALITY_REVIEW_CAP,
        )

    if settings.QUALITY_PREMIUM_KEYWORD in brand.lower():
        brand_score = settings.QUALITY_PREMIUM_BRAND_SCORE
    else:
        brand_score = settings.QUALITY_DEFAULT_BRAND_SCORE

    score = min(rating_score + review_score + brand_score, settings.QUALITY_MAX_SCORE)
    return max(0.0, min(score, settings.QUALITY_MAX_SCORE))
