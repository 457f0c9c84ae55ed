from dealfinder.engine.price_history import (
    PriceStats,
    get_price_history,
    get_price_stats,
    record_scraped_prices,
    track_price_change,
)
from dealfinder.engine.quality import calculate_quality_score

__all__ = [
    "PriceStats",
    "calculate_quality_score",
    "get_price_history",
    "get_price_stats",
    "record_scraped_prices",
    "track_price_change",
]
