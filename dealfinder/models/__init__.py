"""
Models package - export all SQLAlchemy models.
"""

from dealfinder.models.base import Base
from dealfinder.models.price_history import PriceHistory
from dealfinder.models.product import ProductRecord

__all__ = ["Base", "PriceHistory", "ProductRecord"]
