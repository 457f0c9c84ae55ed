"""
SQLAlchemy 2.0 async DeclarativeBase for DealFinder.

All models inherit from this Base.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all DealFinder database models."""
    pass
