"""
DealFinder - Command-Line Entrypoint

Configures structlog, opens the async database engine and runs one merged
product search, printing the JSON response the HTTP layer would return.

Run via:
    python -m dealfinder.main "blue tank top" --retailer amazon --max-price 30
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from dealfinder.config import settings
from dealfinder.retailers import supported_retailers
from dealfinder.search import SearchQuery, search


# ---------------------------------------------------------------------------
# Structlog Configuration
# ---------------------------------------------------------------------------


def _configure_logging(log_level: str = "INFO") -> None:
    """
    Set up structured logging with JSON output.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
    """
    # stdlib logging first, for third-party libraries
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper()),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Database Setup
# ---------------------------------------------------------------------------


async def create_db_engine() -> tuple[Any, async_sessionmaker[AsyncSession]]:
    """
    Create SQLAlchemy async engine and session factory from settings.DATABASE_URL.

    Returns:
        (engine, session_factory) tuple.
    """
    logger = structlog.get_logger(__name__)
    logger.info("database_engine_initializing")

    engine = create_async_engine(
        settings.DATABASE_URL,
        echo=False,
        pool_pre_ping=True,
    )
    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    logger.info("database_engine_ready")
    return engine, session_factory


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Search retailers for clothing deals (cache first, live scrape on shortfall).",
    )
    parser.add_argument("query", help="Free-text search, e.g. 'blue tank top'.")
    parser.add_argument(
        "--retailer",
        dest="retailers",
        action="append",
        choices=supported_retailers(),
        help=f"Retailer to scrape; repeatable (default: {settings.DEFAULT_RETAILER}).",
    )
    parser.add_argument("--min-price", type=float, default=None)
    parser.add_argument("--max-price", type=float, default=None)
    parser.add_argument("--min-quality", type=float, default=None, help="Minimum quality score (0-10).")
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    """Run one search and print the response. Returns the process exit code."""
    args = parse_args(argv)

    _configure_logging(log_level=settings.LOG_LEVEL)
    logger = structlog.get_logger(__name__)

    try:
        query = SearchQuery(
            query=args.query,
            min_price=args.min_price,
            max_price=args.max_price,
            min_quality_score=args.min_quality,
            retailers=args.retailers or [settings.DEFAULT_RETAILER],
        )
    except ValueError:
        print(json.dumps({"success": False, "error": "Search query is required"}))
        return 1

    engine, session_factory = await create_db_engine()
    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
            response = await search(session, query)
    except Exception as e:
        logger.error("search_failed", error=str(e), error_type=type(e).__name__)
        print(json.dumps({"success": False, "error": "Failed to search products"}))
        return 1
    finally:
        await engine.dispose()

    body = response.model_dump(mode="json", by_alias=True)
    if response.message:
        body["message"] = response.message
    print(json.dumps(body, indent=2))
    return 0


def run() -> None:
    """Console-script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
