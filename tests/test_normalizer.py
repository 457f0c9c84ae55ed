"""Tests for the product normalizer."""

from __future__ import annotations

import re
from datetime import datetime

import pytest

from conftest import make_listing
from dealfinder.scraper.normalizer import (
    UNKNOWN_BRAND,
    derive_brand,
    generate_product_id,
    normalize_listing,
)


class TestNormalizeListing:
    async def test_full_listing(self, amazon_config) -> None:
        product = await normalize_listing(make_listing(amazon_config), amazon_config, "amazon")

        assert product is not None
        assert product.title == "Hanes Women's Tank Top"
        assert product.brand == "Hanes"
        assert product.price == 12.99
        assert product.rating == 4.5
        assert product.review_count == 1024
        assert product.image_url == "https://img.example.com/tank.jpg"
        assert product.product_url == "https://shop.example.com/p/tank"
        assert product.retailer == "amazon"
        assert isinstance(product.date_scraped, datetime)
        assert 0.0 <= product.quality_score <= 10.0

    @pytest.mark.parametrize("title", [None, "", "   \n  "])
    async def test_blank_title_rejected(self, amazon_config, title) -> None:
        listing = make_listing(amazon_config, title=title)
        assert await normalize_listing(listing, amazon_config, "amazon") is None

    @pytest.mark.parametrize("price", [None, "Currently unavailable", "", "$0.00"])
    async def test_unusable_price_rejected(self, amazon_config, price) -> None:
        listing = make_listing(amazon_config, price=price)
        assert await normalize_listing(listing, amazon_config, "amazon") is None

    async def test_missing_rating_still_scored(self, amazon_config) -> None:
        listing = make_listing(amazon_config, rating=None, reviews=None)
        product = await normalize_listing(listing, amazon_config, "amazon")

        assert product is not None
        assert product.rating is None
        assert product.review_count == 0
        # 0 rating + 0 reviews + default brand
        assert product.quality_score == pytest.approx(1.0)

    async def test_out_of_range_rating_dropped(self, amazon_config) -> None:
        listing = make_listing(amazon_config, rating="128 global ratings")
        product = await normalize_listing(listing, amazon_config, "amazon")
        assert product is not None
        assert product.rating is None

    async def test_sparse_config_leaves_optional_fields_empty(self, sparse_config) -> None:
        listing = make_listing(sparse_config, rating=None, reviews=None, image=None, link=None)
        product = await normalize_listing(listing, sparse_config, "sparse")

        assert product is not None
        assert product.image_url == ""
        assert product.product_url == ""
        assert product.rating is None
        assert product.retailer == "sparse"

    async def test_ids_unique_per_listing(self, amazon_config) -> None:
        products = [
            await normalize_listing(make_listing(amazon_config), amazon_config, "amazon")
            for _ in range(25)
        ]
        assert len({p.id for p in products}) == 25


class TestDeriveBrand:
    def test_leading_word(self) -> None:
        assert derive_brand("Levi's 501 Original Jeans") == "Levi"

    def test_no_leading_letters(self) -> None:
        assert derive_brand("2-Pack Cotton Tees") == UNKNOWN_BRAND


class TestGenerateProductId:
    def test_format(self) -> None:
        assert re.fullmatch(r"target-\d{13}-[a-z0-9]{9}", generate_product_id("target"))
