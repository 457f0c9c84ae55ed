"""Products and price_history tables

Revision ID: 001_products_schema
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001_products_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- products (scraped listings, insert-only) ---
    op.create_table(
        "products",
        sa.Column("id", sa.String(), primary_key=True, comment="{retailer}-{epoch_ms}-{random}"),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("brand", sa.String(), nullable=False),
        sa.Column("price", sa.FLOAT(), nullable=False),
        sa.Column("image_url", sa.String(), nullable=False, server_default=""),
        sa.Column("product_url", sa.String(), nullable=False, server_default=""),
        sa.Column("retailer", sa.String(), nullable=False),
        sa.Column("rating", sa.FLOAT(), nullable=True),
        sa.Column("review_count", sa.INTEGER(), nullable=True),
        sa.Column("quality_score", sa.FLOAT(), nullable=True),
        sa.Column(
            "date_scraped",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_products_brand", "products", ["brand"])
    op.create_index("ix_products_price", "products", ["price"])
    op.create_index("ix_products_quality_score", "products", ["quality_score"])
    op.create_index("ix_products_retailer", "products", ["retailer"])

    # --- price_history (append-only) ---
    op.create_table(
        "price_history",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("product_id", sa.String(), nullable=False),
        sa.Column("product_url", sa.String(), nullable=False, server_default=""),
        sa.Column("retailer", sa.String(), nullable=False),
        sa.Column("price", sa.FLOAT(), nullable=False),
        sa.Column("currency", sa.String(), nullable=False, server_default="USD"),
        sa.Column(
            "recorded_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("is_on_sale", sa.BOOLEAN(), nullable=False, server_default=sa.false()),
        sa.Column("original_price", sa.FLOAT(), nullable=True),
        sa.Column("discount_percentage", sa.FLOAT(), nullable=True),
        sa.Column("availability", sa.String(), nullable=False, server_default="in_stock"),
    )
    op.create_index(
        "ix_price_history_product_recorded",
        "price_history",
        ["product_id", "recorded_at"],
    )
    op.create_index(
        "ix_price_history_retailer_recorded",
        "price_history",
        ["retailer", "recorded_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_price_history_retailer_recorded", table_name="price_history")
    op.drop_index("ix_price_history_product_recorded", table_name="price_history")
    op.drop_table("price_history")
    op.drop_index("ix_products_retailer", table_name="products")
    op.drop_index("ix_products_quality_score", table_name="products")
    op.drop_index("ix_products_price", table_name="products")
    op.drop_index("ix_products_brand", table_name="products")
    op.drop_table("products")
