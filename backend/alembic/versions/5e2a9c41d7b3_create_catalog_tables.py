"""create_catalog_tables

Revision ID: 5e2a9c41d7b3
Revises:
Create Date: 2026-10-18 09:12:44.183502

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "5e2a9c41d7b3"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("url", sa.String(500), nullable=False),
        sa.Column("description", sa.String(2000), nullable=True),
        sa.Column("image_path_in_storage", sa.String(500), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint("url", name="uq_products_url"),
    )
    op.create_index("ix_products_updated_at", "products", ["updated_at"])

    op.create_table(
        "product_sources",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "product_id",
            sa.Integer(),
            sa.ForeignKey("products.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("store", sa.String(100), nullable=False),
        sa.Column("external_id", sa.String(100), nullable=True),
        sa.Column("source_url", sa.String(500), nullable=True),
        sa.Column(
            "is_primary", sa.Boolean(), server_default="false", nullable=False
        ),
    )
    op.create_index(
        "ix_product_sources_product_id", "product_sources", ["product_id"]
    )
    op.create_index(
        "ix_product_sources_product_store_external",
        "product_sources",
        ["product_id", "store", "external_id"],
    )

    op.create_table(
        "price_snapshots",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "product_id",
            sa.Integer(),
            sa.ForeignKey("products.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "product_source_id",
            sa.Integer(),
            sa.ForeignKey("product_sources.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("price", sa.Numeric(18, 2), nullable=False),
        sa.Column("currency", sa.String(10), nullable=False),
        sa.Column("collected_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("raw_data_json", sa.Text(), nullable=True),
    )
    op.create_index(
        "ix_price_snapshots_product_id", "price_snapshots", ["product_id"]
    )
    op.create_index(
        "ix_price_snapshots_product_source_collected",
        "price_snapshots",
        ["product_id", "product_source_id", "collected_at"],
    )

    op.create_table(
        "watchlists",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(100), nullable=False),
        sa.Column(
            "product_id",
            sa.Integer(),
            sa.ForeignKey("products.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("target_price", sa.Numeric(18, 2), nullable=True),
        sa.Column("notify", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "user_id", "product_id", name="uq_watchlists_user_product"
        ),
    )
    op.create_index("ix_watchlists_product_id", "watchlists", ["product_id"])

    op.create_table(
        "product_assets",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "product_id",
            sa.Integer(),
            sa.ForeignKey("products.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("storage_path", sa.String(500), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_product_assets_product_type", "product_assets", ["product_id", "type"]
    )


def downgrade() -> None:
    op.drop_table("product_assets")
    op.drop_table("watchlists")
    op.drop_table("price_snapshots")
    op.drop_table("product_sources")
    op.drop_table("products")
