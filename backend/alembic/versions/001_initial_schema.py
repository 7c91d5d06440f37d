"""Initial database schema - vendors, products, product variants

Revision ID: 001_initial
Revises: None
Create Date: 2025-02-07
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- Vendors ---
    op.create_table(
        "vendors",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("code", sa.String(50), nullable=False, unique=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_vendors_code", "vendors", ["code"])

    # --- Products ---
    op.create_table(
        "products",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("sku", sa.String(100)),
        sa.Column("description", sa.Text),
        sa.Column("image_url", sa.String(500)),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        sa.Column("purchase_price", sa.Numeric(12, 2)),
        sa.Column("selling_price", sa.Numeric(12, 2)),
        sa.Column("mrp", sa.Numeric(12, 2)),
        sa.Column("gst", sa.Numeric(5, 2), comment="GST percentage"),
        sa.Column("vendor_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_products_name", "products", ["name"])
    op.create_index("ix_products_vendor_sku", "products", ["vendor_id", "sku"], unique=True)

    # --- Product Variants ---
    op.create_table(
        "product_variants",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("color", sa.String(100), nullable=False, server_default=""),
        sa.Column("size", sa.String(100), nullable=False, server_default=""),
        sa.Column("sku", sa.String(100)),
        sa.Column("barcode", sa.String(100)),
        sa.Column("purchase_price", sa.Numeric(12, 2)),
        sa.Column("selling_price", sa.Numeric(12, 2)),
        sa.Column("mrp", sa.Numeric(12, 2)),
        sa.Column("gst", sa.Numeric(5, 2)),
        sa.Column("inventory_quantity", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("weight", sa.Numeric(10, 3)),
        sa.Column("image_url", sa.String(500)),
        sa.Column("images", postgresql.JSONB, server_default=sa.text("'[]'::jsonb")),
        sa.Column("attributes", postgresql.JSONB, server_default=sa.text("'{}'::jsonb")),
        sa.Column("position", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("is_default", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("product_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_product_variants_product_id", "product_variants", ["product_id"])
    op.create_index("ix_product_variants_sku", "product_variants", ["sku"])


def downgrade() -> None:
    op.drop_table("product_variants")
    op.drop_table("products")
    op.drop_table("vendors")
