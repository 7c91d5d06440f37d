"""Product variant model - one sellable combination of attribute values."""

import uuid
from decimal import Decimal

from sqlalchemy import String, Numeric, Integer, Boolean, ForeignKey, text
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.mixins import UUIDPrimaryKeyMixin, TimestampMixin

SKU_MAX_LENGTH = 100


class ProductVariant(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "product_variants"

    # Legacy mirrors of attributes["Color"] / attributes["Size"]
    color: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    size: Mapped[str] = mapped_column(String(100), default="", nullable=False)

    sku: Mapped[str | None] = mapped_column(String(SKU_MAX_LENGTH), index=True)
    barcode: Mapped[str | None] = mapped_column(String(100))
    purchase_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    selling_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    mrp: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    gst: Mapped[Decimal | None] = mapped_column(Numeric(5, 2))
    inventory_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    weight: Mapped[Decimal | None] = mapped_column(Numeric(10, 3))
    image_url: Mapped[str | None] = mapped_column(String(500))
    images: Mapped[list] = mapped_column(JSONB, default=list, server_default=text("'[]'::jsonb"))
    attributes: Mapped[dict] = mapped_column(JSONB, default=dict, server_default=text("'{}'::jsonb"))
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Foreign keys
    product_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Relationships
    product = relationship("Product", back_populates="variants")

    def __repr__(self) -> str:
        return f"<ProductVariant {self.sku} default={self.is_default}>"
