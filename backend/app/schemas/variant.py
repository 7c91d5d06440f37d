"""Product variant schemas for API request/response."""

from datetime import datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, ConfigDict, field_validator

from app.services.variant_matrix import Variant


# ── Attributes ─────────────────────────────────────
class AttributeIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    values: list[str] = Field(default_factory=list)
    is_color_like: bool = False


class AttributeOut(AttributeIn):
    pass


class AttributeSetResponse(BaseModel):
    attributes: list[AttributeOut]


# ── Variants ───────────────────────────────────────
class VariantBase(BaseModel):
    color: str = Field("", max_length=100)
    size: str = Field("", max_length=100)
    sku: str | None = Field(None, max_length=100)
    barcode: str | None = Field(None, max_length=100)
    purchase_price: Decimal | None = Field(None, ge=0)
    selling_price: Decimal | None = Field(None, ge=0)
    mrp: Decimal | None = Field(None, ge=0)
    gst: Decimal | None = Field(None, ge=0, le=100)
    inventory_quantity: int = Field(0, ge=0)
    weight: Decimal | None = Field(None, ge=0)
    image_url: str | None = None
    images: list[str] = Field(default_factory=list)
    attributes: dict[str, str] = Field(default_factory=dict)
    position: int = 0
    is_default: bool = False


class VariantUpsert(VariantBase):
    """Existing variants are updated by id; items without a known id are created."""
    id: UUID | None = None


class VariantUpdate(BaseModel):
    color: str | None = Field(None, max_length=100)
    size: str | None = Field(None, max_length=100)
    sku: str | None = Field(None, max_length=100)
    barcode: str | None = Field(None, max_length=100)
    purchase_price: Decimal | None = Field(None, ge=0)
    selling_price: Decimal | None = Field(None, ge=0)
    mrp: Decimal | None = Field(None, ge=0)
    gst: Decimal | None = Field(None, ge=0, le=100)
    inventory_quantity: int | None = Field(None, ge=0)
    weight: Decimal | None = Field(None, ge=0)
    images: list[str] | None = None
    attributes: dict[str, str] | None = None
    position: int | None = None
    is_default: bool | None = None


class VariantResponse(VariantBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    product_id: UUID
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("images", "attributes", "inventory_quantity", "position", "is_default", mode="before")
    @classmethod
    def _unflushed_defaults(cls, v, info):
        if v is not None:
            return v
        return {"images": [], "attributes": {}, "inventory_quantity": 0, "position": 0, "is_default": False}[info.field_name]


class VariantListResponse(BaseModel):
    items: list[VariantResponse]
    total: int


# ── Generation ─────────────────────────────────────
class PricingIn(BaseModel):
    purchase_price: Decimal | None = Field(None, ge=0)
    selling_price: Decimal | None = Field(None, ge=0)
    mrp: Decimal | None = Field(None, ge=0)
    gst: Decimal | None = Field(None, ge=0, le=100)


class GenerateVariantsRequest(BaseModel):
    attributes: list[AttributeIn]
    pricing: PricingIn | None = Field(None, description="Overrides the product's own default pricing")
    persist: bool = Field(True, description="Save new variants; false returns a preview only")


class GenerateVariantsResponse(BaseModel):
    combination_count: int
    created_count: int
    existing_count: int
    message: str
    variants: list[Variant]


class BulkEditRequest(BaseModel):
    field: Literal["selling_price", "mrp", "purchase_price", "gst", "inventory_quantity"]
    value: Decimal = Field(..., ge=0)
    variant_ids: list[UUID] | None = Field(None, description="Limit the edit to these variants")
