"""Variant matrix: expand an attribute set into sellable variants.

Pipeline, run once per "Generate Variants" action:

    validate -> generate combinations -> synthesize variants -> de-duplicate

Everything here is pure: inputs are never mutated and no I/O happens.
Persisting `to_create` is the caller's job.
"""

import itertools
import logging
import re
import uuid
from collections.abc import Collection, Iterable, Sequence
from decimal import Decimal, ROUND_HALF_UP
from typing import Literal

from pydantic import BaseModel, Field

from app.core.config import settings
from app.services.attributes import (
    AttributeSet,
    InvalidAttributeSetError,
    validate_attribute_set,
)

logger = logging.getLogger(__name__)

Combination = dict[str, str]

FALLBACK_SKU_BASE = "PROD"
CENTS = Decimal("0.01")


class Variant(BaseModel):
    """A sellable version of a product for one combination of attribute values."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    product_id: uuid.UUID | None = None
    attributes: dict[str, str] = Field(default_factory=dict)
    color: str = ""
    size: str = ""

    sku: str | None = None
    barcode: str | None = None
    purchase_price: Decimal | None = None
    selling_price: Decimal | None = None
    mrp: Decimal | None = None
    gst: Decimal | None = None
    inventory_quantity: int = Field(0, ge=0)
    weight: Decimal | None = None

    images: list[str] = Field(default_factory=list)
    image_url: str | None = None
    position: int = 0
    is_default: bool = False


class DefaultPricing(BaseModel):
    purchase_price: Decimal | None = None
    selling_price: Decimal | None = None
    mrp: Decimal | None = None
    gst: Decimal | None = None


class ProductContext(BaseModel):
    """What the synthesizer needs to know about the owning product."""
    product_id: uuid.UUID | None = None
    name: str = ""
    sku: str | None = None
    pricing: DefaultPricing | None = None

    @classmethod
    def from_product(cls, product, pricing: DefaultPricing | None = None) -> "ProductContext":
        """Build from a Product row; fields set in `pricing` override the row's prices."""
        defaults = DefaultPricing(
            purchase_price=product.purchase_price,
            selling_price=product.selling_price,
            mrp=product.mrp,
            gst=product.gst,
        )
        if pricing is not None:
            defaults = defaults.model_copy(update=pricing.model_dump(exclude_none=True))
        return cls(product_id=product.id, name=product.name, sku=product.sku, pricing=defaults)


class SynthesisOptions(BaseModel):
    purchase_price_ratio: Decimal = Decimal("0.7")
    inventory_quantity: int = Field(10, ge=0)
    color_code_width: int = Field(3, ge=1)
    sku_base_style: Literal["initials", "prefix"] = "initials"

    @classmethod
    def from_settings(cls) -> "SynthesisOptions":
        return cls(
            purchase_price_ratio=Decimal(str(settings.VARIANT_PURCHASE_PRICE_RATIO)),
            inventory_quantity=settings.VARIANT_DEFAULT_INVENTORY,
            color_code_width=settings.VARIANT_COLOR_CODE_WIDTH,
            sku_base_style=settings.VARIANT_SKU_BASE_STYLE,
        )


class VariantPartition(BaseModel):
    to_create: list[Variant] = Field(default_factory=list)
    already_exists: list[Variant] = Field(default_factory=list)

    @property
    def created_count(self) -> int:
        return len(self.to_create)

    @property
    def existing_count(self) -> int:
        return len(self.already_exists)


class GenerationResult(VariantPartition):
    combination_count: int = 0

    def message(self) -> str:
        if self.to_create:
            return f"Generated {self.created_count} new variants"
        if self.already_exists:
            return f"All {self.existing_count} combinations already exist"
        return "No valid combinations could be created with the current attributes"


# ── Combination generator ─────────────────────────

def generate_combinations(attribute_set: AttributeSet) -> list[Combination]:
    """Cartesian product of attribute values, last attribute varying fastest.

    Attributes without values are skipped.
    """
    attrs = attribute_set.non_empty
    if not attrs:
        raise InvalidAttributeSetError()

    names = [a.name for a in attrs]
    return [
        dict(zip(names, values))
        for values in itertools.product(*(a.values for a in attrs))
    ]


# ── SKU ────────────────────────────────────────────

def sku_base(product: ProductContext, style: str = "initials") -> str:
    if product.sku and product.sku.strip():
        return product.sku.strip()

    if style == "prefix":
        token = "".join(ch for ch in product.name if ch.isalnum())
    else:
        token = "".join(word[0] for word in product.name.split() if word[0].isalnum())
    return token[:3].upper() or FALLBACK_SKU_BASE


def sku_segment(value: str, is_color: bool, color_code_width: int = 3) -> str:
    code = value.strip().upper()
    if is_color:
        code = code[:color_code_width]
    return code


def build_sku(
    product: ProductContext,
    combination: Combination,
    options: SynthesisOptions,
    color_attributes: Collection[str] = (),
) -> str:
    """BASE-SEG-SEG..., e.g. TSH-RED-XL."""
    color_names = {n.casefold() for n in color_attributes} | {"color", "colour"}
    segments = [sku_base(product, options.sku_base_style)]
    for name, value in combination.items():
        segments.append(sku_segment(value, name.strip().casefold() in color_names, options.color_code_width))
    return re.sub(r"\s+", "-", "-".join(segments))


# ── Variant synthesizer ───────────────────────────

def _inherit(field: str, product: ProductContext, existing: Sequence[Variant]) -> Decimal | None:
    if product.pricing is not None:
        value = getattr(product.pricing, field)
        if value is not None:
            return value
    if existing:
        return getattr(existing[0], field)
    return None


def synthesize_variant(
    combination: Combination,
    product: ProductContext,
    ordinal: int,
    existing: Sequence[Variant] = (),
    options: SynthesisOptions | None = None,
    color_attributes: Collection[str] = (),
) -> Variant:
    options = options or SynthesisOptions()

    selling_price = _inherit("selling_price", product, existing)
    purchase_price = product.pricing.purchase_price if product.pricing else None
    if purchase_price is None and selling_price is not None:
        purchase_price = (selling_price * options.purchase_price_ratio).quantize(CENTS, ROUND_HALF_UP)

    return Variant(
        product_id=product.product_id,
        attributes=dict(combination),
        color=combination.get("Color", ""),
        size=combination.get("Size", ""),
        sku=build_sku(product, combination, options, color_attributes),
        purchase_price=purchase_price,
        selling_price=selling_price,
        mrp=_inherit("mrp", product, existing),
        gst=_inherit("gst", product, existing),
        inventory_quantity=options.inventory_quantity,
        position=len(existing) + ordinal,
        is_default=ordinal == 0 and not existing,
    )


def synthesize_variants(
    combinations: Iterable[Combination],
    product: ProductContext,
    existing: Sequence[Variant] = (),
    options: SynthesisOptions | None = None,
    color_attributes: Collection[str] = (),
) -> list[Variant]:
    options = options or SynthesisOptions()
    return [
        synthesize_variant(combo, product, i, existing, options, color_attributes)
        for i, combo in enumerate(combinations)
    ]


# ── De-duplication ────────────────────────────────

def combination_key(attributes: dict[str, str]) -> tuple[tuple[str, str], ...]:
    """Order-independent, case-sensitive key for an attribute mapping."""
    return tuple(sorted(attributes.items()))


def partition_variants(new: Iterable[Variant], existing: Iterable[Variant]) -> VariantPartition:
    existing_keys = {combination_key(v.attributes) for v in existing}
    partition = VariantPartition()
    for variant in new:
        if combination_key(variant.attributes) in existing_keys:
            partition.already_exists.append(variant)
        else:
            partition.to_create.append(variant)
    return partition


# ── Pipeline ──────────────────────────────────────

def generate_variant_matrix(
    attribute_set: AttributeSet,
    product: ProductContext,
    existing: Sequence[Variant] = (),
    options: SynthesisOptions | None = None,
) -> GenerationResult:
    """Validate, generate, synthesize and de-duplicate in one call."""
    validate_attribute_set(attribute_set)
    combinations = generate_combinations(attribute_set)

    color_attributes = [a.name for a in attribute_set.attributes if a.is_color]
    variants = synthesize_variants(combinations, product, existing, options, color_attributes)
    partition = partition_variants(variants, existing)
    # New variants are appended after existing ones without gaps
    partition.to_create = [
        v.model_copy(update={"position": len(existing) + i})
        for i, v in enumerate(partition.to_create)
    ]

    logger.info(
        f"Variant matrix for product {product.product_id}: {len(combinations)} combinations, "
        f"{partition.created_count} new, {partition.existing_count} existing"
    )
    return GenerationResult(
        combination_count=len(combinations),
        to_create=partition.to_create,
        already_exists=partition.already_exists,
    )
