"""Edits on a product's list of variants: default selection, removal, bulk edit.

Also reads rows persisted before attribute mappings existed, which only carry
`color` and `size`.
"""

from collections.abc import Iterable, Sequence
from decimal import Decimal
from uuid import UUID

from app.services.attributes import AttributeSet, VariantMatrixError, add_attribute, add_attribute_value
from app.services.variant_matrix import Variant

BULK_EDIT_FIELDS = ("selling_price", "mrp", "purchase_price", "gst", "inventory_quantity")


class VariantNotFoundError(VariantMatrixError):
    def __init__(self, variant_id):
        self.variant_id = variant_id
        super().__init__(f"Variant {variant_id} not found")


def legacy_attributes(color: str | None, size: str | None) -> dict[str, str]:
    attrs = {}
    if color:
        attrs["Color"] = color
    if size:
        attrs["Size"] = size
    return attrs


def legacy_columns(attributes: dict[str, str]) -> tuple[str, str]:
    """The (color, size) column values mirrored from an attribute mapping."""
    return attributes.get("Color", ""), attributes.get("Size", "")


def variant_attributes(variant) -> dict[str, str]:
    """Attribute mapping of a row or Variant, falling back to color/size."""
    if variant.attributes:
        return dict(variant.attributes)
    return legacy_attributes(variant.color, variant.size)


def variant_from_row(row) -> Variant:
    # Column defaults are only applied on flush, so unflushed rows carry None
    return Variant(
        id=row.id,
        product_id=row.product_id,
        attributes=variant_attributes(row),
        color=row.color or "",
        size=row.size or "",
        sku=row.sku,
        barcode=row.barcode,
        purchase_price=row.purchase_price,
        selling_price=row.selling_price,
        mrp=row.mrp,
        gst=row.gst,
        inventory_quantity=row.inventory_quantity or 0,
        weight=row.weight,
        images=list(row.images or []),
        image_url=row.image_url,
        position=row.position or 0,
        is_default=bool(row.is_default),
    )


def set_default_variant(variants: Sequence[Variant], variant_id: UUID) -> list[Variant]:
    if not any(v.id == variant_id for v in variants):
        raise VariantNotFoundError(variant_id)
    return [v.model_copy(update={"is_default": v.id == variant_id}) for v in variants]


def remove_variant(variants: Sequence[Variant], variant_id: UUID) -> list[Variant]:
    """Drop a variant; if it was the default, the first remaining one takes over."""
    removed = next((v for v in variants if v.id == variant_id), None)
    if removed is None:
        raise VariantNotFoundError(variant_id)

    remaining = [v for v in variants if v.id != variant_id]
    if removed.is_default and remaining and not any(v.is_default for v in remaining):
        remaining[0] = remaining[0].model_copy(update={"is_default": True})
    return remaining


def apply_bulk_edit(
    variants: Sequence[Variant],
    field: str,
    value: Decimal | int,
    variant_ids: Iterable[UUID] | None = None,
) -> list[Variant]:
    if field not in BULK_EDIT_FIELDS:
        raise ValueError(f"Field '{field}' cannot be bulk edited")
    if field == "inventory_quantity":
        value = int(value)
        if value < 0:
            raise ValueError("Inventory quantity cannot be negative")
    else:
        value = Decimal(str(value))
        if value < 0:
            raise ValueError(f"{field} cannot be negative")

    selected = set(variant_ids) if variant_ids is not None else None
    return [
        v.model_copy(update={field: value}) if selected is None or v.id in selected else v
        for v in variants
    ]


def set_variant_images(variant: Variant, images: Sequence[str]) -> Variant:
    """Replace images, keeping image_url as the cover (first) image."""
    images = [url for url in images if url.strip()]
    return variant.model_copy(update={"images": images, "image_url": images[0] if images else None})


def attribute_set_from_variants(variants: Iterable) -> AttributeSet:
    """Recover the attribute set that the given variants were generated from.

    Attributes and values appear in first-seen order; Color and Size come first
    when present.
    """
    result = AttributeSet()
    for name in ("Color", "Size"):
        result = add_attribute(result, name)

    for variant in variants:
        for name, value in variant_attributes(variant).items():
            if result.find(name) is None:
                result = add_attribute(result, name)
            attr = result.attributes[result.find(name)]
            if value and value.strip() and not attr.has_value(value):
                result = add_attribute_value(result, name, value)

    # Color/Size placeholders nobody used are dropped
    return AttributeSet(attributes=tuple(
        a for a in result.attributes if a.values or a.name not in ("Color", "Size")
    ))
