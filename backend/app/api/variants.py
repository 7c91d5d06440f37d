"""Product variant endpoints: matrix generation, upsert, default selection, bulk edit."""

import logging
from uuid import UUID, uuid4

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.products import get_product_for_vendor
from app.core.deps import require_permission
from app.db.base import get_db
from app.models.product import Product
from app.models.variant import SKU_MAX_LENGTH, ProductVariant
from app.schemas.auth import CurrentUser, PermissionAction
from app.schemas.variant import (
    AttributeOut,
    AttributeSetResponse,
    BulkEditRequest,
    GenerateVariantsRequest,
    GenerateVariantsResponse,
    VariantListResponse,
    VariantResponse,
    VariantUpdate,
    VariantUpsert,
)
from app.services.attributes import AttributeSetError, build_attribute_set
from app.services.variant_editing import (
    VariantNotFoundError,
    apply_bulk_edit,
    attribute_set_from_variants,
    legacy_attributes,
    legacy_columns,
    remove_variant,
    set_default_variant,
    set_variant_images,
    variant_from_row,
)
from app.services.variant_matrix import (
    DefaultPricing,
    ProductContext,
    SynthesisOptions,
    Variant,
    generate_variant_matrix,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["variants"])


async def _load_variants(db: AsyncSession, product_id: UUID) -> list[ProductVariant]:
    result = await db.execute(
        select(ProductVariant)
        .where(ProductVariant.product_id == product_id)
        .order_by(ProductVariant.position, ProductVariant.created_at)
    )
    return list(result.scalars().all())


async def _get_variant_for_vendor(db: AsyncSession, variant_id: UUID, vendor_id: UUID) -> ProductVariant:
    result = await db.execute(
        select(ProductVariant)
        .join(Product, ProductVariant.product_id == Product.id)
        .where(
            ProductVariant.id == variant_id,
            Product.vendor_id == vendor_id,
        )
    )
    variant = result.scalar_one_or_none()
    if not variant:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product variant not found",
        )
    return variant


def _write_back(rows: list[ProductVariant], variants: list[Variant], *fields: str) -> None:
    """Copy the given fields from edited Variants onto their rows."""
    by_id = {v.id: v for v in variants}
    for row in rows:
        variant = by_id.get(row.id)
        if variant is None:
            continue
        for field in fields:
            setattr(row, field, getattr(variant, field))


def _list_response(rows: list[ProductVariant]) -> VariantListResponse:
    return VariantListResponse(
        items=[VariantResponse.model_validate(r) for r in rows],
        total=len(rows),
    )


# ── Product-scoped routes ─────────────────────────

@router.get("/products/{product_id}/variants", response_model=VariantListResponse)
async def list_variants(
    product_id: UUID,
    current_user: CurrentUser = Depends(require_permission(PermissionAction.PRODUCT_READ)),
    db: AsyncSession = Depends(get_db),
):
    """List a product's variants in display order."""
    await get_product_for_vendor(db, product_id, current_user.vendor_id)
    rows = await _load_variants(db, product_id)
    return _list_response(rows)


@router.post("/products/{product_id}/variants", response_model=VariantListResponse)
async def upsert_variants(
    product_id: UUID,
    body: list[VariantUpsert],
    current_user: CurrentUser = Depends(require_permission(PermissionAction.PRODUCT_UPDATE)),
    db: AsyncSession = Depends(get_db),
):
    """Save a list of variants: known ids are updated, the rest created."""
    await get_product_for_vendor(db, product_id, current_user.vendor_id)

    if sum(1 for item in body if item.is_default) > 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only one variant can be the default",
        )

    rows = await _load_variants(db, product_id)
    by_id = {r.id: r for r in rows}
    processed: list[ProductVariant] = []

    for item in body:
        data = item.model_dump(exclude={"id"})
        if data["attributes"]:
            data["color"], data["size"] = legacy_columns(data["attributes"])
        else:
            data["attributes"] = legacy_attributes(data["color"], data["size"])
        if data["images"]:
            data["image_url"] = data["images"][0]

        row = by_id.get(item.id) if item.id else None
        if row is None:
            # Ids that are not this product's variants get a fresh one
            row = ProductVariant(id=uuid4(), product_id=product_id, **data)
            db.add(row)
            rows.append(row)
        else:
            for key, value in data.items():
                setattr(row, key, value)
        processed.append(row)

    chosen = next((r for r in processed if r.is_default), None)
    if chosen is not None:
        for row in rows:
            if row is not chosen:
                row.is_default = False

    await db.flush()
    logger.info(f"Saved {len(processed)} variants for product {product_id}")
    return _list_response(processed)


@router.post("/products/{product_id}/variants/generate", response_model=GenerateVariantsResponse)
async def generate_variants(
    product_id: UUID,
    body: GenerateVariantsRequest,
    current_user: CurrentUser = Depends(require_permission(PermissionAction.PRODUCT_UPDATE)),
    db: AsyncSession = Depends(get_db),
):
    """Generate every attribute combination not yet present as a variant."""
    product = await get_product_for_vendor(db, product_id, current_user.vendor_id)
    rows = await _load_variants(db, product_id)
    existing = [variant_from_row(r) for r in rows]
    options = SynthesisOptions.from_settings()

    try:
        attribute_set = build_attribute_set(
            (a.name, a.values, a.is_color_like) for a in body.attributes
        )
        pricing = DefaultPricing(**body.pricing.model_dump()) if body.pricing else None
        result = generate_variant_matrix(
            attribute_set,
            ProductContext.from_product(product, pricing),
            existing,
            options,
        )
    except (AttributeSetError, ValueError) as e:
        raise HTTPException(
            status_code=422,
            detail=str(e),
        )

    too_long = next((v.sku for v in result.to_create if v.sku and len(v.sku) > SKU_MAX_LENGTH), None)
    if too_long:
        raise HTTPException(
            status_code=422,
            detail=f"Generated SKU '{too_long}' is longer than {SKU_MAX_LENGTH} characters",
        )

    if body.persist and result.to_create:
        for variant in result.to_create:
            db.add(ProductVariant(**variant.model_dump(exclude={"product_id"}), product_id=product_id))
        await db.flush()
        logger.info(f"Persisted {result.created_count} generated variants for product {product_id}")

    return GenerateVariantsResponse(
        combination_count=result.combination_count,
        created_count=result.created_count,
        existing_count=result.existing_count,
        message=result.message(),
        variants=result.to_create,
    )


@router.get("/products/{product_id}/variant-attributes", response_model=AttributeSetResponse)
async def get_variant_attributes(
    product_id: UUID,
    current_user: CurrentUser = Depends(require_permission(PermissionAction.PRODUCT_READ)),
    db: AsyncSession = Depends(get_db),
):
    """Attribute set recovered from the product's saved variants."""
    await get_product_for_vendor(db, product_id, current_user.vendor_id)
    rows = await _load_variants(db, product_id)
    attribute_set = attribute_set_from_variants(rows)
    return AttributeSetResponse(attributes=[
        AttributeOut(name=a.name, values=list(a.values), is_color_like=a.is_color)
        for a in attribute_set.attributes
    ])


@router.post("/products/{product_id}/variants/{variant_id}/default", response_model=VariantListResponse)
async def make_default_variant(
    product_id: UUID,
    variant_id: UUID,
    current_user: CurrentUser = Depends(require_permission(PermissionAction.PRODUCT_UPDATE)),
    db: AsyncSession = Depends(get_db),
):
    await get_product_for_vendor(db, product_id, current_user.vendor_id)
    rows = await _load_variants(db, product_id)

    try:
        variants = set_default_variant([variant_from_row(r) for r in rows], variant_id)
    except VariantNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    _write_back(rows, variants, "is_default")
    await db.flush()
    return _list_response(rows)


@router.post("/products/{product_id}/variants/bulk-edit", response_model=VariantListResponse)
async def bulk_edit_variants(
    product_id: UUID,
    body: BulkEditRequest,
    current_user: CurrentUser = Depends(require_permission(PermissionAction.PRODUCT_UPDATE)),
    db: AsyncSession = Depends(get_db),
):
    """Set one price or inventory field on all (or the selected) variants."""
    await get_product_for_vendor(db, product_id, current_user.vendor_id)
    rows = await _load_variants(db, product_id)

    try:
        variants = apply_bulk_edit(
            [variant_from_row(r) for r in rows], body.field, body.value, body.variant_ids
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    _write_back(rows, variants, body.field)
    await db.flush()
    return _list_response(rows)


# ── Variant routes ────────────────────────────────

@router.get("/product-variants/{variant_id}", response_model=VariantResponse)
async def get_variant(
    variant_id: UUID,
    current_user: CurrentUser = Depends(require_permission(PermissionAction.PRODUCT_READ)),
    db: AsyncSession = Depends(get_db),
):
    row = await _get_variant_for_vendor(db, variant_id, current_user.vendor_id)
    return VariantResponse.model_validate(row)


@router.patch("/product-variants/{variant_id}", response_model=VariantResponse)
async def update_variant(
    variant_id: UUID,
    body: VariantUpdate,
    current_user: CurrentUser = Depends(require_permission(PermissionAction.PRODUCT_UPDATE)),
    db: AsyncSession = Depends(get_db),
):
    row = await _get_variant_for_vendor(db, variant_id, current_user.vendor_id)
    update_data = body.model_dump(exclude_unset=True)

    images = update_data.pop("images", None)
    if images is not None:
        edited = set_variant_images(variant_from_row(row), images)
        row.images = edited.images
        row.image_url = edited.image_url

    if update_data.get("attributes"):
        row.color, row.size = legacy_columns(update_data["attributes"])

    make_default = update_data.pop("is_default", None)
    for key, value in update_data.items():
        setattr(row, key, value)

    if make_default:
        siblings = await _load_variants(db, row.product_id)
        if row not in siblings:
            siblings.append(row)
        variants = set_default_variant([variant_from_row(r) for r in siblings], row.id)
        _write_back(siblings, variants, "is_default")
    elif make_default is False:
        row.is_default = False

    await db.flush()
    await db.refresh(row)
    return VariantResponse.model_validate(row)


@router.delete("/product-variants/{variant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_variant(
    variant_id: UUID,
    current_user: CurrentUser = Depends(require_permission(PermissionAction.PRODUCT_DELETE)),
    db: AsyncSession = Depends(get_db),
):
    """Delete a variant; deleting the default promotes the first remaining one."""
    row = await _get_variant_for_vendor(db, variant_id, current_user.vendor_id)
    siblings = await _load_variants(db, row.product_id)
    if row not in siblings:
        siblings.append(row)

    remaining = remove_variant([variant_from_row(r) for r in siblings], row.id)
    _write_back(siblings, remaining, "is_default")

    await db.delete(row)
    await db.flush()
    logger.info(f"Deleted variant {variant_id} of product {row.product_id}")
