"""Unit tests for the Product Variant API."""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
import uuid

import pytest
from fastapi import HTTPException

from app.models.product import Product
from app.models.variant import ProductVariant
from app.schemas.auth import CurrentUser


def _user() -> CurrentUser:
    return CurrentUser(
        id=uuid.uuid4(),
        role="vendor",
        vendor_id=uuid.uuid4(),
        permissions=["product:read", "product:update", "product:delete"],
    )


def _product(user: CurrentUser, **kwargs) -> Product:
    now = datetime.now(timezone.utc)
    return Product(
        id=uuid.uuid4(),
        vendor_id=user.vendor_id,
        name="Classic Tee",
        is_active=True,
        created_at=now,
        updated_at=now,
        **kwargs,
    )


def _row(product: Product, color: str, size: str, position: int = 0, is_default: bool = False) -> ProductVariant:
    return ProductVariant(
        id=uuid.uuid4(),
        product_id=product.id,
        color=color,
        size=size,
        attributes={"Color": color, "Size": size},
        images=[],
        inventory_quantity=10,
        position=position,
        is_default=is_default,
    )


def _one(obj) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = obj
    return result


def _many(objs) -> MagicMock:
    result = MagicMock()
    result.scalars.return_value.all.return_value = list(objs)
    return result


def _db(*results) -> AsyncMock:
    mock_db = AsyncMock()
    mock_db.add = MagicMock()
    mock_db.execute.side_effect = list(results)
    return mock_db


# ── Generation ────────────────────────────────────

@pytest.mark.asyncio
async def test_generate_variants_persists_new():
    """Generating for a product without variants creates the full matrix."""
    from app.api.variants import generate_variants
    from app.schemas.variant import GenerateVariantsRequest

    user = _user()
    product = _product(user, selling_price=Decimal("100.00"))
    mock_db = _db(_one(product), _many([]))

    body = GenerateVariantsRequest(attributes=[
        {"name": "Color", "values": ["Red", "Blue"]},
        {"name": "Size", "values": ["S", "M", "L"]},
    ])
    result = await generate_variants(product_id=product.id, body=body, current_user=user, db=mock_db)

    assert result.created_count == 6
    assert result.existing_count == 0
    assert result.message == "Generated 6 new variants"
    assert result.variants[0].sku == "CT-RED-S"
    assert result.variants[0].is_default
    assert result.variants[0].purchase_price == Decimal("70.00")
    assert mock_db.add.call_count == 6
    added = mock_db.add.call_args_list[0].args[0]
    assert isinstance(added, ProductVariant)
    assert added.product_id == product.id
    assert added.id == result.variants[0].id
    mock_db.flush.assert_awaited()


@pytest.mark.asyncio
async def test_generate_variants_preview_does_not_persist():
    from app.api.variants import generate_variants
    from app.schemas.variant import GenerateVariantsRequest

    user = _user()
    product = _product(user)
    mock_db = _db(_one(product), _many([]))

    body = GenerateVariantsRequest(
        attributes=[{"name": "Size", "values": ["S", "M"]}],
        persist=False,
    )
    result = await generate_variants(product_id=product.id, body=body, current_user=user, db=mock_db)

    assert result.created_count == 2
    mock_db.add.assert_not_called()


@pytest.mark.asyncio
async def test_generate_variants_skips_existing():
    from app.api.variants import generate_variants
    from app.schemas.variant import GenerateVariantsRequest

    user = _user()
    product = _product(user)
    rows = [_row(product, "Red", "S", 0, True), _row(product, "Red", "M", 1)]
    mock_db = _db(_one(product), _many(rows))

    body = GenerateVariantsRequest(attributes=[
        {"name": "Color", "values": ["Red", "Blue"]},
        {"name": "Size", "values": ["S", "M"]},
    ])
    result = await generate_variants(product_id=product.id, body=body, current_user=user, db=mock_db)

    assert result.created_count == 2
    assert result.existing_count == 2
    assert [v.sku for v in result.variants] == ["CT-BLU-S", "CT-BLU-M"]
    assert not any(v.is_default for v in result.variants)
    assert [v.position for v in result.variants] == [2, 3]


@pytest.mark.asyncio
async def test_generate_variants_all_existing():
    from app.api.variants import generate_variants
    from app.schemas.variant import GenerateVariantsRequest

    user = _user()
    product = _product(user)
    rows = [_row(product, "Red", "S", 0, True)]
    mock_db = _db(_one(product), _many(rows))

    body = GenerateVariantsRequest(attributes=[
        {"name": "Color", "values": ["Red"]},
        {"name": "Size", "values": ["S"]},
    ])
    result = await generate_variants(product_id=product.id, body=body, current_user=user, db=mock_db)

    assert result.created_count == 0
    assert result.message == "All 1 combinations already exist"
    mock_db.add.assert_not_called()


@pytest.mark.asyncio
async def test_generate_variants_rejects_empty_attributes():
    from app.api.variants import generate_variants
    from app.schemas.variant import GenerateVariantsRequest

    user = _user()
    product = _product(user)
    mock_db = _db(_one(product), _many([]))

    body = GenerateVariantsRequest(attributes=[
        {"name": "Color", "values": []},
        {"name": "Size", "values": []},
    ])
    with pytest.raises(HTTPException) as exc_info:
        await generate_variants(product_id=product.id, body=body, current_user=user, db=mock_db)

    assert exc_info.value.status_code == 422


@pytest.mark.asyncio
async def test_generate_variants_rejects_duplicate_value():
    from app.api.variants import generate_variants
    from app.schemas.variant import GenerateVariantsRequest

    user = _user()
    product = _product(user)
    mock_db = _db(_one(product), _many([]))

    body = GenerateVariantsRequest(attributes=[{"name": "Color", "values": ["Red", "red"]}])
    with pytest.raises(HTTPException) as exc_info:
        await generate_variants(product_id=product.id, body=body, current_user=user, db=mock_db)

    assert exc_info.value.status_code == 422
    assert "already exists" in exc_info.value.detail


@pytest.mark.asyncio
async def test_generate_variants_product_not_found():
    from app.api.variants import generate_variants
    from app.schemas.variant import GenerateVariantsRequest

    mock_db = _db(_one(None))
    body = GenerateVariantsRequest(attributes=[{"name": "Size", "values": ["S"]}])

    with pytest.raises(HTTPException) as exc_info:
        await generate_variants(product_id=uuid.uuid4(), body=body, current_user=_user(), db=mock_db)

    assert exc_info.value.status_code == 404


# ── Upsert ────────────────────────────────────────

@pytest.mark.asyncio
async def test_upsert_rejects_two_defaults():
    from app.api.variants import upsert_variants
    from app.schemas.variant import VariantUpsert

    user = _user()
    product = _product(user)
    mock_db = _db(_one(product))

    body = [VariantUpsert(size="S", is_default=True), VariantUpsert(size="M", is_default=True)]
    with pytest.raises(HTTPException) as exc_info:
        await upsert_variants(product_id=product.id, body=body, current_user=user, db=mock_db)

    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_upsert_updates_and_creates():
    from app.api.variants import upsert_variants
    from app.schemas.variant import VariantUpsert

    user = _user()
    product = _product(user)
    existing = _row(product, "Red", "S", 0, True)
    mock_db = _db(_one(product), _many([existing]))

    body = [
        VariantUpsert(id=existing.id, color="Red", size="S", selling_price=Decimal("20")),
        VariantUpsert(color="Red", size="M", images=["https://cdn/m.jpg"], is_default=True),
    ]
    result = await upsert_variants(product_id=product.id, body=body, current_user=user, db=mock_db)

    assert result.total == 2
    assert existing.selling_price == Decimal("20")
    assert existing.is_default is False

    created = result.items[1]
    assert created.attributes == {"Color": "Red", "Size": "M"}
    assert created.image_url == "https://cdn/m.jpg"
    assert created.is_default
    mock_db.add.assert_called_once()


# ── Defaults, bulk edit, attributes ───────────────

@pytest.mark.asyncio
async def test_make_default_variant():
    from app.api.variants import make_default_variant

    user = _user()
    product = _product(user)
    rows = [_row(product, "Red", "S", 0, True), _row(product, "Red", "M", 1)]
    mock_db = _db(_one(product), _many(rows))

    result = await make_default_variant(
        product_id=product.id, variant_id=rows[1].id, current_user=user, db=mock_db
    )

    assert [r.is_default for r in rows] == [False, True]
    assert result.items[1].is_default


@pytest.mark.asyncio
async def test_make_default_unknown_variant():
    from app.api.variants import make_default_variant

    user = _user()
    product = _product(user)
    mock_db = _db(_one(product), _many([_row(product, "Red", "S")]))

    with pytest.raises(HTTPException) as exc_info:
        await make_default_variant(
            product_id=product.id, variant_id=uuid.uuid4(), current_user=user, db=mock_db
        )

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_bulk_edit_selected_variants():
    from app.api.variants import bulk_edit_variants
    from app.schemas.variant import BulkEditRequest

    user = _user()
    product = _product(user)
    rows = [_row(product, "Red", "S"), _row(product, "Red", "M"), _row(product, "Red", "L")]
    mock_db = _db(_one(product), _many(rows))

    body = BulkEditRequest(field="mrp", value=Decimal("499"), variant_ids=[rows[0].id, rows[2].id])
    await bulk_edit_variants(product_id=product.id, body=body, current_user=user, db=mock_db)

    assert [r.mrp for r in rows] == [Decimal("499"), None, Decimal("499")]


@pytest.mark.asyncio
async def test_get_variant_attributes():
    from app.api.variants import get_variant_attributes

    user = _user()
    product = _product(user)
    rows = [_row(product, "Red", "S"), _row(product, "Blue", "S"), _row(product, "Blue", "M")]
    mock_db = _db(_one(product), _many(rows))

    result = await get_variant_attributes(product_id=product.id, current_user=user, db=mock_db)

    assert [(a.name, a.values) for a in result.attributes] == [
        ("Color", ["Red", "Blue"]),
        ("Size", ["S", "M"]),
    ]
    assert result.attributes[0].is_color_like


# ── Single variant ────────────────────────────────

@pytest.mark.asyncio
async def test_get_variant_not_found():
    from app.api.variants import get_variant

    mock_db = _db(_one(None))

    with pytest.raises(HTTPException) as exc_info:
        await get_variant(variant_id=uuid.uuid4(), current_user=_user(), db=mock_db)

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_update_variant_images_and_attributes():
    from app.api.variants import update_variant
    from app.schemas.variant import VariantUpdate

    user = _user()
    product = _product(user)
    row = _row(product, "Red", "S")
    mock_db = _db(_one(row))

    body = VariantUpdate(
        images=["https://cdn/1.jpg", "https://cdn/2.jpg"],
        attributes={"Color": "Navy", "Size": "XL"},
    )
    result = await update_variant(variant_id=row.id, body=body, current_user=user, db=mock_db)

    assert result.image_url == "https://cdn/1.jpg"
    assert row.color == "Navy"
    assert row.size == "XL"
    mock_db.refresh.assert_awaited_once_with(row)


@pytest.mark.asyncio
async def test_update_variant_make_default():
    from app.api.variants import update_variant
    from app.schemas.variant import VariantUpdate

    user = _user()
    product = _product(user)
    rows = [_row(product, "Red", "S", 0, True), _row(product, "Red", "M", 1)]
    mock_db = _db(_one(rows[1]), _many(rows))

    await update_variant(
        variant_id=rows[1].id, body=VariantUpdate(is_default=True), current_user=user, db=mock_db
    )

    assert [r.is_default for r in rows] == [False, True]


@pytest.mark.asyncio
async def test_delete_default_variant_promotes_next():
    """Deleting the default variant makes the first remaining one default."""
    from app.api.variants import delete_variant

    user = _user()
    product = _product(user)
    rows = [_row(product, "Red", "S", 0, True), _row(product, "Red", "M", 1), _row(product, "Red", "L", 2)]
    mock_db = _db(_one(rows[0]), _many(rows))

    await delete_variant(variant_id=rows[0].id, current_user=user, db=mock_db)

    mock_db.delete.assert_awaited_once_with(rows[0])
    assert rows[1].is_default
    assert not rows[2].is_default


@pytest.mark.asyncio
async def test_upsert_ignores_foreign_variant_id():
    """An id that is not one of this product's variants creates a new row with its own id."""
    from app.api.variants import upsert_variants
    from app.schemas.variant import VariantUpsert

    user = _user()
    product = _product(user)
    mock_db = _db(_one(product), _many([]))
    foreign_id = uuid.uuid4()

    result = await upsert_variants(
        product_id=product.id,
        body=[VariantUpsert(id=foreign_id, size="S")],
        current_user=user,
        db=mock_db,
    )

    added = mock_db.add.call_args.args[0]
    assert added.id != foreign_id
    assert added.product_id == product.id
    assert result.items[0].id == added.id


@pytest.mark.asyncio
async def test_upsert_mirrors_attributes_into_color_and_size():
    from app.api.variants import upsert_variants
    from app.schemas.variant import VariantUpsert

    user = _user()
    product = _product(user)
    existing = _row(product, "Blue", "M")
    mock_db = _db(_one(product), _many([existing]))

    body = [
        VariantUpsert(attributes={"Color": "Red", "Size": "S"}),
        VariantUpsert(id=existing.id, attributes={"Color": "Green", "Fit": "Slim"}),
    ]
    result = await upsert_variants(product_id=product.id, body=body, current_user=user, db=mock_db)

    assert (result.items[0].color, result.items[0].size) == ("Red", "S")
    assert (existing.color, existing.size) == ("Green", "")


@pytest.mark.asyncio
async def test_generate_variants_rejects_overlong_sku():
    from app.api.variants import generate_variants
    from app.schemas.variant import GenerateVariantsRequest

    user = _user()
    product = _product(user, sku="X" * 100)
    mock_db = _db(_one(product), _many([]))

    body = GenerateVariantsRequest(attributes=[
        {"name": "Color", "values": ["Red"]},
        {"name": "Size", "values": ["XL"]},
    ])
    with pytest.raises(HTTPException) as exc_info:
        await generate_variants(product_id=product.id, body=body, current_user=user, db=mock_db)

    assert exc_info.value.status_code == 422
    assert "longer than 100" in exc_info.value.detail
    mock_db.add.assert_not_called()
