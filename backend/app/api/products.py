"""Product CRUD endpoints, scoped to the caller's vendor."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import require_permission
from app.db.base import get_db
from app.models.product import Product
from app.schemas.auth import CurrentUser, PermissionAction
from app.schemas.product import (
    ProductCreate, ProductUpdate, ProductResponse, ProductListResponse,
)

router = APIRouter(prefix="/products", tags=["products"])


def _escape_like(s: str) -> str:
    """Escape SQL LIKE wildcards in user input."""
    return s.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def get_product_for_vendor(db: AsyncSession, product_id: UUID, vendor_id: UUID) -> Product:
    """Load a product owned by the vendor, or raise 404."""
    result = await db.execute(
        select(Product).where(
            Product.id == product_id,
            Product.vendor_id == vendor_id,
        )
    )
    product = result.scalar_one_or_none()
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found",
        )
    return product


async def _ensure_sku_free(db: AsyncSession, vendor_id: UUID, sku: str) -> None:
    existing = await db.execute(
        select(Product).where(Product.vendor_id == vendor_id, Product.sku == sku)
    )
    if existing.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"SKU '{sku}' already exists",
        )


@router.get("", response_model=ProductListResponse)
async def list_products(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    search: str | None = None,
    is_active: bool | None = True,
    current_user: CurrentUser = Depends(require_permission(PermissionAction.PRODUCT_READ)),
    db: AsyncSession = Depends(get_db),
):
    """List the vendor's products with pagination and optional filters."""
    query = select(Product).where(Product.vendor_id == current_user.vendor_id)

    if is_active is not None:
        query = query.where(Product.is_active == is_active)
    if search:
        like = f"%{_escape_like(search)}%"
        query = query.where(Product.name.ilike(like) | Product.sku.ilike(like))

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar_one()

    offset = (page - 1) * size
    query = query.offset(offset).limit(size).order_by(Product.created_at.desc())
    result = await db.execute(query)
    items = result.scalars().all()

    return ProductListResponse(
        items=[ProductResponse.model_validate(p) for p in items],
        total=total,
        page=page,
        size=size,
    )


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    body: ProductCreate,
    current_user: CurrentUser = Depends(require_permission(PermissionAction.PRODUCT_CREATE)),
    db: AsyncSession = Depends(get_db),
):
    if body.sku:
        await _ensure_sku_free(db, current_user.vendor_id, body.sku)

    product = Product(**body.model_dump(), vendor_id=current_user.vendor_id)
    db.add(product)
    await db.flush()
    await db.refresh(product)
    return ProductResponse.model_validate(product)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: UUID,
    current_user: CurrentUser = Depends(require_permission(PermissionAction.PRODUCT_READ)),
    db: AsyncSession = Depends(get_db),
):
    product = await get_product_for_vendor(db, product_id, current_user.vendor_id)
    return ProductResponse.model_validate(product)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: UUID,
    body: ProductUpdate,
    current_user: CurrentUser = Depends(require_permission(PermissionAction.PRODUCT_UPDATE)),
    db: AsyncSession = Depends(get_db),
):
    product = await get_product_for_vendor(db, product_id, current_user.vendor_id)

    update_data = body.model_dump(exclude_unset=True)
    if update_data.get("sku") and update_data["sku"] != product.sku:
        await _ensure_sku_free(db, current_user.vendor_id, update_data["sku"])

    for key, value in update_data.items():
        setattr(product, key, value)

    await db.flush()
    await db.refresh(product)
    return ProductResponse.model_validate(product)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: UUID,
    current_user: CurrentUser = Depends(require_permission(PermissionAction.PRODUCT_DELETE)),
    db: AsyncSession = Depends(get_db),
):
    product = await get_product_for_vendor(db, product_id, current_user.vendor_id)
    await db.delete(product)
    await db.flush()
