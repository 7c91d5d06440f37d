from app.schemas.product import (
    ProductCreate, ProductUpdate, ProductResponse, ProductListResponse,
)
from app.schemas.variant import (
    VariantUpsert, VariantUpdate, VariantResponse, VariantListResponse,
    GenerateVariantsRequest, GenerateVariantsResponse, BulkEditRequest,
    AttributeSetResponse,
)

__all__ = [
    "ProductCreate", "ProductUpdate", "ProductResponse", "ProductListResponse",
    "VariantUpsert", "VariantUpdate", "VariantResponse", "VariantListResponse",
    "GenerateVariantsRequest", "GenerateVariantsResponse", "BulkEditRequest",
    "AttributeSetResponse",
]
