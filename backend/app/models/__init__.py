"""SQLAlchemy models for the vendor catalog."""

from app.models.vendor import Vendor
from app.models.product import Product
from app.models.variant import ProductVariant

__all__ = [
    "Vendor",
    "Product",
    "ProductVariant",
]
