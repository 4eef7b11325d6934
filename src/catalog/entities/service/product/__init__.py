"""Entity package: Product."""

from .entity import (
    BulkProductsRequest,
    DiscountRequest,
    Product,
    ProductCreate,
    ProductMetadata,
)
from .repository import BulkInsertResult, BulkUpsertResult, ProductRepository
from .table import ProductTable

__all__ = [
    "BulkInsertResult",
    "BulkProductsRequest",
    "BulkUpsertResult",
    "DiscountRequest",
    "Product",
    "ProductCreate",
    "ProductMetadata",
    "ProductRepository",
    "ProductTable",
]
