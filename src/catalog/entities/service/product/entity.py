"""Entity: Product."""

from typing import Any

from pydantic import BaseModel, Field

from src.catalog.entities._base import Entity


class ProductMetadata(BaseModel):
    """Provenance information attached to a product."""

    keywords: str | None = Field(default=None, description="Free-form search keywords")
    source: str | None = Field(
        default=None, description="Tag of the external catalog the product came from"
    )


class Product(Entity):
    """Product entity representing a catalog item.

    Every default is spelled out here; nothing is filled in by the storage
    layer except the timestamps.
    """

    external_id: int | None = Field(
        default=None, description="Identity of the product in the external catalog"
    )
    title: str = Field(min_length=1, description="Product name")
    description: str | None = Field(default=None, description="Long description")
    brand: str | None = Field(default=None, description="Brand name")
    category: str | None = Field(default=None, description="Catalog category")
    tags: list[str] = Field(default_factory=list, description="Classification tags")

    price: float = Field(ge=0, description="Current price")
    old_price: float | None = Field(
        default=None, ge=0, description="Price before the first price change"
    )
    discount_percentage: float = Field(
        default=0, ge=0, le=100, description="Advertised discount, 0-100"
    )
    cash_discount: bool = Field(default=False, description="Extra discount when paying cash")
    stock: int = Field(default=0, description="Units in stock")
    rating: float = Field(default=0, description="Average rating")
    sales_count: int = Field(default=0, ge=0, description="Units sold")

    thumbnail: str | None = Field(default=None, description="Main image URI")
    images: list[str] = Field(default_factory=list, description="Gallery image URIs")

    active: bool = Field(default=True, description="Visible in public listings")
    metadata: ProductMetadata = Field(
        default_factory=ProductMetadata, description="Provenance metadata"
    )

    def __eq__(self, other: Any) -> bool:
        """Compare products by business attributes, ignoring timestamps."""
        if not isinstance(other, Product):
            return False
        exclude = {"created_at", "updated_at"}
        return self.model_dump(exclude=exclude) == other.model_dump(exclude=exclude)

    def __hash__(self) -> int:
        return hash((self.id, self.external_id, self.title))


class ProductCreate(BaseModel):
    """Payload accepted by the single-product create endpoint.

    ``title``, ``price`` and ``category`` are optional here so that their
    absence is reported as invalid input by the repository.
    """

    external_id: int | None = None
    title: str | None = None
    description: str | None = None
    brand: str | None = None
    category: str | None = None
    tags: list[str] = Field(default_factory=list)
    price: float | None = Field(default=None, ge=0)
    old_price: float | None = Field(default=None, ge=0)
    discount_percentage: float = Field(default=0, ge=0, le=100)
    cash_discount: bool = False
    stock: int = 0
    rating: float = 0
    sales_count: int = Field(default=0, ge=0)
    thumbnail: str | None = None
    images: list[str] = Field(default_factory=list)
    active: bool = True
    metadata: ProductMetadata = Field(default_factory=ProductMetadata)


class DiscountRequest(BaseModel):
    percentage: float | None = None


class BulkProductsRequest(BaseModel):
    """Body of the bulk insert endpoint; items are validated one by one."""

    products: Any = None
