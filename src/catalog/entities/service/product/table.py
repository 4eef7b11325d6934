"""Product database table model."""

from sqlalchemy import JSON, Column, Index
from sqlmodel import Field

from src.catalog.entities._base import EntityTable
from src.catalog.entities.service.product.entity import Product, ProductMetadata


class ProductTable(EntityTable, table=True):
    """Database persistence model for products.

    Provenance metadata is flattened into ``meta_keywords``/``meta_source``
    so that sync-replace can select imported rows with a plain index.
    ``active`` is nullable only to represent legacy rows awaiting the
    active-field backfill.
    """

    __tablename__ = "products"
    __table_args__ = (
        Index("ix_products_category_brand", "category", "brand"),
        Index("ix_products_active_discount", "active", "discount_percentage"),
        Index("ix_products_active_sales", "active", "sales_count"),
        Index("ix_products_active_cash_discount", "active", "cash_discount"),
    )

    external_id: int | None = Field(default=None, unique=True, index=True)
    title: str
    description: str | None = None
    brand: str | None = None
    category: str | None = Field(default=None, index=True)
    tags: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    price: float
    old_price: float | None = None
    discount_percentage: float = 0
    cash_discount: bool = False
    stock: int = 0
    rating: float = 0
    sales_count: int = Field(default=0, index=True)

    thumbnail: str | None = None
    images: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    active: bool | None = Field(default=True)
    meta_keywords: str | None = None
    meta_source: str | None = Field(default=None, index=True)

    @classmethod
    def from_entity(cls, product: Product) -> "ProductTable":
        data = product.model_dump(exclude={"metadata"})
        return cls(
            **data,
            meta_keywords=product.metadata.keywords,
            meta_source=product.metadata.source,
        )

    def apply_entity(self, product: Product, only_set: bool = False) -> None:
        """Copy attributes of ``product`` onto this row, never its id.

        With ``only_set`` only the fields explicitly given when the entity
        was built are copied, which gives upserts ``$set`` semantics.
        """
        data = product.model_dump(
            exclude={"id", "metadata", "created_at", "updated_at"},
            exclude_unset=only_set,
        )
        for key, value in data.items():
            setattr(self, key, value)
        if not only_set or "metadata" in product.model_fields_set:
            self.meta_keywords = product.metadata.keywords
            self.meta_source = product.metadata.source

    def to_entity(self) -> Product:
        return Product(
            id=self.id,
            external_id=self.external_id,
            title=self.title,
            description=self.description,
            brand=self.brand,
            category=self.category,
            tags=list(self.tags or []),
            price=self.price,
            old_price=self.old_price,
            discount_percentage=self.discount_percentage,
            cash_discount=self.cash_discount,
            stock=self.stock,
            rating=self.rating,
            sales_count=self.sales_count,
            thumbnail=self.thumbnail,
            images=list(self.images or []),
            active=bool(self.active),
            metadata=ProductMetadata(keywords=self.meta_keywords, source=self.meta_source),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
