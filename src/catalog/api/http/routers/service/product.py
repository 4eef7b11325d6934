"""Product API router: listings, admin mutations and external sync."""

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query, Security
from fastapi.security import HTTPBearer
from pydantic import BaseModel
from sqlmodel import Session

from src.catalog.api.http.deps import (
    get_catalog_service,
    get_db_session,
    get_discount_service,
    get_product_repository,
    get_sync_service,
)
from src.catalog.api.http.envelope import ApiResponse, success
from src.catalog.core.errors import InvalidInputError
from src.catalog.core.services.catalog.discount import DiscountService
from src.catalog.core.services.catalog.listing import ProductCatalogService
from src.catalog.core.services.catalog.sync import ExternalSyncService
from src.catalog.entities.service.product import (
    BulkProductsRequest,
    DiscountRequest,
    Product,
    ProductCreate,
    ProductRepository,
)

# Documents the bearer scheme on admin routes; tokens are not validated.
admin_bearer = HTTPBearer(auto_error=False, description="Admin token (not enforced)")
admin = [Security(admin_bearer)]

router = APIRouter(prefix="/api/products", tags=["products"])


class ProductList(BaseModel):
    products: list[Product]
    total: int
    page: int
    limit: int


class BulkInsertSummary(BaseModel):
    inserted_count: int
    duplicates: int
    failed: int


class SyncSummary(BaseModel):
    imported_count: int
    sample: str | None
    deleted_count: int


class UpsertSummary(BaseModel):
    upserted_count: int
    modified_count: int
    failed: int


@router.get("", response_model=ApiResponse[ProductList])
def list_products(
    limit: str | None = Query(default=None, description="Page size"),
    page: str | None = Query(default=None, description="1-based page number"),
    offset: str | None = Query(default=None, description="Records to skip; wins over page"),
    category: str | None = Query(default=None, description="Exact category match"),
    search: str | None = Query(default=None, description="Free-text search"),
    catalog: ProductCatalogService = Depends(get_catalog_service),
) -> ApiResponse[ProductList]:
    """List active products, filtered by category or search text."""
    result = catalog.list_products(
        limit=limit, page=page, offset=offset, category=category, search=search
    )
    data = ProductList(
        products=result.items, total=result.total, page=result.page, limit=result.limit
    )
    return success(data, "Products retrieved successfully")


@router.get("/discounted", response_model=ApiResponse[list[Product]])
def list_discounted(
    min_discount: str | None = Query(default=None, description="Minimum discount percentage"),
    catalog: ProductCatalogService = Depends(get_catalog_service),
) -> ApiResponse[list[Product]]:
    """Active products with at least ``min_discount`` percent off; 404 when none."""
    return success(catalog.discounted(min_discount), "Discounted products retrieved")


@router.get("/cash-discount", response_model=ApiResponse[list[Product]])
def list_cash_discount(
    catalog: ProductCatalogService = Depends(get_catalog_service),
) -> ApiResponse[list[Product]]:
    return success(catalog.cash_discount(), "Cash discount products retrieved")


@router.get("/special-offers", response_model=ApiResponse[list[Product]])
def list_special_offers(
    min_discount: str | None = Query(default=None, description="Minimum discount percentage"),
    catalog: ProductCatalogService = Depends(get_catalog_service),
) -> ApiResponse[list[Product]]:
    return success(catalog.special_offers(min_discount), "Special offers retrieved")


@router.get("/featured", response_model=ApiResponse[list[Product]])
def list_featured(
    limit: str | None = Query(default=None, description="Number of best sellers"),
    catalog: ProductCatalogService = Depends(get_catalog_service),
) -> ApiResponse[list[Product]]:
    """Best sellers ordered by sales count."""
    return success(catalog.featured(limit), "Featured products retrieved")


@router.get("/categories", response_model=ApiResponse[list[str]])
def list_categories(
    catalog: ProductCatalogService = Depends(get_catalog_service),
) -> ApiResponse[list[str]]:
    return success(catalog.categories(), "Categories retrieved successfully")


@router.get("/{product_id}", response_model=ApiResponse[Product])
def get_product(
    product_id: str,
    catalog: ProductCatalogService = Depends(get_catalog_service),
) -> ApiResponse[Product]:
    return success(catalog.get_product(product_id), "Product retrieved successfully")


@router.post(
    "", status_code=201, response_model=ApiResponse[Product], dependencies=admin
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_db_session),
    repository: ProductRepository = Depends(get_product_repository),
) -> ApiResponse[Product]:
    """Create a product; title, price and category are required."""
    product = repository.create(payload)
    session.commit()
    return success(product, "Product created successfully", status_code=201)


@router.post(
    "/bulk",
    status_code=201,
    response_model=ApiResponse[BulkInsertSummary],
    dependencies=admin,
)
def bulk_insert_products(
    payload: BulkProductsRequest,
    session: Session = Depends(get_db_session),
    repository: ProductRepository = Depends(get_product_repository),
) -> ApiResponse[BulkInsertSummary]:
    """Insert many products; duplicates are reported and skipped."""
    if not isinstance(payload.products, list):
        raise InvalidInputError("'products' must be a list of products")
    result = repository.bulk_insert(payload.products)
    session.commit()
    return success(
        BulkInsertSummary(**asdict(result)),
        f"{result.inserted_count} products inserted",
        status_code=201,
    )


@router.patch(
    "/{product_id}/discount", response_model=ApiResponse[Product], dependencies=admin
)
def apply_discount(
    product_id: str,
    payload: DiscountRequest,
    session: Session = Depends(get_db_session),
    discounts: DiscountService = Depends(get_discount_service),
) -> ApiResponse[Product]:
    product = discounts.apply_discount(product_id, payload.percentage)
    session.commit()
    return success(product, "Discount applied successfully")


@router.patch(
    "/{product_id}/active", response_model=ApiResponse[Product], dependencies=admin
)
def toggle_active(
    product_id: str,
    session: Session = Depends(get_db_session),
    discounts: DiscountService = Depends(get_discount_service),
) -> ApiResponse[Product]:
    product = discounts.toggle_active(product_id)
    session.commit()
    return success(product, "Product visibility updated")


@router.post(
    "/sync-dummy",
    status_code=201,
    response_model=ApiResponse[SyncSummary],
    dependencies=admin,
)
async def sync_external_products(
    limit: int | None = Query(default=None, ge=1, description="Products to fetch"),
    sync: ExternalSyncService = Depends(get_sync_service),
) -> ApiResponse[SyncSummary]:
    """Replace all previously imported products with a fresh import."""
    result = await sync.sync_replace(limit)
    return success(
        SyncSummary(**asdict(result)),
        f"{result.imported_count} products imported",
        status_code=201,
    )


@router.post(
    "/sync-legacy",
    status_code=201,
    response_model=ApiResponse[UpsertSummary],
    dependencies=admin,
)
async def sync_external_products_legacy(
    limit: int | None = Query(default=None, ge=1, description="Products to fetch"),
    sync: ExternalSyncService = Depends(get_sync_service),
) -> ApiResponse[UpsertSummary]:
    """Merge the external catalog into the products table without deleting."""
    result = await sync.sync_upsert(limit)
    return success(
        UpsertSummary(**asdict(result)),
        f"{result.upserted_count} products inserted, {result.modified_count} updated",
        status_code=201,
    )
