"""Read-side catalog operations used by the public product endpoints."""

from src.catalog.core.errors import InvalidInputError, NotFoundError
from src.catalog.core.services.catalog.query import ProductPage, build_query_plan
from src.catalog.entities.service.product import Product, ProductRepository
from src.catalog.runtime.config.config_data import CatalogConfig


class ProductCatalogService:
    def __init__(self, repository: ProductRepository, catalog: CatalogConfig) -> None:
        self._repository = repository
        self._catalog = catalog

    def list_products(
        self,
        limit: int | str | None = None,
        page: int | str | None = None,
        offset: int | str | None = None,
        category: str | None = None,
        search: str | None = None,
    ) -> ProductPage:
        plan = build_query_plan(
            self._catalog,
            limit=limit,
            page=page,
            offset=offset,
            category=category,
            search=search,
        )
        return self._repository.find_page(plan)

    def get_product(self, product_id: str) -> Product:
        product = self._repository.get(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    def discounted(self, min_discount: float | str | None = None) -> list[Product]:
        """Active products discounted by at least ``min_discount`` percent.

        Raises:
            NotFoundError: when no product qualifies.
        """
        threshold = self._parse_percentage(
            min_discount, self._catalog.discounted_min_percentage
        )
        products = self._repository.list_discounted(threshold)
        if not products:
            raise NotFoundError("No discounted products found")
        return products

    def cash_discount(self) -> list[Product]:
        return self._repository.list_cash_discount()

    def special_offers(self, min_discount: float | str | None = None) -> list[Product]:
        threshold = self._parse_percentage(
            min_discount, self._catalog.special_offer_min_percentage
        )
        return self._repository.list_special_offers(threshold, self._catalog.max_limit)

    def featured(self, limit: int | str | None = None) -> list[Product]:
        plan = build_query_plan(
            self._catalog, limit=limit if limit is not None else self._catalog.featured_limit
        )
        return self._repository.list_featured(plan.limit)

    def categories(self) -> list[str]:
        return self._repository.distinct_categories()

    @staticmethod
    def _parse_percentage(raw: float | str | None, default: float) -> float:
        if raw is None or raw == "":
            return default
        try:
            value = float(raw)
        except (TypeError, ValueError) as exc:
            raise InvalidInputError("'min_discount' must be a number") from exc
        if not 0 <= value <= 100:
            raise InvalidInputError("'min_discount' must be between 0 and 100")
        return value
