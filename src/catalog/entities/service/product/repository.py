"""Product repository: data access over the products table."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from loguru import logger
from pydantic import ValidationError
from sqlalchemy import delete, func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, col, select

from src.catalog.core.errors import InvalidInputError
from src.catalog.core.services.catalog.query import ProductPage, QueryPlan, relevance
from src.catalog.core.services.metrics import MetricsSink, NullMetricsSink
from src.catalog.entities._base import utcnow
from src.catalog.entities.service.product.entity import Product, ProductCreate
from src.catalog.entities.service.product.table import ProductTable

REQUIRED_CREATE_FIELDS = ("title", "price", "category")

ProductInput = Product | ProductCreate | Mapping[str, Any]


@dataclass
class BulkInsertResult:
    inserted_count: int = 0
    duplicates: int = 0
    failed: int = 0


@dataclass
class BulkUpsertResult:
    upserted_count: int = 0
    modified_count: int = 0
    failed: int = 0


def _coerce(record: ProductInput) -> Product:
    """Validate an inbound record into a Product, capturing ``old_price``."""
    if isinstance(record, Product):
        product = record
    elif isinstance(record, ProductCreate):
        product = Product.model_validate(record.model_dump(exclude_unset=True))
    else:
        product = Product.model_validate(dict(record))
    if product.old_price is None:
        product.old_price = product.price
    return product


class ProductRepository:
    """Data-access layer for products.

    Methods flush but never commit; the caller owns the transaction.
    """

    collection = "products"

    def __init__(self, session: Session, metrics: MetricsSink | None = None) -> None:
        self._session = session
        self._metrics = metrics or NullMetricsSink()

    def _timer(self, operation: str):
        return self._metrics.timer(
            "db_query_seconds", {"collection": self.collection, "operation": operation}
        )

    def _row(self, product_id: str) -> ProductTable | None:
        return self._session.get(ProductTable, product_id)

    def get(self, product_id: str) -> Product | None:
        with self._timer("get"):
            row = self._row(product_id)
        return row.to_entity() if row is not None else None

    def create(self, record: ProductCreate | Mapping[str, Any]) -> Product:
        """Persist a single product.

        Raises:
            InvalidInputError: if title, price or category is missing or the
                record fails validation.
        """
        data = (
            record.model_dump(exclude_unset=True)
            if isinstance(record, ProductCreate)
            else dict(record)
        )
        missing = [name for name in REQUIRED_CREATE_FIELDS if data.get(name) in (None, "")]
        if missing:
            raise InvalidInputError(
                f"Missing required fields: {', '.join(REQUIRED_CREATE_FIELDS)}",
                errors=[f"'{name}' is required" for name in missing],
            )
        try:
            product = _coerce(data)
        except ValidationError as exc:
            raise InvalidInputError(
                "Invalid product data",
                errors=[error["msg"] for error in exc.errors()],
            ) from exc

        row = ProductTable.from_entity(product)
        with self._timer("create"):
            try:
                with self._session.begin_nested():
                    self._session.add(row)
                    self._session.flush()
            except IntegrityError as exc:
                raise InvalidInputError(
                    "Product already exists", errors=[str(exc.orig)]
                ) from exc
            self._session.refresh(row)
        return row.to_entity()

    def save(self, product: Product) -> Product:
        """Write every attribute of an existing product back to its row."""
        row = self._row(product.id)
        if row is None:
            raise ValueError(f"Product {product.id} not found")
        with self._timer("update"):
            row.apply_entity(product)
            row.updated_at = utcnow()
            self._session.add(row)
            self._session.flush()
            self._session.refresh(row)
        return row.to_entity()

    def _conditions(self, plan: QueryPlan) -> list:
        conditions = [col(ProductTable.active).is_(True)]
        if plan.mode == "category":
            conditions.append(col(ProductTable.category) == plan.category)
        return conditions

    def count(self, plan: QueryPlan) -> int:
        if not plan.paginated:
            return len(self.search(plan))
        statement = (
            select(func.count()).select_from(ProductTable).where(*self._conditions(plan))
        )
        with self._timer("count"):
            return self._session.exec(statement).one()

    def find_page(self, plan: QueryPlan) -> ProductPage:
        """Execute a query plan, returning the page and the filtered total."""
        if not plan.paginated:
            items = self.search(plan)
            return ProductPage(items=items, total=len(items), page=plan.page, limit=plan.limit)

        statement = (
            select(ProductTable)
            .where(*self._conditions(plan))
            .order_by(col(ProductTable.created_at), col(ProductTable.id))
            .offset(plan.skip)
            .limit(plan.limit)
        )
        with self._timer("find"):
            rows = self._session.exec(statement).all()
        return ProductPage(
            items=[row.to_entity() for row in rows],
            total=self.count(plan),
            page=plan.page,
            limit=plan.limit,
        )

    def search(self, plan: QueryPlan) -> list[Product]:
        """Full-text match over title and description, best matches first.

        Matching is done on case-folded text in Python because SQL
        ``lower()`` folds only ASCII on SQLite. The plan's pagination window
        is not applied.
        """
        statement = select(ProductTable).where(*self._conditions(plan))
        terms = plan.search_terms
        with self._timer("search"):
            scored = [
                (relevance(product, terms), product)
                for product in (row.to_entity() for row in self._session.exec(statement))
            ]
        matches = [(score, p) for score, p in scored if score > 0]
        return [p for _, p in sorted(matches, key=lambda m: (-m[0], m[1].title, m[1].id))]

    def _active_statement(self):
        return select(ProductTable).where(col(ProductTable.active).is_(True))

    def list_discounted(self, min_discount: float) -> list[Product]:
        statement = (
            self._active_statement()
            .where(col(ProductTable.discount_percentage) >= min_discount)
            .order_by(col(ProductTable.discount_percentage).desc(), col(ProductTable.id))
        )
        with self._timer("find"):
            return [row.to_entity() for row in self._session.exec(statement).all()]

    def list_cash_discount(self) -> list[Product]:
        statement = (
            self._active_statement()
            .where(col(ProductTable.cash_discount).is_(True))
            .order_by(col(ProductTable.discount_percentage).desc(), col(ProductTable.id))
        )
        with self._timer("find"):
            return [row.to_entity() for row in self._session.exec(statement).all()]

    def list_special_offers(self, min_discount: float, limit: int) -> list[Product]:
        statement = (
            self._active_statement()
            .where(col(ProductTable.cash_discount).is_(True))
            .where(col(ProductTable.discount_percentage) >= min_discount)
            .order_by(col(ProductTable.discount_percentage).desc(), col(ProductTable.id))
            .limit(limit)
        )
        with self._timer("find"):
            return [row.to_entity() for row in self._session.exec(statement).all()]

    def list_featured(self, limit: int) -> list[Product]:
        statement = (
            self._active_statement()
            .order_by(col(ProductTable.sales_count).desc(), col(ProductTable.id))
            .limit(limit)
        )
        with self._timer("find"):
            return [row.to_entity() for row in self._session.exec(statement).all()]

    def distinct_categories(self) -> list[str]:
        """Distinct categories across all products, active or not."""
        statement = (
            select(ProductTable.category)
            .where(col(ProductTable.category).is_not(None))
            .distinct()
            .order_by(col(ProductTable.category))
        )
        with self._timer("distinct"):
            return list(self._session.exec(statement).all())

    def bulk_insert(self, records: Iterable[ProductInput]) -> BulkInsertResult:
        """Insert records independently of each other.

        Each record gets its own savepoint: a duplicate identity or an
        invalid record is counted and skipped, the rest are kept.
        """
        result = BulkInsertResult()
        with self._timer("insertMany"):
            for index, record in enumerate(records):
                try:
                    product = _coerce(record)
                except (ValidationError, TypeError, ValueError) as exc:
                    logger.warning("Skipping invalid product at index {}: {}", index, exc)
                    result.failed += 1
                    continue
                try:
                    with self._session.begin_nested():
                        self._session.add(ProductTable.from_entity(product))
                        self._session.flush()
                except IntegrityError as exc:
                    logger.info("Duplicate product at index {}: {}", index, exc.orig)
                    result.duplicates += 1
                    continue
                result.inserted_count += 1
        return result

    def _find_existing(self, product: Product) -> ProductTable | None:
        if product.external_id is not None:
            statement = select(ProductTable).where(
                col(ProductTable.external_id) == product.external_id
            )
            return self._session.exec(statement).first()
        if "id" in product.model_fields_set:
            return self._row(product.id)
        return None

    def bulk_upsert(self, records: Iterable[ProductInput]) -> BulkUpsertResult:
        """Update-if-exists by identity, else insert.

        Identity is ``external_id`` when present, otherwise an explicitly
        supplied ``id``. Existing ``old_price`` is never overwritten.
        """
        result = BulkUpsertResult()
        with self._timer("bulkUpsert"):
            for index, record in enumerate(records):
                try:
                    product = (
                        record if isinstance(record, Product)
                        else Product.model_validate(
                            record.model_dump(exclude_unset=True)
                            if isinstance(record, ProductCreate)
                            else dict(record)
                        )
                    )
                except (ValidationError, TypeError, ValueError) as exc:
                    logger.warning("Skipping invalid product at index {}: {}", index, exc)
                    result.failed += 1
                    continue
                try:
                    with self._session.begin_nested():
                        row = self._find_existing(product)
                        if row is None:
                            if product.old_price is None:
                                product.old_price = product.price
                            self._session.add(ProductTable.from_entity(product))
                            inserted = True
                        else:
                            previous_old_price = row.old_price
                            row.apply_entity(product, only_set=True)
                            if previous_old_price is not None:
                                row.old_price = previous_old_price
                            elif row.old_price is None:
                                row.old_price = row.price
                            row.updated_at = utcnow()
                            self._session.add(row)
                            inserted = False
                        self._session.flush()
                except SQLAlchemyError as exc:
                    logger.warning("Failed to upsert product at index {}: {}", index, exc)
                    result.failed += 1
                    continue
                if inserted:
                    result.upserted_count += 1
                else:
                    result.modified_count += 1
        return result

    def delete_by_source(self, source: str) -> int:
        statement = delete(ProductTable).where(col(ProductTable.meta_source) == source)
        with self._timer("deleteMany"):
            return self._session.execute(statement).rowcount

    def insert_many(self, products: Iterable[Product]) -> list[Product]:
        """Insert all products; any failure propagates to the caller."""
        rows = [ProductTable.from_entity(_coerce(product)) for product in products]
        with self._timer("insertMany"):
            self._session.add_all(rows)
            self._session.flush()
        return [row.to_entity() for row in rows]

    def initialize_active_field(self) -> int:
        """Backfill ``active = true`` on legacy rows; safe to run repeatedly."""
        statement = (
            update(ProductTable)
            .where(col(ProductTable.active).is_(None))
            .values(active=True)
        )
        with self._timer("updateMany"):
            return self._session.execute(statement).rowcount
