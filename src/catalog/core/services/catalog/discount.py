"""Single-product price and visibility mutations."""

import math

from loguru import logger

from src.catalog.core.errors import InvalidInputError, NotFoundError
from src.catalog.core.services.metrics import MetricsSink, NullMetricsSink
from src.catalog.entities.service.product import Product, ProductRepository


def validate_percentage(percentage: float | int | str | None) -> float:
    """Return ``percentage`` as a float in [0, 100] or raise InvalidInputError."""
    if percentage is None or isinstance(percentage, bool):
        raise InvalidInputError("'percentage' is required and must be a number")
    try:
        value = float(percentage)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError("'percentage' must be a number") from exc
    if math.isnan(value) or not 0 <= value <= 100:
        raise InvalidInputError("'percentage' must be between 0 and 100")
    return value


def discounted_price(price: float, percentage: float) -> float:
    return max(price * (1 - percentage / 100), 0.0)


def apply_discount(
    repository: ProductRepository, product: Product, percentage: float | int | str | None
) -> Product:
    """Reduce ``product.price`` by ``percentage`` percent and persist it.

    ``old_price`` is left as captured at creation. The record is not
    touched when the percentage is rejected.
    """
    value = validate_percentage(percentage)
    updated = product.model_copy(
        update={
            "price": discounted_price(product.price, value),
            "discount_percentage": value,
        }
    )
    return repository.save(updated)


def toggle_active(repository: ProductRepository, product: Product) -> Product:
    """Flip the visibility flag and persist it."""
    return repository.save(product.model_copy(update={"active": not product.active}))


class DiscountService:
    """Looks products up by id and applies the mutations above."""

    def __init__(self, repository: ProductRepository, metrics: MetricsSink | None = None):
        self._repository = repository
        self._metrics = metrics or NullMetricsSink()

    def _require(self, product_id: str) -> Product:
        product = self._repository.get(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    def apply_discount(self, product_id: str, percentage: float | int | str | None) -> Product:
        validate_percentage(percentage)
        product = self._require(product_id)
        updated = apply_discount(self._repository, product, percentage)
        logger.info(
            "Discount applied",
            product_id=product_id,
            percentage=updated.discount_percentage,
            price=updated.price,
        )
        self._metrics.increment("product_discount_applied_total")
        return updated

    def toggle_active(self, product_id: str) -> Product:
        updated = toggle_active(self._repository, self._require(product_id))
        logger.info("Product visibility changed", product_id=product_id, active=updated.active)
        return updated
