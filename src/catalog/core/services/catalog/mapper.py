"""Map external catalog records onto the product schema."""

import math
from collections.abc import Iterable
from typing import Any

from loguru import logger
from pydantic import ValidationError

from src.catalog.entities._base import utcnow
from src.catalog.entities.service.product import Product, ProductMetadata

CASH_DISCOUNT_THRESHOLD = 15


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def map_external_product(raw: dict[str, Any], source: str) -> Product:
    """Build a Product from one external record.

    ``old_price`` is reconstructed from the advertised discount and
    ``cash_discount`` is granted above the threshold.
    """
    price = float(raw["price"])
    discount = float(raw.get("discountPercentage") or 0)
    category = raw.get("category")
    brand = raw.get("brand")

    return Product(
        external_id=raw.get("id"),
        title=raw["title"],
        description=raw.get("description"),
        price=price,
        category=category,
        brand=brand,
        tags=list(raw.get("tags") or []),
        stock=int(raw.get("stock") or 0),
        discount_percentage=discount,
        rating=float(raw.get("rating") or 0),
        thumbnail=raw.get("thumbnail"),
        images=list(raw.get("images") or []),
        metadata=ProductMetadata(keywords=f"{category}, {brand}", source=source),
        cash_discount=discount > CASH_DISCOUNT_THRESHOLD,
        old_price=round_half_up(price * (1 + discount / 100)),
        created_at=utcnow(),
    )


def map_external_products(raws: Iterable[dict[str, Any]], source: str) -> list[Product]:
    """Map a batch, skipping records that lack required fields."""
    products = []
    for raw in raws:
        try:
            products.append(map_external_product(raw, source))
        except (AttributeError, KeyError, TypeError, ValidationError, ValueError) as exc:
            logger.warning(
                "Skipping unmappable external product {}: {}",
                raw.get("id") if isinstance(raw, dict) else raw,
                exc,
            )
    return products
