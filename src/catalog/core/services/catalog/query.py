"""Translate listing request parameters into a deterministic query plan."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from src.catalog.core.errors import InvalidInputError
from src.catalog.runtime.config.config_data import CatalogConfig

if TYPE_CHECKING:
    from src.catalog.entities.service.product.entity import Product

QueryMode = Literal["search", "category", "all"]

_TERM_SPLIT = re.compile(r"\W+", re.UNICODE)

TITLE_WEIGHT = 2
DESCRIPTION_WEIGHT = 1


@dataclass(frozen=True)
class QueryPlan:
    """Filter, ordering and window for a product listing.

    In ``search`` mode ``skip``/``limit`` are carried for reporting only; the
    full match set is returned ordered by relevance.
    """

    mode: QueryMode
    limit: int
    page: int
    skip: int
    category: str | None = None
    search_terms: tuple[str, ...] = field(default_factory=tuple)

    @property
    def paginated(self) -> bool:
        return self.mode != "search"


@dataclass
class ProductPage:
    items: list[Product]
    total: int
    page: int
    limit: int


def _parse_int(name: str, raw: int | str | None, default: int, minimum: int) -> int:
    if raw is None or raw == "":
        return default
    if isinstance(raw, bool):
        raise InvalidInputError(f"'{name}' must be an integer")
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"'{name}' must be an integer", errors=[str(exc)]) from exc
    if value < minimum:
        raise InvalidInputError(f"'{name}' must be greater than or equal to {minimum}")
    return value


def tokenize(search: str) -> tuple[str, ...]:
    """Split free text into unique case-folded terms, preserving order."""
    seen: dict[str, None] = {}
    for term in _TERM_SPLIT.split(search.casefold()):
        if term:
            seen.setdefault(term, None)
    return tuple(seen)


def relevance(product: Product, terms: tuple[str, ...]) -> int:
    """Weighted number of term occurrences in title and description."""
    title = (product.title or "").casefold()
    description = (product.description or "").casefold()
    return sum(
        title.count(term) * TITLE_WEIGHT + description.count(term) * DESCRIPTION_WEIGHT
        for term in terms
    )


def build_query_plan(
    catalog: CatalogConfig,
    limit: int | str | None = None,
    page: int | str | None = None,
    offset: int | str | None = None,
    category: str | None = None,
    search: str | None = None,
) -> QueryPlan:
    """Build the plan for a listing request.

    Raises:
        InvalidInputError: if ``limit``, ``page`` or ``offset`` is not a
            valid integer or is out of range.
    """
    default_limit = min(catalog.default_limit, catalog.max_limit)
    resolved_limit = min(_parse_int("limit", limit, default_limit, 1), catalog.max_limit)
    resolved_page = _parse_int("page", page, 1, 1)
    resolved_offset = _parse_int("offset", offset, -1, 0)

    if resolved_offset >= 0:
        skip = resolved_offset
        resolved_page = skip // resolved_limit + 1
    else:
        skip = (resolved_page - 1) * resolved_limit

    terms = tokenize(search) if search else ()
    if terms:
        return QueryPlan(
            mode="search",
            limit=resolved_limit,
            page=resolved_page,
            skip=skip,
            search_terms=terms,
        )

    category = category.strip() if category else None
    if category:
        return QueryPlan(
            mode="category",
            limit=resolved_limit,
            page=resolved_page,
            skip=skip,
            category=category,
        )

    return QueryPlan(mode="all", limit=resolved_limit, page=resolved_page, skip=skip)
