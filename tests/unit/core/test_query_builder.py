"""Unit tests for listing query plans."""

import pytest

from src.catalog.core.errors import InvalidInputError
from src.catalog.core.services.catalog.query import (
    build_query_plan,
    relevance,
    tokenize,
)
from src.catalog.entities.service.product import Product
from src.catalog.runtime.config.config_data import CatalogConfig


@pytest.fixture
def catalog() -> CatalogConfig:
    return CatalogConfig(default_limit=20, max_limit=100)


class TestBuildQueryPlan:
    def test_defaults(self, catalog):
        plan = build_query_plan(catalog)

        assert plan.mode == "all"
        assert plan.limit == 20
        assert plan.page == 1
        assert plan.skip == 0
        assert plan.paginated

    def test_page_translates_to_skip(self, catalog):
        plan = build_query_plan(catalog, limit="10", page="3")

        assert plan.skip == 20
        assert plan.limit == 10
        assert plan.page == 3

    def test_offset_wins_over_page(self, catalog):
        plan = build_query_plan(catalog, limit=10, page=5, offset=25)

        assert plan.skip == 25
        assert plan.page == 3

    def test_limit_is_clamped_to_maximum(self, catalog):
        assert build_query_plan(catalog, limit=5000).limit == 100

    def test_default_limit_never_exceeds_maximum(self):
        plan = build_query_plan(CatalogConfig(default_limit=50, max_limit=10))
        assert plan.limit == 10

    def test_category_mode(self, catalog):
        plan = build_query_plan(catalog, category=" laptops ")

        assert plan.mode == "category"
        assert plan.category == "laptops"

    def test_search_wins_over_category(self, catalog):
        plan = build_query_plan(catalog, category="laptops", search="Red Phone")

        assert plan.mode == "search"
        assert plan.search_terms == ("red", "phone")
        assert not plan.paginated

    def test_blank_search_falls_back(self, catalog):
        assert build_query_plan(catalog, search="  ").mode == "all"

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("limit", "abc"),
            ("limit", "-1"),
            ("limit", "0"),
            ("page", "x"),
            ("page", "0"),
            ("page", "-2"),
            ("offset", "-1"),
            ("offset", "1.5"),
        ],
    )
    def test_malformed_numbers_are_invalid_input(self, catalog, name, value):
        with pytest.raises(InvalidInputError) as exc_info:
            build_query_plan(catalog, **{name: value})

        assert exc_info.value.status_code == 400
        assert name in exc_info.value.message


class TestRelevance:
    def test_tokenize_deduplicates_and_lowercases(self):
        assert tokenize("Phone, phone PHONE case") == ("phone", "case")

    def test_tokenize_casefolds_non_ascii(self):
        assert tokenize("ÉCRAN Straße") == ("écran", "strasse")

    def test_title_hits_weigh_more_than_description(self):
        in_title = Product(title="Red phone", price=1)
        in_description = Product(title="Case", description="fits a red phone", price=1)

        terms = ("phone",)
        assert relevance(in_title, terms) > relevance(in_description, terms)
        assert relevance(Product(title="Laptop", price=1), terms) == 0
