"""Unit tests for the discount engine."""

import pytest

from src.catalog.core.errors import InvalidInputError, NotFoundError
from src.catalog.core.services.catalog.discount import (
    DiscountService,
    apply_discount,
    discounted_price,
    toggle_active,
    validate_percentage,
)


@pytest.fixture
def phone(repository):
    return repository.create({"title": "Phone X", "price": 500, "category": "smartphones"})


class TestApplyDiscount:
    def test_twenty_percent_off(self, repository, phone):
        updated = apply_discount(repository, phone, 20)

        assert updated.price == 400
        assert updated.old_price == 500
        assert updated.discount_percentage == 20
        assert repository.get(phone.id).price == 400

    @pytest.mark.parametrize("percentage", [0, 12.5, 33, 99.9, 100])
    def test_price_formula(self, repository, phone, percentage):
        updated = apply_discount(repository, phone, percentage)

        assert updated.price == pytest.approx(500 * (1 - percentage / 100))
        assert updated.price >= 0

    def test_old_price_survives_repeated_discounts(self, repository, phone):
        first = apply_discount(repository, phone, 10)
        second = apply_discount(repository, first, 50)

        assert second.price == pytest.approx(225)
        assert second.old_price == 500

    def test_updated_at_is_refreshed(self, repository, phone):
        updated = apply_discount(repository, phone, 5)
        assert updated.updated_at >= phone.updated_at

    @pytest.mark.parametrize("percentage", [-1, 100.01, 150, None, "abc", float("nan"), True])
    def test_rejected_percentages_leave_record_untouched(self, repository, phone, percentage):
        with pytest.raises(InvalidInputError):
            apply_discount(repository, phone, percentage)

        stored = repository.get(phone.id)
        assert stored.price == 500
        assert stored.discount_percentage == 0

    def test_numeric_strings_are_accepted(self):
        assert validate_percentage("15") == 15.0

    def test_discounted_price_is_never_negative(self):
        assert discounted_price(0, 100) == 0


class TestDiscountService:
    def test_unknown_product_is_not_found(self, repository):
        with pytest.raises(NotFoundError):
            DiscountService(repository).apply_discount("missing", 10)

    def test_invalid_percentage_checked_before_lookup(self, repository):
        with pytest.raises(InvalidInputError):
            DiscountService(repository).apply_discount("missing", 500)

    def test_counts_applied_discounts(self, repository, phone, metrics):
        DiscountService(repository, metrics).apply_discount(phone.id, 20)

        value = metrics.registry.get_sample_value("test_product_discount_applied_total")
        assert value == 1

    def test_toggle_active(self, repository, phone):
        service = DiscountService(repository)

        hidden = service.toggle_active(phone.id)
        assert hidden.active is False
        assert service.toggle_active(phone.id).active is True

    def test_toggle_active_function(self, repository, phone):
        assert toggle_active(repository, phone).active is False
