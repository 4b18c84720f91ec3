"""Tests for the stock validator."""

import pytest
from ordering.cart.stock import StockMode, StockValidator
from ordering.catalogue.fake_adapter import InMemoryCatalogue
from shared.errors import CollaboratorError, StockExceededError


@pytest.fixture()
def stocked():
    catalogue = InMemoryCatalogue()
    catalogue.register(
        "P1",
        variants=[
            {"weight": "500g", "price": 100.0, "quantity": 3},
            {"weight": "1kg", "price": 180.0},
        ],
    )
    catalogue.register("P2")
    return catalogue


class TestValidate:
    def test_add_over_stock_reports_remaining(self, stocked):
        check = StockValidator(stocked).validate("P1", "500g", existing_qty=2, requested=2)

        assert check.allowed is False
        assert check.max_additional == 1
        assert check.available == 3

    def test_add_within_stock(self, stocked):
        check = StockValidator(stocked).validate("P1", "500g", existing_qty=2, requested=1)
        assert check.allowed is True

    def test_set_mode_uses_requested_as_absolute(self, stocked):
        validator = StockValidator(stocked)

        assert validator.validate("P1", "500g", 2, 3, StockMode.SET).allowed is True
        assert validator.validate("P1", "500g", 2, 4, StockMode.SET).allowed is False

    def test_max_additional_never_negative(self, stocked):
        check = StockValidator(stocked).validate("P1", "500g", existing_qty=5, requested=1)
        assert check.max_additional == 0

    @pytest.mark.parametrize(
        "product_id, weight_option",
        [
            ("P2", "500g"),  # no stock list
            ("P1", "2kg"),  # no matching weight
            ("P1", "1kg"),  # entry without a quantity
            ("P404", "500g"),  # unknown product
        ],
    )
    def test_untracked_stock_is_unlimited(self, stocked, product_id, weight_option):
        check = StockValidator(stocked).validate(product_id, weight_option, 0, 10_000)
        assert check.allowed is True
        assert check.max_additional is None

    def test_lookup_failure_is_wrapped(self, stocked):
        stocked.fail_with(TimeoutError("catalogue timed out"))

        with pytest.raises(CollaboratorError) as exc_info:
            StockValidator(stocked).validate("P1", "500g", 0, 1)
        assert "catalogue timed out" in exc_info.value.message


class TestEnsure:
    def test_raises_with_max_additional(self, stocked):
        with pytest.raises(StockExceededError) as exc_info:
            StockValidator(stocked).ensure("P1", "500g", existing_qty=2, requested=2)
        assert exc_info.value.max_additional == 1

    def test_returns_check_when_allowed(self, stocked):
        check = StockValidator(stocked).ensure("P1", "500g", existing_qty=0, requested=3)
        assert check.allowed is True
