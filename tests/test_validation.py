"""Tests for dealership.validation field rules."""

from __future__ import annotations

from datetime import date

import pytest

from conftest import bike_fields, sale_fields
from dealership.errors import ValidationError
from dealership.validation import (
    clean_bike,
    clean_sale_input,
    is_valid_aadhar,
    require_month,
    require_price,
    require_year,
)


class TestAadhar:
    def test_accepts_twelve_digits(self) -> None:
        assert is_valid_aadhar("123456789012")

    @pytest.mark.parametrize("value", ["12345", "12345678901a", "", "1234567890123", " 23456789012", None, 123456789012])
    def test_rejects_malformed(self, value) -> None:
        assert not is_valid_aadhar(value)

    def test_rejects_non_ascii_digits(self) -> None:
        assert not is_valid_aadhar("١٢٣٤٥٦٧٨٩٠١٢")


class TestYear:
    def test_bounds_inclusive(self) -> None:
        assert require_year(1900) == 1900
        assert require_year(date.today().year + 1) == date.today().year + 1

    @pytest.mark.parametrize("value", [1899, date.today().year + 2, "2020", 2020.0, True])
    def test_out_of_range_or_wrong_type(self, value) -> None:
        with pytest.raises(ValidationError):
            require_year(value)


class TestMonth:
    def test_zero_based(self) -> None:
        assert require_month(0) == 0
        assert require_month(11) == 11

    @pytest.mark.parametrize("value", [-1, 12])
    def test_out_of_range(self, value) -> None:
        with pytest.raises(ValidationError, match="between 0 and 11"):
            require_month(value)


class TestPrice:
    def test_zero_allowed(self) -> None:
        assert require_price(0, "salePrice") == 0.0

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValidationError, match="salePrice must be >= 0"):
            require_price(-1, "salePrice")

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_rejected(self, value) -> None:
        with pytest.raises(ValidationError, match="purchasePrice must be a finite number"):
            require_price(value, "purchasePrice")


class TestCleanBike:
    def test_valid_draft_is_trimmed(self) -> None:
        cleaned = clean_bike(bike_fields(bike_name="  RE Classic 350 "))
        assert cleaned["bike_name"] == "RE Classic 350"
        assert cleaned["purchase_price"] == 120000.0

    @pytest.mark.parametrize("field", ["bike_name", "registration_number", "owner_phone", "owner_address"])
    def test_blank_text_rejected(self, field: str) -> None:
        with pytest.raises(ValidationError, match="is required"):
            clean_bike(bike_fields(**{field: "   "}))

    def test_bad_aadhar_names_the_field(self) -> None:
        with pytest.raises(ValidationError) as info:
            clean_bike(bike_fields(owner_aadhar="12345"))
        assert info.value.field == "ownerAadhar"
        assert info.value.message == "ownerAadhar must be exactly 12 digits"


class TestCleanSaleInput:
    def test_valid(self) -> None:
        cleaned = clean_sale_input(sale_fields())
        assert cleaned["sale_price"] == 145000.0

    def test_bad_customer_aadhar(self) -> None:
        with pytest.raises(ValidationError, match="customerAadhar"):
            clean_sale_input(sale_fields(customer_aadhar="12345678901a"))

    def test_missing_customer_name(self) -> None:
        with pytest.raises(ValidationError, match="customerName is required"):
            clean_sale_input(sale_fields(customer_name=None))
