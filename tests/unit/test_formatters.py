"""Unit tests for Indian presentation formatting."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from draftgen.strategies.template_engine.formatters import (
    format_indian_currency,
    format_indian_date,
    format_indian_number,
    format_phone,
    format_value,
    format_variables,
    group_indian,
)
from draftgen.strategies.template_engine.models import VariableDefinition, VariableType


class TestGrouping:
    """Lakh/crore digit grouping."""

    @pytest.mark.parametrize(
        "digits, expected",
        [
            ("0", "0"),
            ("999", "999"),
            ("1000", "1,000"),
            ("100000", "1,00,000"),
            ("1234567", "12,34,567"),
            ("10000000", "1,00,00,000"),
        ],
    )
    def test_group_indian(self, digits, expected):
        assert group_indian(digits) == expected


class TestNumbers:
    """Currency and number formatting."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (100000, "₹1,00,000"),
            (25000, "₹25,000"),
            (0, "₹0"),
            (1234.5, "₹1,235"),
            (1235.5, "₹1,236"),
            (2.5, "₹3"),
            (25000.5, "₹25,001"),
            (-2.5, "-₹3"),
            (-500, "-₹500"),
            (Decimal("9999999.99"), "₹1,00,00,000"),
        ],
    )
    def test_currency(self, value, expected):
        assert format_indian_currency(value) == expected

    @pytest.mark.parametrize(
        "value, expected",
        [
            (42.5, "42.5"),
            (100000, "1,00,000"),
            (1234.567, "1,234.57"),
            (0.125, "0.13"),
            (-0.125, "-0.13"),
            (1.0, "1"),
            (-0.001, "0"),
            (-1234567.8, "-12,34,567.8"),
        ],
    )
    def test_number(self, value, expected):
        assert format_indian_number(value) == expected

    def test_large_float_keeps_every_digit(self):
        assert format_indian_number(1e20) == "10,00,00,00,00,00,00,00,00,000"


class TestDatesAndPhones:
    """Date and phone formatting."""

    def test_date(self):
        assert format_indian_date(datetime(2026, 3, 1, tzinfo=timezone.utc)) == "01/03/2026"

    def test_phone(self):
        assert format_phone("9876543210") == "+91 98765 43210"

    def test_phone_with_wrong_digit_count_passes_through(self):
        assert format_phone("12345") == "12345"


class TestFormatValue:
    """Type dispatch."""

    @pytest.mark.parametrize(
        "variable_type, value, expected",
        [
            (VariableType.DATE, datetime(2026, 3, 1, tzinfo=timezone.utc), "01/03/2026"),
            (VariableType.DATE, "2026-12-25", "25/12/2026"),
            (VariableType.CURRENCY, "100000", "₹1,00,000"),
            (VariableType.NUMBER, 42.5, "42.5"),
            (VariableType.PHONE, "9876543210", "+91 98765 43210"),
            (VariableType.MULTISELECT, ["Parking", "Lift"], "Parking, Lift"),
            (VariableType.STRING, "Ramesh &amp; Sons", "Ramesh &amp; Sons"),
            (VariableType.SELECT, "Monthly", "Monthly"),
        ],
    )
    def test_dispatch(self, variable_type, value, expected):
        assert format_value(variable_type, value) == expected

    @pytest.mark.parametrize(
        "variable_type, value",
        [
            (VariableType.DATE, "not a date"),
            (VariableType.CURRENCY, "n/a"),
            (VariableType.NUMBER, True),
            (VariableType.PHONE, 9876543210),
            (VariableType.MULTISELECT, "Parking"),
        ],
    )
    def test_uninterpretable_values_pass_through(self, variable_type, value):
        assert format_value(variable_type, value) == value

    def test_format_variables_only_includes_declared_present_values(self):
        schema = [
            VariableDefinition(name="rent_amount", type="CURRENCY"),
            VariableDefinition(name="landlord_name", type="STRING"),
            VariableDefinition(name="notes", type="TEXT"),
        ]

        merged = format_variables(
            schema,
            {"rent_amount": 25000, "landlord_name": "Ramesh", "notes": None, "extra": "x"},
        )

        assert merged == {"rent_amount": "₹25,000", "landlord_name": "Ramesh"}
