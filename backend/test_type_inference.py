"""
Tests for column type inference and the value helpers it relies on.
"""

from datetime import date, datetime

import numpy as np
import pytest

from core.models import ColumnType
from core.utils import (
    format_currency,
    format_decimal,
    format_integer,
    is_blank,
    parse_date,
    render_text,
    to_number,
)
from skills.classify import classify_value, infer_column_type, looks_like_date_text


class TestInferColumnType:
    """Tests for the threshold-based column classifier."""

    @pytest.mark.parametrize("values", [
        [],
        [None, None],
        ["", None, ""],
        [float("nan"), None],
    ])
    def test_no_valid_values_is_string(self, values):
        assert infer_column_type(values) == ColumnType.STRING

    def test_mostly_numeric_strings_below_threshold(self):
        """4 values, 3 numeric -> share 0.75 is not enough."""
        assert infer_column_type(["10", "20", "abc", "30"]) == ColumnType.STRING

    def test_share_of_exactly_point_eight_is_not_enough(self):
        assert infer_column_type(["1", "2", "3", "4", "x"]) == ColumnType.STRING

    def test_share_above_threshold_is_number(self):
        values = ["1", "2", "3", "4", "5", "6", "7", "8", "9", "x"]
        assert infer_column_type(values) == ColumnType.NUMBER

    def test_blanks_do_not_count(self):
        assert infer_column_type(["1", None, "", "2.5", "3"]) == ColumnType.NUMBER

    def test_native_numbers(self):
        assert infer_column_type([1, 2.5, np.int64(3), np.float64(4.0)]) == ColumnType.NUMBER

    def test_date_strings(self):
        values = ["2023-01-15", "2023-02-20", "2023-03-05", "2023-04-30"]
        assert infer_column_type(values) == ColumnType.DATE

    def test_native_dates(self):
        values = [datetime(2023, 1, 1), date(2023, 5, 2), datetime(2024, 2, 29, 10, 30)]
        assert infer_column_type(values) == ColumnType.DATE

    def test_digit_codes_are_numbers_not_dates(self):
        assert infer_column_type(["202301", "202302", "202303"]) == ColumnType.NUMBER

    def test_booleans(self):
        assert infer_column_type([True, False, True, None]) == ColumnType.BOOLEAN

    def test_boolean_strings_are_not_booleans(self):
        assert infer_column_type(["true", "false", "true"]) == ColumnType.STRING

    def test_free_text(self):
        assert infer_column_type(["São Paulo", "Rio de Janeiro", "Recife"]) == ColumnType.STRING


class TestClassifyValue:
    """Tests for single-cell classification."""

    def test_bool_is_not_counted_as_number(self):
        assert classify_value(True) == ColumnType.BOOLEAN
        assert classify_value(np.bool_(False)) == ColumnType.BOOLEAN

    @pytest.mark.parametrize("text", ["42", "-3.5", "+7", ".5", "1e3", " 12 "])
    def test_numeric_text(self, text):
        assert classify_value(text) == ColumnType.NUMBER

    @pytest.mark.parametrize("text", ["nan", "inf", "1,5", "R$ 10", "10k", "abc"])
    def test_non_numeric_text(self, text):
        assert classify_value(text) != ColumnType.NUMBER

    def test_short_strings_are_never_dates(self):
        assert looks_like_date_text("2023") is False
        assert looks_like_date_text("1/2/3") is False

    def test_purely_digit_strings_are_never_dates(self):
        assert looks_like_date_text("20230115") is False

    def test_iso_date_text(self):
        assert looks_like_date_text("2023-01-15") is True


class TestValueHelpers:
    """Tests for coercion, rendering and pt-BR formatting helpers."""

    def test_is_blank(self):
        assert is_blank(None)
        assert is_blank("")
        assert is_blank(float("nan"))
        assert not is_blank(" ")
        assert not is_blank(0)
        assert not is_blank(False)

    @pytest.mark.parametrize("raw,expected", [
        ("100", 100.0),
        (" 12 ", 12.0),
        (7, 7.0),
        (True, 1.0),
        ("abc", None),
        ("", None),
        (None, None),
        (float("inf"), None),
        ("1e400", None),
    ])
    def test_to_number(self, raw, expected):
        assert to_number(raw) == expected

    def test_parse_date(self):
        assert parse_date("2023-01-15") == datetime(2023, 1, 15)
        assert parse_date(date(2023, 1, 15)) == datetime(2023, 1, 15)
        assert parse_date("not a date at all") is None
        assert parse_date(12345) is None
        assert parse_date(None) is None

    @pytest.mark.parametrize("raw,expected", [
        (None, ""),
        (100.0, "100"),
        (2.5, "2.5"),
        (True, "true"),
        ("abc", "abc"),
        (datetime(2023, 1, 15), "2023-01-15T00:00:00"),
    ])
    def test_render_text(self, raw, expected):
        assert render_text(raw) == expected

    def test_format_integer(self):
        assert format_integer(0) == "0"
        assert format_integer(999) == "999"
        assert format_integer(1234567) == "1.234.567"

    def test_format_decimal(self):
        assert format_decimal(1234.5, max_fraction=2) == "1.234,5"
        assert format_decimal(1234.567, max_fraction=2) == "1.234,57"
        assert format_decimal(-0.004, max_fraction=2) == "0"

    def test_format_currency(self):
        assert format_currency(350) == "R$\u00a0350,00"
        assert format_currency(1234.5) == "R$\u00a01.234,50"
        assert format_currency(-10) == "-R$\u00a010,00"
