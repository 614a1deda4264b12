"""Unit tests for field-level validation helpers."""

import math

import pytest

from macro_pipeline.models import Source
from macro_pipeline.sanitize import (
    GDP_GROWTH_BOUNDS,
    INFLATION_BOUNDS,
    DEFAULT_VALUE_BOUNDS,
    bounds_for_indicator,
    indicator_family,
    is_empty_marker,
    sanitize_text,
    validate_country_code,
    validate_indicator_code,
    validate_numeric_value,
    validate_year,
)


@pytest.mark.unit
class TestSanitizeText:

    def test_strips_markup_and_control_characters(self):
        assert sanitize_text("  <b>France</b>\x00 ") == "bFrance/b"

    def test_truncates(self):
        assert sanitize_text("abcdef", max_len=3) == "abc"

    @pytest.mark.parametrize("value", [None, 12, "", "   ", "<>"])
    def test_empty_or_non_string_is_none(self, value):
        assert sanitize_text(value) is None


@pytest.mark.unit
class TestNumericValues:

    @pytest.mark.parametrize("value", [None, "", "..", "n/a", "NaN", " -- "])
    def test_empty_markers(self, value):
        assert is_empty_marker(value)
        assert validate_numeric_value(value) is None

    def test_parses_strings_and_numbers(self):
        assert validate_numeric_value(" 2.5 ") == 2.5
        assert validate_numeric_value(3) == 3.0

    @pytest.mark.parametrize("value", ["abc", True, float("inf"), "1e400", object()])
    def test_rejects_non_finite_and_garbage(self, value):
        assert validate_numeric_value(value) is None

    def test_bounds_are_inclusive(self):
        assert validate_numeric_value("50", GDP_GROWTH_BOUNDS) == 50.0
        assert validate_numeric_value("50.01", GDP_GROWTH_BOUNDS) is None
        assert validate_numeric_value("-20", INFLATION_BOUNDS) == -20.0


@pytest.mark.unit
class TestYears:

    @pytest.mark.parametrize("value,expected", [
        ("2020", 2020),
        (" 1960 ", 1960),
        (2030, 2030),
        (2001.0, 2001),
    ])
    def test_valid_years(self, value, expected):
        assert validate_year(value) == expected

    @pytest.mark.parametrize("value", ["1959", 2031, "2019-Q1", "20.5", 2001.5, None, True, ""])
    def test_invalid_years(self, value):
        assert validate_year(value) is None

    def test_custom_bounds(self):
        assert validate_year("1979", (1980, 2030)) is None
        assert validate_year("1980", (1980, 2030)) == 1980


@pytest.mark.unit
class TestCodes:

    @pytest.mark.parametrize("code,expected", [
        ("usa", None),
        ("Fra", None),
        (" FRA ", "FRA"),
        ("1A2", "1A2"),
        ("US", None),
        ("USAA", None),
        ("U-S", None),
        (None, None),
    ])
    def test_iso3_codes(self, code, expected):
        assert validate_country_code(code, Source.WB) == expected
        assert validate_country_code(code, "OECD") == expected

    @pytest.mark.parametrize("code,expected", [
        ("111", "111"),
        ("100", "100"),
        ("999", "999"),
        ("99", None),
        ("1000", None),
        ("050", None),
        ("11A", None),
    ])
    def test_imf_codes(self, code, expected):
        assert validate_country_code(code, Source.IMF) == expected

    def test_unknown_source(self):
        assert validate_country_code("USA", "ESTAT") is None

    def test_indicator_codes(self):
        assert validate_indicator_code(" NY.GDP.MKTP.KD.ZG ") == "NY.GDP.MKTP.KD.ZG"
        assert validate_indicator_code("NGDP_RPCH;DROP") == "NGDP_RPCHDROP"
        assert validate_indicator_code("A" * 60) == "A" * 50
        assert validate_indicator_code("!!!") is None
        assert validate_indicator_code(None) is None


@pytest.mark.unit
class TestIndicatorFamilies:

    @pytest.mark.parametrize("code,family", [
        ("NY.GDP.MKTP.KD.ZG", "gdp_growth"),
        ("NGDP_RPCH", "gdp_growth"),
        ("FP.CPI.TOTL.ZG", "inflation"),
        ("PCPIPCH", "inflation"),
        ("PCPIEPCH", "inflation"),
        ("INFLATION_RATE", "inflation"),
        ("TM_RPCH", "trade_volume"),
        ("NY.GDP.PCAP.KD", None),
        ("PCPI", None),
        (None, None),
    ])
    def test_family(self, code, family):
        assert indicator_family(code) == family

    def test_bounds(self):
        assert bounds_for_indicator("NGDP_RPCH") == GDP_GROWTH_BOUNDS
        assert bounds_for_indicator("PCPIPCH") == INFLATION_BOUNDS
        assert bounds_for_indicator("SP.POP.TOTL") == DEFAULT_VALUE_BOUNDS
        assert not math.isinf(bounds_for_indicator("TX_RPCH")[1])
