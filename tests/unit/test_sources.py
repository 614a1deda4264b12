"""Unit tests for source profiles and the World Bank API reader."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from macro_pipeline.exceptions import FetchError, IngestError
from macro_pipeline.ingest.sources import (
    IMF_PROFILE,
    OECD_PROFILE,
    WB_CSV_PROFILE,
    _api_record_to_row,
    extract_imf_row,
    extract_oecd_row,
    get_profile,
    iter_wb_api_rows,
)
from macro_pipeline.models import Source


def api_record(iso3="USA", year="2020", value=-2.8):
    return {
        "indicator": {"id": "NY.GDP.MKTP.KD.ZG", "value": "GDP growth (annual %)"},
        "country": {"id": "US", "value": "United States"},
        "countryiso3code": iso3,
        "date": year,
        "value": value,
    }


# ============================================================================
# Profiles
# ============================================================================

@pytest.mark.unit
class TestProfiles:

    def test_profiles_by_name(self):
        assert get_profile("wb") is WB_CSV_PROFILE
        assert get_profile("oecd") is OECD_PROFILE
        assert get_profile("imf") is IMF_PROFILE

    def test_api_profile_year_window(self):
        profile = get_profile("wb-api", start_year=2000, end_year=2010)

        assert profile.source == Source.WB
        assert profile.year_bounds == (2000, 2010)

    def test_unknown_profile(self):
        with pytest.raises(IngestError):
            get_profile("eurostat")

    def test_year_ranges(self):
        assert WB_CSV_PROFILE.year_bounds == (1960, 2030)
        assert OECD_PROFILE.year_bounds == (1960, 2030)
        assert IMF_PROFILE.year_bounds == (1980, 2030)


# ============================================================================
# Row extraction
# ============================================================================

@pytest.mark.unit
class TestExtraction:

    def test_oecd_annual_period(self):
        raw = extract_oecd_row({
            "REF_AREA": "FRA", "MEASURE": "PT_GERD", "TIME_PERIOD": "2019", "OBS_VALUE": "2.2",
        })
        assert raw.points == [("2019", "2.2")]
        assert not raw.wide

    @pytest.mark.parametrize("period", ["2019-Q1", "2019-03", "2019-S1"])
    def test_oecd_sub_annual_periods_are_out_of_scope(self, period):
        assert extract_oecd_row({
            "REF_AREA": "FRA", "MEASURE": "PT_GERD", "TIME_PERIOD": period, "OBS_VALUE": "1",
        }) is None

    def test_imf_wide_layout(self):
        raw = extract_imf_row({
            "WEO Country Code": "111",
            "WEO Subject Code": "NGDP_RPCH",
            "1980": "1,234.5",
            "2020": "-2.2",
            "Estimates Start After": "2023",
        })
        assert raw.wide
        assert raw.points == [("1980", "1234.5"), ("2020", "-2.2")]

    def test_imf_long_layout(self):
        raw = extract_imf_row({
            "WEO Country Code": "111",
            "WEO Subject Code": "NGDP_RPCH",
            "Year": "2020",
            "Value": "-2.2",
        })
        assert not raw.wide
        assert raw.points == [("2020", "-2.2")]


# ============================================================================
# World Bank API
# ============================================================================

@pytest.mark.unit
class TestWorldBankApi:

    def test_record_prefers_iso3_code(self):
        row = _api_record_to_row(api_record(), "NY.GDP.MKTP.KD.ZG")

        assert row["country_code"] == "USA"
        assert row["country_name"] == "United States"
        assert row["indicator_name"] == "GDP growth (annual %)"
        assert row["value"] == "-2.8"

    def test_record_falls_back_to_country_id(self):
        row = _api_record_to_row(api_record(iso3="", value=None), "NY.GDP.MKTP.KD.ZG")

        assert row["country_code"] == "US"
        assert row["value"] == ""

    @patch("macro_pipeline.ingest.sources.time.sleep")
    @patch("macro_pipeline.ingest.sources.fetch_json")
    def test_pages_until_short_page(self, mock_fetch, mock_sleep):
        mock_fetch.side_effect = [
            [{"page": 1, "pages": 2}, [api_record(year="2020"), api_record(year="2019")]],
            [{"page": 2, "pages": 2}, [api_record(year="2018")]],
        ]

        rows = list(iter_wb_api_rows(["NY.GDP.MKTP.KD.ZG"], session=MagicMock(), per_page=2))

        assert [row["year"] for row in rows] == ["2020", "2019", "2018"]
        assert mock_fetch.call_count == 2
        pages = [call.kwargs["params"]["page"] for call in mock_fetch.call_args_list]
        assert pages == [1, 2]
        assert mock_fetch.call_args_list[0].kwargs["params"]["date"] == "1990:2024"
        assert mock_sleep.called

    @patch("macro_pipeline.ingest.sources.time.sleep")
    @patch("macro_pipeline.ingest.sources.fetch_json")
    def test_stops_on_last_page(self, mock_fetch, mock_sleep):
        mock_fetch.return_value = [{"page": 1, "pages": 1}, [api_record(), api_record()]]

        rows = list(iter_wb_api_rows(["NY.GDP.MKTP.KD.ZG"], session=MagicMock(), per_page=2))

        assert len(rows) == 2
        assert mock_fetch.call_count == 1

    @patch("macro_pipeline.ingest.sources.time.sleep")
    @patch("macro_pipeline.ingest.sources.fetch_json")
    def test_error_payload_is_fatal(self, mock_fetch, mock_sleep):
        mock_fetch.return_value = [{"message": [{"id": "120", "value": "Invalid value"}]}]

        with pytest.raises(FetchError, match="BAD.CODE"):
            list(iter_wb_api_rows(["BAD.CODE"], session=MagicMock()))

    @patch("macro_pipeline.ingest.sources.time.sleep")
    @patch("macro_pipeline.ingest.sources.fetch_json")
    def test_transport_failure_is_fatal(self, mock_fetch, mock_sleep):
        mock_fetch.side_effect = requests.ConnectionError("connection reset")

        with pytest.raises(FetchError, match="connection reset"):
            list(iter_wb_api_rows(["NY.GDP.MKTP.KD.ZG"], session=MagicMock()))
