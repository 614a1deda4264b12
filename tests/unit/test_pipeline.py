"""Unit tests for the shared streaming ingestion pipeline.

Tests cover:
- Field validation and row classification (valid, error, skipped)
- Mapping-miss policies per source
- Wide and long row layouts
- Required column checks
"""

import pytest

from macro_pipeline.exceptions import IngestError
from macro_pipeline.ingest.pipeline import run_ingestion
from macro_pipeline.ingest.sources import IMF_PROFILE, OECD_PROFILE, WB_CSV_PROFILE
from macro_pipeline.models import CountryInfo, Source
from macro_pipeline.registry import MappingSnapshot


def wb_row(code="USA", indicator="EG.ELC.ACCS.ZS", **years):
    row = {
        "Country Name": "United States",
        "Country Code": code,
        "Indicator Name": "Access to electricity (% of population)",
        "Indicator Code": indicator,
    }
    row.update(years or {"2020": "100.0"})
    return row


def oecd_row(area="FRA", measure="PT_GERD", period="2019", value="2.2"):
    return {
        "REF_AREA": area,
        "MEASURE": measure,
        "Measure": "Gross domestic expenditure on R&D",
        "TIME_PERIOD": period,
        "OBS_VALUE": value,
        "UNIT_MEASURE": "PT_B1GQ",
    }


def imf_row(code="111", subject="NGDP_RPCH", **years):
    row = {
        "WEO Country Code": code,
        "WEO Subject Code": subject,
        "Country": "United States",
        "Subject Descriptor": "Gross domestic product, constant prices",
        "Units": "Percent change",
    }
    row.update(years or {"2020": "-2.2"})
    return row


@pytest.fixture
def wb_snapshot():
    return MappingSnapshot.build(
        Source.WB,
        {"EG.ELC.ACCS.ZS": "energy", "NY.GDP.MKTP.KD.ZG": "context"},
        {},
    )


@pytest.fixture
def oecd_snapshot():
    return MappingSnapshot.build(
        Source.OECD,
        {"PT_GERD": "innovation"},
        {"DEU": CountryInfo("Germany", "DEU")},
    )


@pytest.fixture
def imf_snapshot():
    return MappingSnapshot.build(
        Source.IMF,
        {"NGDP_RPCH": "context", "PCPIPCH": "context"},
        {"111": CountryInfo("United States", "USA")},
    )


# ============================================================================
# World Bank
# ============================================================================

@pytest.mark.unit
class TestWorldBankIngestion:

    def test_electricity_access_example(self, wb_snapshot):
        result = run_ingestion([wb_row()], WB_CSV_PROFILE, wb_snapshot)

        assert len(result.observations) == 1
        observation = result.observations[0]
        assert observation.key == ("USA", "EG.ELC.ACCS.ZS", 2020, "WB")
        assert observation.value == 100.0
        assert observation.industry == "energy"
        assert observation.country_name == "United States"
        assert observation.data_quality_score == 5
        assert result.stats.valid_points == 1
        assert result.stats.industry_counts["energy"] == 1

    def test_wide_row_drops_bad_cells_silently(self, wb_snapshot):
        row = wb_row(**{"1959": "1", "2019": "99.5", "2020": "..", "2021": "abc", "2022": "100"})
        result = run_ingestion([row], WB_CSV_PROFILE, wb_snapshot)

        assert [o.year for o in result.observations] == [2019, 2022]
        assert result.stats.validation_errors == 0
        assert result.stats.skipped_rows == 0

    def test_unclassified_indicator_is_skipped(self, wb_snapshot):
        result = run_ingestion([wb_row(indicator="ZZ.UNCLASSIFIED")], WB_CSV_PROFILE, wb_snapshot)

        assert result.observations == []
        assert result.stats.skipped_rows == 1

    def test_invalid_country_code_is_validation_error(self, wb_snapshot):
        result = run_ingestion([wb_row(code="EUROPE")], WB_CSV_PROFILE, wb_snapshot)

        assert result.stats.validation_errors == 1
        assert result.observations == []

    def test_gdp_growth_out_of_family_bounds(self, wb_snapshot):
        row = wb_row(indicator="NY.GDP.MKTP.KD.ZG", **{"2019": "2.3", "2020": "75"})
        result = run_ingestion([row], WB_CSV_PROFILE, wb_snapshot)

        assert [(o.year, o.value) for o in result.observations] == [(2019, 2.3)]

    def test_missing_required_columns(self, wb_snapshot):
        with pytest.raises(IngestError, match="Indicator Code"):
            run_ingestion([{"Country Code": "USA", "2020": "1"}], WB_CSV_PROFILE, wb_snapshot)


# ============================================================================
# OECD
# ============================================================================

@pytest.mark.unit
class TestOecdIngestion:

    def test_unknown_measure_defaults_to_general(self, oecd_snapshot):
        result = run_ingestion(
            [oecd_row(measure="ZZZUNKNOWN", value="5")], OECD_PROFILE, oecd_snapshot
        )

        observation = result.observations[0]
        assert observation.industry == "general"
        assert observation.country_code == "FRA"
        assert observation.country_name == "FRA"
        assert observation.value == 5.0
        assert observation.year == 2019
        assert observation.source == Source.OECD

    def test_mapped_country_uses_registry_name(self, oecd_snapshot):
        result = run_ingestion([oecd_row(area="DEU")], OECD_PROFILE, oecd_snapshot)

        assert result.observations[0].country_name == "Germany"
        assert result.observations[0].industry == "innovation"

    def test_quarterly_period_is_skipped(self, oecd_snapshot):
        result = run_ingestion([oecd_row(period="2019-Q1")], OECD_PROFILE, oecd_snapshot)

        assert result.observations == []
        assert result.stats.skipped_rows == 1

    def test_empty_value_is_skipped_not_an_error(self, oecd_snapshot):
        result = run_ingestion([oecd_row(value="")], OECD_PROFILE, oecd_snapshot)

        assert result.stats.skipped_rows == 1
        assert result.stats.validation_errors == 0

    @pytest.mark.parametrize("row", [
        oecd_row(value="abc"),
        oecd_row(period="1959"),
        oecd_row(period="soon"),
        oecd_row(area="F"),
    ])
    def test_validation_errors(self, oecd_snapshot, row):
        result = run_ingestion([row], OECD_PROFILE, oecd_snapshot)

        assert result.stats.validation_errors == 1
        assert result.observations == []


# ============================================================================
# IMF
# ============================================================================

@pytest.mark.unit
class TestImfIngestion:

    def test_wide_row(self, imf_snapshot):
        row = imf_row(**{"2019": "2.5", "2020": "-2.2", "2021": "n/a"})
        result = run_ingestion([row], IMF_PROFILE, imf_snapshot)

        assert [(o.country_code, o.year, o.value) for o in result.observations] == [
            ("USA", 2019, 2.5),
            ("USA", 2020, -2.2),
        ]
        assert result.observations[0].units == "Percent change"

    def test_long_row_with_thousands_separator(self, imf_snapshot):
        row = imf_row(subject="PCPIPCH")
        row.update({"Year": "2020", "Value": "1,2"})
        result = run_ingestion([row], IMF_PROFILE, imf_snapshot)

        assert result.observations[0].value == 12.0

    @pytest.mark.parametrize("code", ["050", "1000", "ABC"])
    def test_code_outside_range_is_validation_error(self, imf_snapshot, code):
        result = run_ingestion([imf_row(code=code)], IMF_PROFILE, imf_snapshot)

        assert result.stats.validation_errors == 1
        assert result.stats.skipped_rows == 0

    def test_unmapped_country_is_skipped(self, imf_snapshot):
        result = run_ingestion([imf_row(code="999")], IMF_PROFILE, imf_snapshot)

        assert result.stats.skipped_rows == 1
        assert result.stats.validation_errors == 0

    def test_year_before_imf_range_is_dropped(self, imf_snapshot):
        row = imf_row(**{"1979": "3.0", "1980": "1.0"})
        result = run_ingestion([row], IMF_PROFILE, imf_snapshot)

        assert [o.year for o in result.observations] == [1980]


# ============================================================================
# Policy divergence
# ============================================================================

@pytest.mark.unit
class TestMappingPolicies:

    def test_unmapped_indicator_oecd_general_imf_skip(self, oecd_snapshot, imf_snapshot):
        oecd = run_ingestion([oecd_row(measure="NEWCODE")], OECD_PROFILE, oecd_snapshot)
        imf = run_ingestion([imf_row(subject="NEWCODE")], IMF_PROFILE, imf_snapshot)

        assert oecd.observations[0].industry == "general"
        assert imf.observations == []
        assert imf.stats.skipped_rows == 1

    def test_validation_totality(self, oecd_snapshot):
        rows = [
            oecd_row(),
            oecd_row(value=""),
            oecd_row(value="abc"),
            oecd_row(period="2020-Q2"),
            oecd_row(area="DEU", period="2020"),
        ]
        result = run_ingestion(rows, OECD_PROFILE, oecd_snapshot, progress_interval=2)
        stats = result.stats

        assert stats.rows_seen == 5
        assert stats.valid_points + stats.validation_errors + stats.skipped_rows == 5
        assert stats.valid_points == 2
