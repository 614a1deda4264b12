"""Source profiles for World Bank (CSV and API), OECD MSTI and IMF WEO.

Each profile tells the shared pipeline how to read one source's rows,
which year range is plausible and how mapping misses are treated:

* OECD keeps unmapped indicators under "general" and echoes unmapped
  reference areas, so no OECD observation is lost to a registry gap.
* IMF drops rows whose WEO subject or country code is not registered.
* World Bank drops indicators outside the classifier but accepts any
  country, since World Bank codes are the unified codes.
"""

import re
import time
from typing import Dict, Iterable, Iterator, List, Optional

import requests

from macro_pipeline.exceptions import FetchError, IngestError
from macro_pipeline.industry import all_indicators
from macro_pipeline.ingest.fetch import fetch_json
from macro_pipeline.ingest.pipeline import (
    PERMISSIVE_POLICY,
    STRICT_POLICY,
    EchoRawCode,
    MappingPolicy,
    RawRow,
    Skip,
    SourceProfile,
)
from macro_pipeline.logging_config import create_logger
from macro_pipeline.models import Source
from macro_pipeline.reference_data import DATA_SOURCES

logger = create_logger(__name__)

_YEAR_COLUMN = re.compile(r"^\d{4}$")
_ANNUAL_PERIOD = re.compile(r"^\s*\d{4}\s*$")

WORLD_BANK_POLICY = MappingPolicy(Skip(), EchoRawCode())

QUALITY_SCORES = {info.source_code: info.data_quality_score for info in DATA_SOURCES}

WB_API_URL = "https://api.worldbank.org/v2/country/all/indicator/{indicator}"
WB_API_PER_PAGE = 1000
WB_API_DELAY_SECONDS = 0.1


def _year_columns(row: Dict[str, str]) -> List[str]:
    return [key for key in row if key and _YEAR_COLUMN.match(key.strip())]


# ============================================================================
# World Bank WDI bulk CSV (wide: one column per year)
# ============================================================================

def extract_wb_row(row: Dict[str, str]) -> RawRow:
    return RawRow(
        country_code=row.get("Country Code"),
        country_name=row.get("Country Name"),
        indicator_code=row.get("Indicator Code"),
        indicator_name=row.get("Indicator Name"),
        points=[(year.strip(), row[year]) for year in _year_columns(row)],
        wide=True,
    )


WB_CSV_PROFILE = SourceProfile(
    name="World Bank CSV",
    source=Source.WB,
    policy=WORLD_BANK_POLICY,
    year_bounds=(1960, 2030),
    data_quality_score=QUALITY_SCORES["WB"],
    required_columns=("Country Code", "Indicator Code"),
    extract=extract_wb_row,
)


# ============================================================================
# World Bank REST API (long: one record per country-year)
# ============================================================================

def extract_wb_api_row(row: Dict[str, str]) -> RawRow:
    return RawRow(
        country_code=row.get("country_code"),
        country_name=row.get("country_name"),
        indicator_code=row.get("indicator_code"),
        indicator_name=row.get("indicator_name"),
        points=[(row.get("year"), row.get("value"))],
    )


def wb_api_profile(start_year: int = 1990, end_year: int = 2024) -> SourceProfile:
    return SourceProfile(
        name="World Bank API",
        source=Source.WB,
        policy=WORLD_BANK_POLICY,
        year_bounds=(start_year, end_year),
        data_quality_score=QUALITY_SCORES["WB"],
        required_columns=("country_code", "indicator_code", "year", "value"),
        extract=extract_wb_api_row,
    )


def _api_record_to_row(record: dict, indicator: str) -> Dict[str, str]:
    country = record.get("country") or {}
    meta = record.get("indicator") or {}
    value = record.get("value")
    return {
        "country_code": record.get("countryiso3code") or country.get("id"),
        "country_name": country.get("value"),
        "indicator_code": meta.get("id") or indicator,
        "indicator_name": meta.get("value"),
        "year": record.get("date"),
        "value": "" if value is None else str(value),
    }


def iter_wb_api_rows(
    indicators: Optional[Iterable[str]] = None,
    start_year: int = 1990,
    end_year: int = 2024,
    session: Optional[requests.Session] = None,
    per_page: int = WB_API_PER_PAGE,
    delay: float = WB_API_DELAY_SECONDS,
) -> Iterator[Dict[str, str]]:
    """Page through the World Bank API for each indicator.

    Paging stops when a page is short or the last page is reached.

    :raises FetchError: transport failure or a payload that is not
        ``[metadata, records]``
    """
    session = session or requests.Session()
    indicators = list(indicators or all_indicators())

    for position, indicator in enumerate(indicators, start=1):
        logger.info(f"   🌐 [{position}/{len(indicators)}] Fetching {indicator}")
        page = 1
        fetched = 0
        while True:
            try:
                payload = fetch_json(
                    WB_API_URL.format(indicator=indicator),
                    params={
                        "format": "json",
                        "per_page": per_page,
                        "page": page,
                        "date": f"{start_year}:{end_year}",
                    },
                    session=session,
                )
            except (requests.RequestException, ValueError) as e:
                raise FetchError(f"World Bank API request for {indicator} failed: {e}") from e

            if not isinstance(payload, list) or len(payload) < 2:
                # The API reports unknown indicators as a one-element message list
                raise FetchError(f"Unexpected World Bank API payload for {indicator}")

            metadata, records = payload[0] or {}, payload[1] or []
            for record in records:
                yield _api_record_to_row(record, indicator)
            fetched += len(records)

            pages = int(metadata.get("pages") or page)
            if len(records) < per_page or page >= pages:
                break
            page += 1
            time.sleep(delay)

        logger.info(f"      {fetched:,} records")
        time.sleep(delay)


# ============================================================================
# OECD MSTI (long: SDMX-CSV)
# ============================================================================

def extract_oecd_row(row: Dict[str, str]) -> Optional[RawRow]:
    period = row.get("TIME_PERIOD")
    if period and not _ANNUAL_PERIOD.match(period) and period.strip()[:4].isdigit():
        # Quarterly or monthly periods would collide on the annual key
        return None
    return RawRow(
        country_code=row.get("REF_AREA"),
        indicator_code=row.get("MEASURE"),
        indicator_name=row.get("Measure"),
        units=row.get("UNIT_MEASURE") or row.get("Unit of measure"),
        points=[(period, row.get("OBS_VALUE"))],
    )


OECD_PROFILE = SourceProfile(
    name="OECD MSTI",
    source=Source.OECD,
    policy=PERMISSIVE_POLICY,
    year_bounds=(1960, 2030),
    data_quality_score=QUALITY_SCORES["OECD"],
    required_columns=("REF_AREA", "MEASURE", "TIME_PERIOD", "OBS_VALUE"),
    extract=extract_oecd_row,
)


# ============================================================================
# IMF WEO (wide year columns, or long Year/Value extracts)
# ============================================================================

def _imf_value(raw: Optional[str]) -> Optional[str]:
    # WEO formats large numbers with thousands separators
    return raw.replace(",", "") if isinstance(raw, str) else raw


def extract_imf_row(row: Dict[str, str]) -> RawRow:
    common = dict(
        country_code=row.get("WEO Country Code"),
        country_name=row.get("Country"),
        indicator_code=row.get("WEO Subject Code"),
        indicator_name=row.get("Subject Descriptor"),
        units=row.get("Units"),
    )
    year_key = next((k for k in ("Year", "TIME_PERIOD") if k in row), None)
    if year_key is not None:
        value = row.get("Value", row.get("OBS_VALUE"))
        return RawRow(points=[(row.get(year_key), _imf_value(value))], **common)
    return RawRow(
        points=[(year.strip(), _imf_value(row[year])) for year in _year_columns(row)],
        wide=True,
        **common,
    )


IMF_PROFILE = SourceProfile(
    name="IMF WEO",
    source=Source.IMF,
    policy=STRICT_POLICY,
    year_bounds=(1980, 2030),
    data_quality_score=QUALITY_SCORES["IMF"],
    required_columns=("WEO Country Code", "WEO Subject Code"),
    extract=extract_imf_row,
)


PROFILES = {
    "wb": WB_CSV_PROFILE,
    "oecd": OECD_PROFILE,
    "imf": IMF_PROFILE,
}


def get_profile(name: str, **kwargs) -> SourceProfile:
    """Profile by CLI name; ``wb-api`` accepts ``start_year``/``end_year``."""
    if name == "wb-api":
        return wb_api_profile(**kwargs)
    try:
        return PROFILES[name]
    except KeyError:
        raise IngestError(f"Unknown source: {name}")
