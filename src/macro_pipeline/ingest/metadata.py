"""World Bank WDI metadata files: countries, series and availability.

The bulk WDI download ships three companion files next to the main data
extract. They are optional; when given they enrich the registry with
region/income group and give WB indicators their published names.
"""

from typing import Dict, Iterable, List, Optional, Sequence

import duckdb

from macro_pipeline.industry import all_indicators
from macro_pipeline.ingest.fetch import iter_csv_rows
from macro_pipeline.logging_config import create_logger
from macro_pipeline.models import Source
from macro_pipeline.sanitize import (
    sanitize_text,
    validate_country_code,
    validate_indicator_code,
)

logger = create_logger(__name__)


def _first(row: Dict[str, str], *names: str) -> Optional[str]:
    for name in names:
        if row.get(name):
            return row[name]
    return None


def upsert_rows(
    con: duckdb.DuckDBPyConnection,
    table: str,
    columns: Sequence[str],
    key_columns: Sequence[str],
    rows: Iterable[Sequence],
) -> int:
    """Insert or update ``rows`` by ``key_columns`` in one transaction."""
    key_index = [columns.index(column) for column in key_columns]
    unique = {tuple(row[i] for i in key_index): row for row in rows}
    if not unique:
        return 0

    updates = ", ".join(
        f"{column} = EXCLUDED.{column}" for column in columns if column not in key_columns
    )
    statement = (
        f"INSERT INTO {table} ({', '.join(columns)}) "
        f"VALUES ({', '.join('?' for _ in columns)}) "
        f"ON CONFLICT ({', '.join(key_columns)}) DO UPDATE SET {updates}"
    )

    con.begin()
    try:
        con.executemany(statement, [list(row) for row in unique.values()])
    except duckdb.Error:
        con.rollback()
        raise
    con.commit()
    return len(unique)


def load_countries(con: duckdb.DuckDBPyConnection, location: str) -> int:
    """Load WDICountry.csv into ``countries``."""
    rows: List[tuple] = []
    for row in iter_csv_rows(location):
        code = validate_country_code(_first(row, "Country Code", "CountryCode"), Source.WB)
        if code is None:
            continue
        rows.append((
            code,
            sanitize_text(row.get("Short Name"), 100),
            sanitize_text(row.get("Table Name"), 100),
            sanitize_text(row.get("Region"), 100),
            sanitize_text(row.get("Income Group"), 100),
        ))
    count = upsert_rows(
        con,
        "countries",
        ["country_code", "short_name", "table_name", "region", "income_group"],
        ["country_code"],
        rows,
    )
    logger.info(f"🏳️  Loaded {count:,} country metadata rows")
    return count


def load_series(con: duckdb.DuckDBPyConnection, location: str) -> int:
    """Load WDISeries.csv rows for the classifier's indicators."""
    targets = set(all_indicators())
    rows: List[tuple] = []
    for row in iter_csv_rows(location):
        code = validate_indicator_code(_first(row, "Series Code", "SeriesCode"))
        if code is None or code not in targets:
            continue
        rows.append((
            code,
            sanitize_text(row.get("Indicator Name"), 255),
            sanitize_text(row.get("Long definition"), 2000),
            sanitize_text(row.get("Unit of measure"), 100),
            sanitize_text(row.get("Source"), 1000),
            sanitize_text(row.get("Topic"), 255),
            sanitize_text(row.get("Periodicity"), 50),
        ))
    count = upsert_rows(
        con,
        "indicator_metadata",
        ["indicator_code", "indicator_name", "long_definition", "unit_of_measure",
         "source_note", "topic", "periodicity"],
        ["indicator_code"],
        rows,
    )
    logger.info(f"📖 Loaded {count:,} series metadata rows")
    return count


def load_availability(con: duckdb.DuckDBPyConnection, location: str) -> int:
    """Load WDICountry-series.csv rows for the classifier's indicators."""
    targets = set(all_indicators())
    rows: List[tuple] = []
    for row in iter_csv_rows(location):
        country = validate_country_code(_first(row, "Country Code", "CountryCode"), Source.WB)
        code = validate_indicator_code(_first(row, "Series Code", "SeriesCode"))
        if country is None or code is None or code not in targets:
            continue
        rows.append((
            country,
            code,
            sanitize_text(_first(row, "Last Updated Date", "DESCRIPTION"), 255),
        ))
    count = upsert_rows(
        con,
        "country_indicator_availability",
        ["country_code", "indicator_code", "last_updated"],
        ["country_code", "indicator_code"],
        rows,
    )
    logger.info(f"🗓️  Loaded {count:,} availability rows")
    return count
