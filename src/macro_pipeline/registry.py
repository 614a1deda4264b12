"""Mapping registry: unified country and indicator identities.

The registry lives in three tables (``country_mappings``,
``indicator_mappings``, ``data_sources``). Population functions are
idempotent upserts keyed by natural keys; ingestion never queries the
tables row by row but reads an immutable ``MappingSnapshot`` built once
per run by ``preload_mappings``.

Usage:
    python -m macro_pipeline.registry all
    python -m macro_pipeline.registry summary
"""

import argparse
import sys
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional

import duckdb

from macro_pipeline import config
from macro_pipeline.database import connect
from macro_pipeline.exceptions import PipelineBaseError, RegistryError
from macro_pipeline.industry import INDUSTRY_INDICATORS, industry_rank
from macro_pipeline.logging_config import create_logger, log_exception
from macro_pipeline.models import (
    OBSERVATION_TABLES,
    SOURCE_CODE_COLUMNS,
    CountryInfo,
    Source,
    as_source,
)
from macro_pipeline.reference_data import (
    DATA_SOURCES,
    IMF_COUNTRY_MAPPINGS,
    IMF_INDICATOR_MAPPINGS,
    OECD_COUNTRY_CODES,
    OECD_INDICATOR_MAPPINGS,
)

logger = create_logger(__name__)


# ============================================================================
# Preloaded snapshot
# ============================================================================

@dataclass(frozen=True)
class MappingSnapshot:
    """Read-only view of the registry for one source.

    Attributes:
        source: Source the snapshot was loaded for
        indicators: source-native indicator code -> industry
        countries: source-native country code -> CountryInfo
    """

    source: Source
    indicators: Mapping[str, str]
    countries: Mapping[str, CountryInfo]

    def get_indicator_industry(self, code: str) -> Optional[str]:
        return self.indicators.get(code)

    def get_country_info(self, code: str) -> Optional[CountryInfo]:
        return self.countries.get(code)

    @classmethod
    def build(cls, source, indicators: Dict[str, str], countries: Dict[str, CountryInfo]):
        return cls(
            source=as_source(source),
            indicators=MappingProxyType(dict(indicators)),
            countries=MappingProxyType(dict(countries)),
        )


def preload_mappings(con: duckdb.DuckDBPyConnection, source) -> MappingSnapshot:
    """Load indicator and country mappings for ``source`` in two queries.

    When a code is mapped under several industries the snapshot keeps the
    industry ranked first by the classifier.
    """
    source = as_source(source)
    column = SOURCE_CODE_COLUMNS[source]

    indicator_rows = con.execute(
        f"SELECT {column}, industry FROM indicator_mappings "
        f"WHERE {column} IS NOT NULL"
    ).fetchall()
    country_rows = con.execute(
        f"SELECT {column}, country_name, unified_code FROM country_mappings "
        f"WHERE {column} IS NOT NULL"
    ).fetchall()

    indicators: Dict[str, str] = {}
    for code, industry in sorted(indicator_rows, key=lambda r: (industry_rank(r[1]), r[1])):
        indicators.setdefault(code, industry)

    countries = {
        code: CountryInfo(name=name, unified_code=unified)
        for code, name, unified in country_rows
    }

    logger.info(
        f"📚 Preloaded {len(indicators)} indicator and {len(countries)} "
        f"country mappings for {source.value}"
    )
    return MappingSnapshot.build(source, indicators, countries)


# ============================================================================
# Upsert helpers
# ============================================================================

def _priority_source(wb_code, oecd_code, imf_code) -> str:
    if wb_code:
        return Source.WB.value
    if oecd_code:
        return Source.OECD.value
    if imf_code:
        return Source.IMF.value
    raise RegistryError("A mapping needs at least one source code")


def upsert_country(
    con: duckdb.DuckDBPyConnection,
    unified_code: str,
    country_name: str,
    source,
    source_code: str,
    region: Optional[str] = None,
    income_group: Optional[str] = None,
    match_codes=(),
) -> bool:
    """Attach ``source_code`` to a country, inserting it when unknown.

    The country is found by ``unified_code``, by ``match_codes`` against the
    World Bank code, or by the source code itself. Existing source codes,
    region and income group are never cleared.

    :return: True when a new row was inserted
    """
    source = as_source(source)
    column = SOURCE_CODE_COLUMNS[source]
    candidates = [unified_code, *match_codes]
    placeholders = ", ".join("?" for _ in candidates)

    row = con.execute(
        f"""
        SELECT unified_code, country_name, wb_code, oecd_code, imf_code
        FROM country_mappings
        WHERE unified_code IN ({placeholders})
           OR wb_code IN ({placeholders})
           OR {column} = ?
        ORDER BY unified_code = ? DESC
        LIMIT 1
        """,
        [*candidates, *candidates, source_code, unified_code],
    ).fetchone()

    if row is None:
        codes = {"wb_code": None, "oecd_code": None, "imf_code": None}
        codes[column] = source_code
        con.execute(
            """
            INSERT INTO country_mappings (
                unified_code, country_name, wb_code, oecd_code, imf_code,
                region, income_group, priority_source
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                unified_code,
                country_name,
                codes["wb_code"],
                codes["oecd_code"],
                codes["imf_code"],
                region,
                income_group,
                _priority_source(**codes),
            ],
        )
        return True

    existing_unified, existing_name, wb_code, oecd_code, imf_code = row
    codes = {"wb_code": wb_code, "oecd_code": oecd_code, "imf_code": imf_code}
    codes[column] = source_code
    priority = _priority_source(**codes)

    # The priority source owns the display name
    name = country_name if priority == source.value else existing_name

    con.execute(
        f"""
        UPDATE country_mappings
        SET {column} = ?,
            country_name = ?,
            region = COALESCE(?, region),
            income_group = COALESCE(?, income_group),
            priority_source = ?,
            updated_at = CURRENT_TIMESTAMP
        WHERE unified_code = ?
        """,
        [source_code, name, region, income_group, priority, existing_unified],
    )
    return False


def unified_concept(industry: str, description: str) -> str:
    return f"{industry.upper()}_{description}"


def _find_indicator(con: duckdb.DuckDBPyConnection, where: str, params) -> Optional[dict]:
    row = con.execute(
        f"""
        SELECT unified_concept, wb_code, oecd_code, imf_code
        FROM indicator_mappings
        WHERE {where}
        """,
        params,
    ).fetchone()
    if row is None:
        return None
    return dict(zip(("unified_concept", "wb_code", "oecd_code", "imf_code"), row))


def upsert_indicator(
    con: duckdb.DuckDBPyConnection,
    industry: str,
    description: str,
    source,
    source_code: str,
) -> bool:
    """Map ``source_code`` into ``industry``, merging with an existing concept.

    Natural key is (industry, source code); failing that, a concept with the
    same synthesized name and no code for this source is extended.

    :return: True when a new row was inserted
    """
    source = as_source(source)
    column = SOURCE_CODE_COLUMNS[source]
    concept = unified_concept(industry, description)

    found = _find_indicator(
        con, f"industry = ? AND {column} = ?", [industry, source_code]
    )
    if found is None:
        found = _find_indicator(con, "unified_concept = ?", [concept])
        if found is not None and found[column]:
            # Name already taken by another code of this source
            concept = f"{concept} ({source_code})"
            found = _find_indicator(con, "unified_concept = ?", [concept])

    if found is None:
        codes = {"wb_code": None, "oecd_code": None, "imf_code": None}
        codes[column] = source_code
        con.execute(
            """
            INSERT INTO indicator_mappings (
                unified_concept, concept_description, wb_code, oecd_code,
                imf_code, industry, priority_source
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            [
                concept,
                description,
                codes["wb_code"],
                codes["oecd_code"],
                codes["imf_code"],
                industry,
                _priority_source(**codes),
            ],
        )
        return True

    codes = {key: found[key] for key in ("wb_code", "oecd_code", "imf_code")}
    codes[column] = source_code
    con.execute(
        f"""
        UPDATE indicator_mappings
        SET {column} = ?,
            concept_description = COALESCE(concept_description, ?),
            priority_source = ?,
            updated_at = CURRENT_TIMESTAMP
        WHERE unified_concept = ?
        """,
        [source_code, description, _priority_source(**codes), found["unified_concept"]],
    )
    return False


# ============================================================================
# Population per source
# ============================================================================

def initialize_data_sources(con: duckdb.DuckDBPyConnection) -> int:
    """Insert or refresh the three ``data_sources`` rows."""
    for info in DATA_SOURCES:
        exists = con.execute(
            "SELECT 1 FROM data_sources WHERE source_code = ?", [info.source_code]
        ).fetchone()
        if exists:
            con.execute(
                """
                UPDATE data_sources
                SET source_name = ?, description = ?, base_url = ?,
                    update_frequency = ?, data_quality_score = ?,
                    last_updated = CURRENT_TIMESTAMP
                WHERE source_code = ?
                """,
                [info.source_name, info.description, info.base_url,
                 info.update_frequency, info.data_quality_score, info.source_code],
            )
        else:
            con.execute(
                """
                INSERT INTO data_sources (
                    source_code, source_name, description, base_url,
                    update_frequency, data_quality_score
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                list(info),
            )
    logger.info(f"✅ {len(DATA_SOURCES)} data sources initialized")
    return len(DATA_SOURCES)


def source_quality_scores(con: duckdb.DuckDBPyConnection) -> Dict[str, int]:
    """source_code -> data_quality_score, seeded defaults when the table is empty."""
    rows = con.execute(
        "SELECT source_code, data_quality_score FROM data_sources"
    ).fetchall()
    scores = {info.source_code: info.data_quality_score for info in DATA_SOURCES}
    scores.update({code: score for code, score in rows if score is not None})
    return scores


def populate_wb_country_mappings(con: duckdb.DuckDBPyConnection) -> int:
    """Derive WB country mappings from loaded WB observations and metadata."""
    rows = con.execute(
        f"""
        WITH observed AS (
            SELECT country_code, MIN(country_name) AS country_name
            FROM {OBSERVATION_TABLES[Source.WB]}
            GROUP BY country_code
        )
        SELECT COALESCE(o.country_code, c.country_code),
               COALESCE(c.table_name, c.short_name, o.country_name),
               c.region,
               c.income_group
        FROM observed o
        FULL OUTER JOIN countries c ON c.country_code = o.country_code
        ORDER BY 1
        """
    ).fetchall()

    inserted = 0
    for code, name, region, income_group in rows:
        inserted += upsert_country(
            con, code, name or code, Source.WB, code,
            region=region, income_group=income_group,
        )
    logger.info(f"🗺️  WB countries: {len(rows)} mapped ({inserted} new)")
    return len(rows)


def _wb_indicator_names(con: duckdb.DuckDBPyConnection) -> Dict[str, str]:
    rows = con.execute(
        f"""
        SELECT indicator_code, MIN(indicator_name)
        FROM (
            SELECT indicator_code, indicator_name FROM indicator_metadata
            UNION ALL
            SELECT indicator_code, indicator_name FROM {OBSERVATION_TABLES[Source.WB]}
        )
        WHERE indicator_name IS NOT NULL
        GROUP BY indicator_code
        """
    ).fetchall()
    return dict(rows)


def populate_wb_indicator_mappings(con: duckdb.DuckDBPyConnection) -> int:
    """Map every classifier code into each industry that lists it."""
    names = _wb_indicator_names(con)
    count = 0
    inserted = 0
    for industry, sources in INDUSTRY_INDICATORS.items():
        for code in sources.get("WB", ()):
            inserted += upsert_indicator(
                con, industry, names.get(code, code), Source.WB, code
            )
            count += 1
    logger.info(f"📊 WB indicators: {count} industry mappings ({inserted} new)")
    return count


def _known_country_name(code: str) -> str:
    for info in IMF_COUNTRY_MAPPINGS.values():
        if info.wb_code == code:
            return info.name
    return code


def update_country_mappings_with_oecd(con: duckdb.DuckDBPyConnection) -> int:
    """Attach OECD reference-area codes to their World Bank countries."""
    inserted = 0
    for code in OECD_COUNTRY_CODES:
        inserted += upsert_country(
            con, code, _known_country_name(code), Source.OECD, code
        )
    logger.info(
        f"🗺️  OECD countries: {len(OECD_COUNTRY_CODES)} mapped ({inserted} new)"
    )
    return len(OECD_COUNTRY_CODES)


def populate_oecd_indicator_mappings(con: duckdb.DuckDBPyConnection) -> int:
    count = 0
    inserted = 0
    for industry, indicators in OECD_INDICATOR_MAPPINGS.items():
        for code, info in indicators.items():
            inserted += upsert_indicator(con, industry, info.name, Source.OECD, code)
            count += 1
    logger.info(f"📊 OECD indicators: {count} industry mappings ({inserted} new)")
    return count


def update_country_mappings_with_imf(con: duckdb.DuckDBPyConnection) -> int:
    """Attach WEO numeric codes, matching countries by World Bank code."""
    inserted = 0
    for weo_code, info in IMF_COUNTRY_MAPPINGS.items():
        inserted += upsert_country(
            con, info.wb_code, info.name, Source.IMF, weo_code,
            match_codes=(info.iso,),
        )
    logger.info(
        f"🗺️  IMF countries: {len(IMF_COUNTRY_MAPPINGS)} mapped ({inserted} new)"
    )
    return len(IMF_COUNTRY_MAPPINGS)


def populate_imf_indicator_mappings(con: duckdb.DuckDBPyConnection) -> int:
    count = 0
    inserted = 0
    for industry, indicators in IMF_INDICATOR_MAPPINGS.items():
        for code, description in indicators.items():
            inserted += upsert_indicator(con, industry, description, Source.IMF, code)
            count += 1
    logger.info(f"📊 IMF indicators: {count} industry mappings ({inserted} new)")
    return count


def populate_source(con: duckdb.DuckDBPyConnection, source) -> None:
    """Run the country and indicator population for one source."""
    source = as_source(source)
    if source == Source.WB:
        populate_wb_country_mappings(con)
        populate_wb_indicator_mappings(con)
    elif source == Source.OECD:
        update_country_mappings_with_oecd(con)
        populate_oecd_indicator_mappings(con)
    else:
        update_country_mappings_with_imf(con)
        populate_imf_indicator_mappings(con)


def populate_all(con: duckdb.DuckDBPyConnection) -> None:
    initialize_data_sources(con)
    for source in Source:
        populate_source(con, source)


def mapping_summary(con: duckdb.DuckDBPyConnection) -> Dict[str, int]:
    """Per-source mapping counts, used for CLI output and tests."""
    countries = con.execute(
        """
        SELECT COUNT(*), COUNT(wb_code), COUNT(oecd_code), COUNT(imf_code),
               COUNT(*) FILTER (
                   WHERE wb_code IS NOT NULL AND oecd_code IS NOT NULL
                     AND imf_code IS NOT NULL
               )
        FROM country_mappings
        """
    ).fetchone()
    indicators = con.execute(
        """
        SELECT COUNT(*), COUNT(wb_code), COUNT(oecd_code), COUNT(imf_code),
               COUNT(DISTINCT industry)
        FROM indicator_mappings
        """
    ).fetchone()
    return {
        "countries": countries[0],
        "countries_wb": countries[1],
        "countries_oecd": countries[2],
        "countries_imf": countries[3],
        "countries_tri_source": countries[4],
        "indicators": indicators[0],
        "indicators_wb": indicators[1],
        "indicators_oecd": indicators[2],
        "indicators_imf": indicators[3],
        "industries": indicators[4],
    }


def log_mapping_summary(summary: Dict[str, int]) -> None:
    logger.info("📋 Mapping registry summary")
    logger.info(
        f"   Countries: {summary['countries']} "
        f"(WB {summary['countries_wb']}, OECD {summary['countries_oecd']}, "
        f"IMF {summary['countries_imf']}, tri-source {summary['countries_tri_source']})"
    )
    logger.info(
        f"   Indicators: {summary['indicators']} "
        f"(WB {summary['indicators_wb']}, OECD {summary['indicators_oecd']}, "
        f"IMF {summary['indicators_imf']}) across {summary['industries']} industries"
    )


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Populate the country and indicator mapping registry"
    )
    parser.add_argument(
        "command",
        choices=["init", "wb", "oecd", "imf", "all", "summary"],
        help="init creates tables and data sources; wb/oecd/imf populate one source",
    )
    parser.add_argument("--database", help="Override DATABASE_URL")
    args = parser.parse_args(argv)

    try:
        config.validate_config()
        con = connect(args.database)
        try:
            if args.command == "init":
                initialize_data_sources(con)
            elif args.command == "all":
                populate_all(con)
            elif args.command != "summary":
                initialize_data_sources(con)
                populate_source(con, args.command)
            log_mapping_summary(mapping_summary(con))
        finally:
            con.close()
    except (PipelineBaseError, duckdb.Error) as e:
        log_exception(logger, e, {"command": args.command})
        return 1

    logger.info("✅ Registry update completed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
