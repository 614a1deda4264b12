"""Source-independent streaming ingestion.

``run_ingestion`` is a pure function of a mapping snapshot and a row
stream: it validates every field, resolves unified identities through the
snapshot and applies the source's mapping policy. Nothing here touches the
database.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import (
    Callable,
    Dict,
    Iterable,
    List,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from macro_pipeline import config
from macro_pipeline.exceptions import IngestError
from macro_pipeline.industry import GENERAL_INDUSTRY
from macro_pipeline.logging_config import create_logger
from macro_pipeline.models import CountryInfo, Observation, Source
from macro_pipeline.registry import MappingSnapshot
from macro_pipeline.sanitize import (
    bounds_for_indicator,
    is_empty_marker,
    sanitize_text,
    validate_country_code,
    validate_indicator_code,
    validate_numeric_value,
    validate_year,
)

logger = create_logger(__name__)


# ============================================================================
# Mapping-miss policy
# ============================================================================

@dataclass(frozen=True)
class Skip:
    """Drop the row and count it as skipped."""


@dataclass(frozen=True)
class DefaultTo:
    """Keep the row under a catch-all industry."""

    industry: str = GENERAL_INDUSTRY


@dataclass(frozen=True)
class EchoRawCode:
    """Keep the row, using the source-native code as unified code."""


@dataclass(frozen=True)
class MappingPolicy:
    on_unmapped_indicator: Union[Skip, DefaultTo]
    on_unmapped_country: Union[Skip, EchoRawCode]


STRICT_POLICY = MappingPolicy(Skip(), Skip())
PERMISSIVE_POLICY = MappingPolicy(DefaultTo(GENERAL_INDUSTRY), EchoRawCode())


# ============================================================================
# Profiles and results
# ============================================================================

@dataclass
class RawRow:
    """Unvalidated fields pulled out of one source row.

    ``points`` holds (year, value) string pairs: one pair for long-format
    rows, one per year column for wide-format rows.
    """

    country_code: Optional[str]
    indicator_code: Optional[str]
    points: List[Tuple[str, str]]
    country_name: Optional[str] = None
    indicator_name: Optional[str] = None
    units: Optional[str] = None
    wide: bool = False


@dataclass(frozen=True)
class SourceProfile:
    """Everything that differs between the source pipelines.

    ``extract`` returns None for rows the source marks as out of scope
    (e.g. non-annual periods); those count as skipped.
    """

    name: str
    source: Source
    policy: MappingPolicy
    year_bounds: Tuple[int, int]
    data_quality_score: int
    required_columns: Sequence[str]
    extract: Callable[[Dict[str, str]], Optional[RawRow]]


@dataclass
class IngestionStats:
    rows_seen: int = 0
    valid_points: int = 0
    validation_errors: int = 0
    skipped_rows: int = 0
    industry_counts: Counter = field(default_factory=Counter)

    def log_summary(self, source_name: str) -> None:
        logger.info(f"📊 {source_name} ingestion summary")
        logger.info(f"   Rows processed:    {self.rows_seen:,}")
        logger.info(f"   Valid points:      {self.valid_points:,}")
        logger.info(f"   Validation errors: {self.validation_errors:,}")
        logger.info(f"   Skipped rows:      {self.skipped_rows:,}")
        if self.industry_counts:
            logger.info("   Industry distribution:")
            for industry, count in self.industry_counts.most_common():
                logger.info(f"      • {industry}: {count:,}")


@dataclass
class IngestionResult:
    observations: List[Observation]
    stats: IngestionStats


# ============================================================================
# Pipeline
# ============================================================================

def _check_columns(row: Dict[str, str], profile: SourceProfile) -> None:
    missing = [column for column in profile.required_columns if column not in row]
    if missing:
        raise IngestError(
            f"{profile.name} input is missing required columns: {', '.join(missing)}"
        )


def _resolve_industry(code: str, snapshot: MappingSnapshot, policy: MappingPolicy):
    industry = snapshot.get_indicator_industry(code)
    if industry is None and isinstance(policy.on_unmapped_indicator, DefaultTo):
        return policy.on_unmapped_indicator.industry
    return industry


def _resolve_country(raw: RawRow, code: str, snapshot: MappingSnapshot, policy: MappingPolicy):
    info = snapshot.get_country_info(code)
    if info is None and isinstance(policy.on_unmapped_country, EchoRawCode):
        name = sanitize_text(raw.country_name, 100) or code
        return CountryInfo(name=name, unified_code=code)
    return info


def run_ingestion(
    rows: Iterable[Dict[str, str]],
    profile: SourceProfile,
    snapshot: MappingSnapshot,
    progress_interval: Optional[int] = None,
) -> IngestionResult:
    """Validate and map a row stream into observations.

    :param rows: source rows as dictionaries keyed by header
    :param profile: source profile selecting extraction, bounds and policy
    :param snapshot: preloaded mappings for ``profile.source``
    :param progress_interval: rows between progress lines
    :return: collected observations and run statistics
    :raises IngestError: input lacks the profile's required columns
    """
    progress_interval = progress_interval or config.PROGRESS_INTERVAL
    policy = profile.policy
    stats = IngestionStats()
    observations: List[Observation] = []

    logger.info(f"🚀 Starting {profile.name} ingestion")

    for row in rows:
        if stats.rows_seen == 0:
            _check_columns(row, profile)
        stats.rows_seen += 1
        if stats.rows_seen % progress_interval == 0:
            logger.info(
                f"   ⏳ {stats.rows_seen:,} rows processed, "
                f"{stats.valid_points:,} valid points"
            )

        raw = profile.extract(row)
        if raw is None:
            stats.skipped_rows += 1
            continue

        country_code = validate_country_code(raw.country_code, profile.source)
        indicator_code = validate_indicator_code(raw.indicator_code)
        if country_code is None or indicator_code is None:
            stats.validation_errors += 1
            continue

        bounds = bounds_for_indicator(indicator_code)
        if raw.wide:
            points = []
            for year_raw, value_raw in raw.points:
                year = validate_year(year_raw, profile.year_bounds)
                value = validate_numeric_value(value_raw, bounds)
                if year is not None and value is not None:
                    points.append((year, value))
        else:
            year_raw, value_raw = raw.points[0] if raw.points else (None, None)
            year = validate_year(year_raw, profile.year_bounds)
            if year is None:
                stats.validation_errors += 1
                continue
            if is_empty_marker(value_raw):
                stats.skipped_rows += 1
                continue
            value = validate_numeric_value(value_raw, bounds)
            if value is None:
                stats.validation_errors += 1
                continue
            points = [(year, value)]

        industry = _resolve_industry(indicator_code, snapshot, policy)
        if industry is None:
            stats.skipped_rows += 1
            continue

        country = _resolve_country(raw, country_code, snapshot, policy)
        if country is None:
            stats.skipped_rows += 1
            continue

        indicator_name = sanitize_text(raw.indicator_name, 255)
        units = sanitize_text(raw.units, 100)
        for year, value in points:
            observations.append(
                Observation(
                    country_code=country.unified_code,
                    country_name=country.name,
                    indicator_code=indicator_code,
                    indicator_name=indicator_name,
                    year=year,
                    value=value,
                    industry=industry,
                    source=profile.source,
                    data_quality_score=profile.data_quality_score,
                    units=units,
                )
            )
            stats.industry_counts[industry] += 1
        stats.valid_points += len(points)

    stats.log_summary(profile.name)
    return IngestionResult(observations=observations, stats=stats)
