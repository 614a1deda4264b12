"""Data quality assessment of the persisted World Bank, OECD and IMF store.

The engine re-reads what ingestion wrote and produces one reproducible
``ValidationResult``: per-source record counts against baselines, a paged
range re-validation, WB/IMF cross-source consistency, country and industry
coverage, statistical outliers and registry integrity, rolled up into a
weighted quality score in [0, 100].

Every finding is reported, none is fatal. Database errors are.
"""

import json
import math
import os
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

import duckdb

from macro_pipeline.exceptions import ValidationEngineError
from macro_pipeline.industry import INDUSTRIES
from macro_pipeline.logging_config import create_logger
from macro_pipeline.models import OBSERVATION_TABLES, SOURCE_CODE_COLUMNS, Source
from macro_pipeline.sanitize import (
    bounds_for_indicator,
    indicator_family,
    validate_numeric_value,
    validate_year,
)

logger = create_logger(__name__)

STATUS_TIERS = ((85.0, "EXCELLENT"), (70.0, "GOOD"), (50.0, "FAIR"))
SAMPLE_LIMIT = 20


@dataclass
class ValidationThresholds:
    """Tunable limits of the validation run.

    The score weights are a policy choice, not a statistical result.
    """

    count_variance: float = 0.05
    gdp_relative_tolerance: float = 0.15
    gdp_absolute_tolerance: float = 2.0
    inflation_relative_tolerance: float = 0.20
    inflation_absolute_tolerance: float = 3.0
    z_score: float = 3.0
    completeness_weight: float = 0.30
    consistency_weight: float = 0.25
    coverage_weight: float = 0.25
    accuracy_weight: float = 0.20
    page_size: int = 50000
    anomaly_limit: int = 100
    min_year: int = 1980
    max_year: int = 2030
    gdp_range: Tuple[float, float] = (-50.0, 50.0)
    inflation_range: Tuple[float, float] = (-20.0, 100.0)
    gdp_z_range: Tuple[float, float] = (-30.0, 30.0)
    inflation_z_range: Tuple[float, float] = (-10.0, 50.0)


# ============================================================================
# Result types
# ============================================================================

@dataclass
class CountCheck:
    source: str
    actual: int
    expected: Optional[int]
    variance: Optional[float]
    status: str


@dataclass
class Inconsistency:
    type: str
    country: str
    year: int
    wb_value: float
    imf_value: float
    difference: float
    relative_difference: Optional[float]


@dataclass
class Anomaly:
    source: str
    type: str
    country: str
    indicator: str
    year: int
    value: float
    issue: str
    z_score: Optional[float] = None
    range: Optional[Tuple[float, float]] = None


@dataclass
class CoverageReport:
    total_countries: int = 0
    tri_source_countries: int = 0
    dual_source_countries: int = 0
    single_source_countries: int = 0
    no_source_countries: int = 0
    industry_coverage: Dict[str, Dict[str, int]] = field(default_factory=dict)
    missing_industries: List[str] = field(default_factory=list)


@dataclass
class MappingIntegrity:
    orphaned_countries: int = 0
    orphaned_indicators: int = 0
    unmapped_countries: int = 0
    unmapped_indicators: int = 0
    samples: Dict[str, List[str]] = field(default_factory=dict)


@dataclass
class QualityBreakdown:
    completeness: float
    consistency: float
    coverage: float
    accuracy: float


@dataclass
class ValidationResult:
    started_at: str
    finished_at: str
    total_records: int
    valid_records: int
    invalid_records: int
    record_counts: List[CountCheck]
    comparisons: int
    inconsistencies: List[Inconsistency]
    anomalies: List[Anomaly]
    coverage: CoverageReport
    mapping_integrity: MappingIntegrity
    metrics: QualityBreakdown
    quality_score: float
    status: str
    warnings: List[str]
    recommendations: List[str]
    thresholds: ValidationThresholds

    def to_dict(self) -> dict:
        return asdict(self)

    @property
    def actual_counts(self) -> Dict[str, int]:
        return {check.source: check.actual for check in self.record_counts}


# ============================================================================
# Scoring
# ============================================================================

def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def quality_status(score: float) -> str:
    for floor, label in STATUS_TIERS:
        if score >= floor:
            return label
    return "POOR"


def compute_quality_score(metrics: QualityBreakdown, thresholds: ValidationThresholds) -> float:
    """Weighted sum of the four sub-metrics, clamped to [0, 100], 2 decimals."""
    score = (
        metrics.completeness * thresholds.completeness_weight
        + metrics.consistency * thresholds.consistency_weight
        + metrics.coverage * thresholds.coverage_weight
        + metrics.accuracy * thresholds.accuracy_weight
    )
    return round(_clamp(score), 2)


def _percentage(numerator: int, denominator: int, empty: float) -> float:
    if denominator <= 0:
        return empty
    return round(_clamp(100.0 * numerator / denominator), 2)


def quality_breakdown(
    total: int,
    valid: int,
    comparisons: int,
    inconsistencies: int,
    coverage: CoverageReport,
    anomalies: int,
) -> QualityBreakdown:
    """Sub-metrics in percent.

    An empty store scores 0 for completeness and accuracy; with no
    cross-source pairs to compare, consistency is 100.
    """
    return QualityBreakdown(
        completeness=_percentage(valid, total, 0.0),
        consistency=round(_clamp(100.0 - _percentage(inconsistencies, comparisons, 0.0)), 2),
        coverage=_percentage(coverage.tri_source_countries, coverage.total_countries, 0.0),
        accuracy=round(_clamp(100.0 - _percentage(anomalies, total, 100.0)), 2),
    )


def export_report_json(result: ValidationResult, output_path: str) -> str:
    """Write ``result`` as indented JSON and return the path."""
    directory = os.path.dirname(os.path.abspath(output_path))
    os.makedirs(directory, exist_ok=True)
    report = result.to_dict()
    report["summary"] = {
        "overall_status": result.status,
        "quality_score": result.quality_score,
        "total_records": result.total_records,
        "valid_records": result.valid_records,
        "invalid_records": result.invalid_records,
        "inconsistencies": len(result.inconsistencies),
        "anomalies": len(result.anomalies),
        "warnings": len(result.warnings),
    }
    with open(output_path, "w") as f:
        json.dump(report, f, indent=2, default=str)
    logger.info(f"📄 Validation report saved to {output_path}")
    return output_path


# ============================================================================
# Engine
# ============================================================================

class ValidationEngine:
    """Run every check against one DuckDB connection.

    Args:
        con: Connection to the persisted store
        thresholds: Limits and weights; defaults apply when omitted
        expected_counts: Baseline row count per source code; sources without
            a baseline are reported as "no_baseline"
    """

    def __init__(
        self,
        con: duckdb.DuckDBPyConnection,
        thresholds: Optional[ValidationThresholds] = None,
        expected_counts: Optional[Dict[str, int]] = None,
    ):
        self.con = con
        self.thresholds = thresholds or ValidationThresholds()
        self.expected_counts = dict(expected_counts or {})
        self.warnings: List[str] = []

    def _warn(self, message: str) -> None:
        logger.warning(f"⚠️  {message}")
        self.warnings.append(message)

    # ------------------------------------------------------------------
    # Record counts
    # ------------------------------------------------------------------

    def check_record_counts(self) -> List[CountCheck]:
        logger.info("🔍 Validating record counts...")
        checks = []
        for source, table in OBSERVATION_TABLES.items():
            actual = self.con.execute(
                f"SELECT COUNT(*) FROM {table} WHERE source = ?", [source.value]
            ).fetchone()[0]
            expected = self.expected_counts.get(source.value)

            if expected is None:
                check = CountCheck(source.value, actual, None, None, "no_baseline")
                logger.info(f"   {source.value}: {actual:,} rows (no baseline)")
            elif expected == 0:
                status = "ok" if actual == 0 else "variance_exceeded"
                check = CountCheck(source.value, actual, 0, None, status)
            else:
                variance = abs(actual - expected) / expected
                status = "variance_exceeded" if variance > self.thresholds.count_variance else "ok"
                check = CountCheck(source.value, actual, expected, round(variance, 4), status)

            if check.status == "variance_exceeded":
                self._warn(
                    f"{source.value} record count {actual:,} deviates from baseline "
                    f"{expected:,}" + (f" ({check.variance:.1%})" if check.variance is not None else "")
                )
            elif check.status == "ok":
                logger.info(f"   ✅ {source.value}: {actual:,} rows (baseline {expected:,})")
            checks.append(check)
        return checks

    # ------------------------------------------------------------------
    # Type and range re-validation
    # ------------------------------------------------------------------

    def value_bounds(self, indicator_code: str) -> Tuple[float, float]:
        family = indicator_family(indicator_code)
        if family == "gdp_growth":
            return self.thresholds.gdp_range
        if family == "inflation":
            return self.thresholds.inflation_range
        return bounds_for_indicator(indicator_code)

    def revalidate_ranges(self) -> Tuple[int, List[Anomaly]]:
        """Re-check year and value bounds page by page.

        :return: invalid row count and the out-of-range value anomalies
        """
        logger.info("🔍 Validating data types and ranges...")
        page_size = self.thresholds.page_size
        year_bounds = (self.thresholds.min_year, self.thresholds.max_year)
        invalid = 0
        anomalies: List[Anomaly] = []

        for source, table in OBSERVATION_TABLES.items():
            total = self.con.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
            checked = 0
            for offset in range(0, total, page_size):
                page = self.con.execute(
                    f"""
                    SELECT country_code, indicator_code, year, value
                    FROM {table}
                    ORDER BY country_code, indicator_code, year, source
                    LIMIT ? OFFSET ?
                    """,
                    [page_size, offset],
                ).fetchall()

                for country, indicator, year, value in page:
                    bad_year = validate_year(year, year_bounds) is None
                    bounds = self.value_bounds(indicator)
                    bad_value = validate_numeric_value(value, bounds) is None
                    if bad_year or bad_value:
                        invalid += 1
                    if bad_value and value is not None:
                        anomalies.append(Anomaly(
                            source=source.value,
                            type="RANGE_VIOLATION",
                            country=country,
                            indicator=indicator,
                            year=year,
                            value=value,
                            issue="out_of_range",
                            range=bounds,
                        ))
                checked += len(page)
                logger.info(f"   ⏳ {source.value}: {checked:,}/{total:,} rows re-validated")

        logger.info(f"✅ Range validation complete: {invalid:,} invalid records")
        return invalid, anomalies

    # ------------------------------------------------------------------
    # Cross-source consistency
    # ------------------------------------------------------------------

    def cross_source_pairs(self):
        t = self.thresholds
        return (
            ("GDP_GROWTH_VARIANCE", "NY.GDP.MKTP.KD.ZG", "NGDP_RPCH",
             t.gdp_relative_tolerance, t.gdp_absolute_tolerance),
            ("INFLATION_VARIANCE", "FP.CPI.TOTL.ZG", "PCPIPCH",
             t.inflation_relative_tolerance, t.inflation_absolute_tolerance),
        )

    def check_cross_source(self) -> Tuple[int, List[Inconsistency]]:
        """Compare WB and IMF values of the same concept per (country, year).

        A pair is inconsistent when it exceeds both the absolute and the
        relative tolerance; the relative difference is taken against the
        World Bank value.

        :return: number of compared pairs and the flagged inconsistencies
        """
        logger.info("🔍 Validating cross-source consistency...")
        comparisons = 0
        inconsistencies: List[Inconsistency] = []

        for kind, wb_code, imf_code, relative_tol, absolute_tol in self.cross_source_pairs():
            pairs = self.con.execute(
                f"""
                SELECT wb.country_code, wb.year, wb.value, imf.value
                FROM {OBSERVATION_TABLES[Source.WB]} wb
                JOIN {OBSERVATION_TABLES[Source.IMF]} imf
                  ON wb.country_code = imf.country_code AND wb.year = imf.year
                WHERE wb.indicator_code = ? AND imf.indicator_code = ?
                ORDER BY wb.country_code, wb.year
                """,
                [wb_code, imf_code],
            ).fetchall()
            comparisons += len(pairs)

            for country, year, wb_value, imf_value in pairs:
                difference = abs(wb_value - imf_value)
                if difference <= absolute_tol:
                    continue
                relative = difference / abs(wb_value) if wb_value else None
                if relative is not None and relative <= relative_tol:
                    continue
                inconsistencies.append(Inconsistency(
                    type=kind,
                    country=country,
                    year=year,
                    wb_value=wb_value,
                    imf_value=imf_value,
                    difference=round(difference, 4),
                    relative_difference=round(relative, 4) if relative is not None else None,
                ))

        logger.info(
            f"✅ Cross-source validation complete: {len(inconsistencies):,} "
            f"inconsistencies in {comparisons:,} comparisons"
        )
        return comparisons, inconsistencies

    # ------------------------------------------------------------------
    # Coverage
    # ------------------------------------------------------------------

    def analyze_coverage(self) -> CoverageReport:
        logger.info("🔍 Validating data coverage...")
        report = CoverageReport()
        rows = self.con.execute(
            """
            SELECT (wb_code IS NOT NULL)::INTEGER
                 + (oecd_code IS NOT NULL)::INTEGER
                 + (imf_code IS NOT NULL)::INTEGER AS source_count,
                   COUNT(*)
            FROM country_mappings
            GROUP BY source_count
            """
        ).fetchall()
        buckets = dict(rows)
        report.total_countries = sum(buckets.values())
        report.tri_source_countries = buckets.get(3, 0)
        report.dual_source_countries = buckets.get(2, 0)
        report.single_source_countries = buckets.get(1, 0)
        report.no_source_countries = buckets.get(0, 0)

        for industry, total, wb, oecd, imf in self.con.execute(
            """
            SELECT industry,
                   COUNT(DISTINCT unified_concept),
                   COUNT(DISTINCT wb_code),
                   COUNT(DISTINCT oecd_code),
                   COUNT(DISTINCT imf_code)
            FROM indicator_mappings
            GROUP BY industry
            ORDER BY industry
            """
        ).fetchall():
            report.industry_coverage[industry] = {
                "total_indicators": total,
                "wb_indicators": wb,
                "oecd_indicators": oecd,
                "imf_indicators": imf,
            }

        report.missing_industries = [
            industry for industry in INDUSTRIES if industry not in report.industry_coverage
        ]
        if report.missing_industries:
            self._warn(f"Missing industries: {', '.join(report.missing_industries)}")

        logger.info(
            f"✅ Coverage validation complete: {report.tri_source_countries} tri-source, "
            f"{report.dual_source_countries} dual-source, "
            f"{report.single_source_countries} single-source countries"
        )
        return report

    # ------------------------------------------------------------------
    # Statistical anomalies
    # ------------------------------------------------------------------

    def _family_codes(self, family: str) -> Dict[Source, List[str]]:
        codes = {}
        for source, table in OBSERVATION_TABLES.items():
            found = [
                row[0]
                for row in self.con.execute(
                    f"SELECT DISTINCT indicator_code FROM {table} ORDER BY indicator_code"
                ).fetchall()
                if indicator_family(row[0]) == family
            ]
            if found:
                codes[source] = found
        return codes

    def _family_values(self, codes: Dict[Source, List[str]]) -> str:
        parts = []
        for source, indicator_codes in codes.items():
            placeholders = ", ".join("?" for _ in indicator_codes)
            parts.append(
                f"SELECT source, country_code, indicator_code, year, value "
                f"FROM {OBSERVATION_TABLES[source]} WHERE indicator_code IN ({placeholders})"
            )
        return " UNION ALL ".join(parts)

    def detect_anomalies(self) -> List[Anomaly]:
        """Flag values whose z-score within their family exceeds the threshold.

        Mean and standard deviation come from values inside the family's
        plausible sub-range; every value of the family is then scored.
        """
        logger.info("🔍 Detecting anomalies and outliers...")
        t = self.thresholds
        anomalies: List[Anomaly] = []

        for family, kind, (low, high) in (
            ("gdp_growth", "GDP_OUTLIER", t.gdp_z_range),
            ("inflation", "INFLATION_OUTLIER", t.inflation_z_range),
        ):
            codes = self._family_codes(family)
            if not codes:
                continue
            values_sql = self._family_values(codes)
            params = [code for indicator_codes in codes.values() for code in indicator_codes]

            mean, std = self.con.execute(
                f"SELECT AVG(value), STDDEV_SAMP(value) FROM ({values_sql}) "
                f"WHERE value BETWEEN ? AND ?",
                params + [low, high],
            ).fetchone()
            if mean is None or not std or math.isnan(std):
                logger.debug(f"   {family}: not enough spread for z-scores")
                continue

            rows = self.con.execute(
                f"""
                SELECT source, country_code, indicator_code, year, value,
                       ABS(value - ?) / ? AS z_score
                FROM ({values_sql})
                WHERE ABS(value - ?) / ? > ?
                ORDER BY z_score DESC, source, country_code, indicator_code, year
                LIMIT ?
                """,
                [mean, std] + params + [mean, std, t.z_score, t.anomaly_limit],
            ).fetchall()

            for source, country, indicator, year, value, z_score in rows:
                anomalies.append(Anomaly(
                    source=source,
                    type=kind,
                    country=country,
                    indicator=indicator,
                    year=year,
                    value=value,
                    issue="statistical_outlier",
                    z_score=round(z_score, 4),
                ))

        logger.info(f"✅ Anomaly detection complete: {len(anomalies):,} outliers found")
        return anomalies

    # ------------------------------------------------------------------
    # Mapping integrity
    # ------------------------------------------------------------------

    def check_mapping_integrity(self) -> MappingIntegrity:
        logger.info("🔍 Validating mappings integrity...")
        integrity = MappingIntegrity()

        observed_countries = " UNION ".join(
            f"SELECT DISTINCT country_code FROM {table}" for table in OBSERVATION_TABLES.values()
        )
        orphans = [
            row[0]
            for row in self.con.execute(
                f"""
                SELECT unified_code FROM country_mappings
                WHERE unified_code NOT IN ({observed_countries})
                ORDER BY unified_code
                """
            ).fetchall()
        ]
        integrity.orphaned_countries = len(orphans)

        unmapped = [
            row[0]
            for row in self.con.execute(
                f"""
                SELECT country_code FROM ({observed_countries})
                WHERE country_code NOT IN (SELECT unified_code FROM country_mappings)
                ORDER BY country_code
                """
            ).fetchall()
        ]
        integrity.unmapped_countries = len(unmapped)

        orphaned_indicators: List[str] = []
        unmapped_indicators: List[str] = []
        for source, table in OBSERVATION_TABLES.items():
            column = SOURCE_CODE_COLUMNS[source]
            orphaned_indicators.extend(
                f"{source.value}:{row[0]}"
                for row in self.con.execute(
                    f"""
                    SELECT DISTINCT {column} FROM indicator_mappings
                    WHERE {column} IS NOT NULL
                      AND {column} NOT IN (SELECT DISTINCT indicator_code FROM {table})
                    ORDER BY {column}
                    """
                ).fetchall()
            )
            unmapped_indicators.extend(
                f"{source.value}:{row[0]}"
                for row in self.con.execute(
                    f"""
                    SELECT DISTINCT indicator_code FROM {table}
                    WHERE indicator_code NOT IN (
                        SELECT {column} FROM indicator_mappings WHERE {column} IS NOT NULL
                    )
                    ORDER BY indicator_code
                    """
                ).fetchall()
            )
        integrity.orphaned_indicators = len(orphaned_indicators)
        integrity.unmapped_indicators = len(unmapped_indicators)

        integrity.samples = {
            "orphaned_countries": orphans[:SAMPLE_LIMIT],
            "unmapped_countries": unmapped[:SAMPLE_LIMIT],
            "orphaned_indicators": orphaned_indicators[:SAMPLE_LIMIT],
            "unmapped_indicators": unmapped_indicators[:SAMPLE_LIMIT],
        }

        for label, count in (
            ("orphaned country mappings", integrity.orphaned_countries),
            ("unmapped countries in observations", integrity.unmapped_countries),
            ("orphaned indicator mappings", integrity.orphaned_indicators),
            ("unmapped indicators in observations", integrity.unmapped_indicators),
        ):
            if count:
                self._warn(f"Found {count:,} {label}")

        logger.info("✅ Mapping validation complete")
        return integrity

    # ------------------------------------------------------------------
    # Recommendations and run
    # ------------------------------------------------------------------

    def recommendations(
        self,
        metrics: QualityBreakdown,
        counts: List[CountCheck],
        inconsistencies: List[Inconsistency],
        anomalies: List[Anomaly],
        coverage: CoverageReport,
        integrity: MappingIntegrity,
    ) -> List[str]:
        advice = []
        if metrics.completeness < 80:
            advice.append("Address data completeness issues: re-run ingestion for sources with invalid rows")
        drifted = [check.source for check in counts if check.status == "variance_exceeded"]
        if drifted:
            advice.append(f"Investigate record count drift for {', '.join(drifted)}")
        if inconsistencies:
            advice.append(f"Review {len(inconsistencies):,} cross-source inconsistencies between WB and IMF")
        if anomalies:
            advice.append(f"Investigate {len(anomalies):,} anomalous values")
        if coverage.missing_industries:
            advice.append(f"Add indicator mappings for: {', '.join(coverage.missing_industries)}")
        if metrics.coverage < 80:
            advice.append("Extend country mappings so more countries are covered by all three sources")
        if integrity.unmapped_countries or integrity.unmapped_indicators:
            advice.append("Refresh the mapping registry to cover unmapped observation codes")
        if integrity.orphaned_countries or integrity.orphaned_indicators:
            advice.append("Prune or backfill orphaned registry entries")
        return advice

    def run(self) -> ValidationResult:
        """Run every check and score the store.

        :raises ValidationEngineError: the store could not be queried
        """
        logger.info("🚀 Starting comprehensive data validation")
        started = datetime.now()
        self.warnings = []
        try:
            counts = self.check_record_counts()
            invalid, range_anomalies = self.revalidate_ranges()
            comparisons, inconsistencies = self.check_cross_source()
            coverage = self.analyze_coverage()
            outliers = self.detect_anomalies()
            integrity = self.check_mapping_integrity()
        except duckdb.Error as e:
            raise ValidationEngineError(f"Validation query failed: {e}") from e

        total = sum(check.actual for check in counts)
        anomalies = range_anomalies + outliers
        metrics = quality_breakdown(
            total=total,
            valid=total - invalid,
            comparisons=comparisons,
            inconsistencies=len(inconsistencies),
            coverage=coverage,
            anomalies=len(anomalies),
        )
        score = compute_quality_score(metrics, self.thresholds)
        status = quality_status(score)

        result = ValidationResult(
            started_at=started.isoformat(),
            finished_at=datetime.now().isoformat(),
            total_records=total,
            valid_records=total - invalid,
            invalid_records=invalid,
            record_counts=counts,
            comparisons=comparisons,
            inconsistencies=inconsistencies,
            anomalies=anomalies,
            coverage=coverage,
            mapping_integrity=integrity,
            metrics=metrics,
            quality_score=score,
            status=status,
            warnings=list(self.warnings),
            recommendations=self.recommendations(
                metrics, counts, inconsistencies, anomalies, coverage, integrity
            ),
            thresholds=self.thresholds,
        )
        logger.info(f"🏆 Data quality score: {score:.2f}/100 ({status})")
        return result
