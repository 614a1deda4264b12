"""Ingestion entry point for the World Bank, OECD and IMF pipelines.

Usage:
    python -m macro_pipeline.ingest.run wb --url data/raw/WDICSV.csv \
        --country data/raw/WDICountry.csv --series data/raw/WDISeries.csv
    python -m macro_pipeline.ingest.run wb-api --indicators NY.GDP.MKTP.KD.ZG
    python -m macro_pipeline.ingest.run oecd --url "<msti-csv-url>"
    python -m macro_pipeline.ingest.run imf --url data/raw/WEOApr2025all.csv

Exit code is 0 on success and 1 on any fatal error.
"""

import argparse
import os
import sys
from typing import List, Optional

import duckdb

from macro_pipeline import config, registry
from macro_pipeline.database import connect
from macro_pipeline.exceptions import IngestError, PipelineBaseError
from macro_pipeline.ingest import metadata
from macro_pipeline.ingest.fetch import is_remote, iter_csv_rows
from macro_pipeline.ingest.pipeline import IngestionResult, run_ingestion
from macro_pipeline.ingest.sources import get_profile, iter_wb_api_rows
from macro_pipeline.logging_config import create_logger, log_exception
from macro_pipeline.models import OBSERVATION_TABLES, Source
from macro_pipeline.persistence import (
    PersistenceResult,
    log_tri_source_summary,
    persist,
)

logger = create_logger(__name__)


class Ingest:
    """Run one source pipeline end to end.

    Preloads the registry snapshot, streams and validates the source,
    then replaces the source's observations in a single transaction.
    """

    def __init__(
        self,
        source_name: str,
        url: Optional[str] = None,
        con: Optional[duckdb.DuckDBPyConnection] = None,
        country_file: Optional[str] = None,
        series_file: Optional[str] = None,
        availability_file: Optional[str] = None,
        indicators: Optional[List[str]] = None,
        start_year: int = 1990,
        end_year: int = 2024,
    ) -> None:
        if source_name == "wb-api":
            self.profile = get_profile(source_name, start_year=start_year, end_year=end_year)
        else:
            self.profile = get_profile(source_name)
            if not url:
                raise IngestError(f"--url is required for {source_name}")
            if not is_remote(url) and not os.path.isfile(url):
                raise IngestError(f"Invalid URL or missing file: {url}")

        self.source_name = source_name
        self.source = self.profile.source
        self.url = url
        self.country_file = country_file
        self.series_file = series_file
        self.availability_file = availability_file
        self.indicators = indicators
        self.start_year = start_year
        self.end_year = end_year

        logger.info(f"🚀 Initializing {self.profile.name} ingestion")
        logger.info(f"   Environment Target: {config.TARGET}")
        self.con = con if con is not None else connect()

    def prepare_registry(self) -> None:
        """Make sure the source's mappings exist before the snapshot is taken."""
        registry.initialize_data_sources(self.con)
        if self.source != Source.WB:
            registry.populate_source(self.con, self.source)
            return

        if self.country_file:
            metadata.load_countries(self.con, self.country_file)
        if self.series_file:
            metadata.load_series(self.con, self.series_file)
        if self.availability_file:
            metadata.load_availability(self.con, self.availability_file)
        registry.populate_wb_indicator_mappings(self.con)

    def rows(self):
        if self.source_name == "wb-api":
            return iter_wb_api_rows(
                indicators=self.indicators,
                start_year=self.start_year,
                end_year=self.end_year,
            )
        logger.info(f"   Source: {self.url}")
        return iter_csv_rows(self.url)

    def run(self) -> PersistenceResult:
        self.prepare_registry()
        snapshot = registry.preload_mappings(self.con, self.source)

        result: IngestionResult = run_ingestion(self.rows(), self.profile, snapshot)
        if not result.observations:
            logger.warning(
                f"⚠️  {self.profile.name} produced no observations, "
                f"keeping stored {self.source.value} data"
            )
            return PersistenceResult(
                source=self.source.value,
                table=OBSERVATION_TABLES[self.source],
                deleted=0,
                inserted=0,
                chunks=0,
            )

        persisted = persist(self.con, result.observations, self.source)

        if self.source == Source.WB:
            registry.populate_wb_country_mappings(self.con)

        log_tri_source_summary(self.con)
        return persisted


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Ingest World Bank, OECD or IMF indicator data"
    )
    subparsers = parser.add_subparsers(dest="source", required=True)

    wb = subparsers.add_parser("wb", help="World Bank WDI bulk CSV")
    wb_url = wb.add_mutually_exclusive_group(required=True)
    wb_url.add_argument("--url", help="WDI data CSV (URL or path)")
    wb_url.add_argument("--main", dest="url", help="Alias of --url")
    wb.add_argument("--country", help="WDICountry.csv (URL or path)")
    wb.add_argument("--series", help="WDISeries.csv (URL or path)")
    wb.add_argument("--availability", help="WDICountry-series.csv (URL or path)")

    api = subparsers.add_parser("wb-api", help="World Bank REST API")
    api.add_argument(
        "--indicators",
        help="Comma-separated indicator codes (default: every classified code)",
    )
    api.add_argument("--start-year", type=int, default=1990)
    api.add_argument("--end-year", type=int, default=2024)

    for name, help_text in (("oecd", "OECD MSTI CSV"), ("imf", "IMF WEO CSV")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--url", required=True, help="CSV URL or path")

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    options = {}
    if args.source == "wb":
        options = dict(
            country_file=args.country,
            series_file=args.series,
            availability_file=args.availability,
        )
    elif args.source == "wb-api":
        options = dict(
            indicators=args.indicators.split(",") if args.indicators else None,
            start_year=args.start_year,
            end_year=args.end_year,
        )

    try:
        config.validate_config()
        ingest = Ingest(args.source, url=getattr(args, "url", None), **options)
        try:
            result = ingest.run()
        finally:
            ingest.con.close()
    except (PipelineBaseError, duckdb.Error) as e:
        log_exception(logger, e, {"source": args.source})
        logger.error(f"❌ {args.source} ingestion failed")
        return 1

    logger.info(
        f"✅ {args.source} ingestion completed: {result.inserted:,} observations "
        f"stored in {result.table}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
