"""DuckDB connection handling and schema for the indicator store."""

from typing import Optional

import duckdb

from macro_pipeline import config
from macro_pipeline.logging_config import create_logger
from macro_pipeline.models import OBSERVATION_TABLES

logger = create_logger(__name__)

MAPPING_SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS data_sources (
        source_code VARCHAR PRIMARY KEY,
        source_name VARCHAR NOT NULL,
        description VARCHAR,
        base_url VARCHAR,
        update_frequency VARCHAR,
        data_quality_score INTEGER,
        last_updated TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS country_mappings (
        unified_code VARCHAR PRIMARY KEY,
        country_name VARCHAR NOT NULL,
        wb_code VARCHAR,
        oecd_code VARCHAR,
        imf_code VARCHAR,
        region VARCHAR,
        income_group VARCHAR,
        priority_source VARCHAR NOT NULL DEFAULT 'WB',
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS indicator_mappings (
        unified_concept VARCHAR PRIMARY KEY,
        concept_description VARCHAR,
        wb_code VARCHAR,
        oecd_code VARCHAR,
        imf_code VARCHAR,
        industry VARCHAR NOT NULL,
        priority_source VARCHAR NOT NULL DEFAULT 'WB',
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
]

METADATA_SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS countries (
        country_code VARCHAR PRIMARY KEY,
        short_name VARCHAR,
        table_name VARCHAR,
        region VARCHAR,
        income_group VARCHAR,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS indicator_metadata (
        indicator_code VARCHAR PRIMARY KEY,
        indicator_name VARCHAR,
        long_definition VARCHAR,
        unit_of_measure VARCHAR,
        source_note VARCHAR,
        topic VARCHAR,
        periodicity VARCHAR,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS country_indicator_availability (
        country_code VARCHAR NOT NULL,
        indicator_code VARCHAR NOT NULL,
        last_updated VARCHAR,
        PRIMARY KEY (country_code, indicator_code)
    )
    """,
]

# Uniqueness on (country_code, indicator_code, year, source) is kept by the
# persistence engine, which replaces a source's rows wholesale.
OBSERVATION_DDL = """
    CREATE TABLE IF NOT EXISTS {table} (
        country_code VARCHAR NOT NULL,
        country_name VARCHAR,
        indicator_code VARCHAR NOT NULL,
        indicator_name VARCHAR,
        year INTEGER NOT NULL,
        value DOUBLE NOT NULL,
        units VARCHAR,
        industry VARCHAR NOT NULL,
        source VARCHAR NOT NULL,
        data_quality_score INTEGER NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
"""


def ensure_schema(con: duckdb.DuckDBPyConnection) -> None:
    """Create every table the pipeline reads or writes, if missing."""
    for statement in MAPPING_SCHEMA + METADATA_SCHEMA:
        con.execute(statement)
    for table in OBSERVATION_TABLES.values():
        con.execute(OBSERVATION_DDL.format(table=table))
    logger.debug("Schema verified")


def apply_tls_setting(con: duckdb.DuckDBPyConnection, verify: bool) -> None:
    """Set certificate verification for DuckDB's HTTP(S) layer."""
    con.install_extension("httpfs")
    con.load_extension("httpfs")
    con.execute(f"SET enable_server_cert_verification = {'true' if verify else 'false'}")
    logger.info(f"   TLS certificate verification: {'on' if verify else 'off'}")


def connect(
    url: Optional[str] = None,
    tls_verify: Optional[bool] = None,
    create_schema: bool = True,
) -> duckdb.DuckDBPyConnection:
    """Open the configured DuckDB database.

    :param url: DATABASE_URL override (path, ``:memory:`` or ``duckdb:///path``)
    :param tls_verify: certificate verification override, defaults to DB_TLS_VERIFY
    :param create_schema: create missing tables after connecting
    :return: open DuckDB connection
    """
    path = config.database_path(url)
    verify = config.DB_TLS_VERIFY if tls_verify is None else tls_verify

    logger.info(f"🔌 Connecting to DuckDB at {path}")
    con = duckdb.connect(path)
    apply_tls_setting(con, verify)

    if create_schema:
        ensure_schema(con)
    return con
