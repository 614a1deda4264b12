"""Configuration module for project settings and environment variables.

This module manages configuration settings and environment-specific
parameters for the tri-source macro indicator pipeline. Values are read
once at import time; a local ``.env`` file is honoured when present.
"""

import os

from dotenv import load_dotenv

from macro_pipeline.exceptions import ConfigurationError
from macro_pipeline.logging_config import create_logger

load_dotenv()

logger = create_logger(__name__)

# get the local root directory
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))

DATALAKE_DIR = os.path.join(ROOT_DIR, "data")
RAW_DATA_DIR = os.getenv("RAW_DATA_DIR", os.path.join(DATALAKE_DIR, "raw"))
REPORTS_DIR = os.getenv("REPORTS_DIR", os.path.join(ROOT_DIR, "reports"))

# DATABASE_URL wins over DB_PATH; both point at a DuckDB file
DB_PATH = os.getenv("DB_PATH", os.path.join(DATALAKE_DIR, "macro_indicators.db"))
DATABASE_URL = os.getenv("DATABASE_URL", DB_PATH)

# Environment configurations
TARGET = os.getenv("TARGET", "dev").lower()

# Production hosts sit behind a TLS-terminating proxy with a private CA
DB_TLS_VERIFY = os.getenv(
    "DB_TLS_VERIFY", "false" if TARGET == "prod" else "true"
).lower() == "true"

ENABLE_S3_UPLOAD = os.getenv("ENABLE_S3_UPLOAD", "false").lower() == "true"
S3_BUCKET_NAME = os.getenv("S3_BUCKET_NAME", "macro-indicators")
REPORTS_S3_PREFIX = f"{TARGET}/validation-reports"

# Network behaviour for dataset downloads
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", str(15 * 60)))
MAX_REDIRECTS = int(os.getenv("MAX_REDIRECTS", "10"))

# Ingestion and persistence
BATCH_SIZE = int(os.getenv("BATCH_SIZE", "1000"))
PROGRESS_INTERVAL = int(os.getenv("PROGRESS_INTERVAL", "50000"))


def _read_expected_counts():
    counts = {}
    for source in ("WB", "OECD", "IMF"):
        raw = os.getenv(f"EXPECTED_COUNT_{source}")
        if raw:
            counts[source] = int(raw)
    return counts


# Fallback baselines for the record-count check when no previous report exists
EXPECTED_COUNTS = _read_expected_counts()


def database_path(url: str = None) -> str:
    """Turn DATABASE_URL into a path duckdb.connect() accepts.

    Accepts a bare path, ``:memory:`` or a ``duckdb:///path`` URL.
    """
    url = url if url is not None else DATABASE_URL
    if url.startswith("duckdb:///"):
        return url[len("duckdb:///"):] or ":memory:"
    if url.startswith("duckdb://"):
        return url[len("duckdb://"):] or ":memory:"
    if "://" in url:
        raise ConfigurationError(
            f"Unsupported DATABASE_URL scheme: {url.split('://')[0]}"
        )
    return url


def validate_config():
    """
    Validate critical configuration parameters.

    :raises ConfigurationError: If configuration is invalid
    """
    required_dirs = [
        ("ROOT_DIR", ROOT_DIR),
        ("RAW_DATA_DIR", RAW_DATA_DIR),
        ("REPORTS_DIR", REPORTS_DIR),
    ]

    for dir_name, dir_path in required_dirs:
        if not dir_path:
            raise ConfigurationError(
                f"Missing required directory configuration: {dir_name}"
            )
        try:
            os.makedirs(dir_path, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(
                f"Unable to create directory {dir_name} at {dir_path}: {e}"
            )

    if not DATABASE_URL:
        raise ConfigurationError("Database location (DATABASE_URL) is not configured")

    db_file = database_path()
    if db_file != ":memory:":
        db_dir = os.path.dirname(os.path.abspath(db_file))
        try:
            os.makedirs(db_dir, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(
                f"Unable to create database directory at {db_dir}: {e}"
            )

    if ENABLE_S3_UPLOAD and not S3_BUCKET_NAME:
        raise ConfigurationError(
            "S3 upload is enabled but no bucket name is specified"
        )

    if HTTP_TIMEOUT_SECONDS <= 0:
        raise ConfigurationError("HTTP_TIMEOUT_SECONDS must be positive")

    if MAX_REDIRECTS < 0:
        raise ConfigurationError("MAX_REDIRECTS cannot be negative")

    if BATCH_SIZE <= 0:
        raise ConfigurationError("BATCH_SIZE must be positive")

    if not TARGET:
        raise ConfigurationError("TARGET environment is not set")

    logger.info("Configuration validation successful")
