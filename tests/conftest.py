"""Pytest configuration and shared fixtures for the macro indicator pipeline tests.

This module provides fixtures for:
- In-memory DuckDB stores with the pipeline schema
- A populated mapping registry
- Mock AWS S3 services using moto
- Source CSV files built with pandas
- Temporary file management
"""

import tempfile
from pathlib import Path
from typing import Callable, Dict, Generator

import boto3
import duckdb
import pandas as pd
import pytest
from moto import mock_aws

from macro_pipeline.database import ensure_schema
from macro_pipeline.models import Observation, Source


# ============================================================================
# Environment and Configuration Fixtures
# ============================================================================

@pytest.fixture(scope="session")
def test_env_vars() -> Dict[str, str]:
    """Provide test environment variables.

    Returns:
        Dictionary of environment variables for testing
    """
    return {
        "TARGET": "dev",
        "ENABLE_S3_UPLOAD": "true",
        "S3_BUCKET_NAME": "test-macro-indicators",
        "AWS_ACCESS_KEY_ID": "testing",
        "AWS_SECRET_ACCESS_KEY": "testing",
        "AWS_SECURITY_TOKEN": "testing",
        "AWS_SESSION_TOKEN": "testing",
        "AWS_DEFAULT_REGION": "us-east-1",
    }


@pytest.fixture(scope="function")
def mock_env(test_env_vars: Dict[str, str], monkeypatch) -> None:
    """Mock environment variables for testing."""
    for key, value in test_env_vars.items():
        monkeypatch.setenv(key, value)


# ============================================================================
# DuckDB Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def duckdb_connection() -> Generator[duckdb.DuckDBPyConnection, None, None]:
    """Provide an in-memory DuckDB connection with the pipeline schema.

    Yields:
        DuckDB connection object
    """
    con = duckdb.connect(":memory:")
    ensure_schema(con)

    yield con

    con.close()


@pytest.fixture(scope="function")
def registry_connection(duckdb_connection: duckdb.DuckDBPyConnection) -> duckdb.DuckDBPyConnection:
    """DuckDB connection with data sources and every source's mappings populated."""
    from macro_pipeline.registry import populate_all

    populate_all(duckdb_connection)
    return duckdb_connection


@pytest.fixture(scope="function")
def patch_connect(monkeypatch, duckdb_connection):
    """Route ``connect()`` in the CLI modules to the in-memory test store.

    The CLIs close their connection when done, so the fixture hands them a
    proxy whose ``close`` is a no-op.
    """

    class _KeepOpen:
        def __init__(self, con):
            self._con = con

        def close(self):
            pass

        def __getattr__(self, name):
            return getattr(self._con, name)

    def fake_connect(*args, **kwargs):
        return _KeepOpen(duckdb_connection)

    monkeypatch.setattr("macro_pipeline.ingest.run.connect", fake_connect)
    monkeypatch.setattr("macro_pipeline.registry.connect", fake_connect)
    monkeypatch.setattr("macro_pipeline.validation.run.connect", fake_connect)
    return duckdb_connection


# ============================================================================
# AWS S3 Mocking Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def aws_credentials(test_env_vars: Dict[str, str], monkeypatch):
    """Mock AWS credentials for moto."""
    for key, value in test_env_vars.items():
        if key.startswith("AWS_"):
            monkeypatch.setenv(key, value)
    monkeypatch.delenv("AWS_ROLE_ARN", raising=False)


@pytest.fixture(scope="function")
def s3_mock(aws_credentials):
    """Provide mocked S3 service using moto.

    Yields:
        Mocked AWS context
    """
    with mock_aws():
        yield


@pytest.fixture(scope="function")
def s3_client(s3_mock, test_env_vars: Dict[str, str]):
    """Provide mocked S3 client."""
    return boto3.client("s3", region_name=test_env_vars["AWS_DEFAULT_REGION"])


@pytest.fixture(scope="function")
def s3_bucket(s3_client, test_env_vars: Dict[str, str]) -> str:
    """Create a test S3 bucket and return its name."""
    bucket_name = test_env_vars["S3_BUCKET_NAME"]
    s3_client.create_bucket(Bucket=bucket_name)
    return bucket_name


# ============================================================================
# Test Data Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def sample_wb_data() -> pd.DataFrame:
    """World Bank WDI extract in its wide layout (one column per year)."""
    return pd.DataFrame({
        "Country Name": ["United States", "United States", "France", "Germany"],
        "Country Code": ["USA", "USA", "FRA", "DEU"],
        "Indicator Name": [
            "Access to electricity (% of population)",
            "GDP growth (annual %)",
            "GDP growth (annual %)",
            "Some unclassified series",
        ],
        "Indicator Code": [
            "EG.ELC.ACCS.ZS",
            "NY.GDP.MKTP.KD.ZG",
            "NY.GDP.MKTP.KD.ZG",
            "ZZ.UNCLASSIFIED",
        ],
        "2019": ["100", "2.3", "1.8", "7"],
        "2020": ["100.0", "-2.8", "-7.5", "8"],
        "2021": ["", "5.9", "", "9"],
    })


@pytest.fixture(scope="function")
def sample_oecd_data() -> pd.DataFrame:
    """OECD MSTI SDMX-CSV extract."""
    return pd.DataFrame({
        "REF_AREA": ["FRA", "FRA", "DEU", "ZZZ", "FRA"],
        "MEASURE": ["PT_GERD", "ZZZUNKNOWN", "PT_GERD", "PT_GERD", "PT_GERD"],
        "Measure": ["GERD", "Unknown", "GERD", "GERD", "GERD"],
        "TIME_PERIOD": ["2019", "2019", "2019", "2020", "2019-Q1"],
        "OBS_VALUE": ["2.2", "5", "3.1", "1.0", "0.5"],
        "UNIT_MEASURE": ["PT_B1GQ", "PT_B1GQ", "PT_B1GQ", "PT_B1GQ", "PT_B1GQ"],
    })


@pytest.fixture(scope="function")
def sample_imf_data() -> pd.DataFrame:
    """IMF WEO extract in its wide layout."""
    return pd.DataFrame({
        "WEO Country Code": ["111", "111", "132", "999", "050"],
        "ISO": ["USA", "USA", "FRA", "XXX", "BAD"],
        "WEO Subject Code": ["NGDP_RPCH", "PCPIPCH", "NGDP_RPCH", "NGDP_RPCH", "NGDP_RPCH"],
        "Country": ["United States", "United States", "France", "Unknown", "Bad code"],
        "Subject Descriptor": [
            "Gross domestic product, constant prices",
            "Inflation, average consumer prices",
            "Gross domestic product, constant prices",
            "Gross domestic product, constant prices",
            "Gross domestic product, constant prices",
        ],
        "Units": ["Percent change"] * 5,
        "2019": ["2.5", "1.8", "1.9", "1.0", "1.0"],
        "2020": ["-2.2", "1.2", "-7.5", "1.0", "1.0"],
        "2021": ["n/a", "4.7", "6.4", "1.0", "1.0"],
    })


@pytest.fixture(scope="function")
def write_csv(temp_dir: Path) -> Callable[[str, pd.DataFrame], Path]:
    """Return a helper writing a DataFrame to a CSV under ``temp_dir``."""

    def _write(filename: str, frame: pd.DataFrame) -> Path:
        path = temp_dir / filename
        frame.to_csv(path, index=False)
        return path

    return _write


@pytest.fixture(scope="function")
def make_observation() -> Callable[..., Observation]:
    """Factory for observations with sensible defaults."""

    def _make(**overrides) -> Observation:
        values = dict(
            country_code="USA",
            country_name="United States",
            indicator_code="NY.GDP.MKTP.KD.ZG",
            indicator_name="GDP growth (annual %)",
            year=2020,
            value=1.0,
            industry="context",
            source=Source.WB,
            data_quality_score=5,
        )
        values.update(overrides)
        return Observation(**values)

    return _make


# ============================================================================
# Temporary File Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(scope="function")
def reports_dir(temp_dir: Path, monkeypatch) -> Path:
    """Point REPORTS_DIR at a temporary directory."""
    path = temp_dir / "reports"
    path.mkdir()
    monkeypatch.setattr("macro_pipeline.config.REPORTS_DIR", str(path))
    return path
