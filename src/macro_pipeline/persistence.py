"""Transactional replace-by-source persistence for observation tables.

A persistence run deletes every row of one source and inserts the new
observations in fixed-size, parameterized multi-row INSERT statements,
all inside one DuckDB transaction. Either the whole replace commits or
the table is left exactly as it was before the run.

Runs for the same source must not overlap; callers serialize them.

Example:
    with SourceReplaceTransaction(con, Source.OECD) as txn:
        txn.replace(observations)
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

import duckdb

from macro_pipeline import config
from macro_pipeline.exceptions import PersistenceError, RollbackError, TransactionError
from macro_pipeline.logging_config import create_logger
from macro_pipeline.models import OBSERVATION_TABLES, Observation, Source, as_source

logger = create_logger(__name__)

OBSERVATION_COLUMNS = (
    "country_code",
    "country_name",
    "indicator_code",
    "indicator_name",
    "year",
    "value",
    "units",
    "industry",
    "source",
    "data_quality_score",
    "created_at",
    "updated_at",
)


class TransactionState(str, Enum):
    """States for transaction lifecycle."""
    CREATED = "created"
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    FAILED = "failed"


@dataclass
class PersistenceResult:
    source: str
    table: str
    deleted: int
    inserted: int
    chunks: int
    duplicates_dropped: int = 0


def deduplicate(observations: Iterable[Observation]) -> List[Observation]:
    """Keep the last observation per (country, indicator, year, source)."""
    latest: Dict[tuple, Observation] = {}
    for observation in observations:
        latest[observation.key] = observation
    return list(latest.values())


def _row(observation: Observation, now: datetime) -> Sequence:
    return (
        observation.country_code,
        observation.country_name,
        observation.indicator_code,
        observation.indicator_name,
        observation.year,
        observation.value,
        observation.units,
        observation.industry,
        observation.source.value,
        observation.data_quality_score,
        observation.created_at,
        now,
    )


def insert_chunk(
    con: duckdb.DuckDBPyConnection, table: str, chunk: Sequence[Observation]
) -> int:
    """Insert ``chunk`` with one parameterized multi-row INSERT."""
    if not chunk:
        return 0
    now = datetime.now()
    row_placeholder = "(" + ", ".join("?" for _ in OBSERVATION_COLUMNS) + ")"
    statement = (
        f"INSERT INTO {table} ({', '.join(OBSERVATION_COLUMNS)}) VALUES "
        + ", ".join(row_placeholder for _ in chunk)
    )
    params = [value for observation in chunk for value in _row(observation, now)]
    con.execute(statement, params)
    return len(chunk)


class SourceReplaceTransaction:
    """One delete-then-insert transaction scoped to a single source.

    Attributes:
        source: Source whose rows are replaced
        table: Observation table for the source
        state: Current transaction state
    """

    def __init__(
        self,
        con: duckdb.DuckDBPyConnection,
        source,
        chunk_size: Optional[int] = None,
    ):
        self.con = con
        self.source = as_source(source)
        self.table = OBSERVATION_TABLES[self.source]
        self.chunk_size = chunk_size or config.BATCH_SIZE
        self.state = TransactionState.CREATED
        self.result: Optional[PersistenceResult] = None

    def begin(self) -> None:
        if self.state != TransactionState.CREATED:
            raise TransactionError(f"Transaction for {self.source.value} already {self.state.value}")
        self.con.begin()
        self.state = TransactionState.ACTIVE
        logger.debug(f"Transaction opened for {self.table}")

    def replace(self, observations: Iterable[Observation]) -> PersistenceResult:
        """Delete the source's rows and insert ``observations`` in chunks."""
        if self.state != TransactionState.ACTIVE:
            raise TransactionError("replace() requires an active transaction")

        rows = list(observations)
        unique_rows = deduplicate(rows)
        duplicates = len(rows) - len(unique_rows)
        if duplicates:
            logger.warning(f"   Dropped {duplicates:,} duplicate observations (last one kept)")

        deleted = self.con.execute(
            f"SELECT COUNT(*) FROM {self.table} WHERE source = ?", [self.source.value]
        ).fetchone()[0]
        self.con.execute(f"DELETE FROM {self.table} WHERE source = ?", [self.source.value])
        logger.info(f"🗑️  Cleared {deleted:,} existing {self.source.value} rows from {self.table}")

        inserted = 0
        chunks = 0
        total_chunks = (len(unique_rows) + self.chunk_size - 1) // self.chunk_size
        for start in range(0, len(unique_rows), self.chunk_size):
            chunk = unique_rows[start:start + self.chunk_size]
            inserted += insert_chunk(self.con, self.table, chunk)
            chunks += 1
            logger.info(
                f"   💾 Chunk {chunks}/{total_chunks}: {len(chunk):,} rows "
                f"({inserted:,}/{len(unique_rows):,})"
            )

        self.result = PersistenceResult(
            source=self.source.value,
            table=self.table,
            deleted=deleted,
            inserted=inserted,
            chunks=chunks,
            duplicates_dropped=duplicates,
        )
        return self.result

    def commit(self) -> None:
        self.con.commit()
        self.state = TransactionState.COMMITTED
        logger.info(f"✅ Committed {self.source.value} replace into {self.table}")

    def rollback(self) -> None:
        try:
            self.con.rollback()
        except duckdb.Error as e:
            self.state = TransactionState.FAILED
            raise RollbackError(f"Rollback of {self.table} failed: {e}") from e
        self.state = TransactionState.ROLLED_BACK
        logger.warning(f"↩️  Rolled back {self.source.value} replace; {self.table} unchanged")

    def __enter__(self):
        self.begin()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Commit on success, roll back on any exception."""
        if exc_type is None:
            try:
                self.commit()
            except duckdb.Error as e:
                self.rollback()
                raise PersistenceError(f"Commit to {self.table} failed: {e}") from e
            return False

        logger.error(f"Persistence into {self.table} failed: {exc_val}")
        self.rollback()
        if isinstance(exc_val, duckdb.Error):
            raise PersistenceError(
                f"Persisting {self.source.value} observations failed: {exc_val}"
            ) from exc_val
        return False


def persist(
    con: duckdb.DuckDBPyConnection,
    observations: Iterable[Observation],
    source,
    chunk_size: Optional[int] = None,
) -> PersistenceResult:
    """Atomically replace every stored observation of ``source``.

    :raises PersistenceError: any chunk or the commit failed; the table
        holds its pre-run contents
    """
    with SourceReplaceTransaction(con, source, chunk_size=chunk_size) as txn:
        result = txn.replace(observations)
    return result


def source_counts(con: duckdb.DuckDBPyConnection) -> Dict[str, int]:
    """Row count per observation table, keyed by source code."""
    return {
        source.value: con.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
        for source, table in OBSERVATION_TABLES.items()
    }


def log_tri_source_summary(con: duckdb.DuckDBPyConnection) -> Dict[str, int]:
    counts = source_counts(con)
    logger.info("🌍 Tri-source store summary")
    for source in Source:
        logger.info(f"   {source.value:<5} {OBSERVATION_TABLES[source]:<16} {counts[source.value]:>10,} rows")
    logger.info(f"   Total {sum(counts.values()):>27,} rows")
    return counts
