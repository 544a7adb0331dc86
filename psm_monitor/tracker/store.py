"""SQLite store for fee samples."""

import sqlite3
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime, timedelta
from pathlib import Path

import structlog

from psm_monitor.tracker.errors import (
    DatabaseError,
    FeeStoreError,
    StoreNotConnectedError,
)
from psm_monitor.tracker.migrations import CURRENT_VERSION, MigrationManager
from psm_monitor.tracker.models import FeeAverages, FeeFigures, FeeRecord


logger = structlog.get_logger()

# Fixed-width UTC timestamps keep BETWEEN comparisons lexicographic
_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def format_timestamp(value: datetime) -> str:
    """Format a datetime as a sortable UTC string."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime(_TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    """Parse a timestamp written by format_timestamp."""
    return datetime.strptime(value, _TIMESTAMP_FORMAT).replace(tzinfo=UTC)


class FeeStore:
    """SQLite store for fee records.

    Opened once per process and handed to the sampler and the reporter.
    Uses WAL mode and applies schema migrations on connect.
    """

    def __init__(self, db_path: Path | str) -> None:
        """Initialize the fee store.

        Args:
            db_path: Path to SQLite database file.
        """
        self._db_path = Path(db_path)
        self._conn: sqlite3.Connection | None = None
        self._log = logger.bind(component="store", db_path=str(self._db_path))

    @property
    def db_path(self) -> Path:
        """Get the database path."""
        return self._db_path

    @property
    def is_connected(self) -> bool:
        """Check if connected to database."""
        return self._conn is not None

    def connect(self) -> None:
        """Open the database and apply pending migrations."""
        if self._conn is not None:
            return

        conn: sqlite3.Connection | None = None
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)

            conn = sqlite3.connect(str(self._db_path))
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA synchronous=NORMAL")

            migration_mgr = MigrationManager(conn)
            old_version = migration_mgr.current_version()
            applied = migration_mgr.migrate()
        except FeeStoreError:
            if conn is not None:
                conn.close()
            raise
        except (sqlite3.Error, OSError) as e:
            if conn is not None:
                conn.close()
            self._log.error("database_open_failed", error=str(e))
            raise DatabaseError("open", str(e)) from e

        self._conn = conn

        self._log.info(
            "database_connected",
            old_version=old_version,
            new_version=CURRENT_VERSION,
            migrations_applied=applied,
        )

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            self._log.info("database_closed")

    def __enter__(self) -> "FeeStore":
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Context manager exit."""
        self.close()

    def _ensure_connected(self) -> sqlite3.Connection:
        """Return the open connection.

        Raises:
            StoreNotConnectedError: If not connected.
        """
        if self._conn is None:
            raise StoreNotConnectedError("Database not connected. Call connect() first.")
        return self._conn

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[sqlite3.Connection]:
        """Run a block in a transaction with timing and logging.

        Args:
            operation: Name of the operation for logging.

        Yields:
            The open connection.
        """
        conn = self._ensure_connected()
        tx_id = str(uuid.uuid4())[:8]
        start_ns = time.perf_counter_ns()

        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            self._log.error(
                "transaction_failed", tx_id=tx_id, op=operation, error=str(e)
            )
            raise DatabaseError(operation, str(e)) from e
        except Exception:
            conn.rollback()
            self._log.error("transaction_failed", tx_id=tx_id, op=operation)
            raise

        self._log.debug(
            "transaction_complete",
            tx_id=tx_id,
            op=operation,
            duration_ms=round((time.perf_counter_ns() - start_ns) / 1_000_000, 2),
        )

    @contextmanager
    def _query(self, operation: str) -> Iterator[sqlite3.Connection]:
        """Run a read-only block, translating SQLite failures.

        Args:
            operation: Name of the operation for logging.

        Yields:
            The open connection.
        """
        conn = self._ensure_connected()
        try:
            yield conn
        except sqlite3.Error as e:
            self._log.error("query_failed", op=operation, error=str(e))
            raise DatabaseError(operation, str(e)) from e

    def insert_record(self, record: FeeRecord) -> int:
        """Persist one sampling tick.

        Args:
            record: The record to insert.

        Returns:
            Row id of the new record.
        """
        columns = FeeFigures.columns()
        values = [getattr(record, column) for column in columns]
        placeholders = ", ".join("?" for _ in range(len(columns) + 1))

        with self._transaction("insert_record") as conn:
            cursor = conn.execute(
                f"INSERT INTO fee_records (tracked_at, {', '.join(columns)}) "  # noqa: S608
                f"VALUES ({placeholders})",
                (format_timestamp(record.tracked_at), *values),
            )
            row_id = cursor.lastrowid

        self._log.debug("record_inserted", record_id=row_id)
        return int(row_id or 0)

    def average_between(self, start: datetime, end: datetime) -> FeeAverages:
        """Average every figure over records tracked in [start, end].

        NULL figures (networks that could not be sampled) are skipped.

        Args:
            start: Window start (inclusive).
            end: Window end (inclusive).

        Returns:
            Averages, with None for figures that have no samples.
        """
        columns = FeeFigures.columns()
        select = ", ".join(f"AVG({column}) AS {column}" for column in columns)

        with self._query("average_between") as conn:
            row = conn.execute(
                f"SELECT COUNT(*) AS samples, {select} FROM fee_records "  # noqa: S608
                "WHERE tracked_at BETWEEN ? AND ?",
                (format_timestamp(start), format_timestamp(end)),
            ).fetchone()

        return FeeAverages(
            window_start=start,
            window_end=end,
            samples=row["samples"],
            **{column: row[column] for column in columns},
        )

    def average_last_days(self, days: int, now: datetime) -> FeeAverages:
        """Average every figure over the ``days`` days ending at ``now``."""
        return self.average_between(now - timedelta(days=days), now)

    def list_records(self, limit: int = 100) -> list[FeeRecord]:
        """Get the most recent records, newest first.

        Args:
            limit: Maximum records to return.

        Returns:
            List of records.
        """
        with self._query("list_records") as conn:
            rows = conn.execute(
                "SELECT * FROM fee_records ORDER BY tracked_at DESC LIMIT ?",
                (limit,),
            ).fetchall()

        return [
            FeeRecord(
                tracked_at=parse_timestamp(row["tracked_at"]),
                **{column: row[column] for column in FeeFigures.columns()},
            )
            for row in rows
        ]

    def count_records(self) -> int:
        """Get the number of stored records."""
        with self._query("count_records") as conn:
            return int(conn.execute("SELECT COUNT(*) FROM fee_records").fetchone()[0])

    def prune_older_than(self, days: int, now: datetime | None = None) -> int:
        """Delete records older than the retention window.

        Args:
            days: Number of days to retain.
            now: Reference time (defaults to the current time).

        Returns:
            Number of records pruned.
        """
        cutoff = (now or datetime.now(UTC)) - timedelta(days=days)

        with self._transaction("prune_records") as conn:
            cursor = conn.execute(
                "DELETE FROM fee_records WHERE tracked_at < ?",
                (format_timestamp(cutoff),),
            )
            pruned = cursor.rowcount

        self._log.info("records_pruned", count=pruned, days=days)
        return pruned

    def get_schema_version(self) -> int:
        """Get current schema version."""
        with self._query("get_schema_version") as conn:
            return MigrationManager(conn).current_version()
