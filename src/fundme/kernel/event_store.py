"""
SQLite Event Store - Append-only log of committed contract events

The chain appends the events of every committed transaction here so that
external indexers can query them. It provides:
- Append-only semantics (events never modified or deleted)
- Idempotency via tx_id (appending the same transaction twice is a no-op)
- Queries by emitting address, event type and block range
"""

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from fundme.kernel.errors import EventStoreError
from fundme.kernel.events import Event
from fundme.kernel.logging import get_logger
from fundme.kernel.metrics import events_appended_total
from fundme.kernel.retry import retry_on_sqlite_lock

logger = get_logger(__name__)

_COLUMNS = (
    "event_id, tx_id, block_number, log_index, address, "
    "event_type, timestamp, payload_json"
)


class SQLiteEventStore:
    """
    SQLite-based event store with append-only semantics

    Uses WAL (Write-Ahead Logging) mode for crash safety and good
    concurrent read performance.

    Schema:
    - events table: append-only event log
    - Unique constraint: (tx_id, log_index)
    - Indices: address, event_type, block_number
    """

    def __init__(self, db_path: str | Path) -> None:
        """
        Initialize event store with SQLite database

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self._initialize_schema()

    def _initialize_schema(self) -> None:
        """Create tables and indices if they don't exist"""
        with self._connect() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA synchronous=NORMAL")

            conn.execute("""
                CREATE TABLE IF NOT EXISTS events (
                    event_id TEXT PRIMARY KEY,
                    tx_id TEXT NOT NULL,
                    block_number INTEGER NOT NULL,
                    log_index INTEGER NOT NULL,
                    address TEXT NOT NULL,
                    event_type TEXT NOT NULL,
                    timestamp INTEGER NOT NULL,
                    payload_json TEXT NOT NULL,

                    UNIQUE(tx_id, log_index)
                )
            """)

            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_events_address "
                "ON events(address, block_number)"
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_events_type ON events(event_type)")
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_events_block ON events(block_number, log_index)"
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_events_tx ON events(tx_id)")

            conn.commit()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database connections"""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def append(self, tx_id: str, events: list[Event]) -> list[Event]:
        """
        Append the events of one committed transaction

        All events are written in a single SQLite transaction. If the
        transaction's events are already stored, the stored events are
        returned and nothing is written.

        Args:
            tx_id: Transaction that emitted the events
            events: Events in log_index order

        Returns:
            The stored events

        Raises:
            EventStoreError: If an event belongs to another transaction or the
                database rejects the write
        """
        if not events:
            return []

        foreign = [e.event_id for e in events if e.tx_id != tx_id]
        if foreign:
            raise EventStoreError(f"Events {foreign} do not belong to transaction {tx_id}")

        existing = self.load_transaction(tx_id)
        if existing:
            return existing

        try:
            self._insert_events(events)
        except sqlite3.IntegrityError as e:
            # Another writer stored the same transaction between our check and insert
            existing = self.load_transaction(tx_id)
            if existing:
                return existing
            raise EventStoreError(f"Failed to append events: {e}") from e
        except sqlite3.Error as e:
            raise EventStoreError(f"Unexpected error appending events: {e}") from e

        for event in events:
            events_appended_total.labels(event_type=event.event_type).inc()
        logger.debug("Events appended", tx_id=tx_id, event_count=len(events))
        return events

    @retry_on_sqlite_lock()
    def _insert_events(self, events: list[Event]) -> None:
        with self._connect() as conn:
            try:
                conn.executemany(
                    f"INSERT INTO events ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                    [
                        (
                            event.event_id,
                            event.tx_id,
                            event.block_number,
                            event.log_index,
                            event.address,
                            event.event_type,
                            event.timestamp,
                            json.dumps(event.payload),
                        )
                        for event in events
                    ],
                )
                conn.commit()
            except sqlite3.Error:
                conn.rollback()
                raise

    def load_transaction(self, tx_id: str) -> list[Event]:
        """Load the events of one transaction in log order"""
        return self._select("WHERE tx_id = ?", (tx_id,), order="log_index ASC")

    def load_by_address(self, address: str) -> list[Event]:
        """Load every event emitted by an address in chain order"""
        return self._select("WHERE address = ?", (address.lower(),))

    def load_all_events(self, limit: int | None = None) -> list[Event]:
        """Load events in chain order (for projection rebuilding)"""
        return self._select("", (), limit=limit)

    def query_events(
        self,
        *,
        address: str | None = None,
        event_type: str | None = None,
        from_block: int | None = None,
        to_block: int | None = None,
        limit: int | None = None,
    ) -> list[Event]:
        """
        Query events by various criteria

        Args:
            address: Filter by emitting address
            event_type: Filter by event type (e.g., "TokensDispensed")
            from_block: Events at or after this block
            to_block: Events at or before this block
            limit: Maximum number of events to return

        Returns:
            List of matching events in chain order
        """
        conditions = []
        params: list = []

        if address:
            conditions.append("address = ?")
            params.append(address.lower())

        if event_type:
            conditions.append("event_type = ?")
            params.append(event_type)

        if from_block is not None:
            conditions.append("block_number >= ?")
            params.append(from_block)

        if to_block is not None:
            conditions.append("block_number <= ?")
            params.append(to_block)

        where_clause = "WHERE " + " AND ".join(conditions) if conditions else ""
        return self._select(where_clause, tuple(params), limit=limit)

    def count_events(self) -> int:
        """Get total number of events in store"""
        with self._connect() as conn:
            return conn.execute("SELECT COUNT(*) FROM events").fetchone()[0]

    def count_transactions(self) -> int:
        """Get number of distinct transactions with stored events"""
        with self._connect() as conn:
            return conn.execute("SELECT COUNT(DISTINCT tx_id) FROM events").fetchone()[0]

    def _select(
        self,
        where_clause: str,
        params: tuple,
        *,
        order: str = "block_number ASC, log_index ASC",
        limit: int | None = None,
    ) -> list[Event]:
        query = f"SELECT {_COLUMNS} FROM events {where_clause} ORDER BY {order}"
        if limit:
            query += " LIMIT ?"
            params = params + (limit,)

        with self._connect() as conn:
            cursor = conn.execute(query, params)
            return [self._row_to_event(row) for row in cursor.fetchall()]

    def _row_to_event(self, row: sqlite3.Row) -> Event:
        """Convert SQLite row to Event object"""
        return Event(
            event_id=row["event_id"],
            tx_id=row["tx_id"],
            block_number=row["block_number"],
            log_index=row["log_index"],
            address=row["address"],
            event_type=row["event_type"],
            timestamp=row["timestamp"],
            payload=json.loads(row["payload_json"]),
        )
