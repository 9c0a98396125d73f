"""Repository layer responsible for all database access.

The store is four independent key-value collections (owners, slots,
allocations, valet bookings) keyed by opaque string ids. There are no
secondary indices: lookups by foreign key scan `list()` and filter.
"""

from __future__ import annotations

import json
import sqlite3
import threading
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from threading import RLock
from typing import Any, Iterator, Optional, Union

from backend.domain.constraints import format_price, load_stored_price
from backend.domain.models import Allocation, AllocationStatus, Owner, Parking, Valet
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)

Record = Union[Owner, Parking, Allocation, Valet]


class EntityKind(str, Enum):
    OWNER = "Owners"
    PARKING = "Parkings"
    ALLOCATION = "Allocations"
    VALET = "Valets"

    @property
    def table(self) -> str:
        return self.value


_RECORD_TYPES: dict[EntityKind, type] = {
    EntityKind.OWNER: Owner,
    EntityKind.PARKING: Parking,
    EntityKind.ALLOCATION: Allocation,
    EntityKind.VALET: Valet,
}


def _to_payload(kind: EntityKind, record: Record) -> str:
    expected = _RECORD_TYPES[kind]
    if not isinstance(record, expected):
        raise TypeError(f"{kind.name} store expects {expected.__name__}, got {type(record).__name__}")
    payload = record.to_dict()
    if isinstance(record, Parking):
        payload["price_per_hour"] = format_price(record.price_per_hour)
    return json.dumps(payload, sort_keys=True)


def _from_payload(kind: EntityKind, raw: str) -> Record:
    payload: dict[str, Any] = json.loads(raw)
    if kind is EntityKind.OWNER:
        return Owner(**payload)
    if kind is EntityKind.PARKING:
        payload["price_per_hour"] = load_stored_price(payload["price_per_hour"])
        return Parking(**payload)
    if kind is EntityKind.ALLOCATION:
        payload["status"] = AllocationStatus(payload["status"])
        return Allocation(**payload)
    return Valet(**payload)


class StoreTransaction:
    """get/put/delete/list bound to one open connection."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def get(self, kind: EntityKind, record_id: str) -> Optional[Record]:
        cursor = self._connection.execute(
            f"SELECT payload FROM {kind.table} WHERE id = ?;",
            (record_id,),
        )
        row = cursor.fetchone()
        if row is None:
            return None
        return _from_payload(kind, str(row["payload"]))

    def put(self, kind: EntityKind, record: Record) -> None:
        self._connection.execute(
            f"""
            INSERT INTO {kind.table} (id, payload)
            VALUES (?, ?)
            ON CONFLICT(id) DO UPDATE SET payload = excluded.payload;
            """,
            (record.id, _to_payload(kind, record)),
        )

    def delete(self, kind: EntityKind, record_id: str) -> bool:
        cursor = self._connection.execute(
            f"DELETE FROM {kind.table} WHERE id = ?;",
            (record_id,),
        )
        return cursor.rowcount > 0

    def list(self, kind: EntityKind) -> list[Record]:
        cursor = self._connection.execute(
            f"SELECT payload FROM {kind.table} ORDER BY id ASC;"
        )
        return [_from_payload(kind, str(row["payload"])) for row in cursor.fetchall()]

    def count(self, kind: EntityKind) -> int:
        cursor = self._connection.execute(f"SELECT COUNT(*) AS count FROM {kind.table};")
        return int(cursor.fetchone()["count"])


class DataRepository:
    """Encapsulates SQLite access so business logic stays storage-agnostic.

    Every read and write goes through `transaction()`, which holds a
    store-wide re-entrant lock for its whole duration. Mutating operations are
    therefore serialized and either fully committed or fully rolled back.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = RLock()
        self._local = threading.local()

    @property
    def database_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._db_path)
        connection.row_factory = sqlite3.Row
        return connection

    def initialize_database(self) -> None:
        """Create the four collections if they do not exist yet."""
        try:
            with self._lock, self._connect() as conn:
                cursor = conn.cursor()
                for kind in EntityKind:
                    cursor.execute(
                        f"""
                        CREATE TABLE IF NOT EXISTS {kind.table} (
                            id TEXT PRIMARY KEY,
                            payload TEXT NOT NULL
                        );
                        """
                    )
                conn.commit()
            logger.info("Database initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise RuntimeError(f"Database initialization failed: {exc}") from exc

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        """Yield a transaction; nested calls on the same thread join the outer one."""
        with self._lock:
            current = getattr(self._local, "transaction", None)
            if current is not None:
                yield current
                return

            connection = self._connect()
            store = StoreTransaction(connection)
            self._local.transaction = store
            try:
                yield store
                connection.commit()
            except sqlite3.Error as exc:
                connection.rollback()
                raise RuntimeError(f"Store transaction failed: {exc}") from exc
            except BaseException:
                connection.rollback()
                raise
            finally:
                self._local.transaction = None
                connection.close()

    def get(self, kind: EntityKind, record_id: str) -> Optional[Record]:
        with self.transaction() as store:
            return store.get(kind, record_id)

    def put(self, kind: EntityKind, record: Record) -> None:
        with self.transaction() as store:
            store.put(kind, record)

    def delete(self, kind: EntityKind, record_id: str) -> bool:
        with self.transaction() as store:
            return store.delete(kind, record_id)

    def list(self, kind: EntityKind) -> list[Record]:
        with self.transaction() as store:
            return store.list(kind)

    def count(self, kind: EntityKind) -> int:
        """Return collection size for diagnostics and tests."""
        with self.transaction() as store:
            return store.count(kind)
