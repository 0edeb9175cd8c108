"""
Storage Backend Module

Provides the abstract storage interface and implementations for in-memory
(testing) and SQLite (persistence). Records are JSON documents keyed by id;
all monetary values are stored as Decimal strings.

Mutating operations run inside ``atomic()``, which holds the backend lock for
the whole unit of work so balance read-then-write sequences are serialized.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any, Union
from decimal import Decimal
from datetime import datetime
from enum import Enum
import sqlite3
import json
import threading
from dataclasses import dataclass, asdict
from pathlib import Path
from contextlib import contextmanager


def serialize_value(value: Any) -> Any:
    """Convert a value to a JSON-serializable form"""
    if isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, Enum):
        return getattr(value, 'code', value.value)
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    return value


@dataclass
class StorageRecord:
    """Base class for all stored records"""
    id: int
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage"""
        return serialize_value(asdict(self))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StorageRecord':
        """Create instance from dictionary"""
        data = dict(data)
        if 'created_at' in data and isinstance(data['created_at'], str):
            data['created_at'] = datetime.fromisoformat(data['created_at'])
        if 'updated_at' in data and isinstance(data['updated_at'], str):
            data['updated_at'] = datetime.fromisoformat(data['updated_at'])
        return cls(**data)


class StorageInterface(ABC):
    """Abstract interface for storage backends"""

    @abstractmethod
    def save(self, table: str, record_id: Union[int, str], data: Dict[str, Any]) -> None:
        """Save a record to storage"""
        pass

    @abstractmethod
    def load(self, table: str, record_id: Union[int, str]) -> Optional[Dict[str, Any]]:
        """Load a record from storage"""
        pass

    @abstractmethod
    def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load all records from a table in insertion order"""
        pass

    @abstractmethod
    def exists(self, table: str, record_id: Union[int, str]) -> bool:
        """Check if a record exists"""
        pass

    @abstractmethod
    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Find records matching filters"""
        pass

    @abstractmethod
    def count(self, table: str) -> int:
        """Count records in table"""
        pass

    @abstractmethod
    def next_id(self, table: str) -> int:
        """Allocate the next integer id for a table, starting at 1"""
        pass

    @abstractmethod
    def clear_table(self, table: str) -> None:
        """Clear all records from a table"""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close storage connection"""
        pass

    def begin_transaction(self) -> None:
        """Start a unit of work (default no-op)"""
        pass

    def commit(self) -> None:
        """Commit current unit of work (default no-op)"""
        pass

    def rollback(self) -> None:
        """Rollback current unit of work (default no-op)"""
        pass

    @contextmanager
    def atomic(self):
        """Context manager for atomic operations"""
        self.begin_transaction()
        try:
            yield
        except BaseException:
            self.rollback()
            raise
        self.commit()


_MISSING = object()


def _matches(record: Dict[str, Any], filters: Dict[str, Any]) -> bool:
    for key, value in filters.items():
        if key not in record or record[key] != value:
            return False
    return True


class InMemoryStorage(StorageInterface):
    """In-memory storage implementation for testing"""

    def __init__(self):
        self._data: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._sequences: Dict[str, int] = {}
        self._lock = threading.RLock()
        self._depth = 0
        # Undo log of the outermost unit of work: (table, key, previous record)
        self._undo: List[tuple] = []
        self._undo_keys = set()
        self._saved_sequences: Optional[Dict[str, int]] = None

    def _remember(self, table: str, key: Optional[str]) -> None:
        """Record the pre-image of a record (or of a whole table when key is None)"""
        if self._depth == 0 or (table, key) in self._undo_keys:
            return
        self._undo_keys.add((table, key))
        if key is None:
            self._undo.append((table, None, dict(self._data.get(table, {}))))
        else:
            self._undo.append((table, key, self._data.get(table, {}).get(key, _MISSING)))

    def _ensure_table(self, table: str) -> None:
        """Ensure table exists"""
        if table not in self._data:
            self._data[table] = {}

    def save(self, table: str, record_id: Union[int, str], data: Dict[str, Any]) -> None:
        """Save a record to memory"""
        with self._lock:
            self._ensure_table(table)
            self._remember(table, str(record_id))
            # Deep copy to prevent external mutation
            self._data[table][str(record_id)] = json.loads(json.dumps(data, default=str))

    def load(self, table: str, record_id: Union[int, str]) -> Optional[Dict[str, Any]]:
        """Load a record from memory"""
        with self._lock:
            self._ensure_table(table)
            record = self._data[table].get(str(record_id))
            if record:
                return json.loads(json.dumps(record))
            return None

    def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load all records from a table"""
        with self._lock:
            self._ensure_table(table)
            return [json.loads(json.dumps(record)) for record in self._data[table].values()]

    def exists(self, table: str, record_id: Union[int, str]) -> bool:
        """Check if a record exists"""
        with self._lock:
            self._ensure_table(table)
            return str(record_id) in self._data[table]

    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Find records matching filters"""
        with self._lock:
            self._ensure_table(table)
            return [
                json.loads(json.dumps(record))
                for record in self._data[table].values()
                if _matches(record, filters)
            ]

    def count(self, table: str) -> int:
        """Count records in table"""
        with self._lock:
            self._ensure_table(table)
            return len(self._data[table])

    def next_id(self, table: str) -> int:
        """Allocate the next id from the table's sequence"""
        with self._lock:
            value = self._sequences.get(table, 0) + 1
            self._sequences[table] = value
            return value

    def clear_table(self, table: str) -> None:
        """Clear all records from a table"""
        with self._lock:
            self._remember(table, None)
            self._data[table] = {}
            self._sequences.pop(table, None)

    def begin_transaction(self) -> None:
        """Take the storage lock and start an undo log for the outermost unit of work"""
        self._lock.acquire()
        if self._depth == 0:
            self._saved_sequences = dict(self._sequences)
        self._depth += 1

    def commit(self) -> None:
        """Release the unit of work, keeping its writes"""
        self._depth -= 1
        if self._depth == 0:
            self._reset_undo()
        self._lock.release()

    def rollback(self) -> None:
        """Undo every write made since the outermost unit of work began"""
        self._depth -= 1
        if self._depth == 0:
            for table, key, previous in reversed(self._undo):
                if key is None:
                    self._data[table] = previous
                elif previous is _MISSING:
                    self._data[table].pop(key, None)
                else:
                    self._data[table][key] = previous
            if self._saved_sequences is not None:
                self._sequences = self._saved_sequences
            self._reset_undo()
        self._lock.release()

    def _reset_undo(self) -> None:
        self._undo = []
        self._undo_keys = set()
        self._saved_sequences = None

    def close(self) -> None:
        """Close storage (no-op for in-memory)"""
        pass

    def get_all_data(self) -> Dict[str, Dict[str, Dict[str, Any]]]:
        """Get all data for debugging/inspection"""
        with self._lock:
            return json.loads(json.dumps(self._data, default=str))


class SQLiteStorage(StorageInterface):
    """SQLite storage implementation for persistence"""

    def __init__(self, db_path: Union[str, Path] = ":memory:"):
        self.db_path = str(db_path)
        # Autocommit mode; units of work are opened explicitly with BEGIN IMMEDIATE
        self._connection = sqlite3.connect(self.db_path, check_same_thread=False, isolation_level=None)
        self._connection.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        self._depth = 0
        self._known_tables = set()

        with self._lock:
            if self.db_path != ":memory:":
                self._connection.execute("PRAGMA journal_mode = WAL")
                self._connection.execute("PRAGMA synchronous = NORMAL")
            self._connection.execute("""
                CREATE TABLE IF NOT EXISTS _sequences (
                    name TEXT PRIMARY KEY,
                    value INTEGER NOT NULL
                )
            """)

    def _ensure_table(self, table: str) -> None:
        """Ensure table exists with proper schema"""
        if table in self._known_tables:
            return
        self._connection.execute(f"""
            CREATE TABLE IF NOT EXISTS {table} (
                id TEXT PRIMARY KEY,
                data TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)
        self._connection.execute(f"""
            CREATE INDEX IF NOT EXISTS idx_{table}_created_at
            ON {table}(created_at)
        """)
        self._known_tables.add(table)

    def save(self, table: str, record_id: Union[int, str], data: Dict[str, Any]) -> None:
        """Save a record to SQLite, keeping its original rowid on update"""
        with self._lock:
            self._ensure_table(table)
            data_json = json.dumps(data, default=str)
            created_at = str(data.get('created_at', ''))
            updated_at = str(data.get('updated_at', created_at))

            self._connection.execute(f"""
                INSERT INTO {table} (id, data, created_at, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    data = excluded.data,
                    updated_at = excluded.updated_at
            """, (str(record_id), data_json, created_at, updated_at))

    def load(self, table: str, record_id: Union[int, str]) -> Optional[Dict[str, Any]]:
        """Load a record from SQLite"""
        with self._lock:
            self._ensure_table(table)
            cursor = self._connection.execute(f"""
                SELECT data FROM {table} WHERE id = ?
            """, (str(record_id),))
            row = cursor.fetchone()
            if row:
                return json.loads(row['data'])
            return None

    def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load all records from a table"""
        with self._lock:
            self._ensure_table(table)
            cursor = self._connection.execute(f"""
                SELECT data FROM {table} ORDER BY rowid
            """)
            return [json.loads(row['data']) for row in cursor.fetchall()]

    def exists(self, table: str, record_id: Union[int, str]) -> bool:
        """Check if a record exists"""
        with self._lock:
            self._ensure_table(table)
            cursor = self._connection.execute(f"""
                SELECT 1 FROM {table} WHERE id = ? LIMIT 1
            """, (str(record_id),))
            return cursor.fetchone() is not None

    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Find records matching filters (simple JSON key matching)"""
        return [record for record in self.load_all(table) if _matches(record, filters)]

    def count(self, table: str) -> int:
        """Count records in table"""
        with self._lock:
            self._ensure_table(table)
            cursor = self._connection.execute(f"""
                SELECT COUNT(*) as count FROM {table}
            """)
            return cursor.fetchone()['count']

    def next_id(self, table: str) -> int:
        """Allocate the next id from the persisted sequence"""
        # Increment and read back under one write lock shared with other connections
        with self.atomic():
            self._connection.execute("""
                INSERT INTO _sequences (name, value) VALUES (?, 1)
                ON CONFLICT(name) DO UPDATE SET value = value + 1
            """, (table,))
            cursor = self._connection.execute(
                "SELECT value FROM _sequences WHERE name = ?", (table,)
            )
            return cursor.fetchone()['value']

    def clear_table(self, table: str) -> None:
        """Clear all records from a table"""
        with self._lock:
            self._ensure_table(table)
            self._connection.execute(f"DELETE FROM {table}")
            self._connection.execute("DELETE FROM _sequences WHERE name = ?", (table,))

    def begin_transaction(self) -> None:
        """Start a database transaction holding SQLite's write lock"""
        self._lock.acquire()
        if self._depth == 0:
            try:
                self._connection.execute("BEGIN IMMEDIATE")
            except Exception:
                self._lock.release()
                raise
        self._depth += 1

    def commit(self) -> None:
        """Commit current transaction"""
        try:
            self._depth -= 1
            if self._depth == 0:
                self._connection.execute("COMMIT")
        finally:
            self._lock.release()

    def rollback(self) -> None:
        """Rollback current transaction"""
        try:
            self._depth -= 1
            if self._depth == 0:
                self._connection.execute("ROLLBACK")
                # Tables created inside the transaction were rolled back too
                self._known_tables.clear()
        finally:
            self._lock.release()

    def close(self) -> None:
        """Close SQLite connection"""
        with self._lock:
            if self._connection:
                self._connection.close()
                self._connection = None
