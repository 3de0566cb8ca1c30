"""
Compliance Oracle State Storage

Registries, logs, global counters and the pause flag live behind the
StateStore interface so the engine can run against process memory or a
transactional SQLite database.

Implementations must be:
- Atomic (counter allocation is a single read-modify-write)
- Transactional (a failed operation leaves no partial writes)
- Isolated (readers never see a half-applied operation)
"""

import copy
import json
import sqlite3
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from .errors import ArithmeticRangeError
from .records import (
    Audit,
    COUNTER_DEFAULTS,
    Entity,
    Escalation,
    Oracle,
    Report,
)

# Journal marker for keys that did not exist before the transaction
_ABSENT = object()


class StateStore(ABC):
    """Abstract storage backend for engine state."""

    @abstractmethod
    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Run a block atomically.

        Nested transactions join the outermost one. If the block raises,
        every write made inside it is discarded.
        """
        pass

    # Oracles
    @abstractmethod
    def get_oracle(self, identity: str) -> Optional[Oracle]:
        pass

    @abstractmethod
    def put_oracle(self, oracle: Oracle) -> None:
        pass

    # Entities
    @abstractmethod
    def get_entity(self, identity: str) -> Optional[Entity]:
        pass

    @abstractmethod
    def put_entity(self, entity: Entity) -> None:
        pass

    def snapshot_entities(self, identities: Iterable[str]) -> Dict[str, Entity]:
        """Point-in-time copies of the requested entities that exist."""
        with self.transaction():
            found = {}
            for identity in identities:
                entity = self.get_entity(identity)
                if entity is not None:
                    found[identity] = entity
            return found

    # Reports
    @abstractmethod
    def get_report(self, entity: str, report_id: int) -> Optional[Report]:
        pass

    @abstractmethod
    def put_report(self, report: Report) -> None:
        pass

    # Audits
    @abstractmethod
    def get_audit(self, entity: str, audit_id: int) -> Optional[Audit]:
        pass

    @abstractmethod
    def put_audit(self, audit: Audit) -> None:
        pass

    # Escalations
    @abstractmethod
    def get_escalation(self, entity: str, escalation_id: int) -> Optional[Escalation]:
        pass

    @abstractmethod
    def put_escalation(self, escalation: Escalation) -> None:
        pass

    @abstractmethod
    def list_escalations(self, entity: str) -> List[Escalation]:
        pass

    # Counters and flags
    @abstractmethod
    def get_counter(self, name: str) -> int:
        pass

    @abstractmethod
    def adjust_counter(self, name: str, delta: int) -> int:
        """Add ``delta`` to a counter and return the new value."""
        pass

    def allocate(self, name: str) -> int:
        """Return the counter's current value and advance it by one."""
        with self.transaction():
            return self.adjust_counter(name, 1) - 1

    @abstractmethod
    def get_flag(self, name: str) -> bool:
        pass

    @abstractmethod
    def set_flag(self, name: str, value: bool) -> None:
        pass

    @abstractmethod
    def reset(self) -> None:
        """Clear all state (test isolation)."""
        pass


class InMemoryStateStore(StateStore):
    """
    In-memory store for embedding and testing.

    A re-entrant lock serializes transactions. The outermost transaction
    journals the previous value of every key it writes and puts those
    values back if the block raises.

    WARNING: Not persistent across restarts.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._depth = 0
        self._journal: Optional[Dict[Tuple[str, Any], Any]] = None
        self._state = self._empty_state()

    @staticmethod
    def _empty_state() -> Dict[str, Any]:
        return {
            "oracles": {},
            "entities": {},
            "reports": {},
            "audits": {},
            "escalations": {},
            "counters": dict(COUNTER_DEFAULTS),
            "flags": {},
        }

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            outermost = self._depth == 0
            if outermost:
                self._journal = {}
            self._depth += 1
            try:
                yield
            except BaseException:
                if outermost:
                    self._undo()
                raise
            finally:
                self._depth -= 1
                if outermost:
                    self._journal = None

    def _remember(self, table: str, key: Any) -> None:
        """Journal a key's value before its first write in this transaction."""
        if self._journal is not None and (table, key) not in self._journal:
            self._journal[(table, key)] = self._state[table].get(key, _ABSENT)

    def _undo(self) -> None:
        for (table, key), previous in self._journal.items():
            if previous is _ABSENT:
                self._state[table].pop(key, None)
            else:
                self._state[table][key] = previous

    def _get(self, table: str, key: Any) -> Any:
        with self._lock:
            value = self._state[table].get(key)
            return copy.deepcopy(value)

    def _put(self, table: str, key: Any, value: Any) -> None:
        with self._lock:
            self._remember(table, key)
            self._state[table][key] = copy.deepcopy(value)

    def get_oracle(self, identity: str) -> Optional[Oracle]:
        return self._get("oracles", identity)

    def put_oracle(self, oracle: Oracle) -> None:
        self._put("oracles", oracle.identity, oracle)

    def get_entity(self, identity: str) -> Optional[Entity]:
        return self._get("entities", identity)

    def put_entity(self, entity: Entity) -> None:
        self._put("entities", entity.identity, entity)

    def get_report(self, entity: str, report_id: int) -> Optional[Report]:
        return self._get("reports", (entity, report_id))

    def put_report(self, report: Report) -> None:
        self._put("reports", (report.entity, report.report_id), report)

    def get_audit(self, entity: str, audit_id: int) -> Optional[Audit]:
        return self._get("audits", (entity, audit_id))

    def put_audit(self, audit: Audit) -> None:
        self._put("audits", (audit.entity, audit.audit_id), audit)

    def get_escalation(self, entity: str, escalation_id: int) -> Optional[Escalation]:
        return self._get("escalations", (entity, escalation_id))

    def put_escalation(self, escalation: Escalation) -> None:
        self._put("escalations", (escalation.entity, escalation.escalation_id), escalation)

    def list_escalations(self, entity: str) -> List[Escalation]:
        with self._lock:
            rows = [
                e for (owner, _), e in self._state["escalations"].items()
                if owner == entity
            ]
            rows.sort(key=lambda e: e.escalation_id)
            return copy.deepcopy(rows)

    def get_counter(self, name: str) -> int:
        with self._lock:
            return self._state["counters"].get(name, 0)

    def adjust_counter(self, name: str, delta: int) -> int:
        with self._lock:
            value = self._state["counters"].get(name, 0) + delta
            if value < 0:
                raise ArithmeticRangeError(f"counter {name} would drop below zero")
            self._remember("counters", name)
            self._state["counters"][name] = value
            return value

    def get_flag(self, name: str) -> bool:
        with self._lock:
            return self._state["flags"].get(name, False)

    def set_flag(self, name: str, value: bool) -> None:
        with self._lock:
            self._remember("flags", name)
            self._state["flags"][name] = bool(value)

    def reset(self) -> None:
        with self._lock:
            self._state = self._empty_state()
            if self._journal is not None:
                self._journal = {}


class SqliteStateStore(StateStore):
    """
    SQLite-backed store.

    One connection is shared by all threads and guarded by a re-entrant
    lock; the outermost transaction issues BEGIN IMMEDIATE and commits on
    success or rolls back on failure.

    Schema:
        oracles(identity PK, payload)
        entities(identity PK, payload)
        reports(entity, report_id, payload)        PK(entity, report_id)
        audits(entity, audit_id, payload)          PK(entity, audit_id)
        escalations(entity, escalation_id, payload) PK(entity, escalation_id)
        counters(name PK, value)
        flags(name PK, value)
    """

    def __init__(self, path: Union[str, Path] = "data/compliance.db"):
        self.path = str(path)
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self._depth = 0
        self._conn = sqlite3.connect(self.path, check_same_thread=False, isolation_level=None)
        self._conn.row_factory = sqlite3.Row
        if self.path != ":memory:":
            self._conn.execute("PRAGMA journal_mode=WAL;")
            self._conn.execute("PRAGMA synchronous=NORMAL;")
        self._init_schema()

    def _init_schema(self) -> None:
        """Create tables and seed counters. Safe to call repeatedly."""
        with self.transaction():
            c = self._conn
            c.execute("""
            CREATE TABLE IF NOT EXISTS oracles (
                identity TEXT PRIMARY KEY,
                payload TEXT NOT NULL
            );""")
            c.execute("""
            CREATE TABLE IF NOT EXISTS entities (
                identity TEXT PRIMARY KEY,
                payload TEXT NOT NULL
            );""")
            for table, key in (("reports", "report_id"),
                               ("audits", "audit_id"),
                               ("escalations", "escalation_id")):
                c.execute(f"""
                CREATE TABLE IF NOT EXISTS {table} (
                    entity TEXT NOT NULL,
                    {key} INTEGER NOT NULL,
                    payload TEXT NOT NULL,
                    PRIMARY KEY (entity, {key})
                );""")
                c.execute(f"""
                CREATE INDEX IF NOT EXISTS idx_{table}_entity
                ON {table}(entity);""")
            c.execute("""
            CREATE TABLE IF NOT EXISTS counters (
                name TEXT PRIMARY KEY,
                value INTEGER NOT NULL
            );""")
            c.execute("""
            CREATE TABLE IF NOT EXISTS flags (
                name TEXT PRIMARY KEY,
                value INTEGER NOT NULL
            );""")
            self._seed_counters()

    def _seed_counters(self) -> None:
        for name, value in COUNTER_DEFAULTS.items():
            self._conn.execute(
                "INSERT OR IGNORE INTO counters(name, value) VALUES(?,?)",
                (name, value)
            )

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            outermost = self._depth == 0
            if outermost:
                self._conn.execute("BEGIN IMMEDIATE")
            self._depth += 1
            try:
                yield
            except BaseException:
                self._depth -= 1
                if outermost:
                    self._conn.execute("ROLLBACK")
                raise
            else:
                self._depth -= 1
                if outermost:
                    self._conn.execute("COMMIT")

    def _fetch(self, sql: str, params: tuple) -> Optional[Dict[str, Any]]:
        with self._lock:
            row = self._conn.execute(sql, params).fetchone()
        return json.loads(row["payload"]) if row else None

    def _write(self, sql: str, params: tuple) -> None:
        with self._lock:
            self._conn.execute(sql, params)

    def get_oracle(self, identity: str) -> Optional[Oracle]:
        data = self._fetch("SELECT payload FROM oracles WHERE identity=?", (identity,))
        return Oracle.from_dict(data) if data else None

    def put_oracle(self, oracle: Oracle) -> None:
        self._write(
            "INSERT OR REPLACE INTO oracles(identity, payload) VALUES(?,?)",
            (oracle.identity, json.dumps(oracle.to_dict(), sort_keys=True))
        )

    def get_entity(self, identity: str) -> Optional[Entity]:
        data = self._fetch("SELECT payload FROM entities WHERE identity=?", (identity,))
        return Entity.from_dict(data) if data else None

    def put_entity(self, entity: Entity) -> None:
        self._write(
            "INSERT OR REPLACE INTO entities(identity, payload) VALUES(?,?)",
            (entity.identity, json.dumps(entity.to_dict(), sort_keys=True))
        )

    def get_report(self, entity: str, report_id: int) -> Optional[Report]:
        data = self._fetch(
            "SELECT payload FROM reports WHERE entity=? AND report_id=?",
            (entity, report_id)
        )
        return Report.from_dict(data) if data else None

    def put_report(self, report: Report) -> None:
        self._write(
            "INSERT OR REPLACE INTO reports(entity, report_id, payload) VALUES(?,?,?)",
            (report.entity, report.report_id, json.dumps(report.to_dict(), sort_keys=True))
        )

    def get_audit(self, entity: str, audit_id: int) -> Optional[Audit]:
        data = self._fetch(
            "SELECT payload FROM audits WHERE entity=? AND audit_id=?",
            (entity, audit_id)
        )
        return Audit.from_dict(data) if data else None

    def put_audit(self, audit: Audit) -> None:
        # Audits are write-once; a duplicate key is a programming error.
        self._write(
            "INSERT INTO audits(entity, audit_id, payload) VALUES(?,?,?)",
            (audit.entity, audit.audit_id, json.dumps(audit.to_dict(), sort_keys=True))
        )

    def get_escalation(self, entity: str, escalation_id: int) -> Optional[Escalation]:
        data = self._fetch(
            "SELECT payload FROM escalations WHERE entity=? AND escalation_id=?",
            (entity, escalation_id)
        )
        return Escalation.from_dict(data) if data else None

    def put_escalation(self, escalation: Escalation) -> None:
        self._write(
            "INSERT OR REPLACE INTO escalations(entity, escalation_id, payload) VALUES(?,?,?)",
            (escalation.entity, escalation.escalation_id,
             json.dumps(escalation.to_dict(), sort_keys=True))
        )

    def list_escalations(self, entity: str) -> List[Escalation]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT payload FROM escalations WHERE entity=? ORDER BY escalation_id ASC",
                (entity,)
            ).fetchall()
        return [Escalation.from_dict(json.loads(r["payload"])) for r in rows]

    def get_counter(self, name: str) -> int:
        with self._lock:
            row = self._conn.execute("SELECT value FROM counters WHERE name=?", (name,)).fetchone()
        return row["value"] if row else 0

    def adjust_counter(self, name: str, delta: int) -> int:
        with self.transaction():
            value = self.get_counter(name) + delta
            if value < 0:
                raise ArithmeticRangeError(f"counter {name} would drop below zero")
            self._conn.execute(
                "INSERT OR REPLACE INTO counters(name, value) VALUES(?,?)",
                (name, value)
            )
            return value

    def get_flag(self, name: str) -> bool:
        with self._lock:
            row = self._conn.execute("SELECT value FROM flags WHERE name=?", (name,)).fetchone()
        return bool(row["value"]) if row else False

    def set_flag(self, name: str, value: bool) -> None:
        self._write(
            "INSERT OR REPLACE INTO flags(name, value) VALUES(?,?)",
            (name, 1 if value else 0)
        )

    def reset(self) -> None:
        with self.transaction():
            for table in ("oracles", "entities", "reports", "audits",
                          "escalations", "counters", "flags"):
                self._conn.execute(f"DELETE FROM {table}")
            self._seed_counters()

    def close(self) -> None:
        with self._lock:
            self._conn.close()
