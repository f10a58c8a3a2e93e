"""SQLite local store for ghbrowse.

The store is the single source of truth for everything shown to observers.
Observable reads (``create_live_data``) recompute on the disk lane whenever
a transaction touching one of their tables commits.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Callable, Iterable, Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TypeVar

from ghbrowse.db.repo_dao import RepoDao
from ghbrowse.db.user_dao import UserDao
from ghbrowse.executors import AppExecutors
from ghbrowse.livedata import LiveData

T = TypeVar("T")

logger = logging.getLogger(__name__)

MEMORY = ":memory:"

TABLES = ("repo", "user", "contributor", "repo_search_result")

SCHEMA = """
CREATE TABLE IF NOT EXISTS repo (
    id INTEGER NOT NULL,
    name TEXT NOT NULL,
    full_name TEXT NOT NULL,
    description TEXT,
    owner_login TEXT NOT NULL,
    owner_url TEXT,
    stars INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (name, owner_login)
);
CREATE INDEX IF NOT EXISTS repo_id ON repo (id);

CREATE TABLE IF NOT EXISTS user (
    login TEXT NOT NULL PRIMARY KEY,
    avatar_url TEXT,
    name TEXT,
    company TEXT,
    repos_url TEXT,
    blog TEXT
);

CREATE TABLE IF NOT EXISTS contributor (
    repo_name TEXT NOT NULL,
    repo_owner TEXT NOT NULL,
    login TEXT NOT NULL,
    contributions INTEGER NOT NULL,
    avatar_url TEXT,
    PRIMARY KEY (repo_name, repo_owner, login),
    FOREIGN KEY (repo_name, repo_owner) REFERENCES repo (name, owner_login)
        ON UPDATE CASCADE DEFERRABLE INITIALLY DEFERRED
);

CREATE TABLE IF NOT EXISTS repo_search_result (
    query TEXT NOT NULL PRIMARY KEY,
    repo_ids TEXT NOT NULL,
    total_count INTEGER NOT NULL,
    next INTEGER
);
"""

TableObserver = Callable[[frozenset[str]], None]


def _connect(path: str | Path) -> sqlite3.Connection:
    # Autocommit mode: transactions are opened explicitly in transaction()
    con = sqlite3.connect(str(path), check_same_thread=False, isolation_level=None)
    con.row_factory = sqlite3.Row
    con.execute("PRAGMA foreign_keys = ON")
    return con


class GithubDb:
    """Connection, schema and change tracking for the local store.

    A single connection is shared by every thread and guarded by a
    re-entrant lock, so a transaction started on one thread excludes the
    others until it ends.

    Args:
        executors: Lanes used by observable reads
        path: Database file, or ``:memory:``
    """

    def __init__(self, executors: AppExecutors, path: str | Path = MEMORY) -> None:
        self.executors = executors
        self.path = str(path)
        if self.path != MEMORY:
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)

        self._con = _connect(self.path)
        self._con.executescript(SCHEMA)
        self._lock = threading.RLock()
        self._depth = 0
        self._dirty: set[str] = set()
        self._observers: list[tuple[frozenset[str], TableObserver]] = []
        self._observers_lock = threading.Lock()

        self.repo_dao = RepoDao(self)
        self.user_dao = UserDao(self)
        logger.debug("opened local store at %s", self.path)

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run the block atomically.

        Nested blocks become savepoints of the outermost transaction.
        Observers are told about changed tables once the outermost
        transaction commits; a rollback tells nobody.
        """
        with self._lock:
            depth = self._depth
            if depth == 0:
                self._con.execute("BEGIN")
            else:
                self._con.execute(f"SAVEPOINT sp{depth}")
            self._depth += 1
            try:
                yield self._con
            except BaseException:
                self._depth -= 1
                if depth == 0:
                    self._con.execute("ROLLBACK")
                    self._dirty.clear()
                else:
                    self._con.execute(f"ROLLBACK TO sp{depth}")
                    self._con.execute(f"RELEASE sp{depth}")
                raise
            self._depth -= 1
            if depth > 0:
                self._con.execute(f"RELEASE sp{depth}")
                return
            try:
                self._con.execute("COMMIT")
            except sqlite3.Error:
                # Deferred constraint failures leave the transaction open
                if self._con.in_transaction:
                    self._con.execute("ROLLBACK")
                self._dirty.clear()
                raise
            changed = frozenset(self._dirty)
            self._dirty.clear()

        if changed:
            self._notify(changed)

    def execute(self, table: str, sql: str, params: Sequence[Any] = ()) -> int:
        """Run one write statement against ``table``; returns the row count."""
        with self.transaction() as con:
            cursor = con.execute(sql, params)
            self._dirty.add(table)
            return cursor.rowcount

    def execute_many(
        self, table: str, sql: str, rows: Iterable[Sequence[Any]]
    ) -> None:
        with self.transaction() as con:
            con.executemany(sql, rows)
            self._dirty.add(table)

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[sqlite3.Row]:
        with self._lock:
            return self._con.execute(sql, params).fetchall()

    def query_one(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Row | None:
        with self._lock:
            return self._con.execute(sql, params).fetchone()

    def add_observer(self, tables: Iterable[str], observer: TableObserver) -> None:
        watched = frozenset(tables)
        unknown = watched - set(TABLES)
        if unknown:
            raise ValueError(f"unknown tables: {sorted(unknown)}")
        with self._observers_lock:
            self._observers.append((watched, observer))

    def remove_observer(self, observer: TableObserver) -> None:
        with self._observers_lock:
            self._observers = [
                entry for entry in self._observers if entry[1] != observer
            ]

    def _notify(self, changed: frozenset[str]) -> None:
        logger.debug("tables changed: %s", ", ".join(sorted(changed)))
        with self._observers_lock:
            observers = list(self._observers)
        for watched, observer in observers:
            hit = watched & changed
            if hit:
                observer(hit)

    def create_live_data(
        self, tables: Iterable[str], compute: Callable[[], T]
    ) -> LiveData[T]:
        """Observable read of ``compute()`` that follows changes to ``tables``."""
        return QueryLiveData(self, frozenset(tables), compute)

    def count_rows(self) -> dict[str, int]:
        """Number of rows per table."""
        # Table names come from TABLES, never from callers
        return {
            table: self.query_one(f"SELECT COUNT(*) FROM {table}")[0]
            for table in TABLES
        }

    def clear(self) -> None:
        """Delete every cached row."""
        with self.transaction() as con:
            for table in ("contributor", "repo_search_result", "repo", "user"):
                con.execute(f"DELETE FROM {table}")
                self._dirty.add(table)

    def close(self) -> None:
        with self._lock:
            self._con.close()


class QueryLiveData(LiveData[T]):
    """LiveData fed by a query that reruns when its tables change.

    The query runs on the disk lane; results are delivered on the main lane.
    It listens for changes only while observed, and reruns each time it
    becomes active.
    """

    def __init__(
        self, db: GithubDb, tables: frozenset[str], compute: Callable[[], T]
    ) -> None:
        super().__init__()
        self._db = db
        self._tables = tables
        self._compute = compute

    def _on_active(self) -> None:
        self._db.add_observer(self._tables, self._on_tables_changed)
        self._db.executors.disk_io.execute(self._refresh)

    def _on_inactive(self) -> None:
        self._db.remove_observer(self._on_tables_changed)

    def _on_tables_changed(self, tables: frozenset[str]) -> None:
        self._db.executors.disk_io.execute(self._refresh)

    def _refresh(self) -> None:
        try:
            value = self._compute()
        except sqlite3.Error:
            logger.exception("query on %s failed", ", ".join(sorted(self._tables)))
            return
        self._db.executors.main_thread.execute(lambda: self._set_value(value))
