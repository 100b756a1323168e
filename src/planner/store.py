from __future__ import annotations

import sqlite3
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

from .errors import PersistenceError


class KeyValueStore(Protocol):
    """Blob store keyed by a namespaced string (e.g. ``jee_cards``).

    - load: 未保存のキーは None を返す
    - save: 失敗時は PersistenceError を送出する
    """

    def load(self, key: str) -> str | None: ...

    def save(self, key: str, blob: str) -> None: ...


class InMemoryKeyValueStore:
    """Process-local store used by tests and ephemeral sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def load(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def save(self, key: str, blob: str) -> None:
        with self._lock:
            self._data[key] = blob


class SQLiteKeyValueStore:
    """SQLite-backed key-value store.

    1キー1行で JSON 文字列をそのまま保存する。部分更新は行わず、
    save のたびに値全体を置き換える（updated_at も更新）。
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._ensure_dirs()
        self._init_db()

    # --- low-level helpers ---
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=10.0, isolation_level=None, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        with conn:  # autocommit on pragma
            conn.execute("pragma journal_mode=WAL;")
        return conn

    def _ensure_dirs(self) -> None:
        p = Path(self.db_path)
        if p.parent and not p.parent.exists():
            p.parent.mkdir(parents=True, exist_ok=True)

    def _init_db(self) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS kv (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    );
                    """
                )
        finally:
            conn.close()

    # --- public API ---
    def load(self, key: str) -> str | None:
        try:
            conn = self._connect()
        except sqlite3.Error as exc:
            raise PersistenceError(key, f"open failed: {exc}") from exc
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?;", (key,)).fetchone()
        except sqlite3.Error as exc:
            raise PersistenceError(key, f"read failed: {exc}") from exc
        finally:
            conn.close()
        if row is None:
            return None
        return str(row["value"])

    def save(self, key: str, blob: str) -> None:
        now = datetime.now(UTC).isoformat()
        try:
            conn = self._connect()
        except sqlite3.Error as exc:
            raise PersistenceError(key, f"open failed: {exc}") from exc
        try:
            with conn:
                conn.execute(
                    """
                    INSERT INTO kv(key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at;
                    """,
                    (key, blob, now),
                )
        except sqlite3.Error as exc:
            raise PersistenceError(key, f"write failed: {exc}") from exc
        finally:
            conn.close()
