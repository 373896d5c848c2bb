from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import duckdb

from .config import Config, CACHE_DB_ENV, DEFAULT_CACHE_DB
from .errors import StorageQuotaError


@dataclass(frozen=True)
class TableSchema:
    name: str
    ddl: str


def _resolve_db_path(
    db_path: str | os.PathLike[str] | None = None,
    config: Config | None = None,
) -> str:
    cfg = config or Config(cache_db_default=DEFAULT_CACHE_DB, cache_db_env=CACHE_DB_ENV)
    candidate = db_path or os.environ.get(cfg.cache_db_env, cfg.cache_db_default)
    return str(Path(candidate).expanduser())


class DuckDb:
    """Wrapper around a DuckDB connection holding the viewer's key-value cache."""

    def __init__(
        self,
        db_path: str | os.PathLike[str] | None = None,
        *,
        config: Config | None = None,
    ):
        self._config = config or Config()
        self.db_path = _resolve_db_path(db_path, self._config)
        self._conn = None

        self.initialize_db()

    @property
    def conn(self) -> duckdb.DuckDBPyConnection:
        if self._conn is None:
            self._conn = duckdb.connect(database=self.db_path, read_only=False)
        return self._conn

    def __enter__(self):
        return self.conn

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __call__(self, query: str, parameters: tuple = ()) -> duckdb.DuckDBPyRelation:
        conn = self.conn
        params = parameters if parameters else None
        return conn.sql(query, params=params)

    def initialize_db(self):
        """Create necessary tables if they don't exist."""
        schemas = [
            TableSchema(
                name="cache_entries",
                ddl="""
                CREATE TABLE IF NOT EXISTS cache_entries (
                    cache_key TEXT PRIMARY KEY,
                    payload TEXT,
                    access_seq BIGINT
                );
                """,
            ),
        ]
        for schema in schemas:
            self(schema.ddl)

    def _next_access_seq(self) -> int:
        row = self("SELECT COALESCE(MAX(access_seq), 0) + 1 FROM cache_entries;").fetchone()
        return int(row[0]) if row else 1

    def get_payload(self, key: str, *, touch: bool = True) -> str | None:
        """Return the raw payload for ``key``, marking it recently used unless ``touch`` is False."""
        row = self("SELECT payload FROM cache_entries WHERE cache_key = ?;", (key,)).fetchone()
        if row is None:
            return None
        if touch:
            self(
                "UPDATE cache_entries SET access_seq = ? WHERE cache_key = ?;",
                (self._next_access_seq(), key),
            )
        payload = row[0]
        if isinstance(payload, (bytes, bytearray)):
            payload = payload.decode("utf-8")
        return payload

    def put_payload(self, key: str, payload: str) -> None:
        """Store payload for ``key``. If it already exists, update it."""
        query = """
            INSERT INTO cache_entries (cache_key, payload, access_seq)
            VALUES (?, ?, ?)
            ON CONFLICT (cache_key) DO UPDATE
            SET payload = EXCLUDED.payload,
                access_seq = EXCLUDED.access_seq;
            """
        self(query, (key, payload, self._next_access_seq()))

    def delete(self, key: str) -> None:
        self("DELETE FROM cache_entries WHERE cache_key = ?;", (key,))

    def keys(self, *, oldest_first: bool = False, limit: int | None = None) -> list[str]:
        order = "access_seq" if oldest_first else "cache_key"
        query = f"SELECT cache_key FROM cache_entries ORDER BY {order}"
        if limit is not None:
            query += f" LIMIT {int(limit)}"
        return [row[0] for row in self(query + ";").fetchall()]

    def count(self) -> int:
        row = self("SELECT COUNT(*) FROM cache_entries;").fetchone()
        return int(row[0]) if row else 0

    def truncate(self) -> None:
        self("DELETE FROM cache_entries;")


class DuckDbKeyValueStore:
    """KeyValueStore adapter persisting cache entries in DuckDB."""

    def __init__(self, db: DuckDb):
        self._db = db

    def get_item(self, key: str) -> str | None:
        return self._db.get_payload(key)

    def set_item(self, key: str, payload: str) -> None:
        try:
            self._db.put_payload(key, payload)
        except duckdb.Error as exc:
            raise StorageQuotaError(key, f"Could not write {key!r}: {exc}") from exc

    def remove_item(self, key: str) -> None:
        self._db.delete(key)

    def keys(self) -> list[str]:
        return self._db.keys()

    def least_recent_keys(self, count: int) -> list[str]:
        if count <= 0:
            return []
        return self._db.keys(oldest_first=True, limit=count)

    def clear(self) -> None:
        self._db.truncate()

    def __len__(self) -> int:
        return self._db.count()
