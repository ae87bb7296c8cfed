"""Snowflake connection wrapper with the metadata queries discovery needs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from source_snowflake.config import SnowflakeSourceConfig

try:
    import snowflake.connector
except Exception:  # pragma: no cover
    snowflake = None  # type: ignore[assignment]
else:  # pragma: no cover
    snowflake = snowflake.connector


SYSTEM_SCHEMAS = {"INFORMATION_SCHEMA"}


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


@dataclass
class ColumnInfo:
    schema: str
    table: str
    name: str
    data_type: str
    numeric_scale: int | None
    ordinal_position: int


class SnowflakeClient:
    """Thin data-access helper over ``snowflake.connector`` for one source config."""

    def __init__(self, cfg: SnowflakeSourceConfig, login_timeout: int = 60) -> None:
        self.cfg = cfg
        self.login_timeout = login_timeout
        self._conn = None

    def is_configured(self) -> bool:
        return snowflake is not None and not self.cfg.missing()

    def connect(self):
        if self._conn:
            return self._conn
        if snowflake is None:
            raise RuntimeError("snowflake-connector-python is not installed.")
        missing = self.cfg.missing()
        if missing:
            raise RuntimeError(f"Snowflake not configured: missing {', '.join(missing)}")
        kwargs: Dict[str, Any] = {"login_timeout": self.login_timeout}
        kwargs.update(self.cfg.connect_kwargs())
        self._conn = snowflake.connect(**kwargs)  # type: ignore[union-attr]
        return self._conn

    def close(self) -> None:
        if self._conn is None:
            return
        try:
            self._conn.close()
        finally:
            self._conn = None

    def __enter__(self) -> "SnowflakeClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    def query(self, sql: str, params: Optional[List[Any]] = None) -> List[tuple]:
        conn = self.connect()
        with conn.cursor() as cur:
            cur.execute(sql, params or ())
            return cur.fetchall()

    def execute(self, sql: str, params: Optional[List[Any]] = None) -> None:
        conn = self.connect()
        with conn.cursor() as cur:
            cur.execute(sql, params or ())

    def iter_rows(
        self, sql: str, params: Optional[List[Any]] = None, batch_size: int = 1000
    ) -> Iterator[Dict[str, Any]]:
        conn = self.connect()
        with conn.cursor() as cur:
            cur.execute(sql, params or ())
            names = [d[0] for d in cur.description or []]
            while True:
                batch = cur.fetchmany(batch_size)
                if not batch:
                    break
                for row in batch:
                    yield dict(zip(names, row))

    def current_identity(self) -> tuple:
        rows = self.query("SELECT CURRENT_ACCOUNT(), CURRENT_USER(), CURRENT_ROLE()")
        return rows[0] if rows else ("unknown", "unknown", "unknown")

    def list_schemas(self) -> List[str]:
        rows = self.query(
            f"""
            SELECT SCHEMA_NAME
            FROM {quote_identifier(self.cfg.database)}.INFORMATION_SCHEMA.SCHEMATA
            ORDER BY SCHEMA_NAME
            """
        )
        return [str(r[0]) for r in rows if str(r[0]).upper() not in SYSTEM_SCHEMAS]

    def list_columns(self, schema: str) -> List[ColumnInfo]:
        rows = self.query(
            f"""
            SELECT TABLE_SCHEMA, TABLE_NAME, COLUMN_NAME, DATA_TYPE, NUMERIC_SCALE, ORDINAL_POSITION
            FROM {quote_identifier(self.cfg.database)}.INFORMATION_SCHEMA.COLUMNS
            WHERE TABLE_SCHEMA=%s
            ORDER BY TABLE_NAME, ORDINAL_POSITION
            """,
            [schema],
        )
        return [
            ColumnInfo(
                schema=str(r[0]),
                table=str(r[1]),
                name=str(r[2]),
                data_type=str(r[3]),
                numeric_scale=int(r[4]) if r[4] is not None else None,
                ordinal_position=int(r[5]),
            )
            for r in rows
        ]

    def list_primary_keys(self, schema: str) -> Dict[str, List[str]]:
        """Map table name to its primary key columns, in key order."""
        conn = self.connect()
        with conn.cursor() as cur:
            cur.execute(
                f"SHOW PRIMARY KEYS IN SCHEMA {quote_identifier(self.cfg.database)}.{quote_identifier(schema)}"
            )
            names = [str(d[0]).lower() for d in cur.description or []]
            rows = [dict(zip(names, r)) for r in cur.fetchall()]
        keyed: Dict[str, List[tuple]] = {}
        for r in rows:
            keyed.setdefault(str(r["table_name"]), []).append((int(r["key_sequence"]), str(r["column_name"])))
        return {table: [col for _, col in sorted(cols)] for table, cols in keyed.items()}
