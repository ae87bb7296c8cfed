from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

from source_snowflake.snowflake_client import SnowflakeClient

SELECT_RX = re.compile(
    r'^SELECT (?P<cols>.+?) FROM "(?P<db>(?:[^"]|"")+)"\."(?P<schema>(?:[^"]|"")+)"\."(?P<table>(?:[^"]|"")+)"'
    r'(?: WHERE "(?P<where>(?:[^"]|"")+)" > %s)?'
    r'(?: ORDER BY "(?P<order>(?:[^"]|"")+)" ASC)?$',
    re.S,
)
IDENT_RX = re.compile(r'"((?:[^"]|"")+)"')

PK_DESCRIPTION = [
    ("created_on",),
    ("database_name",),
    ("schema_name",),
    ("table_name",),
    ("column_name",),
    ("key_sequence",),
    ("constraint_name",),
]


def _unquote(name: str) -> str:
    return name.replace('""', '"')


def _sort_key(value: Any):
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


class FakeDriverError(Exception):
    """Mimics the attributes of snowflake.connector errors."""

    def __init__(self, msg: str, errno: int | None = None, sqlstate: str | None = None):
        super().__init__(f"{errno} ({sqlstate}): {msg}")
        self.raw_msg = msg
        self.errno = errno
        self.sqlstate = sqlstate


class FakeCursor:
    def __init__(self, conn: "FakeConn"):
        self.conn = conn
        self.description = None
        self._rows: list[tuple] = []

    def execute(self, sql: str, params=()):
        self.conn.executed.append((sql, list(params or [])))
        self._rows, self.description = self.conn.answer(sql.strip(), list(params or []))
        return self

    def fetchall(self):
        rows, self._rows = self._rows, []
        return rows

    def fetchmany(self, size: int):
        batch, self._rows = self._rows[:size], self._rows[size:]
        return batch

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class FakeConn:
    def __init__(self, database: str = "DB"):
        self.database = database
        self.tables: dict[tuple[str, str], dict[str, Any]] = {}
        self.executed: list[tuple[str, list[Any]]] = []
        self.closed = False

    def add_table(self, schema, table, columns, primary_key=(), rows=()):
        """columns: list of (name, data_type, numeric_scale)."""
        self.tables[(schema, table)] = {
            "columns": list(columns),
            "pk": list(primary_key),
            "rows": [dict(r) for r in rows],
        }

    def cursor(self):
        return FakeCursor(self)

    def close(self):
        self.closed = True

    def answer(self, sql: str, params: list[Any]):
        sql_u = sql.upper()
        if "CURRENT_ACCOUNT()" in sql_u:
            return [("ACCT", "USER", "ROLE")], [("CURRENT_ACCOUNT()",), ("CURRENT_USER()",), ("CURRENT_ROLE()",)]
        if "INFORMATION_SCHEMA.SCHEMATA" in sql_u:
            schemas = sorted({s for s, _ in self.tables} | {"INFORMATION_SCHEMA"})
            return [(s,) for s in schemas], [("SCHEMA_NAME",)]
        if "INFORMATION_SCHEMA.COLUMNS" in sql_u:
            out = []
            for (schema, table), spec in sorted(self.tables.items()):
                if schema != params[0]:
                    continue
                for pos, (name, data_type, scale) in enumerate(spec["columns"], start=1):
                    out.append((schema, table, name, data_type, scale, pos))
            return out, [("TABLE_SCHEMA",)]
        if sql_u.startswith("SHOW PRIMARY KEYS"):
            schema = _unquote(IDENT_RX.findall(sql)[-1])
            out = []
            for (s, table), spec in sorted(self.tables.items()):
                if s != schema:
                    continue
                # Snowflake does not guarantee key order in SHOW output.
                for seq, col in reversed(list(enumerate(spec["pk"], start=1))):
                    out.append(("2026-01-01", self.database, s, table, col, seq, f"PK_{table}"))
            return out, PK_DESCRIPTION
        m = SELECT_RX.match(sql)
        if m:
            spec = self.tables[(_unquote(m["schema"]), _unquote(m["table"]))]
            cols = [_unquote(c) for c in IDENT_RX.findall(m["cols"])]
            rows = spec["rows"]
            if m["where"]:
                where = _unquote(m["where"])
                bound = params[0]
                if isinstance(bound, str):
                    rows = [r for r in rows if r.get(where) is not None and str(_sort_key(r[where])) > bound]
                else:
                    rows = [r for r in rows if r.get(where) is not None and r[where] > bound]
            if m["order"]:
                order = _unquote(m["order"])
                rows = sorted(rows, key=lambda r: (r.get(order) is None, _sort_key(r.get(order))))
            return [tuple(r.get(c) for c in cols) for r in rows], [(c,) for c in cols]
        return [], None


def client_factory(conn: FakeConn):
    def make(cfg):
        client = SnowflakeClient(cfg)
        client._conn = conn
        return client

    return make


def failing_factory(exc: Exception):
    def make(cfg):
        client = SnowflakeClient(cfg)

        def boom():
            raise exc

        client.connect = boom
        return client

    return make


BASE_CONFIG = {
    "host": "acct.us-east-2.aws.snowflakecomputing.com",
    "role": "AIRBYTE_ROLE",
    "warehouse": "AIRBYTE_WAREHOUSE",
    "database": "DB",
    "schema": "PUBLIC",
    "credentials": {"auth_type": "username/password", "username": "airbyte", "password": "secret"},
}


def base_config(**overrides) -> dict:
    cfg = {k: (dict(v) if isinstance(v, dict) else v) for k, v in BASE_CONFIG.items()}
    cfg.update(overrides)
    return cfg
