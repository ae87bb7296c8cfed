"""Snowflake source: spec, connection check, catalog discovery, and record reads."""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, Iterator, List, Optional

from source_snowflake.config import SnowflakeSourceConfig, load_config
from source_snowflake.errors import (
    ConfigError,
    empty_username_error,
    format_connection_error,
)
from source_snowflake.models import (
    AirbyteCatalog,
    AirbyteStream,
    ConfiguredAirbyteCatalog,
    ConfiguredAirbyteStream,
    ConnectionStatus,
    Field,
    Status,
    SyncMode,
    create_airbyte_stream,
    record_message,
    state_message,
)
from source_snowflake.run_logger import RunLogger
from source_snowflake.snowflake_client import ColumnInfo, SnowflakeClient, quote_identifier
from source_snowflake.spec import connector_spec
from source_snowflake.state import StateManager
from source_snowflake.type_mapping import is_cursor_type, to_json_schema, to_json_value

SUPPORTED_SYNC_MODES = [SyncMode.FULL_REFRESH, SyncMode.INCREMENTAL]


class SnowflakeSource:
    """Source connector backed by ``SnowflakeClient``."""

    def __init__(
        self,
        client_factory: Callable[[SnowflakeSourceConfig], SnowflakeClient] = SnowflakeClient,
        logger: Optional[RunLogger] = None,
        batch_size: int = 1000,
    ) -> None:
        self.client_factory = client_factory
        self.logger = logger or RunLogger()
        self.batch_size = batch_size

    def spec(self) -> Dict[str, Any]:
        return connector_spec()

    def check(self, config: Any) -> ConnectionStatus:
        try:
            cfg = load_config(config)
        except ConfigError as exc:
            return ConnectionStatus(Status.FAILED, str(exc))

        if not cfg.credentials.username.strip():
            return ConnectionStatus(Status.FAILED, format_connection_error(empty_username_error()))
        missing = cfg.missing()
        if missing:
            return ConnectionStatus(Status.FAILED, f"Missing required config keys: {', '.join(missing)}")

        self.logger.info(f"Checking connection with {json.dumps(cfg.redacted(), sort_keys=True)}")

        client = self.client_factory(cfg)
        try:
            account, user, role = client.current_identity()
            if cfg.schema and cfg.schema not in client.list_schemas():
                return ConnectionStatus(
                    Status.FAILED,
                    f"Schema {cfg.schema} does not exist in database {cfg.database}",
                )
        except Exception as exc:
            message = format_connection_error(exc)
            self.logger.error(f"Check failed: {message}")
            return ConnectionStatus(Status.FAILED, message)
        finally:
            client.close()
        self.logger.info(f"Connected account={account} user={user} role={role}")
        return ConnectionStatus(Status.SUCCEEDED)

    def _schemas(self, cfg: SnowflakeSourceConfig, client: SnowflakeClient) -> List[str]:
        return [cfg.schema] if cfg.schema else client.list_schemas()

    def _streams_for_schema(self, client: SnowflakeClient, schema: str) -> List[AirbyteStream]:
        tables: Dict[str, List[ColumnInfo]] = {}
        for col in client.list_columns(schema):
            tables.setdefault(col.table, []).append(col)
        primary_keys = client.list_primary_keys(schema)

        streams = []
        for table in sorted(tables):
            cols = sorted(tables[table], key=lambda c: c.ordinal_position)
            fields = [Field.of(c.name, to_json_schema(c.data_type, c.numeric_scale)) for c in cols]
            stream = (
                create_airbyte_stream(table, schema, *fields)
                .with_supported_sync_modes(SUPPORTED_SYNC_MODES)
                .with_source_defined_primary_key([[k] for k in primary_keys.get(table, [])])
            )
            streams.append(stream)
        return streams

    def discover(self, config: Any) -> AirbyteCatalog:
        cfg = load_config(config)
        self.logger.info(f"Discovering tables with {json.dumps(cfg.redacted(), sort_keys=True)}")
        with self.client_factory(cfg) as client:
            streams: List[AirbyteStream] = []
            for schema in sorted(self._schemas(cfg, client)):
                found = self._streams_for_schema(client, schema)
                self.logger.info(f"Discovered {len(found)} tables in {cfg.database}.{schema}")
                streams.extend(found)
        return AirbyteCatalog(streams=streams)

    def read(
        self,
        config: Any,
        catalog: ConfiguredAirbyteCatalog | Dict[str, Any],
        state: Any = None,
    ) -> Iterator[Dict[str, Any]]:
        cfg = load_config(config)
        if isinstance(catalog, dict):
            catalog = ConfiguredAirbyteCatalog.from_dict(catalog)
        state_manager = StateManager(state)
        columns_by_schema: Dict[str, List[ColumnInfo]] = {}

        with self.client_factory(cfg) as client:
            for configured in catalog.streams:
                namespace = configured.stream.namespace or cfg.schema
                if not namespace:
                    raise ConfigError(f"Stream {configured.stream.name} has no namespace and no schema is configured.")
                if namespace not in columns_by_schema:
                    columns_by_schema[namespace] = client.list_columns(namespace)
                columns = {
                    c.name: c for c in columns_by_schema[namespace] if c.table == configured.stream.name
                }
                if not columns:
                    raise ValueError(f"Table {namespace}.{configured.stream.name} does not exist.")
                yield from self._read_stream(cfg, client, configured, namespace, columns, state_manager)

    def _selected_columns(
        self, configured: ConfiguredAirbyteStream, columns: Dict[str, ColumnInfo]
    ) -> List[ColumnInfo]:
        wanted = [name for name in configured.stream.properties if name in columns]
        if not wanted:
            return sorted(columns.values(), key=lambda c: c.ordinal_position)
        return [columns[name] for name in wanted]

    def _read_stream(
        self,
        cfg: SnowflakeSourceConfig,
        client: SnowflakeClient,
        configured: ConfiguredAirbyteStream,
        namespace: str,
        columns: Dict[str, ColumnInfo],
        state_manager: StateManager,
    ) -> Iterator[Dict[str, Any]]:
        name = configured.stream.name
        selected = self._selected_columns(configured, columns)
        table_ref = ".".join(quote_identifier(p) for p in (cfg.database, namespace, name))
        select_list = ", ".join(quote_identifier(c.name) for c in selected)
        sql = f"SELECT {select_list} FROM {table_ref}"
        params: List[Any] = []

        incremental = configured.sync_mode == SyncMode.INCREMENTAL
        cursor_field: List[str] = []
        cursor_value: Any = None
        if incremental:
            cursor_field = list(configured.cursor_field or configured.stream.default_cursor_field)
            if len(cursor_field) != 1:
                raise ConfigError(f"Incremental stream {namespace}.{name} needs exactly one cursor field.")
            cursor_col = columns.get(cursor_field[0])
            if cursor_col is None:
                raise ConfigError(f"Cursor field {cursor_field[0]} does not exist in {namespace}.{name}.")
            if not is_cursor_type(cursor_col.data_type):
                raise ConfigError(
                    f"Cursor field {cursor_col.name} of type {cursor_col.data_type} cannot be used in {namespace}.{name}."
                )
            if cursor_col not in selected:
                selected.append(cursor_col)
                sql = f"SELECT {select_list}, {quote_identifier(cursor_col.name)} FROM {table_ref}"
            cursor_value = state_manager.cursor_for(name, namespace, cursor_field)
            quoted_cursor = quote_identifier(cursor_col.name)
            if cursor_value is not None:
                sql += f" WHERE {quoted_cursor} > %s"
                params.append(cursor_value)
            sql += f" ORDER BY {quoted_cursor} ASC"

        self.logger.info(f"Reading {namespace}.{name} ({configured.sync_mode.value})")
        types = {c.name: c.data_type for c in selected}
        count = 0
        for row in client.iter_rows(sql, params, batch_size=self.batch_size):
            data = {k: to_json_value(v, types.get(k)) for k, v in row.items()}
            if incremental and data.get(cursor_field[0]) is not None:
                # Rows arrive ordered by the cursor, so the last non-null value is the max.
                cursor_value = data[cursor_field[0]]
            count += 1
            yield record_message(name, namespace, data)
        self.logger.info(f"Read {count} records from {namespace}.{name}")

        if incremental:
            state_manager.update(name, namespace, cursor_field, cursor_value)
            yield state_message(state_manager.to_dict())
