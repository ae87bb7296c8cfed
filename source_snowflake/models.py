"""Protocol value objects emitted by the source: status, catalog, and messages."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class Status(str, Enum):
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class SyncMode(str, Enum):
    FULL_REFRESH = "full_refresh"
    INCREMENTAL = "incremental"


class DestinationSyncMode(str, Enum):
    APPEND = "append"
    OVERWRITE = "overwrite"
    APPEND_DEDUP = "append_dedup"


@dataclass
class ConnectionStatus:
    status: Status
    message: str | None = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"status": self.status.value}
        if self.message is not None:
            out["message"] = self.message
        return out


class JsonSchemaType:
    """JSON-schema fragments for the column types the source can emit."""

    STRING = {"type": "string"}
    STRING_BASE_64 = {"type": "string", "contentEncoding": "base64"}
    STRING_DATE = {"type": "string", "format": "date"}
    STRING_TIME_WITHOUT_TIMEZONE = {
        "type": "string",
        "format": "time",
        "airbyte_type": "time_without_timezone",
    }
    STRING_TIMESTAMP_WITHOUT_TIMEZONE = {
        "type": "string",
        "format": "date-time",
        "airbyte_type": "timestamp_without_timezone",
    }
    STRING_TIMESTAMP_WITH_TIMEZONE = {
        "type": "string",
        "format": "date-time",
        "airbyte_type": "timestamp_with_timezone",
    }
    INTEGER = {"type": "number", "airbyte_type": "integer"}
    NUMBER = {"type": "number"}
    BOOLEAN = {"type": "boolean"}
    OBJECT = {"type": "object"}
    ARRAY = {"type": "array"}


@dataclass(frozen=True)
class Field:
    name: str
    json_schema: Dict[str, Any]

    @classmethod
    def of(cls, name: str, json_schema: Dict[str, Any]) -> "Field":
        return cls(name=name, json_schema=dict(json_schema))


@dataclass
class AirbyteStream:
    name: str
    namespace: str | None
    json_schema: Dict[str, Any]
    supported_sync_modes: List[SyncMode] = field(default_factory=lambda: [SyncMode.FULL_REFRESH])
    source_defined_primary_key: List[List[str]] = field(default_factory=list)
    source_defined_cursor: bool = False
    default_cursor_field: List[str] = field(default_factory=list)

    def with_supported_sync_modes(self, modes: List[SyncMode]) -> "AirbyteStream":
        self.supported_sync_modes = list(modes)
        return self

    def with_source_defined_primary_key(self, keys: List[List[str]]) -> "AirbyteStream":
        self.source_defined_primary_key = [list(k) for k in keys]
        return self

    @property
    def properties(self) -> Dict[str, Any]:
        return self.json_schema.get("properties", {})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "namespace": self.namespace,
            "json_schema": self.json_schema,
            "supported_sync_modes": [m.value for m in self.supported_sync_modes],
            "source_defined_cursor": self.source_defined_cursor,
            "default_cursor_field": list(self.default_cursor_field),
            "source_defined_primary_key": [list(k) for k in self.source_defined_primary_key],
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "AirbyteStream":
        return cls(
            name=raw["name"],
            namespace=raw.get("namespace"),
            json_schema=raw.get("json_schema") or {"type": "object", "properties": {}},
            supported_sync_modes=[SyncMode(m) for m in raw.get("supported_sync_modes") or ["full_refresh"]],
            source_defined_primary_key=[list(k) for k in raw.get("source_defined_primary_key") or []],
            source_defined_cursor=bool(raw.get("source_defined_cursor", False)),
            default_cursor_field=list(raw.get("default_cursor_field") or []),
        )


def create_airbyte_stream(name: str, namespace: str | None, *fields: Field) -> AirbyteStream:
    """Build a stream whose JSON schema is an object with one property per field."""
    return AirbyteStream(
        name=name,
        namespace=namespace,
        json_schema={
            "type": "object",
            "properties": {f.name: dict(f.json_schema) for f in fields},
        },
    )


@dataclass
class AirbyteCatalog:
    streams: List[AirbyteStream] = field(default_factory=list)

    def with_streams(self, streams: List[AirbyteStream]) -> "AirbyteCatalog":
        self.streams = list(streams)
        return self

    def stream(self, name: str, namespace: str | None = None) -> AirbyteStream | None:
        for s in self.streams:
            if s.name == name and (namespace is None or s.namespace == namespace):
                return s
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {"streams": [s.to_dict() for s in self.streams]}


@dataclass
class ConfiguredAirbyteStream:
    stream: AirbyteStream
    sync_mode: SyncMode = SyncMode.FULL_REFRESH
    cursor_field: List[str] = field(default_factory=list)
    destination_sync_mode: DestinationSyncMode = DestinationSyncMode.APPEND
    primary_key: List[List[str]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ConfiguredAirbyteStream":
        return cls(
            stream=AirbyteStream.from_dict(raw["stream"]),
            sync_mode=SyncMode(raw.get("sync_mode") or "full_refresh"),
            cursor_field=list(raw.get("cursor_field") or []),
            destination_sync_mode=DestinationSyncMode(raw.get("destination_sync_mode") or "append"),
            primary_key=[list(k) for k in raw.get("primary_key") or []],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stream": self.stream.to_dict(),
            "sync_mode": self.sync_mode.value,
            "cursor_field": list(self.cursor_field),
            "destination_sync_mode": self.destination_sync_mode.value,
            "primary_key": [list(k) for k in self.primary_key],
        }


@dataclass
class ConfiguredAirbyteCatalog:
    streams: List[ConfiguredAirbyteStream] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ConfiguredAirbyteCatalog":
        return cls(streams=[ConfiguredAirbyteStream.from_dict(s) for s in raw.get("streams") or []])

    @classmethod
    def from_catalog(
        cls,
        catalog: AirbyteCatalog,
        sync_mode: SyncMode = SyncMode.FULL_REFRESH,
        cursor_field: Optional[List[str]] = None,
    ) -> "ConfiguredAirbyteCatalog":
        return cls(
            streams=[
                ConfiguredAirbyteStream(
                    stream=s,
                    sync_mode=sync_mode,
                    cursor_field=list(cursor_field or []),
                    primary_key=[list(k) for k in s.source_defined_primary_key],
                )
                for s in catalog.streams
            ]
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"streams": [s.to_dict() for s in self.streams]}


def _now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def record_message(stream: str, namespace: str | None, data: Dict[str, Any]) -> Dict[str, Any]:
    record: Dict[str, Any] = {"stream": stream, "data": data, "emitted_at": _now_ms()}
    if namespace:
        record["namespace"] = namespace
    return {"type": "RECORD", "record": record}


def state_message(state: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "STATE", "state": {"data": state}}


def log_message(level: str, message: str) -> Dict[str, Any]:
    return {"type": "LOG", "log": {"level": level, "message": message}}


def spec_message(spec: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "SPEC", "spec": spec}


def catalog_message(catalog: AirbyteCatalog) -> Dict[str, Any]:
    return {"type": "CATALOG", "catalog": catalog.to_dict()}


def connection_status_message(status: ConnectionStatus) -> Dict[str, Any]:
    return {"type": "CONNECTION_STATUS", "connectionStatus": status.to_dict()}
