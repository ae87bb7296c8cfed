"""Snowflake column types -> JSON schema types, plus value conversion for records."""

from __future__ import annotations

import base64
import json
import math
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict

from source_snowflake.models import JsonSchemaType

INTEGER_TYPES = {"INT", "INTEGER", "BIGINT", "SMALLINT", "TINYINT", "BYTEINT"}
DECIMAL_TYPES = {"NUMBER", "DECIMAL", "NUMERIC"}
FLOAT_TYPES = {"FLOAT", "FLOAT4", "FLOAT8", "DOUBLE", "DOUBLE PRECISION", "REAL"}
TEXT_TYPES = {"VARCHAR", "CHAR", "CHARACTER", "STRING", "TEXT", "NCHAR", "NVARCHAR", "NVARCHAR2", "CHAR VARYING"}
BINARY_TYPES = {"BINARY", "VARBINARY"}
SEMI_STRUCTURED_TYPES = {"VARIANT", "OBJECT"}

TYPE_MAP: Dict[str, Dict[str, Any]] = {
    "BOOLEAN": JsonSchemaType.BOOLEAN,
    "DATE": JsonSchemaType.STRING_DATE,
    "TIME": JsonSchemaType.STRING_TIME_WITHOUT_TIMEZONE,
    "DATETIME": JsonSchemaType.STRING_TIMESTAMP_WITHOUT_TIMEZONE,
    "TIMESTAMP": JsonSchemaType.STRING_TIMESTAMP_WITHOUT_TIMEZONE,
    "TIMESTAMP_NTZ": JsonSchemaType.STRING_TIMESTAMP_WITHOUT_TIMEZONE,
    "TIMESTAMP_LTZ": JsonSchemaType.STRING_TIMESTAMP_WITH_TIMEZONE,
    "TIMESTAMP_TZ": JsonSchemaType.STRING_TIMESTAMP_WITH_TIMEZONE,
    "VARIANT": JsonSchemaType.OBJECT,
    "OBJECT": JsonSchemaType.OBJECT,
    "ARRAY": JsonSchemaType.ARRAY,
}

NON_CURSOR_TYPES = {"BOOLEAN", "VARIANT", "OBJECT", "ARRAY", "GEOGRAPHY", "GEOMETRY"} | BINARY_TYPES


def _base_type(data_type: str) -> str:
    """Strip precision/length: ``NUMBER(38,0)`` -> ``NUMBER``."""
    return (data_type or "").split("(")[0].strip().upper()


def to_json_schema(data_type: str, numeric_scale: int | None = None) -> Dict[str, Any]:
    base = _base_type(data_type)
    if base in INTEGER_TYPES:
        return dict(JsonSchemaType.INTEGER)
    if base in DECIMAL_TYPES:
        if numeric_scale is None or int(numeric_scale) == 0:
            return dict(JsonSchemaType.INTEGER)
        return dict(JsonSchemaType.NUMBER)
    if base in FLOAT_TYPES:
        return dict(JsonSchemaType.NUMBER)
    if base in TEXT_TYPES:
        return dict(JsonSchemaType.STRING)
    if base in BINARY_TYPES:
        return dict(JsonSchemaType.STRING_BASE_64)
    return dict(TYPE_MAP.get(base, JsonSchemaType.STRING))


def is_cursor_type(data_type: str) -> bool:
    return _base_type(data_type) not in NON_CURSOR_TYPES


def _non_finite(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    return "Infinity" if value > 0 else "-Infinity"


def to_json_value(value: Any, data_type: str | None = None) -> Any:
    if value is None:
        return None
    base = _base_type(data_type or "")
    if isinstance(value, Decimal):
        if not value.is_finite():
            return _non_finite(float(value))
        if value == value.to_integral_value():
            return int(value)
        # Kept exact; the writer emits it as a JSON number.
        return value
    if isinstance(value, float) and not math.isfinite(value):
        return _non_finite(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, str) and (base in SEMI_STRUCTURED_TYPES or base == "ARRAY"):
        # The driver returns semi-structured values as JSON text.
        try:
            return json.loads(value)
        except ValueError:
            return value
    return value
