from __future__ import annotations

from datetime import date, datetime, time, timezone
from decimal import Decimal

from source_snowflake.models import JsonSchemaType
from source_snowflake.type_mapping import is_cursor_type, to_json_schema, to_json_value


def test_numeric_types():
    assert to_json_schema("NUMBER", 0) == JsonSchemaType.INTEGER
    assert to_json_schema("NUMBER(38,0)") == JsonSchemaType.INTEGER
    assert to_json_schema("NUMBER", 2) == JsonSchemaType.NUMBER
    assert to_json_schema("FLOAT") == JsonSchemaType.NUMBER
    assert to_json_schema("bigint") == JsonSchemaType.INTEGER


def test_text_and_temporal_types():
    assert to_json_schema("TEXT") == JsonSchemaType.STRING
    assert to_json_schema("VARCHAR(200)") == JsonSchemaType.STRING
    assert to_json_schema("DATE") == JsonSchemaType.STRING_DATE
    assert to_json_schema("TIME") == JsonSchemaType.STRING_TIME_WITHOUT_TIMEZONE
    assert to_json_schema("TIMESTAMP_NTZ") == JsonSchemaType.STRING_TIMESTAMP_WITHOUT_TIMEZONE
    assert to_json_schema("TIMESTAMP_TZ") == JsonSchemaType.STRING_TIMESTAMP_WITH_TIMEZONE
    assert to_json_schema("TIMESTAMP_LTZ") == JsonSchemaType.STRING_TIMESTAMP_WITH_TIMEZONE


def test_other_types():
    assert to_json_schema("BOOLEAN") == JsonSchemaType.BOOLEAN
    assert to_json_schema("BINARY") == JsonSchemaType.STRING_BASE_64
    assert to_json_schema("VARIANT") == JsonSchemaType.OBJECT
    assert to_json_schema("ARRAY") == JsonSchemaType.ARRAY
    assert to_json_schema("GEOGRAPHY") == JsonSchemaType.STRING


def test_schema_is_a_copy():
    schema = to_json_schema("DATE")
    schema["format"] = "changed"
    assert JsonSchemaType.STRING_DATE["format"] == "date"


def test_cursor_types():
    assert is_cursor_type("NUMBER")
    assert is_cursor_type("DATE")
    assert is_cursor_type("TIMESTAMP_NTZ")
    assert is_cursor_type("TEXT")
    assert not is_cursor_type("BOOLEAN")
    assert not is_cursor_type("VARIANT")
    assert not is_cursor_type("BINARY")


def test_value_conversion():
    assert to_json_value(Decimal("1")) == 1
    assert isinstance(to_json_value(Decimal("1")), int)
    assert to_json_value(Decimal("1.5")) == 1.5
    assert to_json_value(date(2004, 10, 19)) == "2004-10-19"
    assert to_json_value(datetime(2005, 10, 19, 1, 2, 3, tzinfo=timezone.utc)) == "2005-10-19T01:02:03+00:00"
    assert to_json_value(time(1, 2, 3)) == "01:02:03"
    assert to_json_value(b"\x00\x01") == "AAE="
    assert to_json_value('{"a": 1}', "VARIANT") == {"a": 1}
    assert to_json_value("[1, 2]", "ARRAY") == [1, 2]
    assert to_json_value("not json", "VARIANT") == "not json"
    assert to_json_value('{"a": 1}', "TEXT") == '{"a": 1}'
    assert to_json_value(None) is None


def test_non_finite_floats_become_strings():
    assert to_json_value(float("nan"), "FLOAT") == "NaN"
    assert to_json_value(float("inf"), "FLOAT") == "Infinity"
    assert to_json_value(float("-inf"), "DOUBLE") == "-Infinity"
    assert to_json_value(Decimal("NaN"), "NUMBER") == "NaN"


def test_wide_decimals_stay_exact():
    value = Decimal("12345678901234567890.12")
    converted = to_json_value(value, "NUMBER")
    assert isinstance(converted, Decimal)
    assert str(converted) == "12345678901234567890.12"
