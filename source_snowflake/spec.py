"""Connection specification advertised by the ``spec`` command."""

from __future__ import annotations

from typing import Any, Dict

from source_snowflake.config import KEY_PAIR, USERNAME_PASSWORD

DOCUMENTATION_URL = "https://docs.airbyte.com/integrations/sources/snowflake"

CONNECTION_SPECIFICATION: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Snowflake Source Spec",
    "type": "object",
    "required": ["host", "role", "warehouse", "database"],
    "properties": {
        "credentials": {
            "title": "Authorization Method",
            "type": "object",
            "order": 0,
            "oneOf": [
                {
                    "title": "Username and Password",
                    "type": "object",
                    "required": ["username", "password", "auth_type"],
                    "properties": {
                        "auth_type": {"type": "string", "const": USERNAME_PASSWORD, "order": 0},
                        "username": {
                            "title": "Username",
                            "description": "The username you created to allow Airbyte to access the database.",
                            "type": "string",
                            "order": 1,
                        },
                        "password": {
                            "title": "Password",
                            "description": "The password associated with the username.",
                            "type": "string",
                            "airbyte_secret": True,
                            "order": 2,
                        },
                    },
                },
                {
                    "title": "Key Pair Authentication",
                    "type": "object",
                    "required": ["username", "private_key", "auth_type"],
                    "properties": {
                        "auth_type": {"type": "string", "const": KEY_PAIR, "order": 0},
                        "username": {"title": "Username", "type": "string", "order": 1},
                        "private_key": {
                            "title": "Private Key",
                            "description": "RSA private key for the user, PEM text or base64-encoded DER.",
                            "type": "string",
                            "multiline": True,
                            "airbyte_secret": True,
                            "order": 2,
                        },
                        "private_key_password": {
                            "title": "Passphrase",
                            "description": "Passphrase for an encrypted PEM private key.",
                            "type": "string",
                            "airbyte_secret": True,
                            "order": 3,
                        },
                    },
                },
            ],
        },
        "host": {
            "title": "Account Name",
            "description": "The host domain of the snowflake instance (must include the account, region, cloud environment, and end with snowflakecomputing.com).",
            "examples": ["accountname.us-east-2.aws.snowflakecomputing.com"],
            "type": "string",
            "order": 1,
        },
        "role": {
            "title": "Role",
            "description": "The role you created for Airbyte to access Snowflake.",
            "examples": ["AIRBYTE_ROLE"],
            "type": "string",
            "order": 2,
        },
        "warehouse": {
            "title": "Warehouse",
            "description": "The warehouse you created for Airbyte to access data.",
            "examples": ["AIRBYTE_WAREHOUSE"],
            "type": "string",
            "order": 3,
        },
        "database": {
            "title": "Database",
            "description": "The database you created for Airbyte to access data.",
            "examples": ["AIRBYTE_DATABASE"],
            "type": "string",
            "order": 4,
        },
        "schema": {
            "title": "Schema",
            "description": "The source Snowflake schema tables. Leave empty to access tables from multiple schemas.",
            "examples": ["AIRBYTE_SCHEMA"],
            "type": "string",
            "order": 5,
        },
        "jdbc_url_params": {
            "title": "JDBC URL Params",
            "description": "Additional properties to pass to the driver, formatted as 'key=value' pairs separated by '&'.",
            "type": "string",
            "order": 6,
        },
    },
}


def connector_spec() -> Dict[str, Any]:
    return {
        "documentationUrl": DOCUMENTATION_URL,
        "connectionSpecification": CONNECTION_SPECIFICATION,
        "supportsIncremental": True,
        "supported_destination_sync_modes": ["overwrite", "append", "append_dedup"],
    }
