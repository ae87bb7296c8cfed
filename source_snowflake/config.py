"""Connection configuration for the Snowflake source."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from dotenv import load_dotenv

from source_snowflake.errors import ConfigError


load_dotenv()

USERNAME_PASSWORD = "username/password"
KEY_PAIR = "Key Pair Authentication"

HOST_SUFFIX = ".snowflakecomputing.com"

# Keys the connector always sets itself; URL params cannot override them.
RESERVED_PARAMS = {"account", "host", "user", "password", "private_key"}


@dataclass
class SnowflakeCredentials:
    auth_type: str = USERNAME_PASSWORD
    username: str = ""
    password: str | None = None
    private_key: str | None = None
    private_key_password: str | None = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "SnowflakeCredentials":
        auth_type = raw.get("auth_type") or (KEY_PAIR if raw.get("private_key") else USERNAME_PASSWORD)
        if auth_type not in (USERNAME_PASSWORD, KEY_PAIR):
            raise ConfigError(f"Unsupported auth_type: {auth_type}")
        return cls(
            auth_type=auth_type,
            username=str(raw.get("username") or ""),
            password=raw.get("password"),
            private_key=raw.get("private_key"),
            private_key_password=raw.get("private_key_password") or None,
        )


@dataclass
class SnowflakeSourceConfig:
    host: str
    role: str
    warehouse: str
    database: str
    schema: str | None = None
    credentials: SnowflakeCredentials = field(default_factory=SnowflakeCredentials)
    jdbc_url_params: str | None = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "SnowflakeSourceConfig":
        if not isinstance(raw, dict):
            raise ConfigError("Config must be a JSON object.")
        creds_raw = raw.get("credentials")
        if creds_raw is None:
            # Legacy layout keeps username/password at the top level.
            creds_raw = {"username": raw.get("username"), "password": raw.get("password")}
        if not isinstance(creds_raw, dict):
            raise ConfigError("credentials must be a JSON object.")
        return cls(
            host=str(raw.get("host") or ""),
            role=str(raw.get("role") or ""),
            warehouse=str(raw.get("warehouse") or ""),
            database=str(raw.get("database") or ""),
            schema=raw.get("schema") or None,
            credentials=SnowflakeCredentials.from_dict(creds_raw),
            jdbc_url_params=raw.get("jdbc_url_params") or None,
        )

    @classmethod
    def from_json_file(cls, path: str | Path) -> "SnowflakeSourceConfig":
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise ConfigError(f"Could not read config file {path}: {exc}") from exc
        return cls.from_dict(raw)

    @classmethod
    def from_env(cls) -> "SnowflakeSourceConfig":
        account = os.getenv("SNOWFLAKE_ACCOUNT", "")
        host = os.getenv("SNOWFLAKE_HOST") or (f"{account}{HOST_SUFFIX}" if account else "")
        return cls(
            host=host,
            role=os.getenv("SNOWFLAKE_ROLE", ""),
            warehouse=os.getenv("SNOWFLAKE_WAREHOUSE", ""),
            database=os.getenv("SNOWFLAKE_DATABASE", ""),
            schema=os.getenv("SNOWFLAKE_SCHEMA") or None,
            credentials=SnowflakeCredentials(
                auth_type=KEY_PAIR if os.getenv("SNOWFLAKE_PRIVATE_KEY") else USERNAME_PASSWORD,
                username=os.getenv("SNOWFLAKE_USER", ""),
                password=os.getenv("SNOWFLAKE_PASSWORD"),
                private_key=os.getenv("SNOWFLAKE_PRIVATE_KEY"),
                private_key_password=os.getenv("SNOWFLAKE_PRIVATE_KEY_PASSWORD") or None,
            ),
        )

    def bare_host(self) -> str:
        host = self.host.strip()
        for prefix in ("https://", "http://"):
            if host.lower().startswith(prefix):
                host = host[len(prefix):]
        return host.rstrip("/")

    @property
    def account(self) -> str:
        host = self.bare_host()
        if host.lower().endswith(HOST_SUFFIX):
            host = host[: -len(HOST_SUFFIX)]
        return host

    def missing(self) -> List[str]:
        missing = []
        if not self.host:
            missing.append("host")
        if not self.role:
            missing.append("role")
        if not self.warehouse:
            missing.append("warehouse")
        if not self.database:
            missing.append("database")
        creds = self.credentials
        if creds.auth_type == KEY_PAIR:
            if not creds.private_key:
                missing.append("credentials.private_key")
        elif creds.password is None:
            missing.append("credentials.password")
        return missing

    def url_params(self) -> Dict[str, str]:
        """Parse ``jdbc_url_params`` (``k=v&k2=v2``) into driver keyword arguments."""
        params: Dict[str, str] = {}
        if not self.jdbc_url_params:
            return params
        for pair in self.jdbc_url_params.split("&"):
            if not pair.strip():
                continue
            if "=" not in pair:
                raise ConfigError(f"Invalid jdbc_url_params entry: {pair!r} (expected key=value)")
            key, value = pair.split("=", 1)
            params[key.strip().lower()] = value.strip()
        return params

    def connect_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            k: v for k, v in self.url_params().items() if k not in RESERVED_PARAMS
        }
        kwargs.update(
            {
                "account": self.account,
                "host": self.bare_host(),
                "user": self.credentials.username,
                "role": self.role,
                "warehouse": self.warehouse,
                "database": self.database,
                "application": "airbyte_source_snowflake",
            }
        )
        if self.schema:
            kwargs["schema"] = self.schema
        if self.credentials.auth_type == KEY_PAIR:
            kwargs["private_key"] = self.private_key_der()
        else:
            kwargs["password"] = self.credentials.password
        return kwargs

    def private_key_der(self) -> bytes | str | None:
        """PEM keys are decrypted and re-encoded as unencrypted PKCS8 DER; other values pass through."""
        key = self.credentials.private_key
        if not key or "-----BEGIN" not in key:
            return key
        password = self.credentials.private_key_password
        try:
            loaded = serialization.load_pem_private_key(
                key.encode("utf-8"), password=password.encode("utf-8") if password else None
            )
        except (TypeError, ValueError, UnsupportedAlgorithm) as exc:
            raise ConfigError(f"Could not load private key: {exc}") from exc
        return loaded.private_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )

    def redacted(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "role": self.role,
            "warehouse": self.warehouse,
            "database": self.database,
            "schema": self.schema,
            "username": self.credentials.username,
            "auth_type": self.credentials.auth_type,
        }


def load_config(source: Optional[Dict[str, Any] | str | Path | SnowflakeSourceConfig]) -> SnowflakeSourceConfig:
    if isinstance(source, SnowflakeSourceConfig):
        return source
    if source is None:
        return SnowflakeSourceConfig.from_env()
    if isinstance(source, dict):
        return SnowflakeSourceConfig.from_dict(source)
    if not isinstance(source, (str, Path)):
        raise ConfigError(f"Unsupported config type: {type(source).__name__}")
    return SnowflakeSourceConfig.from_json_file(source)
