"""Error types and connection-failure messages for the Snowflake source."""

from __future__ import annotations

from typing import Any

CONNECTION_FAILED_PREFIX = "Could not connect with provided configuration"

# Snowflake reports a login without a user name as an invalid authorization.
EMPTY_USERNAME_SQLSTATE = "28000"
EMPTY_USERNAME_ERRNO = 200011

# Error numbers the Python driver raises itself (network, DNS, local validation).
CLIENT_ERRNO_RANGE = range(250000, 260000)


class ConfigError(ValueError):
    """Raised when a source config is missing keys or malformed."""


class SnowflakeConnectionError(RuntimeError):
    """Connection failure carrying the server's SQLSTATE and error number."""

    def __init__(self, message: str, sqlstate: str | None = None, errno: int | None = None) -> None:
        super().__init__(message)
        self.msg = message
        self.sqlstate = sqlstate
        self.errno = errno


def empty_username_error() -> SnowflakeConnectionError:
    return SnowflakeConnectionError(
        "Login name must be specified.",
        sqlstate=EMPTY_USERNAME_SQLSTATE,
        errno=EMPTY_USERNAME_ERRNO,
    )


def _error_text(exc: BaseException) -> str:
    msg = getattr(exc, "raw_msg", None) or getattr(exc, "msg", None)
    return str(msg or exc).strip()


def _errno(exc: BaseException) -> int | None:
    raw: Any = getattr(exc, "errno", None)
    try:
        return int(raw) if raw is not None else None
    except (TypeError, ValueError):
        return None


def is_server_error(exc: BaseException) -> bool:
    """True when the warehouse answered with a SQLSTATE, as opposed to a client-side failure."""
    errno = _errno(exc)
    sqlstate = getattr(exc, "sqlstate", None)
    return bool(sqlstate) and errno is not None and errno not in CLIENT_ERRNO_RANGE


def format_connection_error(exc: BaseException) -> str:
    if is_server_error(exc):
        return f"State code: {exc.sqlstate}; Error code: {_errno(exc)}; Message: {_error_text(exc)}"  # type: ignore[attr-defined]
    return f"{CONNECTION_FAILED_PREFIX}. Error: {_error_text(exc)}"
