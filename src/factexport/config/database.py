"""Database connection configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from sqlalchemy import URL

from .env import optional_env_var
from .errors import ConfigurationError, MissingConfigurationError

DEFAULT_DRIVERNAME: Final[str] = "postgresql+psycopg"
DEFAULT_PORT: Final[int] = 5432
DEFAULT_SCHEMA: Final[str] = "public"

DATABASE_URI_ENV: Final[str] = "FACTEXPORT_DATABASE_URI"
DATABASE_SCHEMA_ENV: Final[str] = "FACTEXPORT_DATABASE_SCHEMA"

# libpq-style fallbacks for the individual connection parameters
_PARAMETER_ENV: Final[dict[str, str]] = {
    "host": "PGHOST",
    "port": "PGPORT",
    "database": "PGDATABASE",
    "user": "PGUSER",
    "password": "PGPASSWORD",
}


@dataclass(frozen=True, slots=True)
class ConnectionParameters:
    host: str | None = None
    port: str | int | None = None
    database: str | None = None
    user: str | None = None
    password: str | None = None


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str | URL
    schema: str | None = DEFAULT_SCHEMA

    def describe(self) -> str:
        """Return the URI with any password masked, suitable for logs."""

        if isinstance(self.uri, URL):
            return self.uri.render_as_string(hide_password=True)
        return self.uri


def _resolve_parameter(name: str, explicit: str | int | None) -> str | None:
    if explicit is not None and str(explicit).strip():
        return str(explicit)
    return optional_env_var(_PARAMETER_ENV[name])


def _parse_port(value: str | None) -> int:
    if value is None:
        return DEFAULT_PORT
    try:
        port = int(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid port: {value!r}") from exc
    if not 0 < port < 65536:  # noqa: PLR2004
        raise ConfigurationError(f"Port out of range: {port}")
    return port


def build_database_url(parameters: ConnectionParameters) -> URL:
    """Assemble a PostgreSQL URL from discrete connection parameters."""

    host = _resolve_parameter("host", parameters.host)
    database = _resolve_parameter("database", parameters.database)
    user = _resolve_parameter("user", parameters.user)
    missing = [
        name
        for name, value in (("host", host), ("database", database), ("user", user))
        if value is None
    ]
    if missing:
        raise MissingConfigurationError(
            missing,
            hint=f"pass --{missing[0]} or set {_PARAMETER_ENV[missing[0]]}",
        )

    return URL.create(
        DEFAULT_DRIVERNAME,
        username=user,
        password=_resolve_parameter("password", parameters.password),
        host=host,
        port=_parse_port(_resolve_parameter("port", parameters.port)),
        database=database,
    )


def get_database_config(
    *,
    uri: str | None = None,
    parameters: ConnectionParameters | None = None,
    schema: str | None = None,
) -> DatabaseConfig:
    """Resolve the database configuration from explicit values and the environment.

    An explicit ``uri`` wins, then ``FACTEXPORT_DATABASE_URI``, and finally the
    discrete connection parameters (falling back to the ``PG*`` variables).
    """

    effective_schema = schema or optional_env_var(DATABASE_SCHEMA_ENV)
    env_uri = optional_env_var(DATABASE_URI_ENV)
    resolved_uri = uri or env_uri
    if resolved_uri:
        # a full URI names its own database; only PostgreSQL gets the public default
        if effective_schema is None and resolved_uri.startswith("postgresql"):
            effective_schema = DEFAULT_SCHEMA
        return DatabaseConfig(uri=resolved_uri, schema=effective_schema)

    url = build_database_url(parameters or ConnectionParameters())
    return DatabaseConfig(uri=url, schema=effective_schema or DEFAULT_SCHEMA)
