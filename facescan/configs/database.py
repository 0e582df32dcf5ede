"""
Job database configuration.

Connection either from discrete POSTGRES_* parts or from a single
POSTGRES_URL (the form Lambda receives). Any URL is normalized to an
async driver: asyncpg for PostgreSQL, aiosqlite for SQLite.

Dependencies: pydantic, pydantic_settings, sqlalchemy
System role: Database connection configuration for the job store
"""

from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict
from sqlalchemy.engine import URL, make_url

from facescan.configs.base import BaseSettings

ASYNC_DRIVERS = {"postgresql": "asyncpg", "postgres": "asyncpg", "sqlite": "aiosqlite"}


class DatabaseSettings(BaseSettings):
    """Job database connection and pool settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="POSTGRES_",
        case_sensitive=False,
        extra="ignore",
    )

    url: str | None = Field(
        default=None,
        description="Full database URL; overrides the discrete connection fields",
    )
    host: str = Field(default="localhost", description="PostgreSQL host")
    port: int = Field(default=5432, description="PostgreSQL port")
    user: str = Field(default="postgres", description="PostgreSQL user")
    password: str = Field(default="postgres", description="PostgreSQL password")
    db: str = Field(default="facescan", description="PostgreSQL database name")
    require_ssl: bool = Field(default=True, description="Require TLS (RDS)")

    pool_size: int = Field(default=5, ge=1, description="Connection pool size")
    max_overflow: int = Field(default=10, ge=0, description="Connections beyond pool_size")
    pool_timeout: int = Field(default=30, ge=1, description="Seconds to wait for a connection")
    echo_sql: bool = Field(default=False, description="Echo SQL statements to logs")
    create_tables: bool = Field(
        default=False,
        description="Create missing tables on application startup",
    )

    @field_validator("url")
    @classmethod
    def _blank_url_is_unset(cls, value: str | None) -> str | None:
        return value or None

    @property
    def database_url(self) -> URL:
        """Configured URL as given, or assembled from the discrete fields."""
        if self.url:
            return make_url(self.url)
        return URL.create(
            "postgresql",
            username=self.user,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.db,
        )

    @property
    def async_database_url(self) -> str:
        """
        URL for create_async_engine.

        Bare dialects get their async driver; asyncpg takes TLS as ``ssl``
        rather than libpq's ``sslmode``.
        """
        url = self.database_url
        if "+" not in url.drivername and url.drivername in ASYNC_DRIVERS:
            backend = "postgresql" if url.drivername == "postgres" else url.drivername
            url = url.set(drivername=f"{backend}+{ASYNC_DRIVERS[url.drivername]}")
        if url.get_backend_name() == "postgresql":
            query = dict(url.query)
            sslmode = query.pop("sslmode", None)
            if self.require_ssl or sslmode == "require":
                query.setdefault("ssl", "require")
            url = url.set(query=query)
        return url.render_as_string(hide_password=False)
