"""Database connection bootstrap."""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError

from queryforge.core.config import PlaceholderStyle, QueryConfig
from queryforge.core.errors import DatabaseUnavailableError
from queryforge.core.logging import color_palette, log
from queryforge.db.connection import SqlAlchemyConnection
from queryforge.query.builder import QueryBuilder


class PoolConfig(BaseModel):
    """Connection pool settings; ignored for SQLite."""

    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_pre_ping: bool = True


class DbConfig(BaseSettings):
    """
    Where and how to connect.

    Values come from arguments or from ``QUERYFORGE_DB_*`` environment
    variables, e.g. ``QUERYFORGE_DB_DRIVER=postgresql+psycopg``.
    """

    model_config = SettingsConfigDict(
        env_prefix="QUERYFORGE_DB_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    driver: str = "sqlite"
    database: Optional[str] = None
    user: Optional[str] = None
    password: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    echo: bool = False
    pool: PoolConfig = PoolConfig()

    @property
    def is_sqlite(self) -> bool:
        return self.driver.split("+")[0] == "sqlite"

    @property
    def url(self) -> URL:
        return URL.create(
            drivername=self.driver,
            username=self.user,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database,
        )


class DbClient:
    """Owns the SQLAlchemy engine and hands out connections the builder can use."""

    def __init__(self, config: Optional[DbConfig] = None, engine: Optional[Engine] = None):
        self.config = config or DbConfig()
        self.engine = engine or create_engine(self.config.url, **self._engine_options())

    def _engine_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {"echo": self.config.echo}
        if self.config.is_sqlite:
            # connections are handed across threads by FastAPI's threadpool
            options["connect_args"] = {"check_same_thread": False}
        else:
            options.update(self.config.pool.model_dump())
        return options

    @property
    def placeholder_style(self) -> PlaceholderStyle:
        return PlaceholderStyle.from_paramstyle(self.engine.dialect.paramstyle)

    @property
    def query_config(self) -> QueryConfig:
        return QueryConfig(placeholder_style=self.placeholder_style)

    def query(self, table: str, model: Any = None) -> QueryBuilder:
        """New builder whose placeholders match this engine's driver."""
        return QueryBuilder(table, model=model, config=self.query_config)

    def test_connection(self) -> None:
        """Ping the database, raising DatabaseUnavailableError if it is unreachable."""
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            log.error(f"Database connection failed: {color_palette['dim'](e)}")
            raise DatabaseUnavailableError(f"failed to ping database: {e}") from e
        log.success(f"Connected to {color_palette['table'](self.engine.url.render_as_string(hide_password=True))}")

    @contextmanager
    def connect(self, **execution_options: Any) -> Iterator[SqlAlchemyConnection]:
        """Yield a connection inside a transaction; commit on success, roll back on error."""
        with self.engine.begin() as connection:
            yield SqlAlchemyConnection(connection, execution_options or None)

    def get_connection(self) -> Iterator[SqlAlchemyConnection]:
        """FastAPI dependency: one transactional connection per request."""
        with self.connect() as connection:
            yield connection

    def dispose(self) -> None:
        self.engine.dispose()
