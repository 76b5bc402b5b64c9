"""
Pooled PostgreSQL access for the tover store.

One DatabaseConnectionPool is opened per process (per CLI run or per test
session) and shared by PostgresStore and SchemaManager. Connections hand
rows back as dicts.
"""
import os
import time
from contextlib import contextmanager
from typing import Any, Iterator

from psycopg import Connection, Cursor, OperationalError
from psycopg.conninfo import make_conninfo
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from tover.observability.logger import get_logger

logger = get_logger(__name__)


class PoolNotOpenError(RuntimeError):
    """Raised when a connection is requested before open() or after close()."""


class DatabaseConnectionPool:
    """
    psycopg_pool.ConnectionPool with dict rows, startup retries and small
    query helpers.

    Settings not passed explicitly fall back to DB_HOST, DB_PORT, DB_NAME,
    DB_USER and DB_PASSWORD.
    """

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        database: str | None = None,
        user: str | None = None,
        password: str | None = None,
        min_size: int = 1,
        max_size: int = 10,
        timeout: float = 30.0,
    ) -> None:
        """
        Args:
            host: Database host
            port: Database port
            database: Database name
            user: Database user
            password: Database password (required here or in DB_PASSWORD)
            min_size: Connections kept open
            max_size: Upper bound on concurrent connections
            timeout: Seconds to wait for a connection (also the connect timeout)

        Raises:
            ValueError: If no password is available
        """
        self.host = host or os.getenv("DB_HOST", "localhost")
        self.port = port or int(os.getenv("DB_PORT", "5432"))
        self.database = database or os.getenv("DB_NAME", "tover")
        self.user = user or os.getenv("DB_USER", "tover")
        password = password or os.getenv("DB_PASSWORD")
        if not password:
            raise ValueError("No database password: pass one or set DB_PASSWORD")

        self.min_size = min_size
        self.max_size = max_size
        self.timeout = timeout

        # make_conninfo quotes values, so passwords with spaces are safe
        self.conninfo = make_conninfo(
            host=self.host,
            port=self.port,
            dbname=self.database,
            user=self.user,
            password=password,
            connect_timeout=max(int(timeout), 1),
        )

        self._pool: ConnectionPool | None = None

    @classmethod
    def from_config(cls, config) -> "DatabaseConnectionPool":
        """Build a pool from a DatabaseConfig."""
        return cls(**config.pool_kwargs())

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    def open(self, max_retries: int = 3, retry_delay: float = 2.0) -> None:
        """
        Open the pool, waiting until min_size connections are up.

        A database that is still starting (containers, CI) gets
        max_retries attempts, retry_delay seconds apart.

        Raises:
            OperationalError: If every attempt fails
        """
        if self._pool is not None:
            return

        last_error: OperationalError | None = None
        for attempt in range(1, max_retries + 1):
            pool = ConnectionPool(
                conninfo=self.conninfo,
                min_size=self.min_size,
                max_size=self.max_size,
                timeout=self.timeout,
                kwargs={"row_factory": dict_row},
                open=False,
            )
            try:
                pool.open(wait=True, timeout=self.timeout)
            except OperationalError as e:  # PoolTimeout included
                pool.close()
                last_error = e
                logger.warning(
                    "Database not reachable",
                    extra={"host": self.host, "attempt": attempt, "error_type": type(e).__name__},
                )
                if attempt < max_retries:
                    time.sleep(retry_delay)
                continue

            self._pool = pool
            logger.info(
                "Database pool opened",
                extra={"host": self.host, "database": self.database, "pool_max": self.max_size},
            )
            return

        raise OperationalError(
            f"Could not reach {self.host}:{self.port}/{self.database} "
            f"after {max_retries} attempts: {last_error}"
        ) from last_error

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()
            self._pool = None

    @contextmanager
    def get_connection(self) -> Iterator[Connection]:
        """
        Borrow a connection.

        The pool commits when the block exits cleanly and rolls back when
        it raises.

        Raises:
            PoolNotOpenError: If the pool is not open
        """
        if self._pool is None:
            raise PoolNotOpenError("Connection pool is not open")

        with self._pool.connection() as conn:
            yield conn

    @contextmanager
    def get_cursor(self) -> Iterator[Cursor]:
        with self.get_connection() as conn:
            with conn.cursor() as cur:
                yield cur

    @contextmanager
    def transaction(self) -> Iterator[Cursor]:
        """Cursor inside an explicit transaction; one write batch per block."""
        with self.get_connection() as conn:
            with conn.transaction(), conn.cursor() as cur:
                yield cur

    def execute_query(self, query, params: Any = None) -> list[dict]:
        """Run a statement that returns rows and fetch them all."""
        with self.get_cursor() as cur:
            cur.execute(query, params)
            return cur.fetchall()

    def execute_command(self, command, params: Any = None) -> int:
        """Run a statement for its effect; returns the affected row count."""
        with self.get_cursor() as cur:
            cur.execute(command, params)
            return cur.rowcount

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
