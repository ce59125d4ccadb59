"""NebulaGraph connection and session management."""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Sequence

from nebula3.Config import Config as PoolConfig
from nebula3.gclient.net import ConnectionPool, Session
from nebula3.data.ResultSet import ResultSet

from ..config import Config, describe_hosts, load_config
from ..errors import BatchExecutionError, GraphConnectionError, StatementError
from .values import NULL_CELL

logger = logging.getLogger(__name__)

_USE_PREFIX = re.compile(r"^\s*USE\s", re.IGNORECASE)


def _cell_text(value: Any) -> str:
    """Render one engine value the way it appears in a string table."""
    if value.is_null():
        return str(value.as_null())
    if value.is_empty():
        return NULL_CELL
    if value.is_string():
        return f'"{value.as_string()}"'
    if value.is_bool():
        return "true" if value.as_bool() else "false"
    if value.is_int():
        return str(value.as_int())
    if value.is_double():
        return repr(value.as_double())
    if value.is_datetime():
        dt = value.as_datetime()
        return "%04d-%02d-%02dT%02d:%02d:%02d.%06d" % (
            dt.get_year(),
            dt.get_month(),
            dt.get_day(),
            dt.get_hour(),
            dt.get_minute(),
            dt.get_sec(),
            dt.get_microsec(),
        )
    if value.is_date():
        d = value.as_date()
        return "%04d-%02d-%02d" % (d.get_year(), d.get_month(), d.get_day())
    if value.is_time():
        t = value.as_time()
        return "%02d:%02d:%02d.%06d" % (
            t.get_hour(),
            t.get_minute(),
            t.get_sec(),
            t.get_microsec(),
        )
    if value.is_list():
        return "[" + ", ".join(_cell_text(item) for item in value.as_list()) + "]"
    return str(value)


@dataclass
class ResultTable:
    """Rectangular string view of a statement result."""

    columns: List[str] = field(default_factory=list)
    rows: List[List[str]] = field(default_factory=list)

    @classmethod
    def from_result_set(cls, result: ResultSet) -> "ResultTable":
        columns = list(result.keys())
        rows = [
            [_cell_text(value) for value in result.row_values(i)]
            for i in range(result.row_size())
        ]
        return cls(columns=columns, rows=rows)

    def as_string_table(self) -> List[List[str]]:
        """Header row followed by the data rows."""
        return [list(self.columns)] + [list(row) for row in self.rows]

    def __len__(self) -> int:
        return len(self.rows)


class NebulaClient:
    """NebulaGraph database client with connection pooling."""

    def __init__(
        self,
        config: Optional[Config] = None,
        pool: Optional[ConnectionPool] = None,
    ) -> None:
        """Initialize NebulaGraph client with configuration.

        Args:
            config: Connection settings; loaded from the environment when omitted.
            pool: An already initialized pool to use instead of creating one.
        """
        self.config = config or load_config()
        self._pool: Optional[ConnectionPool] = pool

    @property
    def space(self) -> str:
        return self.config.nebula_space

    def connect(self) -> None:
        """Establish the connection pool to NebulaGraph."""
        if self._pool is not None:
            return

        pool_config = PoolConfig()
        pool_config.max_connection_pool_size = self.config.nebula_max_connection_pool_size
        pool_config.timeout = self.config.nebula_timeout
        pool_config.idle_time = self.config.nebula_idle_time

        addresses = [(host, self.config.nebula_port) for host in self.config.nebula_hosts]
        pool = ConnectionPool()
        try:
            ok = pool.init(addresses, pool_config)
        except Exception as e:
            logger.error(f"Failed to initialize NebulaGraph connection pool: {e}")
            pool.close()
            raise GraphConnectionError(
                f"Cannot connect to NebulaGraph at {describe_hosts(self.config)}. "
                "Please ensure graphd is running and accessible."
            ) from e
        if not ok:
            pool.close()
            raise GraphConnectionError(
                f"Fail to initialize the connection pool, hosts: {describe_hosts(self.config)}"
            )
        self._pool = pool

    def close(self) -> None:
        """Close every connection in the pool."""
        if self._pool is not None:
            self._pool.close()
            self._pool = None

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Context manager for a pooled session, released on exit."""
        if self._pool is None:
            self.connect()

        assert self._pool is not None  # for type checkers
        try:
            session = self._pool.get_session(
                self.config.nebula_user, self.config.nebula_password
            )
        except Exception as e:
            raise GraphConnectionError(f"Nebula DB connecting error. {e}") from e
        try:
            yield session
        finally:
            session.release()

    def with_space(self, statement: str) -> str:
        """Prefix a statement with ``USE <space>;`` unless it selects one itself."""
        if _USE_PREFIX.match(statement):
            return statement
        return f"USE {self.space}; {statement}"

    def _run(self, session: Session, statement: str) -> ResultTable:
        ngql = self.with_space(statement)
        logger.debug("Executing nGQL: %s", ngql)
        try:
            result = session.execute(ngql)
        except Exception as e:
            raise GraphConnectionError(f"nGQL executing failed. {e}") from e
        if not result.is_succeeded():
            raise StatementError(result.error_code(), result.error_msg(), statement)
        return ResultTable.from_result_set(result)

    def execute(self, statement: str) -> ResultTable:
        """Run one statement in its own session.

        Raises:
            GraphConnectionError: No session could be acquired.
            StatementError: The engine rejected the statement.
        """
        with self.session() as session:
            return self._run(session, statement)

    def execute_batch(self, statements: Sequence[str]) -> List[ResultTable]:
        """Run statements one after another on a single session.

        The batch is not atomic: it stops at the first failure and statements
        before it stay applied.

        Raises:
            GraphConnectionError: No session could be acquired.
            BatchExecutionError: Carries the results completed before the
                failing statement and the statement's own error, which is a
                StatementError or, when the session broke mid-batch, a
                GraphConnectionError.
        """
        results: List[ResultTable] = []
        with self.session() as session:
            for index, statement in enumerate(statements):
                try:
                    results.append(self._run(session, statement))
                except (StatementError, GraphConnectionError) as e:
                    raise BatchExecutionError(
                        index=index, results=results, error=e, statement=statement
                    ) from e
        return results

    def verify_connectivity(self) -> bool:
        """Verify connection to NebulaGraph."""
        try:
            self.execute("SHOW HOSTS;")
            return True
        except Exception as e:
            logger.error("NebulaGraph connectivity check failed: %s", e, exc_info=True)
            return False

    def __enter__(self) -> "NebulaClient":
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
