"""SQL session over polars with external table support."""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import polars as pl

from klaw_dbase_sql._logging import get_logger
from klaw_dbase_sql._scan import scan_dbase
from klaw_dbase_sql.errors import DbaseError, QueryError
from klaw_dbase_sql.providers import TableFactory, default_table_factories
from klaw_dbase_sql.statements import ExternalTable, is_ddl, parse_external_table, split_statements

__all__ = [
    'Session',
    'StatementResult',
]

logger = get_logger(__name__)

# errors raised by polars or by the dBase scan while planning or collecting
_ENGINE_ERRORS = (
    pl.exceptions.PolarsError,
    DbaseError,
    OSError,
    ValueError,
)


@dataclass(frozen=True)
class StatementResult:
    """Outcome of one statement. `frame` is None for statements that produce no rows."""

    statement: str
    frame: pl.DataFrame | None = None


class Session:
    """A SQL session that can read dBase files as external tables.

    Statements run on a `polars.SQLContext`. `CREATE EXTERNAL TABLE` is handled
    here: the `STORED AS` file type selects a table factory, whose LazyFrame is
    registered under the table name.

    Example:
        ```python
        from klaw_dbase_sql import Session

        session = Session()
        results = session.execute(
            "CREATE EXTERNAL TABLE t STORED AS dbase LOCATION 'data.dbf'; SELECT * FROM t LIMIT 5"
        )
        print(results[-1].frame)
        ```
    """

    def __init__(self, table_factories: Mapping[str, TableFactory] | None = None) -> None:
        self._ctx = pl.SQLContext()
        self._factories: dict[str, TableFactory] = {}
        factories = default_table_factories() if table_factories is None else table_factories
        for file_type, factory in factories.items():
            self.register_table_factory(file_type, factory)

    def register_table_factory(self, file_type: str, factory: TableFactory) -> None:
        """Register the provider used for `STORED AS <file_type>`."""
        self._factories[file_type.upper()] = factory

    def tables(self) -> list[str]:
        """Names of the registered tables."""
        return self._ctx.tables()

    def register_dbase(self, name: str, path: str | Path, **scan_kwargs: Any) -> None:
        """Register a dBase file (or directory, or glob) as table `name`.

        Raises:
            QueryError: If the table exists or the file cannot be opened.
        """
        if name in self._ctx.tables():
            raise QueryError(f'table {name!r} already exists')
        try:
            frame = scan_dbase(path, **scan_kwargs)
        except _ENGINE_ERRORS as exc:
            raise QueryError(str(exc)) from exc
        self._ctx.register(name, frame)
        logger.debug('table_registered', table=name, file_type='DBASE', location=str(path))

    def create_external_table(self, table: ExternalTable, *, statement: str | None = None) -> None:
        """Register the table described by a CREATE EXTERNAL TABLE statement."""
        if table.name in self._ctx.tables():
            if table.if_not_exists:
                logger.debug('table_exists', table=table.name)
                return
            raise QueryError(f'table {table.name!r} already exists', statement=statement)

        factory = self._factories.get(table.file_type)
        if factory is None:
            supported = ', '.join(sorted(self._factories))
            msg = f'unsupported file type {table.file_type!r} (expected one of: {supported})'
            raise QueryError(msg, statement=statement)

        try:
            frame = factory.create(table)
            # resolve the schema now so a missing or corrupt file fails here
            frame.collect_schema()
        except QueryError as exc:
            raise QueryError(exc.reason, statement=statement) from exc
        except _ENGINE_ERRORS as exc:
            raise QueryError(str(exc), statement=statement) from exc

        self._ctx.register(table.name, frame)
        logger.debug('table_registered', table=table.name, file_type=table.file_type, location=table.location)

    def sql(self, statement: str) -> StatementResult:
        """Execute a single statement and collect its result.

        Raises:
            QueryError: If the statement fails to parse, plan or execute.
        """
        table = parse_external_table(statement)
        if table is not None:
            self.create_external_table(table, statement=statement)
            return StatementResult(statement)

        start = time.perf_counter()
        try:
            frame = self._ctx.execute(statement, eager=False).collect()
        except _ENGINE_ERRORS as exc:
            raise QueryError(str(exc), statement=statement) from exc

        logger.debug(
            'statement_executed',
            statement=statement,
            rows=frame.height,
            elapsed_ms=round((time.perf_counter() - start) * 1000, 3),
        )
        if is_ddl(statement):
            return StatementResult(statement)
        return StatementResult(statement, frame)

    def execute(self, text: str) -> list[StatementResult]:
        """Execute every statement in `text`, in order.

        Statements are separated by semicolons. Execution stops at the first
        failing statement.

        Raises:
            QueryError: If any statement fails.
        """
        return [self.sql(statement) for statement in split_statements(text)]
