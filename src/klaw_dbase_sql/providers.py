"""Table providers backing CREATE EXTERNAL TABLE ... STORED AS <file_type>."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

import polars as pl

from klaw_dbase_sql._scan import scan_dbase
from klaw_dbase_sql.errors import QueryError

if TYPE_CHECKING:
    from klaw_dbase_sql.statements import ExternalTable

__all__ = [
    'CsvTableFactory',
    'DbaseTableFactory',
    'NdJsonTableFactory',
    'ParquetTableFactory',
    'TableFactory',
    'default_table_factories',
]

_TRUE = frozenset({'true', 't', 'yes', '1'})
_FALSE = frozenset({'false', 'f', 'no', '0'})


@runtime_checkable
class TableFactory(Protocol):
    """Creates the LazyFrame behind an external table."""

    def create(self, table: ExternalTable) -> pl.LazyFrame: ...


def _option_bool(table: ExternalTable, key: str, value: str) -> bool:
    lowered = value.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise QueryError(f'option {key!r} of table {table.name!r} expects true or false, got {value!r}')


def _option_int(table: ExternalTable, key: str, value: str) -> int:
    try:
        parsed = int(value)
    except ValueError:
        parsed = 0
    if parsed <= 0:
        raise QueryError(f'option {key!r} of table {table.name!r} expects a positive integer, got {value!r}')
    return parsed


def _check_options(table: ExternalTable, allowed: frozenset[str]) -> dict[str, str]:
    """Strip the `format.` prefix and reject options the provider does not know."""
    options = {key.removeprefix('format.'): value for key, value in table.options.items()}
    unknown = sorted(set(options) - allowed)
    if unknown:
        msg = f'unsupported option(s) {", ".join(unknown)} for {table.file_type} table {table.name!r}'
        raise QueryError(msg)
    return options


class DbaseTableFactory:
    """Reads dBase files through `scan_dbase`.

    Options: `encoding`, `skip_deleted`, `batch_size`, `lowercase_names`.
    """

    allowed_options = frozenset({'encoding', 'skip_deleted', 'batch_size', 'lowercase_names'})

    def create(self, table: ExternalTable) -> pl.LazyFrame:
        options = _check_options(table, self.allowed_options)
        kwargs: dict[str, object] = {}
        if 'encoding' in options:
            kwargs['encoding'] = options['encoding']
        if 'skip_deleted' in options:
            kwargs['skip_deleted'] = _option_bool(table, 'skip_deleted', options['skip_deleted'])
        if 'lowercase_names' in options:
            kwargs['lowercase_names'] = _option_bool(table, 'lowercase_names', options['lowercase_names'])
        if 'batch_size' in options:
            kwargs['batch_size'] = _option_int(table, 'batch_size', options['batch_size'])
        return scan_dbase(table.location, **kwargs)


class CsvTableFactory:
    """Reads CSV files through `polars.scan_csv`. Options: `delimiter`, `has_header`."""

    allowed_options = frozenset({'delimiter', 'has_header'})

    def create(self, table: ExternalTable) -> pl.LazyFrame:
        options = _check_options(table, self.allowed_options)
        has_header = True if table.has_header is None else table.has_header
        if 'has_header' in options:
            has_header = _option_bool(table, 'has_header', options['has_header'])
        separator = options.get('delimiter', ',')
        if len(separator) != 1:
            raise QueryError(f'option delimiter of table {table.name!r} must be a single character')
        return pl.scan_csv(table.location, has_header=has_header, separator=separator)


class ParquetTableFactory:
    """Reads Parquet files through `polars.scan_parquet`."""

    def create(self, table: ExternalTable) -> pl.LazyFrame:
        _check_options(table, frozenset())
        return pl.scan_parquet(table.location)


class NdJsonTableFactory:
    """Reads newline-delimited JSON through `polars.scan_ndjson`."""

    def create(self, table: ExternalTable) -> pl.LazyFrame:
        _check_options(table, frozenset())
        return pl.scan_ndjson(table.location)


def default_table_factories() -> dict[str, TableFactory]:
    """Providers registered in every new session, keyed by upper-case file type."""
    ndjson = NdJsonTableFactory()
    return {
        'DBASE': DbaseTableFactory(),
        'CSV': CsvTableFactory(),
        'PARQUET': ParquetTableFactory(),
        'NDJSON': ndjson,
        'JSON': ndjson,
    }
