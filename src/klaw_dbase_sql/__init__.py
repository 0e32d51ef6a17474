"""Run SQL queries against dBase files.

`Session` executes SQL on the polars engine and understands
`CREATE EXTERNAL TABLE <name> STORED AS dbase LOCATION '<path>'`.

`scan_dbase` scans a dBase file or files and returns a `LazyFrame`.

`read_dbase` reads a dBase file or files into a `DataFrame`.
"""

from klaw_dbase_sql._config import CliConfig, OutputFormat
from klaw_dbase_sql._scan import get_dbase_record_count, read_dbase, scan_dbase
from klaw_dbase_sql.errors import (
    ArgumentError,
    ArgumentInvalid,
    DbaseError,
    DbaseSqlError,
    EmptySources,
    EncodingError,
    InvalidHeader,
    QueryError,
    QueryFailed,
    QueryFileError,
    QueryFileUnreadable,
    SchemaMismatch,
)
from klaw_dbase_sql.output import write_results
from klaw_dbase_sql.providers import TableFactory
from klaw_dbase_sql.session import Session, StatementResult
from klaw_dbase_sql.statements import ExternalTable, parse_external_table, split_statements

__version__ = '0.1.0'

__all__ = [
    'ArgumentError',
    'ArgumentInvalid',
    'CliConfig',
    'DbaseError',
    'DbaseSqlError',
    'EmptySources',
    'EncodingError',
    'InvalidHeader',
    'ExternalTable',
    'OutputFormat',
    'QueryError',
    'QueryFailed',
    'QueryFileError',
    'QueryFileUnreadable',
    'SchemaMismatch',
    'Session',
    'StatementResult',
    'TableFactory',
    '__version__',
    'get_dbase_record_count',
    'parse_external_table',
    'read_dbase',
    'scan_dbase',
    'split_statements',
    'write_results',
]
