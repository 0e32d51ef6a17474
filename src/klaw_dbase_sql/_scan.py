from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from glob import iglob
from itertools import chain, islice
from struct import error as StructError
from pathlib import Path
from typing import Any, Literal

import polars as pl
from dbfread import DBF
from polars import DataFrame, Expr, LazyFrame, Schema
from polars.io.plugins import register_io_source

from ._encoding import resolve_encoding, validate_encoding
from .errors import EmptySources, EncodingError, InvalidHeader, SchemaMismatch

Encoding = Literal[
    'utf8',
    'utf8-lossy',
    'ascii',
    'cp1252',
    'cp850',
    'cp437',
    'cp852',
    'cp866',
    'cp865',
    'cp861',
    'cp874',
    'cp1255',
    'cp1256',
    'cp1250',
    'cp1251',
    'cp1254',
    'cp1253',
    'gbk',
    'big5',
    'shift_jis',
    'euc-jp',
    'euc-kr',
]

# dBase field type code -> polars dtype; N, B and 0 depend on the descriptor
_FIELD_TYPES: dict[str, pl.DataType] = {
    'C': pl.String(),
    'V': pl.String(),
    'M': pl.String(),
    'I': pl.Int64(),
    '+': pl.Int64(),
    'F': pl.Float64(),
    'O': pl.Float64(),
    'Y': pl.Decimal(scale=4),
    'L': pl.Boolean(),
    'D': pl.Date(),
    'T': pl.Datetime('us'),
    '@': pl.Datetime('us'),
    'G': pl.Binary(),
    'P': pl.Binary(),
}

_NULL_FLAGS = '0'
_TABLE_SUFFIX = '.dbf'


def expand_str(source: str | Path, *, glob: bool) -> Iterator[str]:
    expanded = str(Path(source).expanduser())
    if glob and '*' in expanded:
        yield from sorted(iglob(expanded))
    elif Path(expanded).is_dir():
        tables = (p for p in Path(expanded).iterdir() if p.suffix.lower() == _TABLE_SUFFIX and p.is_file())
        yield from sorted(str(p) for p in tables)
    else:
        yield expanded


def _field_dtype(field: Any) -> pl.DataType:
    if field.type == 'N':
        return pl.Float64() if field.decimal_count > 0 else pl.Int64()
    if field.type == 'B':
        return pl.Float64() if field.length == 8 else pl.Binary()
    return _FIELD_TYPES.get(field.type, pl.String())


def _open_table(source: str, codec: str, errors: str, lowercase_names: bool) -> DBF:
    try:
        return DBF(
            source,
            encoding=codec,
            char_decode_errors=errors,
            lowernames=lowercase_names,
            recfactory=dict,
        )
    except (StructError, ValueError) as exc:
        # truncated, empty or non-dBase file
        raise InvalidHeader(f'Cannot read dBase header of {source!r}: {exc}') from exc


def _table_schema(table: DBF) -> Schema:
    return Schema({field.name: _field_dtype(field) for field in table.fields if field.type != _NULL_FLAGS})


def _batched(records: Iterable[dict[str, Any]], size: int) -> Iterator[list[dict[str, Any]]]:
    it = iter(records)
    while batch := list(islice(it, size)):
        yield batch


def scan_dbase(
    sources: Sequence[str | Path] | str | Path,
    *,
    batch_size: int = 8192,
    encoding: Encoding | str = 'cp1252',
    skip_deleted: bool = True,
    validate_schema: bool = True,
    lowercase_names: bool = False,
    glob: bool = True,
) -> LazyFrame:
    """Scan a dBase file or files.

    Parameters:
        sources: The dBase file or files to scan. Directories expand to the files they contain
            and patterns containing `*` are globbed.
        batch_size: The number of records per batch handed to polars. Defaults to 8192.
        encoding: The encoding of character and memo fields. Defaults to "cp1252".
        skip_deleted: Whether to skip records flagged as deleted. Defaults to True.
        validate_schema: Whether all files must share the same field layout. Defaults to True.
        lowercase_names: Whether to lowercase the field names. Defaults to False.
        glob: Whether to expand glob patterns. Defaults to True.

    Returns:
        LazyFrame: The scanned dBase file.

    Raises:
        EmptySources: If no file matched the sources.
        EncodingError: If the encoding is not supported.
        InvalidHeader: If a file is empty, truncated or not a dBase file.
        SchemaMismatch: If `validate_schema` is set and the files have different layouts.

    Example:
        ??? example "Scan a single dBase file"

            ```python
            import polars as pl
            from klaw_dbase_sql import scan_dbase

            df: pl.LazyFrame = scan_dbase("data.dbf")
            ```

        ??? example "Scan every file in a directory"

            ```python
            import polars as pl
            from klaw_dbase_sql import scan_dbase

            df: pl.LazyFrame = scan_dbase("exports/")
            ```

        ??? example "Scan with a custom encoding"

            ```python
            import polars as pl
            from klaw_dbase_sql import scan_dbase

            df: pl.LazyFrame = scan_dbase("data.dbf", encoding="cp850")
            ```
    """
    # normalize sources
    strs: list[str] = []
    match sources:
        case str() | Path():
            strs.extend(expand_str(sources, glob=glob))
        case _:
            for source in sources:
                strs.extend(expand_str(source, glob=glob))

    if len(strs) == 0:
        raise EmptySources

    if not validate_encoding(encoding):
        raise EncodingError(f'Unsupported encoding: {encoding}')
    resolved = resolve_encoding(encoding)

    tables = [_open_table(s, resolved.codec, resolved.errors, lowercase_names) for s in strs]
    schema = _table_schema(tables[0])
    if validate_schema:
        for source, table in zip(strs[1:], tables[1:]):
            other = _table_schema(table)
            if other != schema:
                raise SchemaMismatch(f'Schema of {source!r} does not match {strs[0]!r}: {other} != {schema}')

    def_batch_size = batch_size

    def get_schema() -> Schema:
        return schema

    def records() -> Iterator[dict[str, Any]]:
        for table in tables:
            yield from table if skip_deleted else chain(table, table.deleted)

    def source_generator(
        with_columns: list[str] | None,
        predicate: Expr | None,
        n_rows: int | None,
        batch_size: int | None,
    ) -> Iterator[DataFrame]:
        columns = list(schema.names()) if with_columns is None else with_columns
        if not columns:
            # row counts still need one column to carry the height
            columns = list(schema.names())[:1]
        batch_schema = {name: schema[name] for name in columns}

        for chunk in _batched(records(), batch_size or def_batch_size):
            batch = pl.DataFrame(
                [{name: record.get(name) for name in columns} for record in chunk],
                schema=batch_schema,
                strict=False,
            )
            if predicate is not None:
                batch = batch.filter(predicate)
            if n_rows is None:
                yield batch
            else:
                batch = batch[:n_rows]
                n_rows -= len(batch)
                yield batch
                if n_rows == 0:
                    break

    try:
        return register_io_source(source_generator, schema=get_schema)
    except TypeError:
        return register_io_source(source_generator, schema=get_schema())


def read_dbase(
    sources: Sequence[str | Path] | str | Path,
    *,
    columns: Sequence[int | str] | None = None,
    n_rows: int | None = None,
    row_index_name: str | None = None,
    row_index_offset: int = 0,
    batch_size: int = 8192,
    encoding: Encoding | str = 'cp1252',
    skip_deleted: bool = True,
    validate_schema: bool = True,
    lowercase_names: bool = False,
    glob: bool = True,
) -> DataFrame:
    """Read a dBase file or files into a DataFrame.

    Parameters:
        sources: The dBase file or files to read.
        columns: Column names or positions to read. Defaults to None, which reads all columns.
        n_rows: The number of rows to read. Defaults to None, which reads all rows.
        row_index_name: The name of the row index column. Defaults to None.
        row_index_offset: The offset to add to the row index. Defaults to 0.
        batch_size: The number of records per batch. Defaults to 8192.
        encoding: The encoding of character and memo fields. Defaults to "cp1252".
        skip_deleted: Whether to skip records flagged as deleted. Defaults to True.
        validate_schema: Whether all files must share the same field layout. Defaults to True.
        lowercase_names: Whether to lowercase the field names. Defaults to False.
        glob: Whether to expand glob patterns. Defaults to True.

    Returns:
        DataFrame: The read dBase file as a DataFrame.

    Example:
        ??? example "Read two columns of the first ten records"

            ```python
            import polars as pl
            from klaw_dbase_sql import read_dbase

            df: pl.DataFrame = read_dbase("data.dbf", columns=["NAME", "AGE"], n_rows=10)
            ```
    """
    lazy = scan_dbase(
        sources,
        batch_size=batch_size,
        encoding=encoding,
        skip_deleted=skip_deleted,
        validate_schema=validate_schema,
        lowercase_names=lowercase_names,
        glob=glob,
    )
    if columns is not None:
        lazy = lazy.select([pl.nth(c) if isinstance(c, int) else pl.col(c) for c in columns])
    if row_index_name is not None:
        lazy = lazy.with_row_index(row_index_name, offset=row_index_offset)
    if n_rows is not None:
        lazy = lazy.limit(n_rows)
    return lazy.collect()


def get_dbase_record_count(path: str | Path) -> int:
    """Get the number of live (not deleted) records in a dBase file.

    Parameters:
        path: The path to the dBase file.

    Returns:
        int: The number of records in the dBase file.

    Raises:
        InvalidHeader: If the file is not a readable dBase table.
    """
    match path:
        case str() | Path():
            return len(_open_table(str(path), 'cp1252', 'strict', lowercase_names=False))

        case _:
            raise TypeError('path must be a string or Path')
