"""Render query results as delimited text or an aligned table."""

from __future__ import annotations

import sys
from collections.abc import Iterable
from typing import TextIO

import polars as pl

from klaw_dbase_sql._config import OutputFormat
from klaw_dbase_sql.session import StatementResult

__all__ = [
    'TABLE_OPTIONS',
    'format_delimited',
    'format_table',
    'write_results',
]

# whole result, no elision or truncation, no shape or dtype rows
TABLE_OPTIONS = {
    'tbl_formatting': 'ASCII_FULL_CONDENSED',
    'tbl_hide_column_data_types': True,
    'tbl_hide_dataframe_shape': True,
    'tbl_rows': -1,
    'tbl_cols': -1,
    'tbl_width_chars': 65_535,
    'fmt_str_lengths': 10_000,
}


def format_delimited(frame: pl.DataFrame, delimiter: str) -> str:
    """Header line then one line per row, fields joined by `delimiter`."""
    return frame.write_csv(separator=delimiter, include_header=True, line_terminator='\n')


def format_table(frame: pl.DataFrame) -> str:
    with pl.Config(**TABLE_OPTIONS):
        return f'{frame}\n'


def write_results(
    results: Iterable[StatementResult],
    output_format: OutputFormat,
    delimiter: str | None = None,
    sink: TextIO | None = None,
) -> None:
    """Write every result that produced rows to `sink` (stdout by default).

    Args:
        results: Statement results, in execution order.
        output_format: Text format to render.
        delimiter: Field delimiter for csv, tsv and dsv output.
        sink: Text stream to write to.
    """
    out = sys.stdout if sink is None else sink
    for result in results:
        if result.frame is None or result.frame.width == 0:
            continue
        if output_format is OutputFormat.TABLE:
            out.write(format_table(result.frame))
        else:
            if delimiter is None:
                raise ValueError(f'{output_format.value} output needs a delimiter')
            out.write(format_delimited(result.frame, delimiter))
    out.flush()
