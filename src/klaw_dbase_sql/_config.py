"""CLI configuration: OutputFormat enum and the validated CliConfig."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from klaw_dbase_sql.errors import ArgumentError

__all__ = [
    'CliConfig',
    'OutputFormat',
]


class OutputFormat(Enum):
    """Text format of query results."""

    CSV = 'csv'
    TSV = 'tsv'
    DSV = 'dsv'
    TABLE = 'table'


_FIXED_DELIMITERS = {
    OutputFormat.CSV: ',',
    OutputFormat.TSV: '\t',
}


@dataclass(frozen=True)
class CliConfig:
    """Validated command line configuration.

    Attributes:
        execute: Inline SQL text (`-e`).
        file: Path of a file holding SQL text (`-f`).
        output_format: Format of the printed results.
        delimiter: Field delimiter, used only by the dsv format.
        log_level: Logging level for stderr logs.
        log_json: Emit logs as JSON lines.

    Raises:
        ArgumentError: If the flags conflict or a required one is missing.
    """

    execute: str | None = None
    file: Path | None = None
    output_format: OutputFormat = OutputFormat.TABLE
    delimiter: str | None = None
    log_level: str = 'WARNING'
    log_json: bool = False

    def __post_init__(self) -> None:
        if (self.execute is None) == (self.file is None):
            msg = 'exactly one of --execute (-e) or --file (-f) is required'
            raise ArgumentError(msg)

        if self.output_format is OutputFormat.DSV and self.delimiter is None:
            msg = '--delimiter-for-dsv is required with --output-format dsv'
            raise ArgumentError(msg)

        if self.delimiter is not None and (len(self.delimiter) != 1 or not self.delimiter.isascii()):
            msg = f'delimiter must be a single ASCII character, got {self.delimiter!r}'
            raise ArgumentError(msg)

    @property
    def field_delimiter(self) -> str | None:
        """Separator for delimited output, or None for the table format."""
        if self.output_format is OutputFormat.DSV:
            return self.delimiter
        return _FIXED_DELIMITERS.get(self.output_format)
