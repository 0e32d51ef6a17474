"""Command line entry point: parse flags, read the query, run it, print results."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import NoReturn

import msgspec

from klaw_dbase_sql import __version__
from klaw_dbase_sql._config import CliConfig, OutputFormat
from klaw_dbase_sql._logging import configure_logging, get_logger
from klaw_dbase_sql.errors import ArgumentError, DbaseSqlError, QueryFileError
from klaw_dbase_sql.output import write_results
from klaw_dbase_sql.session import Session

__all__ = [
    'build_parser',
    'main',
    'parse_args',
    'resolve_query',
    'run',
]

PROG = 'klaw-dbase-sql'

logger = get_logger(__name__)


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises ArgumentError instead of exiting."""

    def error(self, message: str) -> NoReturn:
        raise ArgumentError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog=PROG,
        description='Run SQL queries against dBase (.dbf) files.',
        epilog=(
            "Register a file with: CREATE EXTERNAL TABLE <name> STORED AS dbase LOCATION '<path.dbf>'. "
            'Multiple statements are separated by semicolons.'
        ),
    )
    method = parser.add_mutually_exclusive_group(required=True)
    method.add_argument(
        '-e',
        '--execute',
        metavar='SQL',
        help='SQL text to execute',
    )
    method.add_argument(
        '-f',
        '--file',
        type=Path,
        metavar='PATH',
        help='File containing the SQL text to execute',
    )
    parser.add_argument(
        '--output-format',
        type=OutputFormat,
        choices=list(OutputFormat),
        default=OutputFormat.TABLE,
        metavar='{' + ','.join(f.value for f in OutputFormat) + '}',
        help='Result format (default: table)',
    )
    parser.add_argument(
        '--delimiter-for-dsv',
        metavar='CHAR',
        help='Field delimiter, required with --output-format dsv',
    )
    parser.add_argument(
        '--log-level',
        default='WARNING',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        type=str.upper,
        help='Level of the logs written to stderr (default: WARNING)',
    )
    parser.add_argument(
        '--log-json',
        action='store_true',
        help='Write logs as JSON lines',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def parse_args(
    argv: Sequence[str] | None = None,
    *,
    parser: argparse.ArgumentParser | None = None,
) -> CliConfig:
    """Parse process arguments into a validated CliConfig.

    Raises:
        ArgumentError: If the flags are invalid, missing or conflicting.
    """
    parser = build_parser() if parser is None else parser
    args = parser.parse_args(argv)
    return CliConfig(
        execute=args.execute,
        file=args.file,
        output_format=args.output_format,
        delimiter=args.delimiter_for_dsv,
        log_level=args.log_level,
        log_json=args.log_json,
    )


def resolve_query(config: CliConfig) -> str:
    """Return the SQL text: the inline query or the contents of the query file.

    Raises:
        QueryFileError: If the query file cannot be opened, read or decoded.
    """
    if config.execute is not None:
        return config.execute

    if config.file is None:
        raise ArgumentError('exactly one of --execute (-e) or --file (-f) is required')
    try:
        return config.file.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as exc:
        reason = exc.strerror if isinstance(exc, OSError) and exc.strerror else str(exc)
        raise QueryFileError(str(config.file), reason) from exc


def main(argv: Sequence[str] | None = None) -> int:
    """Run the pipeline and return the process exit code."""
    parser = build_parser()
    try:
        config = parse_args(argv, parser=parser)
    except ArgumentError as exc:
        parser.print_usage(sys.stderr)
        print(f'{parser.prog}: error: {exc}', file=sys.stderr)
        return exc.exit_code

    configure_logging(config.log_level, json_output=config.log_json)
    if config.delimiter is not None and config.output_format is not OutputFormat.DSV:
        logger.warning('delimiter_ignored', output_format=config.output_format.value, delimiter=config.delimiter)

    try:
        query = resolve_query(config)
        results = Session().execute(query)
    except DbaseSqlError as exc:
        logger.debug('pipeline_failed', **msgspec.structs.asdict(exc.to_struct()))
        print(f'Error: {exc}', file=sys.stderr)
        return exc.exit_code

    write_results(results, config.output_format, config.field_delimiter)
    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(main())
