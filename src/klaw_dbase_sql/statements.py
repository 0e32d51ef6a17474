"""Statement splitting and the CREATE EXTERNAL TABLE statement."""

from __future__ import annotations

import re

import msgspec

from klaw_dbase_sql.errors import QueryError

__all__ = [
    'ExternalTable',
    'is_ddl',
    'parse_external_table',
    'split_statements',
]

_EXTERNAL_TABLE_PREFIX = re.compile(r'^\s*CREATE\s+(?:UNBOUNDED\s+)?EXTERNAL\s+TABLE\b', re.IGNORECASE)

_EXTERNAL_TABLE = re.compile(
    r"""^\s*CREATE\s+(?:UNBOUNDED\s+)?EXTERNAL\s+TABLE\s+
    (?P<if_not_exists>IF\s+NOT\s+EXISTS\s+)?
    (?P<name>"(?:[^"]|"")+"|[A-Za-z_][\w$]*)
    (?P<clauses>(?:\s.*)?)$""",
    re.IGNORECASE | re.VERBOSE | re.DOTALL,
)

_CLAUSE = re.compile(
    r"""\s*(?:
        STORED\s+AS\s+(?P<file_type>\w+)
      | LOCATION\s+'(?P<location>(?:[^']|'')*)'
      | OPTIONS\s*\((?P<options>(?:[^()']|'(?:[^']|'')*')*)\)
      | (?P<header>WITH\s+HEADER\s+ROW)
    )""",
    re.IGNORECASE | re.VERBOSE,
)

_OPTION = re.compile(
    r"""\s*(?:'(?P<qkey>(?:[^']|'')*)'|(?P<key>[\w.]+))
    \s+(?:'(?P<qvalue>(?:[^']|'')*)'|(?P<value>[\w.+-]+))
    \s*(?:,|$)""",
    re.VERBOSE,
)

_DDL = re.compile(r'^\s*(?:CREATE|DROP|TRUNCATE)\b', re.IGNORECASE)


class ExternalTable(msgspec.Struct, frozen=True):
    """A parsed CREATE EXTERNAL TABLE statement."""

    name: str
    file_type: str
    location: str
    options: dict[str, str] = msgspec.field(default_factory=dict)
    if_not_exists: bool = False
    has_header: bool | None = None


def split_statements(text: str) -> list[str]:
    """Split SQL text on semicolons that are not inside quotes or comments.

    Comments are dropped and blank statements are skipped.
    """
    statements: list[str] = []
    current: list[str] = []
    quote: str | None = None
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]
        if quote is not None:
            current.append(ch)
            if ch == quote:
                # doubled quote is an escaped quote
                if i + 1 < n and text[i + 1] == quote:
                    current.append(quote)
                    i += 2
                    continue
                quote = None
            i += 1
            continue

        if ch in ('"', "'"):
            quote = ch
        elif text.startswith('--', i):
            end = text.find('\n', i)
            i = n if end == -1 else end
            continue
        elif text.startswith('/*', i):
            end = text.find('*/', i + 2)
            i = n if end == -1 else end + 2
            current.append(' ')
            continue
        elif ch == ';':
            statements.append(''.join(current))
            current = []
            i += 1
            continue
        current.append(ch)
        i += 1

    statements.append(''.join(current))
    return [s.strip() for s in statements if s.strip()]


def _unquote(value: str, quote: str) -> str:
    return value.replace(quote * 2, quote)


def _parse_options(text: str, statement: str) -> dict[str, str]:
    options: dict[str, str] = {}
    pos = 0
    while text[pos:].strip():
        m = _OPTION.match(text, pos)
        if m is None or m.end() == pos:
            msg = f'malformed OPTIONS clause near {text[pos:].strip()!r}'
            raise QueryError(msg, statement=statement)
        key = _unquote(m['qkey'], "'") if m['qkey'] is not None else m['key']
        value = _unquote(m['qvalue'], "'") if m['qvalue'] is not None else m['value']
        options[key.lower()] = value
        pos = m.end()
    return options


def parse_external_table(statement: str) -> ExternalTable | None:
    """Parse a CREATE EXTERNAL TABLE statement.

    Args:
        statement: A single SQL statement.

    Returns:
        The parsed table definition, or None if the statement is not a
        CREATE EXTERNAL TABLE statement.

    Raises:
        QueryError: If the statement starts like CREATE EXTERNAL TABLE but
            cannot be parsed, or lacks STORED AS or LOCATION.
    """
    if not _EXTERNAL_TABLE_PREFIX.match(statement):
        return None

    m = _EXTERNAL_TABLE.match(statement)
    if m is None:
        raise QueryError('malformed CREATE EXTERNAL TABLE statement', statement=statement)

    name = m['name']
    if name.startswith('"'):
        name = _unquote(name[1:-1], '"')

    file_type: str | None = None
    location: str | None = None
    options: dict[str, str] = {}
    has_header: bool | None = None

    clauses = m['clauses']
    pos = 0
    while clauses[pos:].strip():
        clause = _CLAUSE.match(clauses, pos)
        if clause is None:
            msg = f'unexpected {clauses[pos:].strip()!r} in CREATE EXTERNAL TABLE'
            raise QueryError(msg, statement=statement)
        if clause['file_type'] is not None:
            file_type = clause['file_type'].upper()
        elif clause['location'] is not None:
            location = _unquote(clause['location'], "'")
        elif clause['options'] is not None:
            options.update(_parse_options(clause['options'], statement))
        else:
            has_header = True
        pos = clause.end()

    if file_type is None:
        raise QueryError('CREATE EXTERNAL TABLE requires STORED AS', statement=statement)
    if location is None:
        raise QueryError('CREATE EXTERNAL TABLE requires LOCATION', statement=statement)

    return ExternalTable(
        name=name,
        file_type=file_type,
        location=location,
        options=options,
        if_not_exists=m['if_not_exists'] is not None,
        has_header=has_header,
    )


def is_ddl(statement: str) -> bool:
    """Whether a statement only changes the catalog and produces no rows."""
    return _DDL.match(statement) is not None
