"""Pytest configuration and dBase fixtures for klaw-dbase-sql tests."""

from __future__ import annotations

import datetime
import logging
import struct
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Any

import pytest


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    """Put the root logger back the way pytest left it after the CLI configured it."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


Field = tuple[str, str, int, int]  # name, type code, length, decimal count


def _encode_value(value: Any, type_code: str, length: int, decimals: int, encoding: str) -> bytes:
    if value is None:
        return b' ' * length
    if type_code == 'C':
        return str(value).encode(encoding).ljust(length, b' ')[:length]
    if type_code == 'N':
        text = f'{value:.{decimals}f}' if decimals else str(int(value))
        return text.encode('ascii').rjust(length, b' ')
    if type_code == 'L':
        return b'T' if value else b'F'
    if type_code == 'D':
        return value.strftime('%Y%m%d').encode('ascii')
    msg = f'unsupported field type {type_code!r}'
    raise ValueError(msg)


def write_dbf(
    path: Path,
    fields: Sequence[Field],
    records: Sequence[Sequence[Any]],
    *,
    deleted: Sequence[Sequence[Any]] = (),
    encoding: str = 'cp1252',
) -> Path:
    """Write a dBase III file with the given fields and records.

    Records in `deleted` are written after the live ones, flagged as deleted.
    """
    header_length = 32 + 32 * len(fields) + 1
    record_length = 1 + sum(length for _, _, length, _ in fields)
    today = datetime.date.today()

    out = bytearray()
    out += struct.pack(
        '<BBBBLHH20x',
        0x03,
        today.year - 1900,
        today.month,
        today.day,
        len(records) + len(deleted),
        header_length,
        record_length,
    )
    for name, type_code, length, decimals in fields:
        out += struct.pack('<11sc4xBB14x', name.encode('ascii'), type_code.encode('ascii'), length, decimals)
    out += b'\r'

    for flag, rows in ((b' ', records), (b'*', deleted)):
        for row in rows:
            out += flag
            for value, (_, type_code, length, decimals) in zip(row, fields):
                out += _encode_value(value, type_code, length, decimals, encoding)
    out += b'\x1a'

    path.write_bytes(bytes(out))
    return path


@pytest.fixture
def ab_dbf(tmp_path: Path) -> Path:
    """A table with numeric columns `a`, `b` and the single row (1, 2)."""
    return write_dbf(tmp_path / 'ab.dbf', [('a', 'N', 5, 0), ('b', 'N', 5, 0)], [(1, 2)])


PEOPLE_FIELDS: list[Field] = [
    ('name', 'C', 20, 0),
    ('age', 'N', 3, 0),
    ('score', 'N', 6, 2),
    ('active', 'L', 1, 0),
    ('joined', 'D', 8, 0),
]

PEOPLE_RECORDS = [
    ('Alice', 25, 95.5, True, datetime.date(2020, 1, 15)),
    ('Bob', 30, 87.25, False, datetime.date(2021, 6, 1)),
    ('Charlie', 35, 92.1, True, datetime.date(2019, 11, 30)),
]


@pytest.fixture
def people_dbf(tmp_path: Path) -> Path:
    """A table with character, numeric, logical and date columns."""
    return write_dbf(
        tmp_path / 'people.dbf',
        PEOPLE_FIELDS,
        PEOPLE_RECORDS,
        deleted=[('Mallory', 99, 0.0, False, datetime.date(2000, 1, 1))],
    )
