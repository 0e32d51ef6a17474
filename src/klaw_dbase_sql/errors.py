"""Error types: dual struct+exception for the CLI taxonomy, plus dBase scan errors."""

from __future__ import annotations

import msgspec

__all__ = [
    'ArgumentError',
    'ArgumentInvalid',
    'DbaseError',
    'DbaseSqlError',
    'EmptySources',
    'EncodingError',
    'InvalidHeader',
    'QueryError',
    'QueryFailed',
    'QueryFileError',
    'QueryFileUnreadable',
    'SchemaMismatch',
]


# --- CLI Errors ---


class DbaseSqlError(Exception):
    """Base class for errors that terminate the command line pipeline."""

    exit_code: int = 1

    def to_struct(self) -> msgspec.Struct:
        raise NotImplementedError


class ArgumentInvalid(msgspec.Struct, frozen=True, gc=False):
    """Invalid, missing or conflicting flags - struct variant."""

    reason: str
    kind: str = 'argument'

    def to_exception(self) -> ArgumentError:
        """Convert to exception for raise-based code."""
        return ArgumentError(self.reason)


class ArgumentError(DbaseSqlError):
    """Invalid, missing or conflicting flags - exception variant."""

    exit_code = 2

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)

    def to_struct(self) -> ArgumentInvalid:
        """Convert to struct for logging and Result-based code."""
        return ArgumentInvalid(self.reason)


class QueryFileUnreadable(msgspec.Struct, frozen=True, gc=False):
    """Query file could not be opened or decoded - struct variant."""

    path: str
    reason: str
    kind: str = 'io'

    def to_exception(self) -> QueryFileError:
        """Convert to exception for raise-based code."""
        return QueryFileError(self.path, self.reason)


class QueryFileError(DbaseSqlError):
    """Query file could not be opened or decoded - exception variant."""

    exit_code = 3

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f'cannot read query file {path!r}: {reason}')

    def to_struct(self) -> QueryFileUnreadable:
        """Convert to struct for logging and Result-based code."""
        return QueryFileUnreadable(self.path, self.reason)


class QueryFailed(msgspec.Struct, frozen=True, gc=False):
    """SQL statement failed to parse, plan or execute - struct variant."""

    reason: str
    statement: str | None = None
    kind: str = 'query'

    def to_exception(self) -> QueryError:
        """Convert to exception for raise-based code."""
        return QueryError(self.reason, statement=self.statement)


class QueryError(DbaseSqlError):
    """SQL statement failed to parse, plan or execute - exception variant."""

    exit_code = 4

    def __init__(self, reason: str, *, statement: str | None = None) -> None:
        self.reason = reason
        self.statement = statement
        super().__init__(reason)

    def to_struct(self) -> QueryFailed:
        """Convert to struct for logging and Result-based code."""
        return QueryFailed(self.reason, statement=self.statement)


# --- dBase Scan Errors ---


class DbaseError(Exception):
    """Base class for errors raised while scanning dBase files."""


class EmptySources(DbaseError, ValueError):
    """No dBase file matched the given sources."""

    def __init__(self, message: str = 'No dBase sources to scan') -> None:
        super().__init__(message)


class EncodingError(DbaseError, ValueError):
    """The requested character encoding is not supported."""


class InvalidHeader(DbaseError):
    """A file is empty, truncated or not a dBase table."""


class SchemaMismatch(DbaseError):
    """Scanned dBase files do not share the same field layout."""
