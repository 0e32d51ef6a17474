"""Structured logging for the command line tool.

structlog events and stdlib records (from polars or any other library) are
rendered by one `ProcessorFormatter` on stderr. Standard output is reserved
for query results.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

__all__ = [
    'configure_logging',
    'get_logger',
]

# applied to structlog events and to foreign stdlib records alike
_PRE_CHAIN: tuple[Any, ...] = (
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt='iso'),
    structlog.stdlib.ExtraAdder(),
)


def _stderr_handler(json_output: bool) -> logging.Handler:
    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=list(_PRE_CHAIN),
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    return handler


def configure_logging(level: str = 'WARNING', *, json_output: bool = False) -> None:
    """Route all logging to stderr at `level`.

    Args:
        level: Level name such as "DEBUG" or "WARNING". Unknown names fall back to WARNING.
        json_output: Emit one JSON object per line instead of console output.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_PRE_CHAIN,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.handlers[:] = [_stderr_handler(json_output)]
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))


def get_logger(name: str | None = None) -> Any:
    return structlog.get_logger(name)
