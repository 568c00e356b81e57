"""Diagnostics sink configuration.

Every module logs through ``logging.getLogger(__name__)`` under the
``snaptree`` hierarchy. Two ways to point that hierarchy at a stream:

* ``configure_logging`` installs one process-wide sink, replacing any
  previous one, or silences the hierarchy.
* ``capture_logging`` is a context manager that sends only the records
  emitted inside its scope to a stream. ``run()`` uses it so concurrent
  runs with different error streams never see each other's messages.

Scopes are tracked with a ``ContextVar``. asyncio tasks inherit it
automatically; the thread-pool walker starts its threads inside a copy of
the caller's context.
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional, TextIO

LOGGER_NAME = "snaptree"
LOG_FORMAT = "[tree]: %(message)s"

# Scope key of records emitted outside any capture_logging block
_GLOBAL_SCOPE = object()
_scope: ContextVar[object] = ContextVar("snaptree_log_scope", default=_GLOBAL_SCOPE)


class _ScopedHandler(logging.StreamHandler):
    """Stream handler that only accepts records emitted in its own scope."""

    def __init__(self, stream: TextIO, scope: object):
        super().__init__(stream)
        self.scope = scope
        self.setFormatter(logging.Formatter(LOG_FORMAT))

    def filter(self, record: logging.LogRecord) -> bool:
        return _scope.get() is self.scope and super().filter(record)


def _package_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.propagate = False
    logger.setLevel(logging.WARNING)
    if not any(type(h) is logging.NullHandler for h in logger.handlers):
        # Keeps logging.lastResort from printing when no sink is attached
        logger.addHandler(logging.NullHandler())
    return logger


def configure_logging(stream: Optional[TextIO], verbose: bool = True) -> logging.Logger:
    """Route snaptree diagnostics to ``stream``.

    Only records emitted outside ``capture_logging`` blocks reach this sink.

    Args:
        stream: Destination for warnings (typically stderr)
        verbose: If False, discard all diagnostics

    Returns:
        The configured package logger
    """
    logger = _package_logger()
    for handler in list(logger.handlers):
        if isinstance(handler, _ScopedHandler) and handler.scope is _GLOBAL_SCOPE:
            logger.removeHandler(handler)

    if verbose and stream is not None:
        logger.addHandler(_ScopedHandler(stream, _GLOBAL_SCOPE))
    return logger


@contextmanager
def capture_logging(stream: Optional[TextIO], verbose: bool = True) -> Iterator[logging.Logger]:
    """Send diagnostics emitted inside the block to ``stream``.

    Args:
        stream: Destination for warnings (typically stderr)
        verbose: If False, records emitted inside the block go nowhere

    Yields:
        The package logger
    """
    logger = _package_logger()
    scope = object()
    handler = _ScopedHandler(stream, scope) if verbose and stream is not None else None
    token = _scope.set(scope)
    if handler is not None:
        logger.addHandler(handler)
    try:
        yield logger
    finally:
        if handler is not None:
            logger.removeHandler(handler)
        _scope.reset(token)
