"""
Error handling policies for snaptree.

This module provides the error classifier and a small set of policies,
following the Policy pattern, that decide what a walker does when a
directory cannot be read.

Classification is stateless: permission-denied and not-found failures are
recoverable (the directory is recorded as empty and the walk continues),
every other I/O failure is fatal and aborts the walk.
"""

import errno
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Tuple

from ._common.exceptions import TraversalAbortedError
from ._common.model import ErrorKind, FailureRecord

logger = logging.getLogger(__name__)


class Severity(Enum):
    RECOVERABLE = "recoverable"
    FATAL = "fatal"


_PERMISSION_ERRNOS = frozenset({errno.EACCES, errno.EPERM})
_NOT_FOUND_ERRNOS = frozenset({errno.ENOENT})


def classify_error(error: BaseException) -> Tuple[ErrorKind, Severity]:
    """
    Map a raw filesystem error to its kind and severity.

    Args:
        error: Exception raised by an entry reader

    Returns:
        ``(ErrorKind, Severity)`` tuple
    """
    if isinstance(error, PermissionError):
        return ErrorKind.PERMISSION_DENIED, Severity.RECOVERABLE
    if isinstance(error, FileNotFoundError):
        return ErrorKind.NOT_FOUND, Severity.RECOVERABLE
    if isinstance(error, OSError):
        # Plain OSError instances still carry an errno
        if error.errno in _PERMISSION_ERRNOS:
            return ErrorKind.PERMISSION_DENIED, Severity.RECOVERABLE
        if error.errno in _NOT_FOUND_ERRNOS:
            return ErrorKind.NOT_FOUND, Severity.RECOVERABLE
    return ErrorKind.OTHER_IO, Severity.FATAL


def abort(path: str, error: BaseException) -> TraversalAbortedError:
    """Build the exception that unwinds a walk after ``error`` at ``path``."""
    kind, _ = classify_error(error)
    aborted = TraversalAbortedError(path, kind, error)
    aborted.__cause__ = error
    return aborted


class ErrorPolicy(ABC):
    """
    Base class for error handling policies.

    Walkers call ``handle`` from worker threads, so implementations must be
    safe to call concurrently.
    """

    @abstractmethod
    def handle(self, error: BaseException, path: str) -> FailureRecord:
        """
        Handle a failure to read the directory at ``path``.

        Args:
            error: The exception raised by the entry reader
            path: Absolute path of the directory being read

        Returns:
            A FailureRecord when the walk should continue with the
            directory recorded as empty.

        Raises:
            TraversalAbortedError: when the walk must stop
        """


class ContinueOnErrorsPolicy(ErrorPolicy):
    """
    Policy that logs recoverable errors and continues traversal.

    Each recoverable failure becomes a FailureRecord that the walker
    stores in its own outcome; the policy keeps no state between calls,
    so one instance can serve any number of walks. Fatal errors still
    abort the walk.
    """

    def __init__(self, verbose: bool = True):
        """
        Initialize the policy.

        Args:
            verbose: If True, log a warning for each recoverable failure
        """
        self.verbose = verbose

    def handle(self, error: BaseException, path: str) -> FailureRecord:
        kind, severity = classify_error(error)
        if severity is Severity.FATAL:
            raise abort(path, error)

        record = FailureRecord(path=path, kind=kind, message=str(error))
        if self.verbose:
            logger.warning("skipping unreadable directory %s: %s", path, error)
        return record


class FailFastPolicy(ErrorPolicy):
    """
    Policy that aborts on the first failure of any kind.

    Useful when partial results are not acceptable.
    """

    def handle(self, error: BaseException, path: str) -> FailureRecord:
        logger.error("aborting at %s: %s", path, error)
        raise abort(path, error)


def policy_for(abort_on_error: bool, verbose: bool = True) -> ErrorPolicy:
    """
    Convenience function to pick the policy for a walk.

    Args:
        abort_on_error: If True, use FailFastPolicy; otherwise ContinueOnErrorsPolicy
        verbose: Passed to ContinueOnErrorsPolicy

    Returns:
        A configured ErrorPolicy
    """
    if abort_on_error:
        return FailFastPolicy()
    return ContinueOnErrorsPolicy(verbose=verbose)
