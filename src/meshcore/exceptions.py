"""Error kinds raised by the canonicalization and region layers.

Precondition violations are programmer errors (undefined region ids,
malformed bounds). Library code raises them and never recovers; the
production entry point turns them into process termination through
:func:`terminate_on_violation`.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Iterator

log = logging.getLogger(__name__)


class PreconditionViolation(ValueError):
    """A caller broke the contract of an operation."""


def violation(message: str) -> PreconditionViolation:
    """Log ``message`` and build the matching exception for the caller to raise."""
    log.error(message)
    return PreconditionViolation(message)


@contextmanager
def terminate_on_violation(enabled: bool = True) -> Iterator[None]:
    """Turn a :class:`PreconditionViolation` into ``SystemExit(1)``.

    With ``enabled=False`` the exception propagates unchanged, which is what
    test harnesses want.
    """
    try:
        yield
    except PreconditionViolation as exc:
        if not enabled:
            raise
        log.critical(f"Fatal: {exc}")
        sys.exit(1)
