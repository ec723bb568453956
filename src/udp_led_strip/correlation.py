"""
Operation id tracking for log correlation.

Every public client operation (a set, a poll, a refresh tick) runs under a
short operation id stored in a context variable, so log lines emitted by the
client, the transport and subscriber callbacks can be tied back together.
"""

from __future__ import annotations

import contextvars
import uuid
from collections.abc import Generator
from contextlib import contextmanager

__all__ = [
    "current_operation_id",
    "new_operation_id",
    "operation_context",
]

OPERATION_ID_LENGTH = 12

_operation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation_id",
    default=None,
)


def new_operation_id() -> str:
    """Return a fresh operation id (first 12 hex chars of a UUID4)."""
    return uuid.uuid4().hex[:OPERATION_ID_LENGTH]


def current_operation_id() -> str | None:
    """Return the operation id bound to the current context, if any."""
    return _operation_id.get()


@contextmanager
def operation_context(operation_id: str | None = None) -> Generator[str]:
    """
    Bind an operation id for the duration of the block.

    Nested contexts keep the outer id unless a specific one is passed, so a
    refresh tick that triggers a poll logs both under the same id.

    Args:
        operation_id: Explicit id to bind (tests use fixed ids)

    Yields:
        The bound operation id
    """
    outer = _operation_id.get()
    bound = operation_id or outer or new_operation_id()
    token = _operation_id.set(bound)
    try:
        yield bound
    finally:
        _operation_id.reset(token)
