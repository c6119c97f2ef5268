"""Explicit transaction-context handle passed between transactional calls.

The innermost context opened by :meth:`TransactionManager.begin` is also
published through a :class:`~contextvars.ContextVar`, so zero-argument units
of work can reach it with :func:`current_session`.
"""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass

from sqlalchemy.orm import Session

from .exceptions import check_state


@dataclass(slots=True)
class TransactionContext:
    """State of one transaction opened by :class:`~txhelper.manager.TransactionManager`.

    ``rollback_only`` is set when joined work fails; the owning manager then
    refuses to commit.
    """

    session: Session
    rollback_only: bool = False
    finished: bool = False

    @property
    def is_active(self) -> bool:
        """Return ``True`` while the underlying session holds an open transaction."""

        return not self.finished and self.session.in_transaction()

    def mark_rollback_only(self) -> None:
        """Force the enclosing transaction to roll back instead of committing."""

        self.rollback_only = True


_current_context: ContextVar[TransactionContext | None] = ContextVar(
    "txhelper_current_context", default=None
)


def current_context() -> TransactionContext | None:
    """Return the innermost transaction opened in this execution context, if any."""

    return _current_context.get()


def current_session() -> Session:
    """Return the session of the active transaction or raise ``TransactionNotActiveError``."""

    context = _current_context.get()
    check_state(
        context is not None and context.is_active,
        "no active transaction in the current execution context",
    )
    return context.session  # type: ignore[union-attr]


def _publish(context: TransactionContext | None) -> TransactionContext | None:
    """Make ``context`` current and return the one it replaces."""

    previous = _current_context.get()
    _current_context.set(context)
    return previous


__all__ = ["TransactionContext", "current_context", "current_session"]
