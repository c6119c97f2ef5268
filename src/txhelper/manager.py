"""SQLAlchemy-backed transaction boundaries.

:class:`TransactionManager` is the only place where transactions are begun,
committed and rolled back. Its default policy rolls back on *any* exception,
``BaseException`` subclasses included. Usage::

    manager = TransactionManager(sessionmaker(bind=engine))

    with manager.begin() as context:
        context.session.add(Account(name="alice"))

    @manager.transactional
    def rename(context, account_id, name):
        context.session.get(Account, account_id).name = name
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, TypeVar

from sqlalchemy.orm import Session

from .context import TransactionContext, _publish
from .exceptions import UnexpectedRollbackError, ensure_exception_types

if TYPE_CHECKING:
    from .unit_of_work import SqlAlchemyUnitOfWork

F = TypeVar("F", bound=Callable[..., Any])

logger = logging.getLogger(__name__)


class TransactionManager:
    """Open, commit and roll back transactions on sessions from ``session_factory``."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        rollback_for: Iterable[type[BaseException]] = (BaseException,),
        no_rollback_for: Iterable[type[BaseException]] = (),
    ) -> None:
        self._session_factory = session_factory
        self._rollback_for = ensure_exception_types(tuple(rollback_for))
        self._no_rollback_for = ensure_exception_types(tuple(no_rollback_for))

    @property
    def session_factory(self) -> Callable[[], Session]:
        return self._session_factory

    def with_policy(
        self,
        *,
        rollback_for: Iterable[type[BaseException]] | None = None,
        no_rollback_for: Iterable[type[BaseException]] | None = None,
    ) -> "TransactionManager":
        """Return a manager sharing the session factory with a different rollback policy."""

        return TransactionManager(
            self._session_factory,
            rollback_for=self._rollback_for if rollback_for is None else rollback_for,
            no_rollback_for=(
                self._no_rollback_for if no_rollback_for is None else no_rollback_for
            ),
        )

    def should_roll_back(self, exc: BaseException) -> bool:
        """Return whether ``exc`` aborts the transaction under this manager's policy."""

        if self._no_rollback_for and isinstance(exc, self._no_rollback_for):
            return False
        return isinstance(exc, self._rollback_for)

    @staticmethod
    def is_transaction_active(context: TransactionContext | None) -> bool:
        return context is not None and context.is_active

    @contextmanager
    def begin(self) -> Iterator[TransactionContext]:
        """Yield a fresh :class:`TransactionContext` and finish it on exit.

        While open, the context is also returned by
        :func:`~txhelper.context.current_context`. Normal exit commits, unless
        the context was marked rollback-only, in which case the transaction is
        rolled back and :class:`UnexpectedRollbackError` is raised. An exception
        rolls back when it matches the rollback policy or the context is
        rollback-only, and commits otherwise. The exception is always re-raised
        unchanged; a failed commit is attached to it as a note. The session is
        always closed.
        """

        session = self._session_factory()
        previous: TransactionContext | None = None
        published = False
        try:
            session.begin()
            context = TransactionContext(session=session)
            previous = _publish(context)
            published = True
            logger.debug("transaction started")
            try:
                yield context
            except BaseException as exc:
                if context.rollback_only or self.should_roll_back(exc):
                    self._rollback(context, reason=type(exc).__name__)
                else:
                    try:
                        self._commit(context)
                    except Exception as commit_error:
                        exc.add_note(
                            f"commit after {type(exc).__name__} failed: "
                            f"{type(commit_error).__name__}: {commit_error}"
                        )
                raise
            if context.rollback_only:
                self._rollback(context, reason="rollback-only")
                raise UnexpectedRollbackError(
                    "transaction rolled back because it has been marked as rollback-only"
                )
            self._commit(context)
        finally:
            if published:
                _publish(previous)
            session.close()

    def transactional(
        self,
        func: F | None = None,
        *,
        rollback_for: Iterable[type[BaseException]] | None = None,
        no_rollback_for: Iterable[type[BaseException]] | None = None,
    ) -> Any:
        """Decorate ``func`` so each call runs in its own transaction.

        The decorated function receives the :class:`TransactionContext` as its
        first positional argument. Works both bare and with keyword options.
        """

        manager = self
        if rollback_for is not None or no_rollback_for is not None:
            manager = self.with_policy(
                rollback_for=rollback_for, no_rollback_for=no_rollback_for
            )

        def decorator(inner: F) -> F:
            @functools.wraps(inner)
            def wrapper(*args: Any, **kwargs: Any) -> Any:
                with manager.begin() as context:
                    return inner(context, *args, **kwargs)

            return wrapper  # type: ignore[return-value]

        if func is not None:
            return decorator(func)
        return decorator

    def unit_of_work(self) -> "SqlAlchemyUnitOfWork":
        from .unit_of_work import SqlAlchemyUnitOfWork

        return SqlAlchemyUnitOfWork(self)

    @staticmethod
    def _commit(context: TransactionContext) -> None:
        try:
            context.session.commit()
        except BaseException:
            logger.warning("commit failed; rolling back", exc_info=True)
            context.session.rollback()
            raise
        finally:
            context.finished = True
        logger.debug("transaction committed")

    @staticmethod
    def _rollback(context: TransactionContext, *, reason: str) -> None:
        try:
            context.session.rollback()
        finally:
            context.finished = True
        logger.debug("transaction rolled back", extra={"reason": reason})


__all__ = ["TransactionManager"]
