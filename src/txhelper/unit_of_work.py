"""Transactional boundary protocol and its SQLAlchemy implementation."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Protocol

from sqlalchemy.orm import Session

from .context import TransactionContext
from .exceptions import UnexpectedRollbackError, check_state

if TYPE_CHECKING:
    from .manager import TransactionManager


class UnitOfWork(Protocol):
    """A ``with`` block whose database changes are kept or discarded together.

    Leaving the block normally keeps the changes; leaving it with an exception
    discards them. ``commit`` and ``rollback`` finish the current batch early
    and keep the block open for the next one.
    """

    def __enter__(self) -> UnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: object,
    ) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class SqlAlchemyUnitOfWork(UnitOfWork):
    """Unit of work backed by :meth:`TransactionManager.begin`.

    ``commit`` and ``rollback`` finish the current transaction and start a new
    one on the same session; leaving the ``with`` block finishes the last one
    according to the manager's rollback policy.
    """

    def __init__(self, manager: "TransactionManager") -> None:
        self._manager = manager
        self._scope: AbstractContextManager[TransactionContext] | None = None
        self._context: TransactionContext | None = None

    @property
    def context(self) -> TransactionContext:
        check_state(self._context is not None, "unit of work is not active")
        return self._context  # type: ignore[return-value]

    @property
    def session(self) -> Session:
        return self.context.session

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        check_state(self._scope is None, "unit of work is already active")
        scope = self._manager.begin()
        self._context = scope.__enter__()
        self._scope = scope
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: object,
    ) -> None:
        scope, self._scope, self._context = self._scope, None, None
        if scope is None:
            return
        scope.__exit__(exc_type, exc, tb)

    def commit(self) -> None:
        context = self.context
        if context.rollback_only:
            self.rollback()
            raise UnexpectedRollbackError(
                "transaction rolled back because it has been marked as rollback-only"
            )
        context.session.commit()
        context.session.begin()

    def rollback(self) -> None:
        if self._context is None:
            return
        self._context.session.rollback()
        self._context.rollback_only = False
        self._context.session.begin()


__all__ = ["UnitOfWork", "SqlAlchemyUnitOfWork"]
