"""Run units of work inside a transaction through an explicit call.

Decorator-driven transactions have two traps: they may only roll back for
some exception types, and a decorated function can end up running without
any transaction at all. :class:`TransactionHelper` makes the boundary
explicit and rolls back on every failure, whatever policy the underlying
:class:`TransactionManager` was given::

    helper = TransactionHelper(manager)

    account = helper.run_in_transaction(lambda: create_account(current_session(), "alice"))

    helper.run_in_transaction_and_throw(
        lambda: transfer(current_session(), source, target, amount),
        InsufficientFunds,
        AccountLocked,
    )

Pass ``context=`` to join a transaction the caller already owns instead of
opening a new one.
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractContextManager
from typing import TypeVar

from .context import TransactionContext
from .exceptions import check_state, ensure_exception_types
from .manager import TransactionManager

T = TypeVar("T")


class TransactionHelper:
    """Execute zero-argument units of work under a :class:`TransactionManager`."""

    def __init__(self, manager: TransactionManager) -> None:
        self._manager = manager
        self._any_failure = manager.with_policy(
            rollback_for=(BaseException,), no_rollback_for=()
        )

    @property
    def manager(self) -> TransactionManager:
        return self._manager

    def transaction(self) -> AbstractContextManager[TransactionContext]:
        """Open a transaction that rolls back on any exception."""

        return self._any_failure.begin()

    def run_in_transaction(
        self,
        work: Callable[[], T],
        *,
        context: TransactionContext | None = None,
    ) -> T:
        """Invoke ``work`` once inside a transaction and return its result.

        Without ``context`` a new transaction is opened, reachable from
        ``work`` through :func:`~txhelper.context.current_session`, and
        committed on success. Any exception raised by ``work`` propagates
        unchanged and rolls the transaction back; for a joined ``context`` the
        caller's transaction is marked rollback-only.

        Raises:
            TransactionNotActiveError: no transaction is active; ``work`` is
                not invoked.
        """

        if context is not None:
            return self._run_joined(work, context)
        with self.transaction() as owned:
            self._ensure_active(owned)
            return work()

    def run_in_transaction_and_throw(
        self,
        work: Callable[[], T],
        *raises: type[BaseException],
        context: TransactionContext | None = None,
    ) -> T:
        """Like :meth:`run_in_transaction`, declaring the failures ``work`` may raise.

        ``raises`` documents the expected failure types at the call site. They
        do not change behaviour: every exception still rolls back and
        propagates unchanged.
        """

        ensure_exception_types(raises)
        return self.run_in_transaction(work, context=context)

    def _run_joined(self, work: Callable[[], T], context: TransactionContext) -> T:
        self._ensure_active(context)
        try:
            return work()
        except BaseException:
            context.mark_rollback_only()
            raise

    def _ensure_active(self, context: TransactionContext) -> None:
        check_state(
            self._manager.is_transaction_active(context),
            "unit of work must run inside an active transaction",
        )


__all__ = ["TransactionHelper"]
