"""Explicit, rollback-on-any-failure transactions on top of SQLAlchemy.

The package wraps SQLAlchemy session transactions so that application code
runs transactional work through a plain function call
(:meth:`TransactionHelper.run_in_transaction`) that checks a transaction is
really active and rolls back on every exception.
"""

from .config import HelperSettings, build_transaction_helper, create_session_factory
from .context import TransactionContext, current_context, current_session
from .exceptions import (
    TransactionNotActiveError,
    TxHelperError,
    UnexpectedRollbackError,
    check_state,
)
from .helper import TransactionHelper
from .logging import configure_logging
from .manager import TransactionManager
from .unit_of_work import SqlAlchemyUnitOfWork, UnitOfWork

__all__ = [
    "HelperSettings",
    "SqlAlchemyUnitOfWork",
    "TransactionContext",
    "TransactionHelper",
    "TransactionManager",
    "TransactionNotActiveError",
    "TxHelperError",
    "UnexpectedRollbackError",
    "UnitOfWork",
    "build_transaction_helper",
    "check_state",
    "configure_logging",
    "create_session_factory",
    "current_context",
    "current_session",
]
