"""Error hierarchy and precondition helpers for transactional execution."""

from __future__ import annotations

__all__ = [
    "TxHelperError",
    "TransactionNotActiveError",
    "UnexpectedRollbackError",
    "check_state",
    "ensure_exception_types",
]


class TxHelperError(Exception):
    """Base class for errors raised by txhelper itself."""


class TransactionNotActiveError(TxHelperError, RuntimeError):
    """Raised when transactional work is attempted without an active transaction.

    This is a programming error in the calling code, not a business failure:
    the guarantee that the work runs atomically has already been broken.
    """


class UnexpectedRollbackError(TxHelperError):
    """Raised when a transaction marked rollback-only is asked to commit."""


def check_state(condition: bool, message: str = "no active transaction") -> None:
    """Raise :class:`TransactionNotActiveError` unless ``condition`` holds."""

    if not condition:
        raise TransactionNotActiveError(message)


def ensure_exception_types(types: tuple[object, ...]) -> tuple[type[BaseException], ...]:
    """Validate that every entry of ``types`` is an exception class."""

    for candidate in types:
        if not (isinstance(candidate, type) and issubclass(candidate, BaseException)):
            raise TypeError(f"expected an exception class, got {candidate!r}")
    return types  # type: ignore[return-value]
