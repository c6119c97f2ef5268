from __future__ import annotations

import pytest
from sqlalchemy.orm import Session, sessionmaker

from tests.helpers.accounts import add_account, stored_names
from txhelper import (
    SqlAlchemyUnitOfWork,
    TransactionManager,
    TransactionNotActiveError,
    UnexpectedRollbackError,
)

pytestmark = pytest.mark.unit


def test_unit_of_work_commits_on_exit(
    manager: TransactionManager, session_factory: sessionmaker[Session]
) -> None:
    with manager.unit_of_work() as uow:
        assert isinstance(uow, SqlAlchemyUnitOfWork)
        add_account(uow.session, "alice")

    assert stored_names(session_factory) == ["alice"]


def test_explicit_commit_survives_later_failure(
    manager: TransactionManager, session_factory: sessionmaker[Session]
) -> None:
    with pytest.raises(LookupError):
        with manager.unit_of_work() as uow:
            add_account(uow.session, "bob")
            uow.commit()
            add_account(uow.session, "carol")
            raise LookupError("carol")

    assert stored_names(session_factory) == ["bob"]


def test_explicit_rollback_discards_pending_rows(
    manager: TransactionManager, session_factory: sessionmaker[Session]
) -> None:
    with manager.unit_of_work() as uow:
        add_account(uow.session, "dave")
        uow.rollback()
        assert uow.context.is_active
        add_account(uow.session, "erin")

    assert stored_names(session_factory) == ["erin"]


def test_commit_of_rollback_only_context_fails(
    manager: TransactionManager, session_factory: sessionmaker[Session]
) -> None:
    with manager.unit_of_work() as uow:
        add_account(uow.session, "frank")
        uow.context.mark_rollback_only()
        with pytest.raises(UnexpectedRollbackError):
            uow.commit()
        assert uow.context.rollback_only is False

    assert stored_names(session_factory) == []


def test_inactive_unit_of_work_rejects_access(manager: TransactionManager) -> None:
    uow = manager.unit_of_work()

    with pytest.raises(TransactionNotActiveError):
        uow.commit()
    with pytest.raises(TransactionNotActiveError):
        uow.session
    uow.rollback()


def test_unit_of_work_is_not_reentrant(manager: TransactionManager) -> None:
    with manager.unit_of_work() as uow:
        with pytest.raises(TransactionNotActiveError):
            uow.__enter__()
