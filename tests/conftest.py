from __future__ import annotations

from collections.abc import Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tests.helpers.accounts import Base
from txhelper import TransactionHelper, TransactionManager


@pytest.fixture()
def engine() -> Iterator[Engine]:
    # Single shared in-memory connection; FastAPI runs sync dependencies in worker threads.
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture()
def manager(session_factory: sessionmaker[Session]) -> TransactionManager:
    return TransactionManager(session_factory)


@pytest.fixture()
def helper(manager: TransactionManager) -> TransactionHelper:
    return TransactionHelper(manager)
