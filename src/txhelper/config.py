"""Configuration for building a ready-to-use :class:`TransactionHelper`.

Values are read from ``TXHELPER_*`` environment variables. The defaults give
a local SQLite database, which is enough for scripts and tests.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .helper import TransactionHelper
from .logging import configure_logging
from .manager import TransactionManager


class HelperSettings(BaseSettings):
    """Pydantic settings container for engine and session wiring."""

    model_config = SettingsConfigDict(env_prefix="TXHELPER_")

    database_url: str = Field(
        default="sqlite:///txhelper.db",
        description="SQLAlchemy URL of the database transactions run against.",
    )
    echo_sql: bool = Field(
        default=False,
        description="Log every SQL statement emitted by the engine.",
    )
    expire_on_commit: bool = Field(
        default=False,
        description="Expire ORM instances after each commit.",
    )
    log_level: str = Field(
        default="INFO",
        description="Level of the txhelper loggers, applied by build_transaction_helper().",
    )

    @classmethod
    def build_default(cls) -> "HelperSettings":
        return cls()


def create_session_factory(
    settings: HelperSettings, *, engine: Engine | None = None
) -> sessionmaker[Session]:
    """Return a ``sessionmaker`` bound to ``engine`` or one built from ``settings``."""

    if engine is None:
        engine = create_engine(settings.database_url, echo=settings.echo_sql)
    return sessionmaker(bind=engine, expire_on_commit=settings.expire_on_commit)


def build_transaction_helper(
    settings: HelperSettings | None = None, *, engine: Engine | None = None
) -> TransactionHelper:
    """Configure logging, then wire engine, session factory, manager and helper together."""

    cfg = settings or HelperSettings.build_default()
    configure_logging(cfg.log_level)
    manager = TransactionManager(create_session_factory(cfg, engine=engine))
    return TransactionHelper(manager)


__all__ = ["HelperSettings", "build_transaction_helper", "create_session_factory"]
