"""Logging setup for applications built with :func:`build_transaction_helper`."""

from __future__ import annotations

import logging

import structlog

PACKAGE_LOGGER = "txhelper"


def configure_logging(level: str | int = logging.INFO) -> None:
    """Set the level of the ``txhelper`` loggers and render structlog events as JSON.

    Transaction begin/commit/rollback lines are emitted at DEBUG, so pass
    ``"DEBUG"`` to trace transaction boundaries.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"unknown log level: {level!r}")
        level = resolved

    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s %(message)s")
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )


__all__ = ["PACKAGE_LOGGER", "configure_logging"]
