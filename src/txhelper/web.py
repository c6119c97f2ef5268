"""FastAPI integration: one transaction per request.

::

    app = FastAPI()
    install_transaction_helper(app, build_transaction_helper())

    @app.post("/accounts")
    def create(
        payload: AccountIn,
        context: TransactionScope,
        helper: TransactionHelper = Depends(get_transaction_helper),
    ):
        return helper.run_in_transaction(
            lambda: insert_account(context.session, payload), context=context
        )

``TransactionScope`` finishes the transaction as soon as the endpoint
returns, before the response is sent, so a rollback forced by failed joined
work reaches the client as a server error instead of a success.
"""

from __future__ import annotations

import logging
from typing import Annotated, Iterator

from fastapi import Depends, FastAPI, Request

from .context import TransactionContext
from .helper import TransactionHelper

logger = logging.getLogger(__name__)

_STATE_ATTRIBUTE = "transaction_helper"


def install_transaction_helper(app: FastAPI, helper: TransactionHelper) -> None:
    """Attach ``helper`` to ``app.state`` for the request dependencies below."""

    setattr(app.state, _STATE_ATTRIBUTE, helper)


def get_transaction_helper(request: Request) -> TransactionHelper:
    helper = getattr(request.app.state, _STATE_ATTRIBUTE, None)
    if helper is None:
        raise RuntimeError("transaction helper is not installed on this application")
    return helper


def transaction_scope(request: Request) -> Iterator[TransactionContext]:
    """Open a transaction for the request that rolls back on any exception.

    Use it through :data:`TransactionScope`; a plain ``Depends`` exits only
    after the response has been sent.
    """

    helper = get_transaction_helper(request)
    with helper.transaction() as context:
        logger.debug("request transaction opened", extra={"path": request.url.path})
        yield context


TransactionScope = Annotated[
    TransactionContext, Depends(transaction_scope, scope="function")
]


__all__ = [
    "TransactionScope",
    "get_transaction_helper",
    "install_transaction_helper",
    "transaction_scope",
]
