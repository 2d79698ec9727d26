"""Enlist SQLAlchemy sessions in a transaction scope."""
from __future__ import annotations

import logging
from typing import Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from bigox.shared_kernel.exceptions import TransactionError
from bigox.shared_kernel.guard import require

from .scope import EnlistmentNotification, Transaction, current_transaction

logger = logging.getLogger(__name__)


class SessionEnlistment(EnlistmentNotification):
    """Flushes on prepare, then commits or rolls back the session with the transaction."""

    def __init__(self, session: Union[Session, AsyncSession]) -> None:
        self.session = require(session, "session")

    async def prepare(self, transaction: Transaction) -> None:
        if isinstance(self.session, AsyncSession):
            await self.session.flush()
        else:
            self.session.flush()

    async def commit(self, transaction: Transaction) -> None:
        logger.debug("Committing session for transaction %s", transaction.id)
        if isinstance(self.session, AsyncSession):
            await self.session.commit()
        else:
            self.session.commit()

    async def rollback(self, transaction: Transaction) -> None:
        logger.debug("Rolling back session for transaction %s", transaction.id)
        if isinstance(self.session, AsyncSession):
            await self.session.rollback()
        else:
            self.session.rollback()


def enlist_session(
    session: Union[Session, AsyncSession],
    transaction: Optional[Transaction] = None,
) -> SessionEnlistment:
    """Enlist ``session`` in ``transaction`` or the ambient one."""
    transaction = transaction or current_transaction()
    if transaction is None:
        raise TransactionError("No ambient transaction to enlist the session in", "NoAmbientTransaction")
    enlistment = SessionEnlistment(session)
    transaction.enlist(enlistment)
    return enlistment
