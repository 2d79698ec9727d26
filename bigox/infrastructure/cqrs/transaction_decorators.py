"""Command decorators running the wrapped handler inside a transaction scope."""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional, TypeVar

from bigox.core.config import settings
from bigox.infrastructure.di.container import Container
from bigox.infrastructure.transactions.scope import (
    IsolationLevel,
    TransactionScope,
    TransactionScopeAsyncFlowOption,
    TransactionScopeOption,
    create_transaction_scope,
)
from bigox.shared_kernel.cancellation import CancellationToken
from bigox.shared_kernel.guard import require

from .command_bus import Command, CommandHandler
from .decoration import decorate_command_handler

TCommand = TypeVar("TCommand", bound=Command)

logger = logging.getLogger(__name__)


class TransactionCommandDecoratorBase(CommandHandler[TCommand]):
    """
    Wraps a command handler in a :class:`TransactionScope`.

    The scope options are plain attributes; set them before the first call
    or override :meth:`create_scope`. Defaults come from settings: the
    configured isolation level, the maximum timeout when none is configured,
    joining an ambient transaction and flowing across awaits.
    """

    def __init__(self, decorated: CommandHandler[TCommand]) -> None:
        self._decorated = require(decorated, "decorated")
        self.isolation_level = IsolationLevel(settings.TRANSACTION_ISOLATION_LEVEL)
        self.timeout: Optional[timedelta] = (
            timedelta(seconds=settings.TRANSACTION_TIMEOUT_SECONDS) if settings.TRANSACTION_TIMEOUT_SECONDS else None
        )
        self.scope_option = TransactionScopeOption.REQUIRED
        self.async_flow_option = TransactionScopeAsyncFlowOption.ENABLED

    def create_scope(self) -> TransactionScope:
        return create_transaction_scope(
            self.scope_option,
            self.isolation_level,
            self.timeout,
            self.async_flow_option,
        )

    async def handle(self, command: TCommand, cancellation: Optional[CancellationToken] = None) -> None:
        require(command, "command")
        async with self.create_scope() as scope:
            await self._decorated.handle(command, cancellation)
            scope.complete()
        logger.debug("Committed transaction for command '%s'", type(command).__name__)


class DefaultTransactionCommandDecorator(CommandHandler[TCommand]):
    """Runs the wrapped handler in a scope with default options."""

    def __init__(self, decorated: CommandHandler[TCommand]) -> None:
        self._decorated = require(decorated, "decorated")

    async def handle(self, command: TCommand, cancellation: Optional[CancellationToken] = None) -> None:
        require(command, "command")
        async with TransactionScope() as scope:
            await self._decorated.handle(command, cancellation)
            scope.complete()


def decorate_command_handler_with_transactions(container: Container, command_type: type) -> bool:
    """Wrap the handler of ``command_type`` in a transaction; no-op when it is not registered."""
    require(container, "container")
    require(command_type, "command_type")
    if not container.is_registered(CommandHandler[command_type]):
        return False
    decorate_command_handler(container, command_type, DefaultTransactionCommandDecorator)
    return True
