"""Decorators authorizing commands and queries before they reach the handler."""
from __future__ import annotations

from typing import Optional, TypeVar

from bigox.infrastructure.security.authorization import AuthorizationManager
from bigox.shared_kernel.cancellation import CancellationToken
from bigox.shared_kernel.guard import require
from bigox.shared_kernel.result import Result

from .command_bus import Command, CommandHandler, ResultCommandHandler
from .query_bus import QueryHandler

TCommand = TypeVar("TCommand", bound=Command)
TValue = TypeVar("TValue")
TQuery = TypeVar("TQuery")
TResult = TypeVar("TResult")


class AuthorizationCommandDecorator(CommandHandler[TCommand]):
    def __init__(self, decorated: CommandHandler[TCommand], authorization_manager: AuthorizationManager) -> None:
        self._decorated = require(decorated, "decorated")
        self._authorization_manager = require(authorization_manager, "authorization_manager")

    async def handle(self, command: TCommand, cancellation: Optional[CancellationToken] = None) -> None:
        require(command, "command")
        await self._authorization_manager.authorize(command, cancellation)
        await self._decorated.handle(command, cancellation)


class AuthorizationResultCommandDecorator(ResultCommandHandler[TCommand, TValue]):
    def __init__(
        self,
        decorated: ResultCommandHandler[TCommand, TValue],
        authorization_manager: AuthorizationManager,
    ) -> None:
        self._decorated = require(decorated, "decorated")
        self._authorization_manager = require(authorization_manager, "authorization_manager")

    async def handle(self, command: TCommand, cancellation: Optional[CancellationToken] = None) -> Result[TValue]:
        require(command, "command")
        await self._authorization_manager.authorize(command, cancellation)
        return await self._decorated.handle(command, cancellation)


class AuthorizationQueryDecorator(QueryHandler[TQuery, TResult]):
    def __init__(self, decorated: QueryHandler[TQuery, TResult], authorization_manager: AuthorizationManager) -> None:
        self._decorated = require(decorated, "decorated")
        self._authorization_manager = require(authorization_manager, "authorization_manager")

    async def read(self, query: TQuery, cancellation: Optional[CancellationToken] = None) -> TResult:
        require(query, "query")
        await self._authorization_manager.authorize(query, cancellation)
        return await self._decorated.read(query, cancellation)
