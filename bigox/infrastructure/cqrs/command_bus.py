"""Command contracts and the container-backed command bus."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

from bigox.infrastructure.di.container import Resolver
from bigox.shared_kernel.cancellation import CancellationToken
from bigox.shared_kernel.exceptions import HandlerNotFoundError
from bigox.shared_kernel.guard import require
from bigox.shared_kernel.result import Result

TCommand = TypeVar("TCommand", bound="Command")
TValue = TypeVar("TValue")

logger = logging.getLogger(__name__)


class Command(ABC):
    """Marker base class for commands."""


class CommandHandler(ABC, Generic[TCommand]):
    @abstractmethod
    async def handle(self, command: TCommand, cancellation: Optional[CancellationToken] = None) -> None:
        raise NotImplementedError


class ResultCommandHandler(ABC, Generic[TCommand, TValue]):
    """Handler for commands that report a :class:`Result` instead of raising."""

    @abstractmethod
    async def handle(self, command: TCommand, cancellation: Optional[CancellationToken] = None) -> Result[TValue]:
        raise NotImplementedError


class CommandDecorator(CommandHandler[TCommand]):
    """Base for decorators wrapping another command handler of the same contract."""

    def __init__(self, decorated: CommandHandler[TCommand]) -> None:
        self._decorated = require(decorated, "decorated")

    @property
    def decorated(self) -> CommandHandler[TCommand]:
        return self._decorated

    async def handle(self, command: TCommand, cancellation: Optional[CancellationToken] = None) -> None:
        await self._decorated.handle(command, cancellation)


class ResultCommandDecorator(ResultCommandHandler[TCommand, TValue]):
    def __init__(self, decorated: ResultCommandHandler[TCommand, TValue]) -> None:
        self._decorated = require(decorated, "decorated")

    @property
    def decorated(self) -> ResultCommandHandler[TCommand, TValue]:
        return self._decorated

    async def handle(self, command: TCommand, cancellation: Optional[CancellationToken] = None) -> Result[TValue]:
        return await self._decorated.handle(command, cancellation)


class CommandBus(ABC):
    @abstractmethod
    async def send(self, command: Command, cancellation: Optional[CancellationToken] = None) -> None:
        raise NotImplementedError

    @abstractmethod
    async def send_for_result(
        self,
        command: Command,
        result_type: Any,
        cancellation: Optional[CancellationToken] = None,
    ) -> Result[Any]:
        raise NotImplementedError


class ContainerCommandBus(CommandBus):
    """Resolves the handler contract for each command from the container."""

    def __init__(self, resolver: Resolver) -> None:
        self._resolver = resolver

    async def send(self, command: Command, cancellation: Optional[CancellationToken] = None) -> None:
        require(command, "command")
        contract = CommandHandler[type(command)]
        handler = self._resolve(contract)
        logger.debug("Dispatching %s to %s", type(command).__name__, type(handler).__name__)
        await handler.handle(command, cancellation)

    async def send_for_result(
        self,
        command: Command,
        result_type: Any,
        cancellation: Optional[CancellationToken] = None,
    ) -> Result[Any]:
        require(command, "command")
        require(result_type, "result_type")
        contract = ResultCommandHandler[type(command), result_type]
        handler = self._resolve(contract)
        logger.debug("Dispatching %s to %s", type(command).__name__, type(handler).__name__)
        return await handler.handle(command, cancellation)

    def _resolve(self, contract: Any) -> Any:
        if not self._resolver.is_registered(contract):
            raise HandlerNotFoundError(contract)
        return self._resolver.resolve(contract)
