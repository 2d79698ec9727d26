"""Decorators logging start, failure and duration of handler invocations."""
from __future__ import annotations

import logging
import time
from typing import Any, Optional, TypeVar

from bigox.infrastructure.di.container import Container
from bigox.shared_kernel.cancellation import CancellationToken
from bigox.shared_kernel.guard import require
from bigox.shared_kernel.result import Result

from .command_bus import Command, CommandHandler, ResultCommandHandler
from .decoration import decorate_command_handler, decorate_query_handler
from .query_bus import QueryHandler

TCommand = TypeVar("TCommand", bound=Command)
TValue = TypeVar("TValue")
TQuery = TypeVar("TQuery")
TResult = TypeVar("TResult")

QUERY_STARTED = 1001
QUERY_FAILED = 1002
QUERY_EXECUTED = 1003
COMMAND_STARTED = 2001
COMMAND_FAILED = 2002
COMMAND_EXECUTED = 2003


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


class LoggingCommandDecorator(CommandHandler[TCommand]):
    def __init__(self, decorated: CommandHandler[TCommand], logger: Optional[logging.Logger] = None) -> None:
        self._decorated = require(decorated, "decorated")
        self._logger = logger or logging.getLogger(__name__)

    async def handle(self, command: TCommand, cancellation: Optional[CancellationToken] = None) -> None:
        require(command, "command")
        name = type(command).__name__
        extra = {"command_type": name}
        self._logger.info("Start executing command '%s'", name, extra={"event_id": COMMAND_STARTED, **extra})
        started = time.perf_counter()
        try:
            await self._decorated.handle(command, cancellation)
        except BaseException:
            self._logger.exception(
                "Exception thrown while executing command '%s'", name, extra={"event_id": COMMAND_FAILED, **extra}
            )
            raise
        finally:
            elapsed = _elapsed_ms(started)
            self._logger.info(
                "Executed command '%s' in %.3f ms",
                name,
                elapsed,
                extra={"event_id": COMMAND_EXECUTED, "elapsed_ms": elapsed, **extra},
            )


class LoggingResultCommandDecorator(ResultCommandHandler[TCommand, TValue]):
    def __init__(
        self,
        decorated: ResultCommandHandler[TCommand, TValue],
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._decorated = require(decorated, "decorated")
        self._logger = logger or logging.getLogger(__name__)

    async def handle(self, command: TCommand, cancellation: Optional[CancellationToken] = None) -> Result[TValue]:
        require(command, "command")
        name = type(command).__name__
        extra = {"command_type": name}
        self._logger.info("Start executing command '%s'", name, extra={"event_id": COMMAND_STARTED, **extra})
        started = time.perf_counter()
        try:
            result = await self._decorated.handle(command, cancellation)
        except BaseException:
            self._logger.exception(
                "Exception thrown while executing command '%s'", name, extra={"event_id": COMMAND_FAILED, **extra}
            )
            raise
        finally:
            elapsed = _elapsed_ms(started)
            self._logger.info(
                "Executed command '%s' in %.3f ms",
                name,
                elapsed,
                extra={"event_id": COMMAND_EXECUTED, "elapsed_ms": elapsed, **extra},
            )
        if result is not None and result.is_failure:
            self._logger.warning(
                "Command '%s' returned a failed result: %s", name, result.first_error, extra=extra
            )
        return result


class LoggingQueryDecorator(QueryHandler[TQuery, TResult]):
    def __init__(self, decorated: QueryHandler[TQuery, TResult], logger: Optional[logging.Logger] = None) -> None:
        self._decorated = require(decorated, "decorated")
        self._logger = logger or logging.getLogger(__name__)

    async def read(self, query: TQuery, cancellation: Optional[CancellationToken] = None) -> TResult:
        require(query, "query")
        name = type(query).__name__
        extra = {"query_type": name}
        self._logger.info("Start reading query '%s'", name, extra={"event_id": QUERY_STARTED, **extra})
        started = time.perf_counter()
        try:
            return await self._decorated.read(query, cancellation)
        except BaseException:
            self._logger.exception(
                "Exception thrown while reading query '%s'", name, extra={"event_id": QUERY_FAILED, **extra}
            )
            raise
        finally:
            elapsed = _elapsed_ms(started)
            self._logger.info(
                "Executed query '%s' in %.3f ms",
                name,
                elapsed,
                extra={"event_id": QUERY_EXECUTED, "elapsed_ms": elapsed, **extra},
            )


def decorate_command_handler_with_logging(container: Container, command_type: type) -> None:
    decorate_command_handler(container, command_type, LoggingCommandDecorator)


def decorate_query_handler_with_logging(
    container: Container,
    query_type: type,
    result_type: Optional[Any] = None,
) -> None:
    decorate_query_handler(container, query_type, LoggingQueryDecorator, result_type)
