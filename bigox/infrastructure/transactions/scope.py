"""Transaction scopes with an ambient transaction flowing through ``contextvars``."""
from __future__ import annotations

import inspect
import logging
import time
import uuid
from contextvars import ContextVar, Token
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any, List, Optional, Union

from bigox.shared_kernel.exceptions import ArgumentOutOfRangeError, TransactionAbortedError, TransactionError
from bigox.shared_kernel.guard import require

logger = logging.getLogger(__name__)

MAXIMUM_TIMEOUT = timedelta(minutes=10)


class IsolationLevel(str, Enum):
    SERIALIZABLE = "serializable"
    REPEATABLE_READ = "repeatable_read"
    READ_COMMITTED = "read_committed"
    READ_UNCOMMITTED = "read_uncommitted"
    SNAPSHOT = "snapshot"
    CHAOS = "chaos"
    UNSPECIFIED = "unspecified"


class TransactionScopeOption(str, Enum):
    REQUIRED = "required"
    REQUIRES_NEW = "requires_new"
    SUPPRESS = "suppress"


class TransactionScopeAsyncFlowOption(str, Enum):
    ENABLED = "enabled"
    SUPPRESS = "suppress"


class TransactionStatus(str, Enum):
    ACTIVE = "active"
    COMMITTED = "committed"
    ABORTED = "aborted"
    IN_DOUBT = "in_doubt"


@dataclass(frozen=True)
class TransactionOptions:
    isolation_level: IsolationLevel = IsolationLevel.READ_COMMITTED
    timeout: Optional[timedelta] = None


class EnlistmentNotification:
    """
    Resource taking part in a transaction.

    Every method may be a coroutine. ``prepare`` votes to commit by returning
    and votes to abort by raising.
    """

    def prepare(self, transaction: "Transaction") -> Any:
        return None

    def commit(self, transaction: "Transaction") -> Any:
        return None

    def rollback(self, transaction: "Transaction") -> Any:
        return None

    def in_doubt(self, transaction: "Transaction") -> Any:
        return None


async def _invoke(method: Any, transaction: "Transaction") -> None:
    result = method(transaction)
    if inspect.isawaitable(result):
        await result


class Transaction:
    def __init__(
        self,
        isolation_level: IsolationLevel = IsolationLevel.READ_COMMITTED,
        timeout: Optional[timedelta] = None,
    ) -> None:
        self.id = uuid.uuid4().hex
        self.isolation_level = isolation_level
        self.timeout = timeout or MAXIMUM_TIMEOUT
        self.status = TransactionStatus.ACTIVE
        self.rollback_reason: Optional[str] = None
        self._resources: List[EnlistmentNotification] = []
        self._rollback_only = False
        self._started = time.monotonic()

    @property
    def rollback_only(self) -> bool:
        return self._rollback_only

    @property
    def expired(self) -> bool:
        return time.monotonic() - self._started > self.timeout.total_seconds()

    @property
    def resources(self) -> List[EnlistmentNotification]:
        return list(self._resources)

    def enlist(self, resource: EnlistmentNotification) -> EnlistmentNotification:
        require(resource, "resource")
        if self.status is not TransactionStatus.ACTIVE:
            raise TransactionError(
                f"Cannot enlist in a transaction that is {self.status.value}",
                "TransactionNotActive",
                {"transaction_id": self.id},
            )
        self._resources.append(resource)
        return resource

    def mark_rollback_only(self, reason: Optional[str] = None) -> None:
        self._rollback_only = True
        self.rollback_reason = self.rollback_reason or reason

    async def commit(self) -> None:
        """Two-phase commit: prepare every resource, then commit every resource."""
        if self.status is not TransactionStatus.ACTIVE:
            raise TransactionError(
                f"Cannot commit a transaction that is {self.status.value}",
                "TransactionNotActive",
                {"transaction_id": self.id},
            )
        if self.expired:
            self.mark_rollback_only("Transaction Timeout")
        if self._rollback_only:
            await self.rollback()
            raise TransactionAbortedError(
                "The transaction has aborted.",
                "TransactionAborted",
                {"transaction_id": self.id, "reason": self.rollback_reason},
            )

        for resource in self._resources:
            try:
                await _invoke(resource.prepare, self)
            except Exception as exc:
                self.mark_rollback_only(str(exc))
                await self.rollback()
                raise TransactionAbortedError(
                    "The transaction has aborted.",
                    "TransactionAborted",
                    {"transaction_id": self.id, "reason": self.rollback_reason},
                ) from exc

        committed = 0
        try:
            for resource in self._resources:
                await _invoke(resource.commit, self)
                committed += 1
        except Exception:
            self.status = TransactionStatus.IN_DOUBT
            for resource in self._resources[committed + 1:]:
                await _invoke(resource.in_doubt, self)
            raise
        self.status = TransactionStatus.COMMITTED
        logger.debug("Transaction %s committed", self.id)

    async def rollback(self) -> None:
        if self.status is TransactionStatus.ABORTED:
            return
        if self.status is not TransactionStatus.ACTIVE:
            raise TransactionError(
                f"Cannot roll back a transaction that is {self.status.value}",
                "TransactionNotActive",
                {"transaction_id": self.id},
            )
        self.status = TransactionStatus.ABORTED
        for resource in self._resources:
            try:
                await _invoke(resource.rollback, self)
            except Exception:
                logger.exception("Resource %r failed to roll back transaction %s", resource, self.id)
        logger.debug("Transaction %s rolled back", self.id)


_ambient: ContextVar[Optional[Transaction]] = ContextVar("bigox_ambient_transaction", default=None)


def current_transaction() -> Optional[Transaction]:
    """The ambient transaction of the running task, if any."""
    return _ambient.get()


class TransactionScope:
    """
    Async context manager around a transaction.

    The owning scope commits on exit when :meth:`complete` was called and the
    block did not raise; otherwise it rolls back. A scope that joined an
    ambient transaction and exits incomplete dooms that transaction.
    """

    def __init__(
        self,
        scope_option: TransactionScopeOption = TransactionScopeOption.REQUIRED,
        options: Optional[TransactionOptions] = None,
        async_flow_option: TransactionScopeAsyncFlowOption = TransactionScopeAsyncFlowOption.ENABLED,
    ) -> None:
        self.scope_option = scope_option
        self.options = options or TransactionOptions()
        self.async_flow_option = async_flow_option
        self._explicit_options = options is not None
        self.transaction: Optional[Transaction] = None
        self.owner = False
        self.completed = False
        self.disposed = False
        self._token: Optional[Token] = None

    async def __aenter__(self) -> "TransactionScope":
        ambient = _ambient.get()
        if self.scope_option is TransactionScopeOption.SUPPRESS:
            self.transaction = None
        elif (
            self.scope_option is TransactionScopeOption.REQUIRED
            and ambient is not None
            and ambient.status is TransactionStatus.ACTIVE
        ):
            if self._explicit_options and ambient.isolation_level is not self.options.isolation_level:
                raise TransactionError(
                    "The transaction specified for TransactionScope has a different isolation level "
                    "than the value requested for the scope.",
                    "IsolationLevelMismatch",
                    {"ambient": ambient.isolation_level.value, "requested": self.options.isolation_level.value},
                )
            self.transaction = ambient
        else:
            self.transaction = Transaction(self.options.isolation_level, self.options.timeout)
            self.owner = True

        if self.async_flow_option is TransactionScopeAsyncFlowOption.ENABLED:
            self._token = _ambient.set(self.transaction)
        return self

    def complete(self) -> None:
        if self.completed or self.disposed:
            raise TransactionError(
                "The current TransactionScope is already complete.",
                "TransactionScopeComplete",
            )
        self.completed = True

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        try:
            if self.transaction is None:
                return False
            if self.owner:
                if self.completed and exc is None:
                    await self.transaction.commit()
                else:
                    await self.transaction.rollback()
            elif not self.completed or exc is not None:
                self.transaction.mark_rollback_only("A nested scope was not completed")
        finally:
            if self._token is not None:
                _ambient.reset(self._token)
                self._token = None
            self.disposed = True
        return False


def create_transaction_scope(
    scope_option: TransactionScopeOption = TransactionScopeOption.REQUIRED,
    isolation_level: IsolationLevel = IsolationLevel.READ_COMMITTED,
    timeout: Optional[Union[timedelta, float]] = None,
    async_flow_option: TransactionScopeAsyncFlowOption = TransactionScopeAsyncFlowOption.ENABLED,
) -> TransactionScope:
    """Build a scope; ``timeout`` defaults to the maximum and must be positive when given."""
    if timeout is not None:
        if not isinstance(timeout, timedelta):
            timeout = timedelta(seconds=timeout)
        if timeout <= timedelta(0):
            raise ArgumentOutOfRangeError("timeout", timeout, "Timeout must be greater than zero.")
    return TransactionScope(scope_option, TransactionOptions(isolation_level, timeout), async_flow_option)
