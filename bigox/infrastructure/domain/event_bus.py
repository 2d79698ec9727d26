"""In-process publication of domain events to their registered handlers."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Generic, List, Optional, TypeVar

from bigox.infrastructure.di.container import Resolver, ServiceScope
from bigox.shared_kernel.cancellation import CancellationToken
from bigox.shared_kernel.domain_events import DomainEvent
from bigox.shared_kernel.guard import require

TEvent = TypeVar("TEvent", bound=DomainEvent)

logger = logging.getLogger(__name__)


class DomainEventHandler(ABC, Generic[TEvent]):
    @abstractmethod
    async def handle(self, event: TEvent, cancellation: Optional[CancellationToken] = None) -> None:
        raise NotImplementedError


class DomainEventBus(ABC):
    @abstractmethod
    async def publish(self, event: DomainEvent, cancellation: Optional[CancellationToken] = None) -> None:
        raise NotImplementedError


class ContainerDomainEventBus(DomainEventBus):
    """
    Publishes an event to every ``DomainEventHandler[type(event)]`` in the container.

    Handlers run one after another in registration order and the first
    exception stops publication. Only handlers registered for the exact event
    class are invoked. When built from the root container each publication
    resolves its handlers in a fresh scope.
    """

    def __init__(self, resolver: Resolver) -> None:
        self._resolver = require(resolver, "resolver")

    async def publish(self, event: DomainEvent, cancellation: Optional[CancellationToken] = None) -> None:
        require(event, "event")
        if isinstance(self._resolver, ServiceScope):
            await self._dispatch(self._resolver, event, cancellation)
            return
        with self._resolver.create_scope() as scope:
            await self._dispatch(scope, event, cancellation)

    async def _dispatch(
        self,
        resolver: Resolver,
        event: DomainEvent,
        cancellation: Optional[CancellationToken],
    ) -> None:
        event_type = type(event)
        handlers: List[DomainEventHandler] = resolver.resolve_all(DomainEventHandler[event_type])
        if not handlers:
            name = f"{event_type.__module__}.{event_type.__qualname__}"
            logger.warning("No registered handlers found for domain event type %s", name, extra={"event_type": name})
            return
        for handler in handlers:
            logger.debug("Publishing %s to %s", event_type.__name__, type(handler).__name__)
            await handler.handle(event, cancellation)
