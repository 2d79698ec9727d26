"""Container registration of domain event handlers and the event bus."""
from __future__ import annotations

import logging
from types import ModuleType
from typing import Any, Callable, List, TypeVar, Union, get_args, get_origin

from bigox.infrastructure.cqrs.decorators import module_prefix, record_handler, tagged_handlers
from bigox.infrastructure.cqrs.families import declared_type_argument
from bigox.infrastructure.di.container import Container
from bigox.infrastructure.di.scopes import Scope
from bigox.shared_kernel.domain_events import DomainEvent
from bigox.shared_kernel.exceptions import ValidationError
from bigox.shared_kernel.guard import require

from .event_bus import ContainerDomainEventBus, DomainEventBus, DomainEventHandler

T = TypeVar("T")

logger = logging.getLogger(__name__)


def domain_event_handler(event_type: type) -> Callable[[T], T]:
    """Tag a handler for :func:`register_module_domain_event_handlers`."""
    def decorator(handler_cls: T) -> T:
        setattr(handler_cls, "_event_type", event_type)
        record_handler(handler_cls, DomainEventHandler[event_type])
        return handler_cls
    return decorator


def register_domain_event_handler(
    container: Container,
    event_type: type,
    handler_type: type,
    lifetime: Scope = Scope.TRANSIENT,
) -> Container:
    """Add ``handler_type`` to the handlers of ``event_type``; handlers accumulate."""
    require(container, "container")
    require(event_type, "event_type")
    require(handler_type, "handler_type")
    if not isinstance(event_type, type) or not issubclass(event_type, DomainEvent):
        raise ValidationError(
            f"{getattr(event_type, '__name__', event_type)} is not a DomainEvent",
            "InvalidDomainEvent",
        )
    if not isinstance(handler_type, type) or not issubclass(handler_type, DomainEventHandler):
        raise ValidationError(
            f"{getattr(handler_type, '__name__', handler_type)} is not a DomainEventHandler",
            "InvalidDomainEventHandler",
        )
    declared = declared_type_argument(handler_type, DomainEventHandler)
    if declared is not None and declared is not event_type:
        raise ValidationError(
            f"{handler_type.__name__} handles {declared.__name__}, not {event_type.__name__}",
            "InvalidDomainEventHandler",
        )
    container.add_type(DomainEventHandler[event_type], handler_type, lifetime)
    logger.debug("Added domain event handler %s for %s", handler_type.__name__, event_type.__name__)
    return container


def register_default_domain_event_bus(container: Container, lifetime: Scope = Scope.SINGLETON) -> Container:
    require(container, "container")
    container.register(
        DomainEventBus,
        lambda resolver: ContainerDomainEventBus(resolver),
        lifetime,
        ContainerDomainEventBus,
    )
    return container


def register_module_domain_event_handlers(
    container: Container,
    module_marker: Union[ModuleType, type, str],
    lifetime: Scope = Scope.SCOPED,
) -> List[Any]:
    """
    Add every handler tagged with ``@domain_event_handler`` in the marker's
    module or package. A type marker stands for the package containing it.
    """
    require(container, "container")
    prefix = module_prefix(module_marker)
    registered: List[Any] = []
    for handler_type, contract in tagged_handlers(prefix):
        if get_origin(contract) is not DomainEventHandler:
            continue
        register_domain_event_handler(container, get_args(contract)[0], handler_type, lifetime)
        registered.append(contract)
    logger.info("Registered %d domain event handler(s) from %s", len(registered), prefix)
    return registered
