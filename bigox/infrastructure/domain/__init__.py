"""Domain event publication."""
from .event_bus import ContainerDomainEventBus, DomainEventBus, DomainEventHandler
from .registration import (
    domain_event_handler,
    register_default_domain_event_bus,
    register_domain_event_handler,
    register_module_domain_event_handlers,
)

__all__ = [
    "ContainerDomainEventBus",
    "DomainEventBus",
    "DomainEventHandler",
    "domain_event_handler",
    "register_default_domain_event_bus",
    "register_domain_event_handler",
    "register_module_domain_event_handlers",
]
