"""Dependency injection container."""
from .autowire import autowire
from .container import Container, Registration, Resolver, ScopeError, ServiceNotRegisteredError, ServiceScope
from .scopes import Scope

__all__ = [
    "Container",
    "Registration",
    "Resolver",
    "Scope",
    "ScopeError",
    "ServiceNotRegisteredError",
    "ServiceScope",
    "autowire",
]
