"""Dependency injection container with singleton, scoped and transient lifetimes."""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, TypeVar

from bigox.shared_kernel.exceptions import contract_name

from .scopes import Scope

T = TypeVar("T")

logger = logging.getLogger(__name__)

Factory = Callable[["Resolver"], Any]


class ServiceNotRegisteredError(KeyError):
    """Raised when resolving an interface that has no registration."""

    def __init__(self, interface: Any) -> None:
        super().__init__(f"No registration found for {contract_name(interface)}")
        self.interface = interface

    def __str__(self) -> str:
        return self.args[0]


class ScopeError(RuntimeError):
    """Raised when a scoped service is resolved outside of a scope."""


@dataclass(eq=False)
class Registration:
    interface: Any
    factory: Factory
    scope: Scope
    implementation: Optional[type] = None
    _instance: Any = field(default=None, repr=False)
    _created: bool = field(default=False, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def singleton(self, root: "Container") -> Any:
        if not self._created:
            with self._lock:
                if not self._created:
                    self._instance = self.factory(root)
                    self._created = True
        return self._instance


class Resolver:
    """Read side shared by the root container and its scopes."""

    def resolve(self, interface: Any) -> Any:
        raise NotImplementedError

    def resolve_all(self, interface: Any) -> List[Any]:
        raise NotImplementedError

    def is_registered(self, interface: Any) -> bool:
        raise NotImplementedError

    def create_scope(self):
        raise NotImplementedError


class Container(Resolver):
    _instance: Optional["Container"] = None
    _lock = threading.Lock()

    def __init__(self) -> None:
        self._registrations: Dict[Any, List[Registration]] = {}
        self._registration_lock = threading.RLock()

    @classmethod
    def get_instance(cls) -> "Container":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (tests only)."""
        cls._instance = None

    # Registration

    def register(
        self,
        interface: Any,
        factory: Factory,
        scope: Scope = Scope.SINGLETON,
        implementation: Optional[type] = None,
    ) -> Registration:
        """Register ``interface``, replacing any earlier registrations."""
        registration = Registration(interface, factory, scope, implementation)
        with self._registration_lock:
            self._registrations[interface] = [registration]
        logger.debug("Registered %s (%s)", contract_name(interface), scope.value)
        return registration

    def add(
        self,
        interface: Any,
        factory: Factory,
        scope: Scope = Scope.TRANSIENT,
        implementation: Optional[type] = None,
    ) -> Registration:
        """Append a registration; ``resolve_all`` returns every one of them."""
        registration = Registration(interface, factory, scope, implementation)
        with self._registration_lock:
            self._registrations.setdefault(interface, []).append(registration)
        logger.debug("Added %s (%s)", contract_name(interface), scope.value)
        return registration

    def register_type(
        self,
        interface: Any,
        implementation: Optional[type] = None,
        scope: Scope = Scope.TRANSIENT,
    ) -> Registration:
        """Register a type whose constructor dependencies are autowired."""
        from .autowire import autowire

        implementation = implementation or interface
        return self.register(
            interface,
            lambda resolver: autowire(implementation, resolver),
            scope,
            implementation,
        )

    def add_type(
        self,
        interface: Any,
        implementation: type,
        scope: Scope = Scope.TRANSIENT,
    ) -> Registration:
        from .autowire import autowire

        return self.add(
            interface,
            lambda resolver: autowire(implementation, resolver),
            scope,
            implementation,
        )

    def replace(self, interface: Any, factory: Factory, scope: Optional[Scope] = None) -> Registration:
        """Swap the factory of ``interface``; the lifetime is kept unless given."""
        current = self.get_registration(interface)
        if current is None:
            raise ServiceNotRegisteredError(interface)
        return self.register(
            interface,
            factory,
            scope or current.scope,
            current.implementation,
        )

    def get_registration(self, interface: Any) -> Optional[Registration]:
        registrations = self._registrations.get(interface)
        return registrations[-1] if registrations else None

    def registered_interfaces(self) -> List[Any]:
        with self._registration_lock:
            return list(self._registrations.keys())

    def is_registered(self, interface: Any) -> bool:
        return bool(self._registrations.get(interface))

    # Resolution

    def resolve(self, interface: Any) -> Any:
        registration = self.get_registration(interface)
        if registration is None:
            raise ServiceNotRegisteredError(interface)
        return self._activate(registration, None)

    def resolve_all(self, interface: Any) -> List[Any]:
        registrations = list(self._registrations.get(interface, ()))
        return [self._activate(registration, None) for registration in registrations]

    def _activate(self, registration: Registration, scope: Optional["ServiceScope"]) -> Any:
        if registration.scope == Scope.SINGLETON:
            return registration.singleton(self)

        if registration.scope == Scope.SCOPED:
            if scope is None:
                raise ScopeError(
                    f"Cannot resolve scoped service {contract_name(registration.interface)} outside of scope"
                )
            return scope._scoped(registration)

        return registration.factory(scope or self)

    @contextmanager
    def create_scope(self) -> Iterator["ServiceScope"]:
        """Create a scope for scoped services (per operation)."""
        scope = ServiceScope(self)
        try:
            yield scope
        finally:
            scope.close()


class ServiceScope(Resolver):
    """Resolution context owning its own scoped instances."""

    def __init__(self, root: Container) -> None:
        self.root = root
        self._instances: Dict[int, Any] = {}
        self._lock = threading.RLock()

    def _scoped(self, registration: Registration) -> Any:
        key = id(registration)
        with self._lock:
            if key not in self._instances:
                self._instances[key] = registration.factory(self)
            return self._instances[key]

    def resolve(self, interface: Any) -> Any:
        registration = self.root.get_registration(interface)
        if registration is None:
            raise ServiceNotRegisteredError(interface)
        return self.root._activate(registration, self)

    def resolve_all(self, interface: Any) -> List[Any]:
        registrations = list(self.root._registrations.get(interface, ()))
        return [self.root._activate(registration, self) for registration in registrations]

    def is_registered(self, interface: Any) -> bool:
        return self.root.is_registered(interface)

    def create_scope(self):
        return self.root.create_scope()

    def close(self) -> None:
        self._instances.clear()
