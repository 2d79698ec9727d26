from typing import Optional

import pytest

from bigox.infrastructure.di.container import Container, ScopeError, ServiceNotRegisteredError
from bigox.infrastructure.di.scopes import Scope


class IService:
    pass


class ConcreteService(IService):
    pass


class Repository:
    pass


class Clock:
    pass


class ReportService:
    def __init__(self, repository: Repository, clock: Optional[Clock] = None, page_size: int = 20) -> None:
        self.repository = repository
        self.clock = clock
        self.page_size = page_size


class Plugin:
    pass


class FirstPlugin(Plugin):
    pass


class SecondPlugin(Plugin):
    pass


def test_singleton_returns_same_instance():
    container = Container()
    container.register(IService, lambda c: ConcreteService(), Scope.SINGLETON)
    instance1 = container.resolve(IService)
    instance2 = container.resolve(IService)
    assert instance1 is instance2


def test_transient_returns_new_instance():
    container = Container()
    container.register(IService, lambda c: ConcreteService(), Scope.TRANSIENT)
    instance1 = container.resolve(IService)
    instance2 = container.resolve(IService)
    assert instance1 is not instance2


def test_scoped_instance_is_shared_within_a_scope_only():
    container = Container()
    container.register(IService, lambda c: ConcreteService(), Scope.SCOPED)

    with container.create_scope() as scope:
        first = scope.resolve(IService)
        assert scope.resolve(IService) is first

    with container.create_scope() as other:
        assert other.resolve(IService) is not first


def test_scoped_service_cannot_be_resolved_from_root():
    container = Container()
    container.register(IService, lambda c: ConcreteService(), Scope.SCOPED)
    with pytest.raises(ScopeError):
        container.resolve(IService)


def test_unknown_interface_raises_lookup_error():
    container = Container()
    with pytest.raises(ServiceNotRegisteredError) as exc_info:
        container.resolve(IService)
    assert isinstance(exc_info.value, KeyError)
    assert "IService" in str(exc_info.value)
    assert not container.is_registered(IService)


def test_register_type_autowires_constructor():
    container = Container()
    container.register(Repository, lambda c: Repository(), Scope.SINGLETON)
    container.register_type(ReportService)

    service = container.resolve(ReportService)

    assert service.repository is container.resolve(Repository)
    assert service.clock is None
    assert service.page_size == 20


def test_register_type_resolves_optional_dependency_when_registered():
    container = Container()
    container.register(Repository, lambda c: Repository(), Scope.SINGLETON)
    container.register(Clock, lambda c: Clock(), Scope.SINGLETON)
    container.register_type(ReportService)

    assert container.resolve(ReportService).clock is container.resolve(Clock)


def test_missing_required_dependency_raises():
    container = Container()
    container.register_type(ReportService)
    with pytest.raises(ServiceNotRegisteredError):
        container.resolve(ReportService)


def test_add_keeps_every_registration_in_order():
    container = Container()
    container.add_type(Plugin, FirstPlugin)
    container.add_type(Plugin, SecondPlugin)

    plugins = container.resolve_all(Plugin)

    assert [type(plugin) for plugin in plugins] == [FirstPlugin, SecondPlugin]
    assert isinstance(container.resolve(Plugin), SecondPlugin)
    assert container.resolve_all(IService) == []


def test_register_replaces_previous_registrations():
    container = Container()
    container.add_type(Plugin, FirstPlugin)
    container.add_type(Plugin, SecondPlugin)
    container.register(Plugin, lambda c: FirstPlugin(), Scope.TRANSIENT)

    assert len(container.resolve_all(Plugin)) == 1


def test_replace_keeps_lifetime():
    container = Container()
    container.register(IService, lambda c: IService(), Scope.SINGLETON)
    container.replace(IService, lambda c: ConcreteService())

    assert container.get_registration(IService).scope is Scope.SINGLETON
    assert isinstance(container.resolve(IService), ConcreteService)
    assert container.resolve(IService) is container.resolve(IService)


def test_replace_unknown_interface_raises():
    container = Container()
    with pytest.raises(ServiceNotRegisteredError):
        container.replace(IService, lambda c: ConcreteService())


def test_singleton_resolved_in_scope_is_shared_with_root():
    container = Container()
    container.register(IService, lambda c: ConcreteService(), Scope.SINGLETON)
    with container.create_scope() as scope:
        assert scope.resolve(IService) is container.resolve(IService)


def test_get_instance_and_reset():
    Container.reset()
    first = Container.get_instance()
    assert Container.get_instance() is first
    Container.reset()
    assert Container.get_instance() is not first
    Container.reset()
