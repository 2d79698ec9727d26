"""Default service registration for the DI container."""
from __future__ import annotations

from typing import Optional

from bigox.core.config import Settings, settings as default_settings
from bigox.infrastructure.cqrs.registration import add_cqrs
from bigox.infrastructure.di.container import Container
from bigox.infrastructure.di.scopes import Scope
from bigox.infrastructure.security.authorization import AuthorizationNoRulesBehavior
from bigox.infrastructure.security.registration import add_authorization_security


def configure_container(container: Container, settings: Optional[Settings] = None) -> Container:
    """Register the dispatch infrastructure and authorization services."""
    settings = settings or default_settings

    container.register(Container, lambda c: container, Scope.SINGLETON)
    container.register(Settings, lambda c: settings, Scope.SINGLETON)

    add_cqrs(container, Scope.parse(settings.INFRASTRUCTURE_LIFETIME))
    add_authorization_security(
        container,
        no_rules_behavior=AuthorizationNoRulesBehavior(settings.AUTHORIZATION_NO_RULES_BEHAVIOR),
    )
    return container


def get_configured_container() -> Container:
    """Process-wide container with the default registrations applied once."""
    container = Container.get_instance()
    if not container.is_registered(Container):
        configure_container(container)
    return container
