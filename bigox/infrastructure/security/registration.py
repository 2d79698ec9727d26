"""Container registration of authorization services."""
from __future__ import annotations

import logging
from typing import Optional

from bigox.infrastructure.di.container import Container
from bigox.infrastructure.di.scopes import Scope
from bigox.shared_kernel.exceptions import ValidationError
from bigox.shared_kernel.guard import require

from .authorization import (
    AuthorizationManager,
    AuthorizationNoRulesBehavior,
    AuthorizationOptions,
    AuthorizationRule,
    DefaultAuthorizationManager,
)

logger = logging.getLogger(__name__)


def add_authorization_security(
    container: Container,
    lifetime: Scope = Scope.SINGLETON,
    no_rules_behavior: Optional[AuthorizationNoRulesBehavior] = None,
) -> Container:
    require(container, "container")
    options = AuthorizationOptions(no_rules_behavior) if no_rules_behavior else AuthorizationOptions()
    container.register(AuthorizationOptions, lambda resolver: options, Scope.SINGLETON)
    container.register(
        AuthorizationManager,
        lambda resolver: DefaultAuthorizationManager(container, resolver.resolve(AuthorizationOptions)),
        lifetime,
        DefaultAuthorizationManager,
    )
    return container


def add_authorization_rule(
    container: Container,
    args_type: type,
    rule_type: type,
    lifetime: Scope = Scope.TRANSIENT,
) -> Container:
    """Add ``rule_type`` to the rules evaluated for ``args_type``; rules accumulate."""
    require(container, "container")
    require(args_type, "args_type")
    require(rule_type, "rule_type")
    if not isinstance(rule_type, type) or not issubclass(rule_type, AuthorizationRule):
        raise ValidationError(
            f"{getattr(rule_type, '__name__', rule_type)} is not an AuthorizationRule",
            "InvalidAuthorizationRule",
        )
    container.add_type(AuthorizationRule[args_type], rule_type, lifetime)
    logger.debug("Added authorization rule %s for %s", rule_type.__name__, args_type.__name__)
    return container
