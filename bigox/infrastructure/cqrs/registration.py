"""Registration of handlers and dispatch infrastructure in the container."""
from __future__ import annotations

import logging
from types import ModuleType
from typing import Any, Iterable, List, Optional, Union

from bigox.core.config import settings
from bigox.infrastructure.di.container import Container
from bigox.infrastructure.di.scopes import Scope
from bigox.shared_kernel.exceptions import ValidationError, contract_name
from bigox.shared_kernel.guard import require

from .command_bus import CommandBus, ContainerCommandBus
from .decoration import (
    Decorators,
    decorate_all_command_handlers,
    decorate_all_query_handlers,
    decorate_all_result_command_handlers,
    decorate_handler,
)
from .decorators import module_prefix, tagged_handlers
from .families import (
    COMMAND_HANDLERS,
    FAMILIES,
    QUERY_HANDLERS,
    RESULT_COMMAND_HANDLERS,
    close_decorator,
    family_of,
    infer_contracts,
    is_decorator_type,
)
from .query_bus import ContainerQueryProcessor, QueryProcessor

logger = logging.getLogger(__name__)


def default_handler_lifetime() -> Scope:
    return Scope.parse(settings.DEFAULT_HANDLER_LIFETIME)


def default_infrastructure_lifetime() -> Scope:
    return Scope.parse(settings.INFRASTRUCTURE_LIFETIME)


def register_handler(
    container: Container,
    contract: Any,
    implementation: type,
    lifetime: Optional[Scope] = None,
) -> None:
    """Bind ``contract`` to ``implementation``; constructor dependencies are autowired."""
    require(container, "container")
    require(contract, "contract")
    require(implementation, "implementation")
    family = family_of(contract)
    if family is None:
        raise ValidationError(
            f"{contract_name(contract)} is not a handler contract",
            "UnknownContract",
            {"contract": contract_name(contract)},
        )
    if not isinstance(implementation, type) or not issubclass(implementation, family.handler_type):
        raise ValidationError(
            f"{contract_name(implementation)} does not implement {contract_name(contract)}",
            "InvalidHandler",
            {"contract": contract_name(contract)},
        )
    declared = infer_contracts(implementation)
    if declared and contract not in declared:
        raise ValidationError(
            f"{contract_name(implementation)} does not implement {contract_name(contract)}",
            "InvalidHandler",
            {"contract": contract_name(contract), "implements": [contract_name(c) for c in declared]},
        )
    lifetime = lifetime or default_handler_lifetime()
    container.register_type(contract, implementation, lifetime)
    logger.debug("Registered handler %s for %s", implementation.__name__, contract_name(contract))


def register_command_handler(
    container: Container,
    command_type: type,
    implementation: type,
    lifetime: Optional[Scope] = None,
) -> None:
    register_handler(container, COMMAND_HANDLERS.contract(command_type), implementation, lifetime)


def register_result_command_handler(
    container: Container,
    command_type: type,
    result_type: Any,
    implementation: type,
    lifetime: Optional[Scope] = None,
) -> None:
    register_handler(container, RESULT_COMMAND_HANDLERS.contract(command_type, result_type), implementation, lifetime)


def register_query_handler(
    container: Container,
    query_type: type,
    implementation: type,
    lifetime: Optional[Scope] = None,
    result_type: Optional[Any] = None,
) -> None:
    """Register a query handler; the result type defaults to the one declared by ``Query[T]``."""
    result_type = result_type if result_type is not None else query_type.result_type()
    if result_type is None:
        raise ValidationError(
            f"Cannot infer the result type of query '{query_type.__name__}'; pass result_type",
            "ResultTypeRequired",
            {"query": query_type.__name__},
        )
    register_handler(container, QUERY_HANDLERS.contract(query_type, result_type), implementation, lifetime)


def register_handlers(
    container: Container,
    handler_types: Iterable[type],
    lifetime: Optional[Scope] = None,
) -> List[Any]:
    """Register an explicit list of handler types under every contract they implement."""
    registered: List[Any] = []
    for handler_type in require(handler_types, "handler_types"):
        require(handler_type, "handler_types")
        if any(is_decorator_type(handler_type, family) for family in FAMILIES):
            logger.debug("Skipping decorator %s", handler_type.__name__)
            continue
        contracts = infer_contracts(handler_type)
        if not contracts:
            raise ValidationError(
                f"{handler_type.__name__} does not implement a handler contract",
                "InvalidHandler",
                {"handler": handler_type.__name__},
            )
        for contract in contracts:
            register_handler(container, contract, handler_type, lifetime)
            registered.append(contract)
    return registered


def register_module_handlers(
    container: Container,
    module_marker: Union[ModuleType, type, str],
    lifetime: Optional[Scope] = None,
) -> List[Any]:
    """
    Register every handler tagged with ``@command_handler``, ``@result_command_handler``
    or ``@query_handler`` that lives in the marker's module or package.

    ``module_marker`` may be a module, a package name, or a type; a type stands
    for the package that contains its module. Decorator types are skipped.
    """
    prefix = module_prefix(module_marker)
    registered: List[Any] = []
    for handler_type, contract in tagged_handlers(prefix):
        family = family_of(contract)
        if family is None:
            continue
        if is_decorator_type(handler_type, family):
            logger.debug("Skipping decorator %s", handler_type.__name__)
            continue
        register_handler(container, contract, handler_type, lifetime)
        registered.append(contract)
    logger.info("Registered %d handler(s) from %s", len(registered), prefix)
    return registered


def register_module_query_decorators(container: Container, module_marker: Union[ModuleType, type, str]) -> List[Any]:
    """
    Apply every concrete query decorator tagged with ``@query_handler`` in the
    marker's module or package to the handler of its contract.

    Decorators are applied in tagging order, so the first one tagged for a
    contract ends up innermost. Generic decorators are skipped; apply those with
    :func:`decorate_all_query_handlers`. Raises :class:`HandlerNotFoundError`
    when a decorated contract has no registered handler.
    """
    require(container, "container")
    prefix = module_prefix(module_marker)
    decorated: List[Any] = []
    for decorator_type, contract in tagged_handlers(prefix):
        if not QUERY_HANDLERS.owns(contract) or not is_decorator_type(decorator_type, QUERY_HANDLERS):
            continue
        if getattr(decorator_type, "__parameters__", ()) or close_decorator(decorator_type, contract) is not decorator_type:
            logger.debug("Skipping query decorator %s not closed over %s", decorator_type.__name__, contract_name(contract))
            continue
        decorate_handler(container, contract, decorator_type)
        decorated.append(contract)
    logger.info("Applied %d query decorator(s) from %s", len(decorated), prefix)
    return decorated


def register_default_command_bus(container: Container, lifetime: Optional[Scope] = None) -> None:
    container.register(
        CommandBus,
        lambda resolver: ContainerCommandBus(resolver),
        lifetime or default_infrastructure_lifetime(),
        ContainerCommandBus,
    )


def register_default_query_processor(container: Container, lifetime: Optional[Scope] = None) -> None:
    container.register(
        QueryProcessor,
        lambda resolver: ContainerQueryProcessor(resolver),
        lifetime or default_infrastructure_lifetime(),
        ContainerQueryProcessor,
    )


def add_cqrs(
    container: Container,
    infrastructure_lifetime: Optional[Scope] = None,
    command_decorators: Decorators = (),
    query_decorators: Decorators = (),
    result_command_decorators: Decorators = (),
) -> Container:
    """
    Register the command bus and query processor, then decorate every handler
    registered so far. Decorators are applied in the given order, the last one
    outermost.
    """
    require(container, "container")
    register_default_command_bus(container, infrastructure_lifetime)
    register_default_query_processor(container, infrastructure_lifetime)

    if command_decorators:
        decorate_all_command_handlers(container, command_decorators)
    if result_command_decorators:
        decorate_all_result_command_handlers(container, result_command_decorators)
    if query_decorators:
        decorate_all_query_handlers(container, query_decorators)
    return container
