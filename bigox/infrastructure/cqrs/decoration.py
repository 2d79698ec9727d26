"""Builds decorator chains around registered handler contracts."""
from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

from bigox.infrastructure.di.autowire import autowire
from bigox.infrastructure.di.container import Container, Resolver
from bigox.shared_kernel.exceptions import (
    ArgumentRequiredError,
    HandlerNotFoundError,
    InvalidDecoratorError,
    ValidationError,
    contract_name,
)
from bigox.shared_kernel.guard import require

from .families import (
    COMMAND_HANDLERS,
    QUERY_HANDLERS,
    RESULT_COMMAND_HANDLERS,
    HandlerFamily,
    close_decorator,
    family_of,
    validate_decorator,
)

logger = logging.getLogger(__name__)

Decorators = Union[Any, Sequence[Any]]


def _as_list(decorators: Decorators) -> List[Any]:
    require(decorators, "decorators")
    items = list(decorators) if isinstance(decorators, (list, tuple)) else [decorators]
    for item in items:
        if item is None:
            raise ArgumentRequiredError("decorators")
    return items


def _decorator_factory(decorator: Any, parameter: str, inner: Callable[[Resolver], Any]) -> Callable[[Resolver], Any]:
    def factory(resolver: Resolver) -> Any:
        return autowire(decorator, resolver, {parameter: inner(resolver)})
    return factory


def _plan(
    family: HandlerFamily,
    contract: Any,
    decorators: List[Any],
    parameters: List[str],
) -> List[Tuple[Any, str]]:
    chain = []
    for decorator, parameter in zip(decorators, parameters):
        closed = close_decorator(decorator, contract)
        if closed is None:
            raise InvalidDecoratorError(decorator, family.decorator_contract)
        chain.append((closed, parameter))
    return chain


def _apply(container: Container, contract: Any, chain: List[Tuple[Any, str]]) -> None:
    registration = container.get_registration(contract)
    factory = registration.factory
    # index 0 ends up innermost, the last decorator outermost
    for decorator, parameter in chain:
        factory = _decorator_factory(decorator, parameter, factory)
    container.replace(contract, factory)
    logger.debug(
        "Decorated %s with %s",
        contract_name(contract),
        " -> ".join(contract_name(decorator) for decorator, _ in reversed(chain)),
    )


def decorate_all_handlers(container: Container, family: HandlerFamily, decorators: Decorators) -> List[Any]:
    """
    Wrap every registered contract of ``family`` with ``decorators``.

    The first decorator becomes the innermost wrapper and the last one the
    outermost. Every decorator is validated and closed for every contract
    before any registration is replaced, so a failure leaves the container
    untouched. Contracts registered afterwards are not decorated.

    Returns the decorated contracts.
    """
    require(container, "container")
    items = _as_list(decorators)
    parameters = [validate_decorator(decorator, family) for decorator in items]

    contracts = [contract for contract in container.registered_interfaces() if family.owns(contract)]
    plans = [(contract, _plan(family, contract, items, parameters)) for contract in contracts]
    for contract, chain in plans:
        _apply(container, contract, chain)

    if not contracts:
        logger.debug("No %s handlers registered; nothing to decorate", family.name)
    return contracts


def decorate_all_command_handlers(container: Container, decorators: Decorators) -> List[Any]:
    return decorate_all_handlers(container, COMMAND_HANDLERS, decorators)


def decorate_all_result_command_handlers(container: Container, decorators: Decorators) -> List[Any]:
    return decorate_all_handlers(container, RESULT_COMMAND_HANDLERS, decorators)


def decorate_all_query_handlers(container: Container, decorators: Decorators) -> List[Any]:
    return decorate_all_handlers(container, QUERY_HANDLERS, decorators)


def decorate_handler(container: Container, contract: Any, decorators: Decorators) -> None:
    """Wrap a single registered contract; raises if it has no registration."""
    require(container, "container")
    require(contract, "contract")
    family = family_of(contract)
    if family is None:
        raise ValidationError(
            f"{contract_name(contract)} is not a handler contract",
            "UnknownContract",
            {"contract": contract_name(contract)},
        )
    items = _as_list(decorators)
    parameters = [validate_decorator(decorator, family) for decorator in items]
    if not container.is_registered(contract):
        raise HandlerNotFoundError(contract)
    _apply(container, contract, _plan(family, contract, items, parameters))


def decorate_command_handler(container: Container, command_type: type, decorators: Decorators) -> None:
    decorate_handler(container, COMMAND_HANDLERS.contract(require(command_type, "command_type")), decorators)


def decorate_result_command_handler(
    container: Container,
    command_type: type,
    result_type: Any,
    decorators: Decorators,
) -> None:
    contract = RESULT_COMMAND_HANDLERS.contract(require(command_type, "command_type"), require(result_type, "result_type"))
    decorate_handler(container, contract, decorators)


def decorate_query_handler(
    container: Container,
    query_type: type,
    decorators: Decorators,
    result_type: Optional[Any] = None,
) -> None:
    require(query_type, "query_type")
    result_type = result_type if result_type is not None else query_type.result_type()
    if result_type is None:
        raise ValidationError(
            f"Cannot infer the result type of query '{query_type.__name__}'; pass result_type",
            "ResultTypeRequired",
            {"query": query_type.__name__},
        )
    decorate_handler(container, QUERY_HANDLERS.contract(query_type, result_type), decorators)
