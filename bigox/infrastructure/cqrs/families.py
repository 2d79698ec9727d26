"""Known handler contract shapes and decorator capability checks."""
from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple, TypeVar, get_args, get_origin

from bigox.infrastructure.di.autowire import constructor_parameters
from bigox.shared_kernel.exceptions import InvalidDecoratorError

from .command_bus import CommandHandler, ResultCommandHandler
from .query_bus import QueryHandler


@dataclass(frozen=True)
class HandlerFamily:
    """One contract shape: the generic handler base and its type arity."""

    name: str
    handler_type: type
    arity: int
    decorator_contract: str

    def contract(self, *args: Any) -> Any:
        if len(args) != self.arity:
            raise TypeError(f"{self.name} contracts take {self.arity} type argument(s), got {len(args)}")
        return self.handler_type[args if self.arity > 1 else args[0]]

    def owns(self, contract: Any) -> bool:
        return get_origin(contract) is self.handler_type


COMMAND_HANDLERS = HandlerFamily("command", CommandHandler, 1, "CommandDecorator[TCommand]")
RESULT_COMMAND_HANDLERS = HandlerFamily(
    "result command", ResultCommandHandler, 2, "ResultCommandDecorator[TCommand, TValue]"
)
QUERY_HANDLERS = HandlerFamily("query", QueryHandler, 2, "QueryDecorator[TQuery, TResult]")

FAMILIES: Tuple[HandlerFamily, ...] = (COMMAND_HANDLERS, RESULT_COMMAND_HANDLERS, QUERY_HANDLERS)


def family_of(contract: Any) -> Optional[HandlerFamily]:
    for family in FAMILIES:
        if family.owns(contract):
            return family
    return None


def generic_bases(cls: type, substitution: Optional[Dict[Any, Any]] = None) -> Iterator[Tuple[Any, Tuple[Any, ...]]]:
    """Yield ``(origin, args)`` for every parameterized base of ``cls``, type variables substituted."""
    substitution = substitution or {}
    for base in cls.__dict__.get("__orig_bases__", ()):
        origin = get_origin(base)
        if origin is None or not isinstance(origin, type):
            continue
        args = tuple(substitution.get(arg, arg) for arg in get_args(base))
        yield origin, args
        parameters = getattr(origin, "__parameters__", ())
        if parameters and len(parameters) == len(args):
            yield from generic_bases(origin, dict(zip(parameters, args)))


def declared_type_argument(cls: type, base: type, index: int = 0) -> Optional[Any]:
    """Concrete type argument ``cls`` supplies to the generic ``base``, if any."""
    for klass in cls.__mro__:
        for origin, args in generic_bases(klass):
            if origin is base and len(args) > index and not isinstance(args[index], TypeVar):
                return args[index]
    return None


def infer_contracts(handler_type: type) -> List[Any]:
    """Every closed handler contract implemented by ``handler_type``."""
    contracts: List[Any] = []
    for klass in handler_type.__mro__:
        for origin, args in generic_bases(klass):
            family = next((f for f in FAMILIES if f.handler_type is origin), None)
            if family is None or len(args) != family.arity:
                continue
            if any(isinstance(arg, TypeVar) for arg in args):
                continue
            contract = family.contract(*args)
            if contract not in contracts:
                contracts.append(contract)
    return contracts


def decorated_parameter(decorator: Any, family: HandlerFamily) -> Optional[str]:
    """Name of the constructor parameter receiving the wrapped handler, or None."""
    cls = get_origin(decorator) or decorator
    if not isinstance(cls, type) or inspect.isabstract(cls):
        return None
    if not issubclass(cls, family.handler_type):
        return None
    for name, _, annotation in constructor_parameters(cls):
        if annotation is family.handler_type or get_origin(annotation) is family.handler_type:
            return name
    return None


def is_decorator_type(decorator: Any, family: HandlerFamily) -> bool:
    return decorated_parameter(decorator, family) is not None


def validate_decorator(decorator: Any, family: HandlerFamily) -> str:
    name = decorated_parameter(decorator, family)
    if name is None:
        raise InvalidDecoratorError(decorator, family.decorator_contract)
    return name


def close_decorator(decorator: Any, contract: Any) -> Optional[Any]:
    """
    Bind a generic decorator to the type arguments of ``contract``.

    Returns the decorator unchanged when it is already concrete and matches
    the contract, and None when it cannot wrap this contract.
    """
    family = family_of(contract)
    if family is None:
        return None
    if get_origin(decorator) is not None:
        return decorator if _implements(get_origin(decorator), family, get_args(decorator), contract) else None

    parameters = getattr(decorator, "__parameters__", ())
    contract_args = get_args(contract)
    for klass in decorator.__mro__:
        for origin, args in generic_bases(klass):
            if origin is not family.handler_type:
                continue
            substitution: Dict[Any, Any] = {}
            for arg, actual in zip(args, contract_args):
                if isinstance(arg, TypeVar):
                    if substitution.setdefault(arg, actual) != actual:
                        return None
                elif arg != actual:
                    return None
            if not parameters:
                return decorator
            if any(parameter not in substitution for parameter in parameters):
                return None
            closed_args = tuple(substitution[parameter] for parameter in parameters)
            return decorator[closed_args if len(closed_args) > 1 else closed_args[0]]
    return None


def _implements(cls: type, family: HandlerFamily, cls_args: Tuple[Any, ...], contract: Any) -> bool:
    substitution = dict(zip(getattr(cls, "__parameters__", ()), cls_args))
    for klass in cls.__mro__:
        for origin, args in generic_bases(klass, substitution if klass is cls else None):
            if origin is family.handler_type:
                return family.contract(*args) == contract
    return False
