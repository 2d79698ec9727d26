"""Constructor injection driven by ``__init__`` type hints."""
from __future__ import annotations

import inspect
import logging
import types
from typing import Any, Dict, Optional, Union, get_args, get_origin, get_type_hints

from bigox.shared_kernel.exceptions import contract_name

from .container import Resolver, ServiceNotRegisteredError

logger = logging.getLogger(__name__)

_PRIMITIVE_TYPES = {str, int, float, bool, bytes, type(None)}
_UNION_TYPES = {Union, getattr(types, "UnionType", Union)}


def autowire(target: Any, resolver: Resolver, overrides: Optional[Dict[str, Any]] = None) -> Any:
    """
    Instantiate ``target`` resolving its constructor parameters from ``resolver``.

    ``target`` may be a plain class or a parameterized generic alias such as
    ``LoggingQueryDecorator[GetTotal, int]``; calling the alias keeps the closed
    type available on the instance as ``__orig_class__``.

    Resolution order per parameter:
    1. explicit ``overrides`` by parameter name
    2. registered service for the annotation (``Optional[T]`` unwraps to ``T``)
    3. the parameter default
    Primitive annotations are never resolved from the container.
    """
    overrides = overrides or {}
    cls = get_origin(target) or target
    kwargs: Dict[str, Any] = {}

    for name, param, annotation in constructor_parameters(cls):
        if name in overrides:
            kwargs[name] = overrides[name]
            continue
        value = _resolve_parameter(resolver, cls, name, param, annotation)
        if value is not inspect.Parameter.empty:
            kwargs[name] = value

    return target(**kwargs)


def constructor_parameters(cls: type):
    """Yield ``(name, parameter, annotation)`` for keyword-capable ``__init__`` parameters."""
    init = cls.__init__
    if init is object.__init__:
        return
    try:
        hints = get_type_hints(init)
    except Exception as exc:  # unresolvable forward references
        logger.warning("Could not get type hints for %s: %s", cls.__name__, exc)
        hints = {}
    parameters = list(inspect.signature(init).parameters.values())[1:]
    for param in parameters:
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        if param.kind is inspect.Parameter.POSITIONAL_ONLY:
            continue
        yield param.name, param, hints.get(param.name, inspect.Parameter.empty)


def _resolve_parameter(resolver: Resolver, cls: type, name: str, param: inspect.Parameter, annotation: Any) -> Any:
    has_default = param.default is not inspect.Parameter.empty

    if annotation is inspect.Parameter.empty:
        if has_default:
            return param.default
        raise TypeError(f"Cannot autowire {cls.__name__}: parameter '{name}' has no type hint")

    optional = _is_optional_type(annotation)
    if optional:
        annotation = _optional_inner_type(annotation)

    if _is_primitive_type(annotation):
        if has_default:
            return param.default
        raise TypeError(f"Cannot autowire {cls.__name__}: primitive parameter '{name}' requires a default")

    if _is_hashable(annotation) and resolver.is_registered(annotation):
        return resolver.resolve(annotation)

    if has_default:
        return param.default
    if optional:
        return None

    logger.debug("Could not resolve dependency %s: %s for %s", name, contract_name(annotation), cls.__name__)
    raise ServiceNotRegisteredError(annotation)


def _is_hashable(annotation: Any) -> bool:
    try:
        hash(annotation)
    except TypeError:
        return False
    return True


def _is_primitive_type(annotation: Any) -> bool:
    if annotation is Any or (_is_hashable(annotation) and annotation in _PRIMITIVE_TYPES):
        return True
    return get_origin(annotation) in _PRIMITIVE_TYPES


def _is_optional_type(annotation: Any) -> bool:
    if get_origin(annotation) in _UNION_TYPES:
        args = get_args(annotation)
        return len(args) == 2 and type(None) in args
    return False


def _optional_inner_type(annotation: Any) -> Any:
    return next(arg for arg in get_args(annotation) if arg is not type(None))
