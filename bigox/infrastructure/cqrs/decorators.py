"""Class decorators tagging handlers for module registration."""
from __future__ import annotations

import threading
from types import ModuleType
from typing import Any, Callable, List, Optional, Tuple, Type, TypeVar, Union

from bigox.shared_kernel.guard import require

from .command_bus import CommandHandler, ResultCommandHandler
from .query_bus import QueryHandler

T = TypeVar("T")

_HANDLER_REGISTRY: List[Tuple[type, Any]] = []
_registry_lock = threading.Lock()


def record_handler(handler_cls: type, contract: Any) -> None:
    with _registry_lock:
        if (handler_cls, contract) not in _HANDLER_REGISTRY:
            _HANDLER_REGISTRY.append((handler_cls, contract))


def command_handler(command_type: Type) -> Callable[[T], T]:
    def decorator(handler_cls: T) -> T:
        setattr(handler_cls, "_command_type", command_type)
        record_handler(handler_cls, CommandHandler[command_type])
        return handler_cls
    return decorator


def result_command_handler(command_type: Type, result_type: Any) -> Callable[[T], T]:
    def decorator(handler_cls: T) -> T:
        setattr(handler_cls, "_command_type", command_type)
        setattr(handler_cls, "_result_type", result_type)
        record_handler(handler_cls, ResultCommandHandler[command_type, result_type])
        return handler_cls
    return decorator


def query_handler(query_type: Type, result_type: Optional[Any] = None) -> Callable[[T], T]:
    def decorator(handler_cls: T) -> T:
        resolved = result_type if result_type is not None else query_type.result_type()
        if resolved is None:
            raise TypeError(f"Cannot infer the result type of query '{query_type.__name__}'")
        setattr(handler_cls, "_query_type", query_type)
        setattr(handler_cls, "_result_type", resolved)
        record_handler(handler_cls, QueryHandler[query_type, resolved])
        return handler_cls
    return decorator


def tagged_handlers(prefix: str) -> List[Tuple[type, Any]]:
    """Handlers tagged in module ``prefix`` or any of its sub-modules."""
    with _registry_lock:
        entries = list(_HANDLER_REGISTRY)
    return [
        (handler_cls, contract)
        for handler_cls, contract in entries
        if handler_cls.__module__ == prefix or handler_cls.__module__.startswith(prefix + ".")
    ]


def module_prefix(module_marker: Union[ModuleType, type, str]) -> str:
    """Module name scanned for a marker; a type stands for the package containing it."""
    require(module_marker, "module_marker")
    if isinstance(module_marker, ModuleType):
        return module_marker.__name__
    if isinstance(module_marker, type):
        module_name = module_marker.__module__
        return module_name.rpartition(".")[0] or module_name
    return module_marker
