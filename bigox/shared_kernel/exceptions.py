"""Shared kernel exception hierarchy."""
from typing import Any, Dict, Optional, Sequence


class DomainException(Exception):
    """Base exception for all library errors."""

    def __init__(self, message: str, code: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class ValidationError(DomainException):
    """Raised when an argument or configuration value is invalid."""


class ArgumentRequiredError(ValidationError, ValueError):
    """Raised when a required argument is None."""

    def __init__(self, param_name: str) -> None:
        super().__init__(
            f"Value cannot be None. (Parameter '{param_name}')",
            "ArgumentRequired",
            {"param_name": param_name},
        )
        self.param_name = param_name


class ArgumentOutOfRangeError(ValidationError, ValueError):
    """Raised when an argument falls outside its accepted range."""

    def __init__(self, param_name: str, value: Any, message: str) -> None:
        super().__init__(message, "ArgumentOutOfRange", {"param_name": param_name, "value": value})
        self.param_name = param_name
        self.value = value


class InvalidDecoratorError(DomainException, TypeError):
    """Raised when a decorator type cannot wrap the handler family it was given for."""

    def __init__(self, decorator: Any, family_contract: str) -> None:
        name = getattr(decorator, "__name__", repr(decorator))
        super().__init__(
            f"Decorator must implement {family_contract}.",
            "InvalidDecorator",
            {"decorator": name},
        )
        self.decorator = decorator


class HandlerNotFoundError(DomainException, LookupError):
    """Raised when no handler is registered for a message."""

    def __init__(self, contract: Any) -> None:
        super().__init__(
            f"No handler registered for {contract_name(contract)}",
            "HandlerNotFound",
            {"contract": contract_name(contract)},
        )
        self.contract = contract


class AuthorizationError(DomainException, PermissionError):
    """Raised when one or more authorization rules deny an operation."""

    def __init__(self, message: str, failures: Sequence[Any] = ()) -> None:
        super().__init__(message, "Unauthorized", {"failures": [str(f) for f in failures]})
        self.failures = list(failures)


class AuthorizationConfigurationError(DomainException, RuntimeError):
    """Raised when authorization is evaluated without any configured rule."""


class TransactionError(DomainException):
    """Raised on invalid transaction scope usage."""


class TransactionAbortedError(TransactionError):
    """Raised when a transaction could not be committed."""


def contract_name(contract: Any) -> str:
    """Readable name for a type or parameterized generic."""
    if isinstance(contract, type):
        return contract.__name__
    origin = getattr(contract, "__origin__", None)
    args = getattr(contract, "__args__", ())
    if origin is not None:
        inner = ", ".join(contract_name(arg) for arg in args)
        return f"{contract_name(origin)}[{inner}]"
    return repr(contract)
