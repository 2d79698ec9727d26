"""Shared kernel primitives (errors, results, guards, cancellation)."""

from .cancellation import CancellationToken
from .domain_events import DomainEvent
from .exceptions import (
    DomainException,
    ValidationError,
    ArgumentRequiredError,
    ArgumentOutOfRangeError,
    InvalidDecoratorError,
    HandlerNotFoundError,
    AuthorizationError,
    AuthorizationConfigurationError,
    TransactionError,
    TransactionAbortedError,
)
from .guard import require
from .result import Error, ErrorKind, Result, ResultStatus
