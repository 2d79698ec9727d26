"""Result type to make errors explicit."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Tuple, TypeVar

T = TypeVar("T")
U = TypeVar("U")
R = TypeVar("R")


class ErrorKind(str, Enum):
    DEFAULT = "Default"
    UNEXPECTED = "Unexpected"


class ResultStatus(str, Enum):
    SUCCESS = "Success"
    FAILURE = "Failure"


@dataclass(frozen=True)
class Error:
    """A single failure reason carried by a :class:`Result`."""

    message: str
    code: Optional[str] = None
    kind: ErrorKind = ErrorKind.DEFAULT
    exception: Optional[BaseException] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.code is None:
            object.__setattr__(self, "code", self.kind.value)

    @classmethod
    def unexpected(cls, exception: BaseException, message: Optional[str] = None) -> "Error":
        return cls(
            message=message or str(exception) or type(exception).__name__,
            kind=ErrorKind.UNEXPECTED,
            exception=exception,
        )

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


@dataclass(frozen=True)
class Result(Generic[T]):
    """Container for a success value or a list of errors."""

    status: ResultStatus
    _value: Optional[T] = None
    errors: Tuple[Error, ...] = ()
    message: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return self.status is ResultStatus.SUCCESS

    @property
    def is_failure(self) -> bool:
        return self.status is ResultStatus.FAILURE

    @property
    def value(self) -> Optional[T]:
        """The success value; ``None`` for failures."""
        return self._value if self.is_success else None

    @property
    def first_error(self) -> Optional[Error]:
        return self.errors[0] if self.errors else None

    @classmethod
    def success(
        cls,
        value: Optional[T] = None,
        message: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "Result[T]":
        return cls(ResultStatus.SUCCESS, value, (), message, dict(metadata or {}))

    @classmethod
    def failure(
        cls,
        errors: Iterable[Error] | Error,
        message: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "Result[T]":
        collected: List[Error] = [errors] if isinstance(errors, Error) else list(errors)
        if not collected:
            raise ValueError("A failed result requires at least one error.")
        return cls(ResultStatus.FAILURE, None, tuple(collected), message, dict(metadata or {}))

    def match(self, on_success: Callable[[Optional[T]], R], on_failure: Callable[[Tuple[Error, ...]], R]) -> R:
        if self.is_success:
            return on_success(self._value)
        return on_failure(self.errors)

    def map(self, func: Callable[[Optional[T]], U]) -> "Result[U]":
        if self.is_success:
            return Result.success(func(self._value), self.message, self.metadata)
        return Result(self.status, None, self.errors, self.message, self.metadata)

    def bind(self, func: Callable[[Optional[T]], "Result[U]"]) -> "Result[U]":
        if self.is_success:
            return func(self._value)
        return Result(self.status, None, self.errors, self.message, self.metadata)
