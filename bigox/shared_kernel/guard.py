"""Argument guards."""
from typing import Optional, TypeVar

from .exceptions import ArgumentRequiredError

T = TypeVar("T")


def require(value: Optional[T], param_name: str) -> T:
    if value is None:
        raise ArgumentRequiredError(param_name)
    return value
