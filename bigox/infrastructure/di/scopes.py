"""Service scopes for the DI container."""
from enum import Enum


class Scope(Enum):
    SINGLETON = "singleton"
    SCOPED = "scoped"
    TRANSIENT = "transient"

    @classmethod
    def parse(cls, value: "Scope | str") -> "Scope":
        if isinstance(value, Scope):
            return value
        return cls(value.lower())
