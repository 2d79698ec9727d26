"""Rule-based authorization of command and query arguments."""
from __future__ import annotations

import inspect
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, List, Optional, Tuple, TypeVar

from bigox.core.config import settings
from bigox.shared_kernel.cancellation import CancellationToken, raise_if_cancelled
from bigox.infrastructure.di.container import Container
from bigox.shared_kernel.exceptions import AuthorizationConfigurationError, AuthorizationError
from bigox.shared_kernel.guard import require
from bigox.shared_kernel.result import Error, Result

TArgs = TypeVar("TArgs")

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_MESSAGE = "Authorization rule failed."
MULTIPLE_FAILURES_MESSAGE = "Multiple authorization rules failed. See the failures for details."
NO_RULES_CODE = "NoRulesConfigured"
RULE_FAILED_CODE = "AuthorizationRuleFailed"


class AuthorizationNoRulesBehavior(str, Enum):
    """What evaluating arguments without any registered rule does."""

    ALLOW = "allow"
    DENY = "deny"
    ERROR = "error"


@dataclass(frozen=True)
class AuthorizationOptions:
    no_rules_behavior: AuthorizationNoRulesBehavior = field(
        default_factory=lambda: AuthorizationNoRulesBehavior(settings.AUTHORIZATION_NO_RULES_BEHAVIOR)
    )


@dataclass(frozen=True)
class AuthorizationResult:
    is_authorized: bool
    failure_message: Optional[str] = None

    @classmethod
    def success(cls) -> "AuthorizationResult":
        return cls(True)

    @classmethod
    def failure(cls, message: Optional[str] = None) -> "AuthorizationResult":
        return cls(False, message or DEFAULT_FAILURE_MESSAGE)


@dataclass(frozen=True)
class AuthorizationFailure:
    rule: str
    message: str

    def __str__(self) -> str:
        return f"{self.rule}: {self.message}"


@dataclass(frozen=True)
class AuthorizationEvaluationResult:
    has_rules: bool
    failures: Tuple[AuthorizationFailure, ...] = ()

    @property
    def is_authorized(self) -> bool:
        return not self.failures


class AuthorizationRule(ABC, Generic[TArgs]):
    @abstractmethod
    def is_authorized(self, args: TArgs, cancellation: Optional[CancellationToken] = None) -> Any:
        """Return an :class:`AuthorizationResult`, or an awaitable of one."""
        raise NotImplementedError


class AuthorizationManager(ABC):
    @abstractmethod
    async def evaluate(
        self, args: Any, cancellation: Optional[CancellationToken] = None
    ) -> Result[AuthorizationEvaluationResult]:
        raise NotImplementedError

    async def authorize(self, args: Any, cancellation: Optional[CancellationToken] = None) -> None:
        """Raise :class:`AuthorizationError` unless every rule for ``args`` passes."""
        result = await self.evaluate(args, cancellation)
        if result.is_success:
            return
        failures = [
            AuthorizationFailure(error.metadata.get("rule", error.code), error.message) for error in result.errors
        ]
        if len(failures) == 1:
            raise AuthorizationError(failures[0].message, failures)
        raise AuthorizationError(MULTIPLE_FAILURES_MESSAGE, failures)


class DefaultAuthorizationManager(AuthorizationManager):
    """Evaluates every ``AuthorizationRule[type(args)]`` resolved in a fresh container scope."""

    def __init__(self, container: Container, options: Optional[AuthorizationOptions] = None) -> None:
        self._container = require(container, "container")
        self.options = options or AuthorizationOptions()

    async def evaluate(
        self, args: Any, cancellation: Optional[CancellationToken] = None
    ) -> Result[AuthorizationEvaluationResult]:
        require(args, "args")
        args_type = type(args)

        with self._container.create_scope() as scope:
            rules = scope.resolve_all(AuthorizationRule[args_type])
            if not rules:
                return self._without_rules(args_type)

            failures: List[AuthorizationFailure] = []
            for rule in rules:
                raise_if_cancelled(cancellation)
                outcome = rule.is_authorized(args, cancellation)
                if inspect.isawaitable(outcome):
                    outcome = await outcome
                if not outcome.is_authorized:
                    failures.append(
                        AuthorizationFailure(type(rule).__name__, outcome.failure_message or DEFAULT_FAILURE_MESSAGE)
                    )

        evaluation = AuthorizationEvaluationResult(True, tuple(failures))
        if not failures:
            return Result.success(evaluation)
        logger.info("Authorization denied for '%s' by %d rule(s)", args_type.__name__, len(failures))
        return Result.failure(
            [Error(failure.message, RULE_FAILED_CODE, metadata={"rule": failure.rule}) for failure in failures],
            metadata={"evaluation": evaluation},
        )

    def _without_rules(self, args_type: type) -> Result[AuthorizationEvaluationResult]:
        message = f"No authorization rules are configured for arguments of type '{args_type.__name__}'."
        behavior = self.options.no_rules_behavior
        if behavior is AuthorizationNoRulesBehavior.ALLOW:
            logger.warning(message)
            return Result.success(AuthorizationEvaluationResult(False))
        if behavior is AuthorizationNoRulesBehavior.DENY:
            return Result.failure(Error(message, NO_RULES_CODE, metadata={"rule": NO_RULES_CODE}))
        raise AuthorizationConfigurationError(message, NO_RULES_CODE, {"args_type": args_type.__name__})
