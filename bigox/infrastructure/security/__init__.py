"""Authorization of commands and queries."""
from .authorization import (
    AuthorizationEvaluationResult,
    AuthorizationFailure,
    AuthorizationManager,
    AuthorizationNoRulesBehavior,
    AuthorizationOptions,
    AuthorizationResult,
    AuthorizationRule,
    DefaultAuthorizationManager,
)
from .registration import add_authorization_rule, add_authorization_security

__all__ = [
    "AuthorizationEvaluationResult",
    "AuthorizationFailure",
    "AuthorizationManager",
    "AuthorizationNoRulesBehavior",
    "AuthorizationOptions",
    "AuthorizationResult",
    "AuthorizationRule",
    "DefaultAuthorizationManager",
    "add_authorization_rule",
    "add_authorization_security",
]
