"""Transaction scopes and resource enlistment."""
from .scope import (
    MAXIMUM_TIMEOUT,
    EnlistmentNotification,
    IsolationLevel,
    Transaction,
    TransactionOptions,
    TransactionScope,
    TransactionScopeAsyncFlowOption,
    TransactionScopeOption,
    TransactionStatus,
    create_transaction_scope,
    current_transaction,
)
from .sqlalchemy_session import SessionEnlistment, enlist_session

__all__ = [
    "MAXIMUM_TIMEOUT",
    "EnlistmentNotification",
    "IsolationLevel",
    "SessionEnlistment",
    "Transaction",
    "TransactionOptions",
    "TransactionScope",
    "TransactionScopeAsyncFlowOption",
    "TransactionScopeOption",
    "TransactionStatus",
    "create_transaction_scope",
    "current_transaction",
    "enlist_session",
]
