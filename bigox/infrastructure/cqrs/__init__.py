"""CQRS infrastructure for commands and queries."""

from .authorization_decorators import (
    AuthorizationCommandDecorator,
    AuthorizationQueryDecorator,
    AuthorizationResultCommandDecorator,
)
from .command_bus import (
    Command,
    CommandBus,
    CommandDecorator,
    CommandHandler,
    ContainerCommandBus,
    ResultCommandDecorator,
    ResultCommandHandler,
)
from .decoration import (
    decorate_all_command_handlers,
    decorate_all_handlers,
    decorate_all_query_handlers,
    decorate_all_result_command_handlers,
    decorate_command_handler,
    decorate_handler,
    decorate_query_handler,
    decorate_result_command_handler,
)
from .decorators import command_handler, query_handler, result_command_handler
from .families import COMMAND_HANDLERS, QUERY_HANDLERS, RESULT_COMMAND_HANDLERS, HandlerFamily, is_decorator_type
from .logging_decorators import (
    LoggingCommandDecorator,
    LoggingQueryDecorator,
    LoggingResultCommandDecorator,
    decorate_command_handler_with_logging,
    decorate_query_handler_with_logging,
)
from .query_bus import ContainerQueryProcessor, Query, QueryDecorator, QueryHandler, QueryProcessor
from .registration import (
    add_cqrs,
    register_command_handler,
    register_default_command_bus,
    register_default_query_processor,
    register_handler,
    register_handlers,
    register_module_handlers,
    register_module_query_decorators,
    register_query_handler,
    register_result_command_handler,
)
from .transaction_decorators import (
    DefaultTransactionCommandDecorator,
    TransactionCommandDecoratorBase,
    decorate_command_handler_with_transactions,
)

__all__ = [
    "AuthorizationCommandDecorator",
    "AuthorizationQueryDecorator",
    "AuthorizationResultCommandDecorator",
    "COMMAND_HANDLERS",
    "Command",
    "CommandBus",
    "CommandDecorator",
    "CommandHandler",
    "ContainerCommandBus",
    "ContainerQueryProcessor",
    "DefaultTransactionCommandDecorator",
    "HandlerFamily",
    "LoggingCommandDecorator",
    "LoggingQueryDecorator",
    "LoggingResultCommandDecorator",
    "QUERY_HANDLERS",
    "Query",
    "QueryDecorator",
    "QueryHandler",
    "QueryProcessor",
    "RESULT_COMMAND_HANDLERS",
    "ResultCommandDecorator",
    "ResultCommandHandler",
    "TransactionCommandDecoratorBase",
    "add_cqrs",
    "command_handler",
    "decorate_all_command_handlers",
    "decorate_all_handlers",
    "decorate_all_query_handlers",
    "decorate_all_result_command_handlers",
    "decorate_command_handler",
    "decorate_command_handler_with_logging",
    "decorate_command_handler_with_transactions",
    "decorate_handler",
    "decorate_query_handler",
    "decorate_query_handler_with_logging",
    "decorate_result_command_handler",
    "is_decorator_type",
    "query_handler",
    "register_command_handler",
    "register_default_command_bus",
    "register_default_query_processor",
    "register_handler",
    "register_handlers",
    "register_module_handlers",
    "register_module_query_decorators",
    "register_query_handler",
    "register_result_command_handler",
    "result_command_handler",
]
