import logging

import pytest

from bigox.infrastructure.cqrs import (
    AuthorizationCommandDecorator,
    AuthorizationQueryDecorator,
    Command,
    CommandBus,
    CommandHandler,
    Query,
    QueryHandler,
    QueryProcessor,
    add_cqrs,
    register_command_handler,
    register_query_handler,
)
from bigox.infrastructure.di.container import Container
from bigox.infrastructure.di.scopes import Scope
from bigox.infrastructure.security import (
    AuthorizationManager,
    AuthorizationNoRulesBehavior,
    AuthorizationResult,
    AuthorizationRule,
    add_authorization_rule,
    add_authorization_security,
)
from bigox.shared_kernel.exceptions import (
    ArgumentRequiredError,
    AuthorizationConfigurationError,
    AuthorizationError,
    ValidationError,
)


class CallLog:
    def __init__(self) -> None:
        self.calls = []


class DeleteDocument(Command):
    def __init__(self, owner: str, user: str) -> None:
        self.owner = owner
        self.user = user


class ReadDocument(Query[str]):
    def __init__(self, user: str) -> None:
        self.user = user


class Unprotected(Command):
    pass


class OwnerRule(AuthorizationRule[DeleteDocument]):
    def is_authorized(self, args, cancellation=None):
        if args.owner == args.user:
            return AuthorizationResult.success()
        return AuthorizationResult.failure("Only the owner can delete a document.")


class NotGuestRule(AuthorizationRule[DeleteDocument]):
    async def is_authorized(self, args, cancellation=None):
        if args.user == "guest":
            return AuthorizationResult.failure()
        return AuthorizationResult.success()


class ReaderRule(AuthorizationRule[ReadDocument]):
    def __init__(self, log: CallLog) -> None:
        self.log = log

    def is_authorized(self, args, cancellation=None):
        self.log.calls.append("rule")
        return AuthorizationResult(args.user != "mallory")


class DeleteDocumentHandler(CommandHandler[DeleteDocument]):
    def __init__(self, log: CallLog) -> None:
        self.log = log

    async def handle(self, command, cancellation=None):
        self.log.calls.append("delete")


class ReadDocumentHandler(QueryHandler[ReadDocument, str]):
    async def read(self, query, cancellation=None):
        return "contents"


def build_container(no_rules_behavior=AuthorizationNoRulesBehavior.ERROR):
    container = Container()
    log = CallLog()
    container.register(CallLog, lambda c: log, Scope.SINGLETON)
    add_authorization_security(container, no_rules_behavior=no_rules_behavior)
    add_authorization_rule(container, DeleteDocument, OwnerRule)
    add_authorization_rule(container, DeleteDocument, NotGuestRule)
    add_authorization_rule(container, ReadDocument, ReaderRule, Scope.SCOPED)
    return container, log


@pytest.mark.asyncio
async def test_all_rules_passing_authorizes():
    container, _ = build_container()
    manager = container.resolve(AuthorizationManager)

    result = await manager.evaluate(DeleteDocument("ada", "ada"))

    assert result.is_success
    assert result.value.has_rules
    assert result.value.is_authorized
    await manager.authorize(DeleteDocument("ada", "ada"))


@pytest.mark.asyncio
async def test_single_failure_raises_with_rule_message():
    container, _ = build_container()

    with pytest.raises(AuthorizationError) as exc_info:
        await container.resolve(AuthorizationManager).authorize(DeleteDocument("ada", "bob"))

    assert str(exc_info.value) == "Only the owner can delete a document."
    assert isinstance(exc_info.value, PermissionError)
    assert [failure.rule for failure in exc_info.value.failures] == ["OwnerRule"]


@pytest.mark.asyncio
async def test_multiple_failures_are_aggregated():
    container, _ = build_container()

    with pytest.raises(AuthorizationError) as exc_info:
        await container.resolve(AuthorizationManager).authorize(DeleteDocument("ada", "guest"))

    assert str(exc_info.value).startswith("Multiple authorization rules failed.")
    messages = [failure.message for failure in exc_info.value.failures]
    assert messages == ["Only the owner can delete a document.", "Authorization rule failed."]


@pytest.mark.asyncio
async def test_evaluate_reports_failures_as_result_errors():
    container, _ = build_container()

    result = await container.resolve(AuthorizationManager).evaluate(DeleteDocument("ada", "bob"))

    assert result.is_failure
    assert result.first_error.code == "AuthorizationRuleFailed"
    assert result.first_error.metadata == {"rule": "OwnerRule"}


@pytest.mark.asyncio
async def test_no_rules_with_error_behavior_raises():
    container, _ = build_container(AuthorizationNoRulesBehavior.ERROR)

    with pytest.raises(AuthorizationConfigurationError) as exc_info:
        await container.resolve(AuthorizationManager).evaluate(Unprotected())

    assert str(exc_info.value) == "No authorization rules are configured for arguments of type 'Unprotected'."


@pytest.mark.asyncio
async def test_no_rules_with_deny_behavior_fails():
    container, _ = build_container(AuthorizationNoRulesBehavior.DENY)
    manager = container.resolve(AuthorizationManager)

    result = await manager.evaluate(Unprotected())

    assert result.is_failure
    assert result.first_error.code == "NoRulesConfigured"
    with pytest.raises(AuthorizationError):
        await manager.authorize(Unprotected())


@pytest.mark.asyncio
async def test_no_rules_with_allow_behavior_warns(caplog):
    caplog.set_level(logging.WARNING, logger="bigox.infrastructure.security.authorization")
    container, _ = build_container(AuthorizationNoRulesBehavior.ALLOW)

    result = await container.resolve(AuthorizationManager).evaluate(Unprotected())

    assert result.is_success
    assert not result.value.has_rules
    assert "Unprotected" in caplog.records[0].getMessage()


@pytest.mark.asyncio
async def test_manager_is_a_singleton_by_default():
    container, _ = build_container()

    assert container.resolve(AuthorizationManager) is container.resolve(AuthorizationManager)


@pytest.mark.asyncio
async def test_none_args_are_rejected():
    container, _ = build_container()

    with pytest.raises(ArgumentRequiredError):
        await container.resolve(AuthorizationManager).evaluate(None)


def test_rule_type_must_be_an_authorization_rule():
    with pytest.raises(ValidationError):
        add_authorization_rule(Container(), DeleteDocument, CallLog)


@pytest.mark.asyncio
async def test_authorization_command_decorator_blocks_denied_commands():
    container, log = build_container()
    register_command_handler(container, DeleteDocument, DeleteDocumentHandler)
    add_cqrs(container, command_decorators=AuthorizationCommandDecorator)
    bus = container.resolve(CommandBus)

    with pytest.raises(AuthorizationError):
        await bus.send(DeleteDocument("ada", "bob"))
    assert log.calls == []

    await bus.send(DeleteDocument("ada", "ada"))
    assert log.calls == ["delete"]


@pytest.mark.asyncio
async def test_authorization_command_decorator_rejects_none_before_authorizing():
    container, log = build_container()
    decorator = AuthorizationCommandDecorator(DeleteDocumentHandler(log), container.resolve(AuthorizationManager))

    with pytest.raises(ArgumentRequiredError) as exc_info:
        await decorator.handle(None)

    assert exc_info.value.param_name == "command"
    assert log.calls == []


@pytest.mark.asyncio
async def test_authorization_query_decorator_resolves_scoped_rules():
    container, log = build_container()
    register_query_handler(container, ReadDocument, ReadDocumentHandler)
    add_cqrs(container, query_decorators=[AuthorizationQueryDecorator])
    processor = container.resolve(QueryProcessor)

    assert await processor.process_query(ReadDocument("ada")) == "contents"
    with pytest.raises(AuthorizationError):
        await processor.process_query(ReadDocument("mallory"))
    assert log.calls == ["rule", "rule"]
