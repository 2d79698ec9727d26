"""Query contracts and the container-backed query processor."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

from bigox.infrastructure.di.container import Resolver
from bigox.shared_kernel.cancellation import CancellationToken
from bigox.shared_kernel.exceptions import HandlerNotFoundError, ValidationError
from bigox.shared_kernel.guard import require

TQuery = TypeVar("TQuery", bound="Query")
TResult = TypeVar("TResult")

logger = logging.getLogger(__name__)


class Query(Generic[TResult]):
    """Marker base class for queries; subclass ``Query[int]`` to declare the result type."""

    @classmethod
    def result_type(cls) -> Optional[Any]:
        from .families import declared_type_argument

        return declared_type_argument(cls, Query)


class QueryHandler(ABC, Generic[TQuery, TResult]):
    @abstractmethod
    async def read(self, query: TQuery, cancellation: Optional[CancellationToken] = None) -> TResult:
        raise NotImplementedError


class QueryDecorator(QueryHandler[TQuery, TResult]):
    """Base for decorators wrapping another query handler of the same contract."""

    def __init__(self, decorated: QueryHandler[TQuery, TResult]) -> None:
        self._decorated = require(decorated, "decorated")

    @property
    def decorated(self) -> QueryHandler[TQuery, TResult]:
        return self._decorated

    async def read(self, query: TQuery, cancellation: Optional[CancellationToken] = None) -> TResult:
        return await self._decorated.read(query, cancellation)


class QueryProcessor(ABC):
    @abstractmethod
    async def process_query(
        self,
        query: Query,
        cancellation: Optional[CancellationToken] = None,
        result_type: Optional[Any] = None,
    ) -> Any:
        raise NotImplementedError


class ContainerQueryProcessor(QueryProcessor):
    """Resolves ``QueryHandler[Q, R]`` for each query from the container."""

    def __init__(self, resolver: Resolver) -> None:
        self._resolver = resolver

    async def process_query(
        self,
        query: Query,
        cancellation: Optional[CancellationToken] = None,
        result_type: Optional[Any] = None,
    ) -> Any:
        require(query, "query")
        query_type = type(query)
        if result_type is None:
            result_type = query_type.result_type() if isinstance(query, Query) else None
        if result_type is None:
            raise ValidationError(
                f"Cannot infer the result type of query '{query_type.__name__}'; pass result_type",
                "ResultTypeRequired",
                {"query": query_type.__name__},
            )

        contract = QueryHandler[query_type, result_type]
        if not self._resolver.is_registered(contract):
            raise HandlerNotFoundError(contract)
        handler = self._resolver.resolve(contract)
        logger.debug("Dispatching %s to %s", query_type.__name__, type(handler).__name__)
        return await handler.read(query, cancellation)
