from __future__ import annotations
from typing import Any
from asyncio import wait_for
from logging import getLogger
from fastapi import Request
from starlette.responses import Response
from graphql import ExecutionResult
from gqlrelay.interfaces.schemas import HandlerConfig
from gqlrelay.adapters.execution import ExecutionEngine
from gqlrelay.adapters.renderer import JSONRenderer
from gqlrelay.resolvers.request_options import RequestOptionsResolver

logger = getLogger(__name__)


class ConfigurationError(ValueError):
    pass


class GraphQLHandler:
    """
    Serves GraphQL over HTTP against one schema.

    Requests are always answered with 200 and a JSON body; execution and
    validation errors travel inside the result's ``errors`` list.
    """

    def __init__(
        self,
        config: HandlerConfig | None = None,
        engine: ExecutionEngine | None = None,
        resolver: RequestOptionsResolver | None = None,
        execution_timeout: float | None = None,
    ):
        if config is None:
            config = HandlerConfig()
        if config.schema is None:
            raise ConfigurationError("undefined GraphQL schema")
        self.schema = config.schema
        self.renderer = JSONRenderer(indent_json=config.pretty)
        self.engine = engine or ExecutionEngine()
        self.resolver = resolver or RequestOptionsResolver()
        self.execution_timeout = execution_timeout

    async def execute(
        self, query: str, variables: dict[str, Any], operation_name: str
    ) -> ExecutionResult:
        pending = self.engine.submit(
            schema=self.schema,
            query=query,
            variables=variables,
            operation_name=operation_name,
        )
        if self.execution_timeout is None:
            return await pending
        return await wait_for(pending, self.execution_timeout)

    async def handle(self, request: Request) -> Response:
        options = await self.resolver.resolve(request)
        result = await self.execute(
            options.query, options.variables, options.operationName
        )
        if result.errors:
            logger.debug(
                "operation=%s finished with %s error(s)",
                options.operationName or "<anonymous>",
                len(result.errors),
            )
        return self.renderer.json(200, result.formatted)

    async def __call__(self, request: Request) -> Response:
        return await self.handle(request)
