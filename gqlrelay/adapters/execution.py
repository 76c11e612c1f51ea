from __future__ import annotations
from typing import Any
from asyncio import Future, Task, get_running_loop
from functools import partial
from logging import getLogger
from graphql import ExecutionResult, GraphQLSchema, graphql

logger = getLogger(__name__)


def cancel_worker(task: Task, result: Future) -> None:
    if result.cancelled():
        task.cancel()


class ExecutionEngine:
    """
    Runs GraphQL operations with graphql-core.

    Every submission gets its own task and its own single-use future; the task
    settles the future exactly once, with the execution result or with the
    exception that stopped it. Cancelling the future cancels the task.
    """

    async def execute(
        self,
        schema: GraphQLSchema,
        query: str,
        variables: dict[str, Any] | None = None,
        operation_name: str | None = None,
    ) -> ExecutionResult:
        return await graphql(
            schema,
            query,
            variable_values=variables or None,
            operation_name=operation_name or None,
        )

    async def deliver(self, result: Future, **params: Any) -> None:
        try:
            outcome = await self.execute(**params)
        except Exception as e:
            logger.exception("execution engine failed")
            if not result.done():
                result.set_exception(e)
            return
        if not result.done():
            result.set_result(outcome)

    def submit(
        self,
        schema: GraphQLSchema,
        query: str,
        variables: dict[str, Any] | None = None,
        operation_name: str | None = None,
    ) -> Future:
        loop = get_running_loop()
        result: Future = loop.create_future()
        task = loop.create_task(
            self.deliver(
                result,
                schema=schema,
                query=query,
                variables=variables,
                operation_name=operation_name,
            )
        )
        result.add_done_callback(partial(cancel_worker, task))
        return result
