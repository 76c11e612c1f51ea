from __future__ import annotations

import pytest
from graphql import (
    GraphQLArgument,
    GraphQLField,
    GraphQLObjectType,
    GraphQLSchema,
    GraphQLString,
)


def _hello(_root, _info, name="world"):
    return f"hello {name}"


def _boom(_root, _info):
    raise ValueError("boom")


@pytest.fixture
def schema() -> GraphQLSchema:
    return GraphQLSchema(
        query=GraphQLObjectType(
            "Query",
            {
                "hello": GraphQLField(
                    GraphQLString,
                    args={"name": GraphQLArgument(GraphQLString)},
                    resolve=_hello,
                ),
                "boom": GraphQLField(GraphQLString, resolve=_boom),
            },
        )
    )
