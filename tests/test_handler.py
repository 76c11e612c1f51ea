import asyncio

import pytest
from fastapi.testclient import TestClient

from gqlrelay.adapters.execution import ExecutionEngine
from gqlrelay.handler import ConfigurationError, GraphQLHandler
from gqlrelay.interfaces.schemas import HandlerConfig
from gqlrelay.main import create_app


@pytest.fixture
def client(schema):
    return TestClient(create_app(schema, pretty=False))


def test_missing_schema_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        GraphQLHandler()
    with pytest.raises(ConfigurationError):
        GraphQLHandler(HandlerConfig(schema=None))
    with pytest.raises(ConfigurationError):
        create_app(None)


def test_default_config_is_pretty(schema):
    assert GraphQLHandler(HandlerConfig(schema=schema)).renderer.indent_json is True


def test_get_with_url_parameters(client):
    response = client.get(
        "/graphql",
        params={
            "query": "query Greet($name: String) { hello(name: $name) }",
            "variables": '{"name": "relay"}',
            "operationName": "Greet",
        },
    )
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")
    assert response.json() == {"data": {"hello": "hello relay"}}


def test_get_with_broken_variables_still_executes(client):
    response = client.get(
        "/graphql", params={"query": "{ hello }", "variables": "{broken"}
    )
    assert response.json() == {"data": {"hello": "hello world"}}


def test_post_json(client):
    response = client.post(
        "/graphql",
        json={
            "query": "query Greet($name: String) { hello(name: $name) }",
            "variables": {"name": "json"},
            "operationName": "Greet",
        },
    )
    assert response.json() == {"data": {"hello": "hello json"}}


def test_post_json_with_string_variables(client):
    response = client.post(
        "/graphql",
        json={
            "query": "query Greet($name: String) { hello(name: $name) }",
            "variables": '{"name": "compat"}',
        },
    )
    assert response.json() == {"data": {"hello": "hello compat"}}


def test_post_graphql_body(client):
    response = client.post(
        "/graphql",
        content="{ hello }",
        headers={"content-type": "application/graphql"},
    )
    assert response.json() == {"data": {"hello": "hello world"}}


def test_post_form(client):
    response = client.post(
        "/graphql",
        data={
            "query": "query A { hello } query B { boom }",
            "operationName": "A",
            "variables": "{}",
        },
    )
    assert response.json() == {"data": {"hello": "hello world"}}


def test_url_query_ignores_body(client):
    response = client.post(
        "/graphql?query=%7B+hello+%7D",
        json={"query": "{ boom }"},
    )
    assert response.json() == {"data": {"hello": "hello world"}}


def test_malformed_request_gets_200_with_errors(client):
    response = client.post(
        "/graphql", content=b"{not json", headers={"content-type": "application/json"}
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["data"] is None
    assert "Syntax Error" in payload["errors"][0]["message"]


def test_get_without_query_gets_200_with_errors(client):
    response = client.get("/graphql")
    assert response.status_code == 200
    assert response.json()["errors"]


def test_resolver_errors_stay_in_body(client):
    response = client.post("/graphql", json={"query": "{ boom hello }"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["data"] == {"boom": None, "hello": "hello world"}
    assert payload["errors"][0]["message"] == "boom"
    assert payload["errors"][0]["path"] == ["boom"]


def test_pretty_output_is_indented(schema):
    pretty = TestClient(create_app(schema, pretty=True))
    compact = TestClient(create_app(schema, pretty=False))
    params = {"query": "{ hello }"}
    assert pretty.get("/graphql", params=params).text == (
        '{\n  "data": {\n    "hello": "hello world"\n  }\n}'
    )
    assert "\n" not in compact.get("/graphql", params=params).text


def test_schema_download(client):
    response = client.get("/graphql/schema")
    assert response.status_code == 200
    assert "attachment" in response.headers["content-disposition"]
    assert "type Query" in response.text


class HangingEngine(ExecutionEngine):
    cancelled = False

    async def execute(self, **params):
        try:
            await asyncio.sleep(3600)
        except asyncio.CancelledError:
            self.cancelled = True
            raise


class FailingEngine(ExecutionEngine):
    async def execute(self, **params):
        raise RuntimeError("engine down")


def test_execution_timeout_cancels_the_engine(schema):
    engine = HangingEngine()
    handler = GraphQLHandler(
        HandlerConfig(schema=schema), engine=engine, execution_timeout=0.01
    )
    with pytest.raises(asyncio.TimeoutError):
        asyncio.run(handler.execute("{ hello }", {}, ""))
    assert engine.cancelled


def test_engine_failure_reaches_the_handler(schema):
    handler = GraphQLHandler(HandlerConfig(schema=schema), engine=FailingEngine())
    with pytest.raises(RuntimeError, match="engine down"):
        asyncio.run(handler.execute("{ hello }", {}, ""))


def test_engine_delivers_one_result(schema):
    async def run():
        pending = ExecutionEngine().submit(schema=schema, query="{ hello }")
        return await pending

    result = asyncio.run(run())
    assert result.formatted == {"data": {"hello": "hello world"}}
