from __future__ import annotations
from typing import Any, Iterable, Mapping
from logging import getLogger
from dataclasses import dataclass
from urllib.parse import parse_qsl
from fastapi import Request
from pydantic import TypeAdapter, ValidationError
from pydantic.types import JsonValue
from starlette.requests import ClientDisconnect
from gqlrelay.interfaces.schemas import RequestOptions, RequestOptionsCompatibility

CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_GRAPHQL = "application/graphql"
CONTENT_TYPE_FORM_URLENCODED = "application/x-www-form-urlencoded"

logger = getLogger(__name__)

# Shared by every request, TypeAdapter holds no per-call state
variables_adapter = TypeAdapter(dict[str, JsonValue])


@dataclass
class Resolution:
    options: RequestOptions
    diagnostic: str | None = None


def decode_variables(raw: str) -> dict[str, Any]:
    """Decode a JSON encoded variables object, raising ValueError when it is not one."""
    try:
        return variables_adapter.validate_json(raw)
    except ValidationError as e:
        raise ValueError(f"variables is not a JSON object: {e}") from e


def first_values(pairs: Iterable[tuple[str, str]]) -> dict[str, str]:
    fields: dict[str, str] = {}
    for name, value in pairs:
        fields.setdefault(name, value)
    return fields


def media_type(content_type: str | None) -> str:
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def from_query_params(params: Mapping[str, str]) -> Resolution:
    diagnostic = None
    variables: dict[str, Any] = {}
    raw_variables = params.get("variables")
    if raw_variables:
        try:
            variables = decode_variables(raw_variables)
        except ValueError as e:
            diagnostic = str(e)
    return Resolution(
        RequestOptions(
            query=params.get("query", ""),
            variables=variables,
            operationName=params.get("operationName", ""),
        ),
        diagnostic,
    )


def from_graphql_body(body: bytes) -> Resolution:
    try:
        return Resolution(RequestOptions(query=body.decode("utf-8")))
    except UnicodeDecodeError as e:
        return Resolution(RequestOptions(), f"body is not UTF-8: {e}")


def from_form_body(body: bytes) -> Resolution:
    try:
        fields = first_values(
            parse_qsl(body.decode("utf-8"), keep_blank_values=True)
        )
        variables = (
            decode_variables(fields["variables"]) if fields.get("variables") else {}
        )
    except ValueError as e:
        # UnicodeDecodeError is a ValueError too
        return Resolution(RequestOptions(), f"form body could not be parsed: {e}")
    return Resolution(
        RequestOptions(
            query=fields.get("query", ""),
            variables=variables,
            operationName=fields.get("operationName", ""),
        )
    )


def from_loose_json(body: bytes, diagnostic: str) -> Resolution:
    """Keep the string fields of a JSON object whose other fields are unusable."""
    try:
        fields = variables_adapter.validate_json(body)
    except ValidationError:
        return Resolution(RequestOptions(), diagnostic)
    query = fields.get("query")
    operation_name = fields.get("operationName")
    return Resolution(
        RequestOptions(
            query=query if isinstance(query, str) else "",
            operationName=operation_name if isinstance(operation_name, str) else "",
        ),
        diagnostic,
    )


def from_json_body(body: bytes) -> Resolution:
    try:
        return Resolution(RequestOptions.model_validate_json(body))
    except ValidationError as e:
        direct_error = e
    # Probably variables was sent as a JSON string instead of an object
    try:
        compatible = RequestOptionsCompatibility.model_validate_json(body)
    except ValidationError as e:
        return from_loose_json(
            body,
            f"JSON body could not be decoded: {direct_error.errors()[0]['msg']}; "
            f"compatibility decode: {e.errors()[0]['msg']}",
        )
    diagnostic = None
    variables: dict[str, Any] = {}
    try:
        variables = decode_variables(compatible.variables)
    except ValueError as e:
        diagnostic = str(e)
    return Resolution(
        RequestOptions(
            query=compatible.query,
            variables=variables,
            operationName=compatible.operationName,
        ),
        diagnostic,
    )


def resolve_options(
    method: str,
    query_params: Mapping[str, str],
    content_type: str | None,
    body: bytes | None,
) -> Resolution:
    """
    Work out the query, variables and operation name of one HTTP request.

    URL parameters win when they carry a query. Otherwise only POST bodies are
    read, decoded according to their Content-Type. Decoding never raises: a
    failed step leaves empty (or partial) options and a diagnostic message.
    """
    if query_params.get("query"):
        return from_query_params(query_params)
    if method.upper() != "POST":
        return Resolution(RequestOptions())
    if not body:
        return Resolution(RequestOptions())

    kind = media_type(content_type)
    if kind == CONTENT_TYPE_GRAPHQL:
        return from_graphql_body(body)
    if kind == CONTENT_TYPE_FORM_URLENCODED:
        return from_form_body(body)
    return from_json_body(body)


class RequestOptionsResolver:
    async def read_body(self, request: Request) -> bytes | None:
        try:
            return await request.body()
        except ClientDisconnect:
            logger.debug("client disconnected before the body was read")
            return None

    async def resolve(self, request: Request) -> RequestOptions:
        query_params = first_values(request.query_params.multi_items())
        body = None
        # The body is only worth reading when the URL does not carry the query
        if not query_params.get("query") and request.method.upper() == "POST":
            body = await self.read_body(request)
        resolution = resolve_options(
            request.method,
            query_params,
            request.headers.get("content-type"),
            body,
        )
        if resolution.diagnostic:
            logger.debug(
                "lenient request decode path=%s diagnostic=%s",
                request.url.path,
                resolution.diagnostic,
            )
        return resolution.options
