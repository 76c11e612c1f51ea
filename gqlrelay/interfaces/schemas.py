from __future__ import annotations
from typing import Any
from dataclasses import dataclass
from graphql import GraphQLSchema
from pydantic import BaseModel, Field, ValidationInfo, field_validator
from pydantic.types import JsonValue


class RequestOptions(BaseModel):
    query: str = ""
    variables: dict[str, JsonValue] = Field(default_factory=dict)
    operationName: str = ""

    # JSON null means the field was not sent
    @field_validator("query", "variables", "operationName", mode="before")
    @classmethod
    def null_is_absent(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return {} if info.field_name == "variables" else ""
        return value


class RequestOptionsCompatibility(BaseModel):
    """Request options from clients that send ``variables`` as a JSON string."""

    query: str = ""
    variables: str = ""
    operationName: str = ""

    @field_validator("query", "variables", "operationName", mode="before")
    @classmethod
    def null_is_absent(cls, value: Any) -> Any:
        return "" if value is None else value


@dataclass(frozen=True)
class HandlerConfig:
    schema: GraphQLSchema | None = None
    pretty: bool = True
