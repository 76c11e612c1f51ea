from typing import Any
from json import dumps
from starlette.responses import JSONResponse, Response


class IndentedJSONResponse(JSONResponse):
    def render(self, content: Any) -> bytes:
        return dumps(
            content,
            ensure_ascii=False,
            allow_nan=False,
            indent=2,
            separators=(",", ": "),
        ).encode("utf-8")


class JSONRenderer:
    def __init__(self, indent_json: bool = False):
        self.indent_json = indent_json

    def json(self, status_code: int, payload: Any) -> Response:
        response_class = IndentedJSONResponse if self.indent_json else JSONResponse
        return response_class(content=payload, status_code=status_code)
