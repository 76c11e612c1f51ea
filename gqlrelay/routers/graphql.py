from io import BytesIO
from fastapi import Request, APIRouter
from fastapi.responses import StreamingResponse
from graphql import print_schema
from gqlrelay.config.general import general
from gqlrelay.handler import GraphQLHandler


def graphql_router(handler: GraphQLHandler, path: str = general.GRAPHQL_PATH):
    router = APIRouter(prefix=path)

    @router.api_route("", methods=["GET", "POST"])
    async def graphql_request(request: Request):
        return await handler.handle(request)

    @router.get("/schema")
    async def graphql_schema():
        headers = {"Content-Disposition": 'attachment; filename="schema.gql"'}
        return StreamingResponse(
            BytesIO(print_schema(handler.schema).encode()), headers=headers
        )

    return router
