from __future__ import annotations
from logging import getLogger
from fastapi.middleware.cors import CORSMiddleware
from fastapi_offline import FastAPIOffline
from graphql import GraphQLSchema
from gqlrelay.interfaces.schemas import HandlerConfig
from gqlrelay.handler import GraphQLHandler
from gqlrelay.middleware.requestlogger import RequestLogger
from gqlrelay.routers.graphql import graphql_router
from gqlrelay.config.general import general

logger = getLogger(__name__)


def create_app(
    schema: GraphQLSchema | None,
    pretty: bool = general.PRETTY,
    execution_timeout: float | None = general.EXECUTION_TIMEOUT,
) -> FastAPIOffline:
    """Build an application serving ``schema`` at the configured GraphQL path."""
    handler = GraphQLHandler(
        HandlerConfig(schema=schema, pretty=pretty),
        execution_timeout=execution_timeout,
    )
    app = FastAPIOffline(
        title=general.PROJECT_NAME,
        version=general.API_VERSION,
        root_path=general.MOUNT_PATH,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLogger)
    app.include_router(graphql_router(handler))
    logger.info("serving GraphQL at %s%s", general.MOUNT_PATH, general.GRAPHQL_PATH)
    return app
