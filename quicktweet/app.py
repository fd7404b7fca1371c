"""FastAPI application for the QuickTweet backend."""
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from quicktweet.core.config import get_settings
from quicktweet.core.logging import configure_logging, get_logger
from quicktweet.domain.errors import (
    AlreadyExists,
    AlreadyFriends,
    AlreadyRequested,
    GraphError,
    InvalidArgument,
    NotFound,
    NotFriends,
    Unauthorized,
)
from quicktweet.routers import admin as admin_router
from quicktweet.routers import friends as friends_router
from quicktweet.routers import users as users_router
from quicktweet.services.registry import ServiceRegistry

log = get_logger(__name__)

STATUS_BY_ERROR: dict[type[GraphError], int] = {
    InvalidArgument: 400,
    NotFound: 404,
    AlreadyExists: 409,
    AlreadyRequested: 409,
    AlreadyFriends: 409,
    NotFriends: 409,
    Unauthorized: 403,
}


def graph_error_handler(_: Request, exc: GraphError) -> JSONResponse:
    status = STATUS_BY_ERROR.get(type(exc), 400)
    log.info("request.rejected", error=exc.kind, message=exc.message, status=status)
    return JSONResponse(status_code=status, content={"error": exc.kind, "message": exc.message})


def create_app(services: ServiceRegistry | None = None) -> FastAPI:
    """Factory compatible with ``uvicorn quicktweet.app:create_app --factory``."""
    configure_logging()
    registry = services or ServiceRegistry.build()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        registry.startup()
        log.info("app.started", env=get_settings().app_env)
        yield

    app = FastAPI(title="QuickTweet API", lifespan=lifespan)
    app.state.services = registry
    app.add_exception_handler(GraphError, graph_error_handler)
    app.include_router(users_router.router)
    app.include_router(friends_router.router)
    app.include_router(admin_router.router)
    return app
