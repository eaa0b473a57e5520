"""FastAPI application wiring for routes, error handlers, and lifespan."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from app.api.errors import UPSTREAM_FAILURE, VALIDATION_ERROR, APIError
from app.api.routes import router
from app.config import Settings
from app.models.schemas import ErrorBody, ErrorResponse
from app.services.ranking import RankingService
from app.services.window import SystemClock
from app.storage.ledger import RedisLedger
from app.storage.redis import create_redis_client
from app.storage.tokens import RedisTokenStorage

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    redis_client = create_redis_client(settings.redis_url)
    app.state.redis = redis_client
    app.state.token_storage = RedisTokenStorage(
        redis_client, ttl_seconds=settings.auth_token_ttl_seconds
    )
    app.state.ranking_service = RankingService(
        RedisLedger(redis_client),
        SystemClock(settings.timezone),
        default_page_size=settings.default_page_size,
    )
    logger.info("ranking service started (timezone=%s)", settings.timezone or "local")
    try:
        yield
    finally:
        await redis_client.aclose()


def _error_response(status_code: int, body: ErrorBody) -> JSONResponse:
    payload = ErrorResponse(error=body)
    return JSONResponse(status_code=status_code, content=payload.model_dump(exclude_none=True))


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.load()
    configure_logging(settings.log_level)

    app = FastAPI(title="Ranking API", version="1.0.0", lifespan=app_lifespan)
    app.state.settings = settings

    @app.exception_handler(APIError)
    async def api_error_handler(_: Request, exc: APIError) -> JSONResponse:
        return _error_response(
            exc.status_code,
            ErrorBody(code=exc.code, message=exc.message, details=exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(
            400,
            ErrorBody(
                code=VALIDATION_ERROR,
                message="Request validation failed",
                details={"errors": jsonable_errors(exc)},
            ),
        )

    @app.exception_handler(RedisError)
    async def upstream_error_handler(request: Request, exc: RedisError) -> JSONResponse:
        logger.error("upstream failure on %s: %r", request.url.path, exc)
        return _error_response(
            503,
            ErrorBody(code=UPSTREAM_FAILURE, message="Ledger storage is unavailable"),
        )

    app.include_router(router)
    return app


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    # ctx may carry exception instances that JSONResponse cannot serialize.
    return [{key: value for key, value in error.items() if key != "ctx"} for error in exc.errors()]


app = create_app()
