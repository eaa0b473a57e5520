"""HTTP route handlers for the ranking query and service health checks."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from app.api.auth import authorize_ranking, get_settings
from app.api.errors import INVALID_INPUT, REDIS_UNAVAILABLE, VALIDATION_ERROR, APIError
from app.config import Settings
from app.models.ranking import Direction, Metric, Period, RankingFilter
from app.models.schemas import (
    HealthResponse,
    PageInfo,
    RankedUser,
    RankingConnection,
    RankingEdge,
    ReadyResponse,
)
from app.services.cursor import InvalidInputError
from app.services.ranking import RankingService
from app.storage.redis import ping

router = APIRouter(prefix="/v1")


def get_ranking_service(request: Request) -> RankingService:
    return request.app.state.ranking_service


def _check_page_size(name: str, value: int | None, max_page_size: int) -> None:
    if value is not None and value > max_page_size:
        raise APIError(
            code=VALIDATION_ERROR,
            message="Request validation failed",
            status_code=400,
            details={
                "errors": [
                    {"loc": ["query", name], "msg": f"{name} must be at most {max_page_size}"}
                ]
            },
        )


@router.get(
    "/ranking",
    response_model=RankingConnection,
    dependencies=[Depends(authorize_ranking)],
)
async def get_ranking(
    by: Metric = Query(),
    order: Direction = Query(),
    period: Period = Query(),
    first: int | None = Query(default=None, ge=0),
    after: str | None = Query(default=None),
    last: int | None = Query(default=None, ge=0),
    before: str | None = Query(default=None),
    settings: Settings = Depends(get_settings),
    service: RankingService = Depends(get_ranking_service),
) -> RankingConnection:
    _check_page_size("first", first, settings.max_page_size)
    _check_page_size("last", last, settings.max_page_size)

    try:
        connection = await service.get_ranking(
            RankingFilter(by=by, order=order, period=period),
            first=first,
            after=after,
            last=last,
            before=before,
        )
    except InvalidInputError as exc:
        raise APIError(
            code=INVALID_INPUT,
            message=str(exc),
            status_code=400,
        ) from exc

    return RankingConnection(
        edges=[
            RankingEdge(
                node=RankedUser(user_id=edge.node.user_id, score=edge.node.score),
                cursor=edge.cursor,
            )
            for edge in connection.edges
        ],
        page_info=PageInfo(
            has_next_page=connection.page_info.has_next_page,
            has_previous_page=connection.page_info.has_previous_page,
            start_cursor=connection.page_info.start_cursor,
            end_cursor=connection.page_info.end_cursor,
        ),
        total_count=connection.total_count,
    )


# These probes are intended for infrastructure and do not need to appear in API docs.
@router.get("/healthz", response_model=HealthResponse, include_in_schema=False)
async def healthz() -> HealthResponse:
    return HealthResponse(status="ok")


@router.get("/readyz", response_model=ReadyResponse, include_in_schema=False)
async def readyz(request: Request) -> ReadyResponse:
    try:
        # Readiness verifies backing Redis connectivity, not just process liveness.
        is_ready = await ping(request.app.state.redis)
    except Exception as exc:
        raise APIError(
            code=REDIS_UNAVAILABLE,
            message="Redis readiness check failed",
            status_code=503,
        ) from exc

    if not is_ready:
        raise APIError(
            code=REDIS_UNAVAILABLE,
            message="Redis readiness check failed",
            status_code=503,
        )
    return ReadyResponse(status="ok")
