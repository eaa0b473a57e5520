"""Pydantic response schemas for the public ranking API.

Connection payloads use camelCase on the wire (``pageInfo``, ``totalCount``);
error payloads keep the flat ``{"error": {...}}`` envelope.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ErrorBody(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    error: ErrorBody


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RankedUser(CamelModel):
    user_id: int
    score: int


class RankingEdge(CamelModel):
    node: RankedUser
    cursor: str


class PageInfo(CamelModel):
    has_next_page: bool
    has_previous_page: bool
    start_cursor: str | None = None
    end_cursor: str | None = None


class RankingConnection(CamelModel):
    edges: list[RankingEdge]
    page_info: PageInfo
    total_count: int


class HealthResponse(BaseModel):
    status: Literal["ok"]


class ReadyResponse(BaseModel):
    status: Literal["ok"]
