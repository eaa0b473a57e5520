"""Relay-style connection over a ranked, non-materialized sequence.

Cursor positions are resolved by binary search on the sort key rather than by
offset, so an ``after``/``before`` cursor still lands between the right
neighbours when unrelated rows were added or removed since it was issued.
"""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from collections.abc import Sequence
from dataclasses import dataclass

from app.models.ranking import Direction, ScoredUser
from app.services.cursor import (
    CursorPosition,
    InvalidInputError,
    decode_cursor,
    encode_cursor,
)
from app.services.ranker import sort_key


class PaginationArgumentsError(InvalidInputError):
    """Raised for contradictory or out-of-range pagination arguments."""


@dataclass(frozen=True, slots=True)
class PageRequest:
    first: int | None = None
    after: CursorPosition | None = None
    last: int | None = None
    before: CursorPosition | None = None

    @property
    def backward(self) -> bool:
        return self.last is not None

    @classmethod
    def parse(
        cls,
        order: Direction,
        first: int | None = None,
        after: str | None = None,
        last: int | None = None,
        before: str | None = None,
        default_page_size: int = 10,
    ) -> PageRequest:
        if first is not None and last is not None:
            raise PaginationArgumentsError("first and last are mutually exclusive")
        if first is not None and first < 0:
            raise PaginationArgumentsError("first must not be negative")
        if last is not None and last < 0:
            raise PaginationArgumentsError("last must not be negative")

        after_position = decode_cursor(after) if after else None
        before_position = decode_cursor(before) if before else None
        if (
            after_position is not None
            and before_position is not None
            and before_position.key(order) <= after_position.key(order)
        ):
            raise PaginationArgumentsError("before must come after the after cursor")

        if first is None and last is None:
            first = default_page_size

        return cls(first=first, after=after_position, last=last, before=before_position)


@dataclass(frozen=True, slots=True)
class Edge:
    node: ScoredUser
    cursor: str


@dataclass(frozen=True, slots=True)
class PageInfo:
    has_next_page: bool
    has_previous_page: bool
    start_cursor: str | None = None
    end_cursor: str | None = None


@dataclass(frozen=True, slots=True)
class Connection:
    edges: list[Edge]
    page_info: PageInfo
    total_count: int


def paginate(ranked: Sequence[ScoredUser], request: PageRequest, order: Direction) -> Connection:
    total = len(ranked)
    keys = [sort_key(row.score, row.user_id, order) for row in ranked]

    lower, upper = 0, total
    if request.after is not None:
        lower = bisect_right(keys, request.after.key(order))
    if request.before is not None:
        upper = max(lower, bisect_left(keys, request.before.key(order)))

    if request.backward:
        start = max(upper - request.last, lower)
        end = upper
        has_previous_page = start > 0
        has_next_page = request.before is not None and end < total
    else:
        start = lower
        end = min(lower + (request.first or 0), upper)
        has_next_page = end < total
        has_previous_page = request.after is not None and start > 0

    edges = [Edge(node=row, cursor=encode_cursor(row.score, row.user_id)) for row in ranked[start:end]]
    page_info = PageInfo(
        has_next_page=has_next_page,
        has_previous_page=has_previous_page,
        start_cursor=edges[0].cursor if edges else None,
        end_cursor=edges[-1].cursor if edges else None,
    )
    return Connection(edges=edges, page_info=page_info, total_count=total)
