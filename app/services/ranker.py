"""Deterministic ordering of aggregated scores."""

from __future__ import annotations

from collections.abc import Iterable

from app.models.ranking import Direction, ScoredUser

SortKey = tuple[int, int]


def sort_key(score: int, user_id: int, order: Direction) -> SortKey:
    # user_id breaks ties ascending regardless of order.
    primary = -score if order is Direction.DESC else score
    return (primary, user_id)


def rank(scored_users: Iterable[ScoredUser], order: Direction) -> list[ScoredUser]:
    return sorted(scored_users, key=lambda row: sort_key(row.score, row.user_id, order))
