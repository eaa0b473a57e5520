"""Per-user score aggregation over the point and submission ledgers.

Each metric is a strategy object registered in ``METRIC_STRATEGIES``. The
ranker and paginator only ever see the resulting ``ScoredUser`` rows, so a
new metric is one more strategy and one more registry entry.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import ClassVar, Protocol

from app.models.ranking import (
    Metric,
    PointGrant,
    ScoredUser,
    Submission,
    SubmissionStatus,
    Window,
)


class LedgerReader(Protocol):
    async def sum_points_by_user(self, window: Window) -> dict[int, int]: ...

    async def count_distinct_solved_by_user(self, window: Window) -> dict[int, int]: ...


def sum_points(grants: Iterable[PointGrant], window: Window) -> dict[int, int]:
    """Signed point totals for every user with at least one grant in the window."""
    totals: dict[int, int] = {}
    for grant in grants:
        if not window.contains(grant.granted_at):
            continue
        totals[grant.user_id] = totals.get(grant.user_id, 0) + grant.points
    return totals


def count_distinct_solved(submissions: Iterable[Submission], window: Window) -> dict[int, int]:
    """Number of distinct questions each user solved inside the window."""
    solved: dict[int, set[int]] = {}
    for submission in submissions:
        if submission.status is not SubmissionStatus.SUCCESS:
            continue
        if not window.contains(submission.submitted_at):
            continue
        solved.setdefault(submission.user_id, set()).add(submission.question_id)
    return {user_id: len(questions) for user_id, questions in solved.items()}


def _scored(scores: dict[int, int]) -> list[ScoredUser]:
    return [ScoredUser(user_id=user_id, score=score) for user_id, score in scores.items()]


class MetricStrategy(Protocol):
    metric: ClassVar[Metric]

    async def aggregate(self, reader: LedgerReader, window: Window) -> list[ScoredUser]: ...


@dataclass(frozen=True, slots=True)
class PointsMetric:
    metric: ClassVar[Metric] = Metric.POINTS

    async def aggregate(self, reader: LedgerReader, window: Window) -> list[ScoredUser]:
        return _scored(await reader.sum_points_by_user(window))


@dataclass(frozen=True, slots=True)
class CompletedQuestionsMetric:
    metric: ClassVar[Metric] = Metric.COMPLETED_QUESTIONS

    async def aggregate(self, reader: LedgerReader, window: Window) -> list[ScoredUser]:
        return _scored(await reader.count_distinct_solved_by_user(window))


METRIC_STRATEGIES: dict[Metric, MetricStrategy] = {
    strategy.metric: strategy for strategy in (PointsMetric(), CompletedQuestionsMetric())
}


async def aggregate(reader: LedgerReader, metric: Metric, window: Window) -> list[ScoredUser]:
    try:
        strategy = METRIC_STRATEGIES[metric]
    except KeyError as exc:
        raise ValueError(f"Unsupported ranking metric: {metric}") from exc
    return await strategy.aggregate(reader, window)
