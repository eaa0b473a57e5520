from __future__ import annotations

import pytest

from app.models.ranking import Metric, Period, ScoredUser, SubmissionStatus
from app.services.aggregation import (
    METRIC_STRATEGIES,
    aggregate,
    count_distinct_solved,
    sum_points,
)
from app.services.window import resolve_window
from conftest import LAST_WEEK, NOW, TODAY, YESTERDAY, InMemoryLedger

DAILY = resolve_window(Period.DAILY, NOW)
WEEKLY = resolve_window(Period.WEEKLY, NOW)


def test_every_metric_has_a_strategy():
    assert set(METRIC_STRATEGIES) == set(Metric)


def test_sum_points_only_counts_grants_inside_window():
    ledger = InMemoryLedger()
    ledger.grant(1, 500, granted_at=YESTERDAY)
    ledger.grant(2, 100)
    ledger.grant(2, -30)
    ledger.grant(3, 900, granted_at=DAILY.end)

    assert sum_points(ledger.grants, DAILY) == {2: 70}
    assert sum_points(ledger.grants, WEEKLY) == {1: 500, 2: 70, 3: 900}


def test_count_distinct_solved_ignores_repeats_failures_and_pending():
    ledger = InMemoryLedger()
    for _ in range(3):
        ledger.submit(1, 7)
    ledger.submit(2, 7, status=SubmissionStatus.FAILED)
    ledger.submit(3, 7, status=SubmissionStatus.PENDING)
    ledger.submit(4, 8, submitted_at=LAST_WEEK)

    assert count_distinct_solved(ledger.submissions, WEEKLY) == {1: 1}


@pytest.mark.anyio
async def test_aggregate_points_returns_only_participants():
    ledger = InMemoryLedger()
    ledger.grant(1, 10, granted_at=TODAY)
    ledger.grant(2, 0, granted_at=TODAY)

    scored = await aggregate(ledger, Metric.POINTS, DAILY)

    assert sorted(scored, key=lambda row: row.user_id) == [
        ScoredUser(user_id=1, score=10),
        ScoredUser(user_id=2, score=0),
    ]


@pytest.mark.anyio
async def test_aggregate_completed_questions_uses_submission_ledger():
    ledger = InMemoryLedger()
    ledger.grant(1, 10)
    ledger.submit(2, 1)
    ledger.submit(2, 2)

    scored = await aggregate(ledger, Metric.COMPLETED_QUESTIONS, DAILY)

    assert scored == [ScoredUser(user_id=2, score=2)]


@pytest.mark.anyio
async def test_aggregate_with_no_events_is_empty():
    assert await aggregate(InMemoryLedger(), Metric.POINTS, DAILY) == []
    assert await aggregate(InMemoryLedger(), Metric.COMPLETED_QUESTIONS, DAILY) == []
