"""Domain types shared by the ledger storage and the ranking pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Metric(str, Enum):
    POINTS = "POINTS"
    COMPLETED_QUESTIONS = "COMPLETED_QUESTIONS"


class Direction(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class Period(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"


class SubmissionStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class PointGrant:
    id: int
    user_id: int
    points: int
    granted_at: datetime
    description: str = ""


@dataclass(frozen=True, slots=True)
class Submission:
    id: int
    user_id: int
    question_id: int
    status: SubmissionStatus
    submitted_at: datetime


@dataclass(frozen=True, slots=True)
class Window:
    """Half-open interval ``[start, end)`` of eligible ledger events."""

    start: datetime
    end: datetime

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end


@dataclass(frozen=True, slots=True)
class RankingFilter:
    by: Metric
    order: Direction
    period: Period


@dataclass(frozen=True, slots=True)
class ScoredUser:
    user_id: int
    score: int
