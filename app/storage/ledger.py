"""Append-only point and submission ledgers stored in Redis.

Layout (``<prefix>`` defaults to ``ledger``)::

    <prefix>:points                 ZSET  member=JSON grant, score=granted_at (epoch ms)
    <prefix>:points:seq             STRING grant id sequence
    <prefix>:submissions            ZSET  member=submission id, score=submitted_at (epoch ms)
    <prefix>:submissions:seq        STRING submission id sequence
    <prefix>:submission:<id>        HASH  user_id, question_id, status, submitted_at

Window reads use ``ZRANGEBYSCORE`` with an exclusive upper bound. Redis
errors are not caught here; callers see them as upstream failures.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

from redis.asyncio import Redis

from app.models.ranking import PointGrant, Submission, SubmissionStatus, Window
from app.services.aggregation import count_distinct_solved, sum_points

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# KEYS[1] submission hash; ARGV[1] required current status; ARGV[2] new status.
# Returns 0 on success, -1 when missing, otherwise the conflicting status.
SET_STATUS_IF_SCRIPT = """
local current = redis.call("HGET", KEYS[1], "status")
if not current then
    return -1
end
if current ~= ARGV[1] then
    return current
end
redis.call("HSET", KEYS[1], "status", ARGV[2])
return 0
"""


class SubmissionNotFoundError(Exception):
    """Raised when a submission id is not present in the ledger."""


class SubmissionStatusError(Exception):
    """Raised when a graded submission would change status again."""


def to_epoch_ms(instant: datetime) -> int:
    if instant.tzinfo is None:
        raise ValueError("ledger timestamps must be timezone-aware")
    return (instant - EPOCH) // timedelta(milliseconds=1)


class RedisLedger:
    def __init__(self, redis_client: Redis, prefix: str = "ledger"):
        self.redis = redis_client
        self.prefix = prefix
        self._set_status_if = redis_client.register_script(SET_STATUS_IF_SCRIPT)

    @property
    def points_key(self) -> str:
        return f"{self.prefix}:points"

    @property
    def submissions_key(self) -> str:
        return f"{self.prefix}:submissions"

    def submission_key(self, submission_id: int) -> str:
        return f"{self.prefix}:submission:{submission_id}"

    async def append_point_grant(
        self,
        user_id: int,
        points: int,
        granted_at: datetime,
        description: str = "",
    ) -> PointGrant:
        grant_id = await self.redis.incr(f"{self.points_key}:seq")
        grant = PointGrant(
            id=int(grant_id),
            user_id=user_id,
            points=points,
            granted_at=granted_at,
            description=description,
        )
        member = json.dumps(
            {
                "id": grant.id,
                "user_id": grant.user_id,
                "points": grant.points,
                "granted_at": grant.granted_at.isoformat(),
                "description": grant.description,
            },
            separators=(",", ":"),
        )
        await self.redis.zadd(self.points_key, {member: to_epoch_ms(granted_at)})
        return grant

    async def append_submission(
        self,
        user_id: int,
        question_id: int,
        submitted_at: datetime,
        status: SubmissionStatus = SubmissionStatus.PENDING,
    ) -> Submission:
        submission_id = int(await self.redis.incr(f"{self.submissions_key}:seq"))
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.hset(
                self.submission_key(submission_id),
                mapping={
                    "user_id": user_id,
                    "question_id": question_id,
                    "status": status.value,
                    "submitted_at": submitted_at.isoformat(),
                },
            )
            pipe.zadd(self.submissions_key, {str(submission_id): to_epoch_ms(submitted_at)})
            await pipe.execute()

        return Submission(
            id=submission_id,
            user_id=user_id,
            question_id=question_id,
            status=status,
            submitted_at=submitted_at,
        )

    async def set_submission_status(self, submission_id: int, status: SubmissionStatus) -> None:
        """Record a grading result. Only pending submissions may change status."""
        result = await self._set_status_if(
            keys=[self.submission_key(submission_id)],
            args=[SubmissionStatus.PENDING.value, status.value],
        )
        if result == -1:
            raise SubmissionNotFoundError(submission_id)
        if result != 0:
            raise SubmissionStatusError(
                f"Submission {submission_id} is already {result}; cannot set {status.value}"
            )

    async def point_grants_between(self, start: datetime, end: datetime) -> list[PointGrant]:
        members = await self.redis.zrangebyscore(
            self.points_key, to_epoch_ms(start), f"({to_epoch_ms(end)}"
        )
        grants: list[PointGrant] = []
        for member in members:
            row = json.loads(member)
            grants.append(
                PointGrant(
                    id=int(row["id"]),
                    user_id=int(row["user_id"]),
                    points=int(row["points"]),
                    granted_at=datetime.fromisoformat(row["granted_at"]),
                    description=row.get("description") or "",
                )
            )
        return grants

    async def submissions_between(self, start: datetime, end: datetime) -> list[Submission]:
        ids = await self.redis.zrangebyscore(
            self.submissions_key, to_epoch_ms(start), f"({to_epoch_ms(end)}"
        )
        if not ids:
            return []

        async with self.redis.pipeline(transaction=False) as pipe:
            for submission_id in ids:
                pipe.hgetall(self.submission_key(int(submission_id)))
            rows = await pipe.execute()

        submissions: list[Submission] = []
        for submission_id, row in zip(ids, rows):
            if not row:
                continue
            submissions.append(
                Submission(
                    id=int(submission_id),
                    user_id=int(row["user_id"]),
                    question_id=int(row["question_id"]),
                    status=SubmissionStatus(row["status"]),
                    submitted_at=datetime.fromisoformat(row["submitted_at"]),
                )
            )
        return submissions

    async def sum_points_by_user(self, window: Window) -> dict[int, int]:
        grants = await self.point_grants_between(window.start, window.end)
        return sum_points(grants, window)

    async def count_distinct_solved_by_user(self, window: Window) -> dict[int, int]:
        submissions = await self.submissions_between(window.start, window.end)
        return count_distinct_solved(submissions, window)
