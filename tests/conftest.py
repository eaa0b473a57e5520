from __future__ import annotations

import os
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from redis import Redis
from redis.exceptions import ConnectionError as RedisConnectionError

from app.api.auth import get_token_storage
from app.api.routes import get_ranking_service
from app.config import Settings
from app.main import create_app
from app.models.ranking import PointGrant, Submission, SubmissionStatus, Window
from app.services.aggregation import count_distinct_solved, sum_points
from app.services.ranking import RankingService
from app.storage.tokens import TokenInfo, TokenNotFoundError

TZ = timezone(timedelta(hours=8))

# Wednesday afternoon; the week started Monday 2026-10-12.
NOW = datetime(2026, 10, 14, 15, 30, tzinfo=TZ)
TODAY = datetime(2026, 10, 14, 9, 0, tzinfo=TZ)
YESTERDAY = TODAY - timedelta(days=1)
LAST_WEEK = datetime(2026, 10, 11, 23, 59, tzinfo=TZ)

READER_TOKEN = "reader-token"
WRITER_TOKEN = "writer-token"


@dataclass
class FixedClock:
    instant: datetime

    def now(self) -> datetime:
        return self.instant

    def midnight(self, day: date) -> datetime:
        return datetime.combine(day, time.min, tzinfo=self.instant.tzinfo)


@dataclass
class InMemoryLedger:
    grants: list[PointGrant] = field(default_factory=list)
    submissions: list[Submission] = field(default_factory=list)
    reads: int = 0

    def grant(self, user_id: int, points: int, granted_at: datetime = TODAY) -> None:
        self.grants.append(
            PointGrant(id=len(self.grants) + 1, user_id=user_id, points=points, granted_at=granted_at)
        )

    def submit(
        self,
        user_id: int,
        question_id: int,
        status: SubmissionStatus = SubmissionStatus.SUCCESS,
        submitted_at: datetime = TODAY,
    ) -> None:
        self.submissions.append(
            Submission(
                id=len(self.submissions) + 1,
                user_id=user_id,
                question_id=question_id,
                status=status,
                submitted_at=submitted_at,
            )
        )

    async def sum_points_by_user(self, window: Window) -> dict[int, int]:
        self.reads += 1
        return sum_points(self.grants, window)

    async def count_distinct_solved_by_user(self, window: Window) -> dict[int, int]:
        self.reads += 1
        return count_distinct_solved(self.submissions, window)


@dataclass
class InMemoryTokenStorage:
    tokens: dict[str, TokenInfo] = field(default_factory=dict)

    async def get(self, token: str) -> TokenInfo:
        try:
            return self.tokens[token]
        except KeyError as exc:
            raise TokenNotFoundError("token not found") from exc


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def ledger() -> InMemoryLedger:
    return InMemoryLedger()


def build_app(ledger: InMemoryLedger, settings: Settings):
    app = create_app(settings)
    tokens = InMemoryTokenStorage(
        {
            READER_TOKEN: TokenInfo(user_id=1, scopes=("user:read",)),
            WRITER_TOKEN: TokenInfo(user_id=2, scopes=("user:write",)),
        }
    )
    service = RankingService(ledger, FixedClock(NOW))
    app.dependency_overrides[get_ranking_service] = lambda: service
    app.dependency_overrides[get_token_storage] = lambda: tokens
    return app


@pytest.fixture()
def client(ledger: InMemoryLedger):
    app = build_app(ledger, Settings())
    headers = {"Authorization": f"Bearer {READER_TOKEN}"}
    with TestClient(app) as test_client:
        yield test_client, ledger, headers


@pytest.fixture(scope="session")
def redis_url() -> str:
    url = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    ping_client = Redis.from_url(url, decode_responses=True)
    try:
        ping_client.ping()
    except RedisConnectionError:
        pytest.skip(f"Redis is not reachable at {url}")
    finally:
        ping_client.close()
    return url


@pytest.fixture()
def redis_prefix(redis_url: str):
    prefix = f"test_{uuid.uuid4().hex}"
    yield prefix

    sync_redis = Redis.from_url(redis_url, decode_responses=True)
    for key in sync_redis.scan_iter(match=f"{prefix}*"):
        sync_redis.delete(key)
    sync_redis.close()


@pytest.fixture()
def public_client(ledger: InMemoryLedger):
    app = build_app(ledger, Settings(ranking_required_scope=""))
    with TestClient(app) as test_client:
        yield test_client, ledger
