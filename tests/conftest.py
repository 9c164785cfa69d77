"""
Pytest configuration and shared fixtures for the Enlighten2Code test suite.
"""

import itertools
import os
from typing import Dict, List, Optional, Sequence, Tuple, Union

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Set test environment before importing app
os.environ["E2C_ENVIRONMENT"] = "test"
os.environ["E2C_DB_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["E2C_JWT_SECRET"] = "test-secret"
os.environ["E2C_JWT_ALGORITHM"] = "HS256"
# Disable rate limiting for tests
os.environ["E2C_RATE_LIMIT_REQUESTS"] = "999999"
# Point the judge somewhere unreachable; tests inject a fake
os.environ["E2C_JUDGE0_API_URL"] = "http://mock-judge0:2358"

from e2c.config import get_settings  # noqa: E402
from e2c.db.base import Base  # noqa: E402
from e2c.db import models  # noqa: E402,F401
from e2c.schemas.judge import SubmissionRequest, SubmissionResult  # noqa: E402
from e2c.services.validation import (  # noqa: E402
    BatchSubmitter,
    ResultPoller,
    ValidationEngine,
)

settings = get_settings()

STATUS_DESCRIPTIONS = {
    1: "In Queue",
    2: "Processing",
    3: "Accepted",
    4: "Wrong Answer",
    5: "Time Limit Exceeded",
    6: "Compilation Error",
    11: "Runtime Error (NZEC)",
}


class FakeJudge:
    """In-memory stand-in for ``Judge0Client``.

    Every submission is accepted unless ``verdicts`` maps its stdin (or a
    ``(language_id, stdin)`` pair) to another status id. Each token reports
    Processing for the first ``pending_rounds`` polls, or ``pending[stdin]``
    when set.
    """

    def __init__(self, pending_rounds: int = 0):
        self.pending_rounds = pending_rounds
        self.verdicts: Dict[Union[str, Tuple[int, str]], int] = {}
        self.pending: Dict[str, int] = {}
        self.submitted: List[List[SubmissionRequest]] = []
        self.poll_calls: List[List[str]] = []
        self.submit_error: Optional[Exception] = None
        self.poll_errors: List[Exception] = []
        self._counter = itertools.count()
        self._store: Dict[str, SubmissionRequest] = {}
        self._seen: Dict[str, int] = {}

    @property
    def submission_count(self) -> int:
        return sum(len(batch) for batch in self.submitted)

    async def submit_batch(self, submissions: Sequence[SubmissionRequest]) -> List[str]:
        if self.submit_error is not None:
            raise self.submit_error
        self.submitted.append(list(submissions))
        tokens = []
        for submission in submissions:
            token = f"tok-{next(self._counter)}"
            self._store[token] = submission
            self._seen[token] = 0
            tokens.append(token)
        return tokens

    async def get_batch_results(self, tokens: Sequence[str]) -> List[SubmissionResult]:
        self.poll_calls.append(list(tokens))
        if self.poll_errors:
            raise self.poll_errors.pop(0)
        results = []
        # No ordering guarantee from the judge
        for token in reversed(list(tokens)):
            self._seen[token] += 1
            stdin = self._store[token].stdin
            if self._seen[token] <= self.pending.get(stdin, self.pending_rounds):
                status_id = 2
            else:
                status_id = self._verdict(self._store[token])
            results.append(
                SubmissionResult(
                    token=token,
                    status_id=status_id,
                    status_description=STATUS_DESCRIPTIONS.get(status_id),
                    stdout=self._store[token].expected_output,
                )
            )
        return results

    def _verdict(self, submission: SubmissionRequest) -> int:
        key = (submission.language_id, submission.stdin)
        if key in self.verdicts:
            return self.verdicts[key]
        return self.verdicts.get(submission.stdin, 3)


def build_engine(
    judge: FakeJudge,
    *,
    batch_size: int = 20,
    concurrent: bool = False,
    deadline: float = 5.0,
    max_retries: int = 3,
) -> ValidationEngine:
    poller = ResultPoller(
        judge,
        interval=0,
        max_interval=0,
        max_retries=max_retries,
        deadline=deadline,
        batch_size=batch_size,
    )
    return ValidationEngine(
        BatchSubmitter(judge),
        poller,
        batch_size=batch_size,
        concurrent=concurrent,
    )


def make_testcases(count: int) -> List[Dict[str, str]]:
    return [{"input": f"{i} {i}", "output": str(2 * i)} for i in range(1, count + 1)]


@pytest.fixture
def fake_judge():
    return FakeJudge()


@pytest.fixture
def engine(fake_judge):
    return build_engine(fake_judge)


@pytest_asyncio.fixture
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        os.environ["E2C_DB_URL"],
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest.fixture
def sample_problem_data():
    """Sample problem payload for testing."""
    return {
        "title": "Add Two Numbers",
        "description": "Read two integers and print their sum.",
        "difficulty": "EASY",
        "tags": ["math"],
        "examples": [{"input": "1 2", "output": "3", "explanation": "1 + 2 = 3"}],
        "constraints": ["-10^9 <= a, b <= 10^9"],
        "testcases": make_testcases(3),
        "code_snippets": {"PYTHON": "a, b = map(int, input().split())\n"},
        "reference_solutions": {
            "PYTHON": "a, b = map(int, input().split())\nprint(a + b)\n",
        },
    }


@pytest.fixture
def app(fake_judge):
    """Create test app instance with the judge replaced by a fake."""
    from e2c.routes.problems import get_validation_engine
    from e2c.server import create_app

    test_app = create_app()
    test_app.dependency_overrides[get_validation_engine] = lambda: build_engine(
        fake_judge
    )
    return test_app


@pytest.fixture
def client(app):
    """Create a test client for the FastAPI app."""
    with TestClient(app) as test_client:
        yield test_client


async def _promote_to_admin(email: str) -> None:
    from sqlalchemy import update

    from e2c.db import base
    from e2c.db.models import User, UserRole

    assert base.AsyncSessionLocal is not None
    async with base.AsyncSessionLocal() as session:
        await session.execute(
            update(User).where(User.email == email).values(role=UserRole.ADMIN)
        )
        await session.commit()


def register(client: TestClient, email: str, *, admin: bool = False) -> dict:
    """Register a user through the API; the client keeps the session cookie."""
    response = client.post(
        "/api/v1/auth/register",
        json={"name": email.split("@")[0], "email": email, "password": "s3cret-pw"},
    )
    assert response.status_code == 201, response.text
    if admin:
        client.portal.call(_promote_to_admin, email)
    return response.json()


@pytest.fixture
def auth_client(client):
    """Client logged in as a regular user."""
    register(client, "user@example.com")
    return client


@pytest.fixture
def admin_client(client):
    """Client logged in as an administrator."""
    register(client, "admin@example.com", admin=True)
    return client


@pytest.fixture
def test_user_id():
    """Test user ID."""
    return "550e8400-e29b-41d4-a716-446655440000"


@pytest.fixture
def test_jwt_token(test_user_id):
    """Session token for the test user."""
    from uuid import UUID

    from e2c.auth import create_access_token

    return create_access_token(UUID(test_user_id))
