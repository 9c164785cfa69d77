"""Problem management endpoints."""

import asyncio
import contextlib
import logging
from typing import AsyncIterator
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from e2c.auth import require_admin, require_user
from e2c.config import get_settings
from e2c.db.base import get_db
from e2c.db.models import User as UserModel
from e2c.schemas.common import VALIDATION_RESPONSES
from e2c.schemas.problems import Problem, ProblemCreate, ProblemList, ProblemUpdate
from e2c.services.problems import ProblemService
from e2c.services.validation import ValidationEngine

logger = logging.getLogger(__name__)

router = APIRouter()


def get_validation_engine() -> ValidationEngine:
    """Validation engine wired to the configured judge."""
    return ValidationEngine.from_settings(get_settings())


@contextlib.asynccontextmanager
async def disconnect_watch(
    request: Request, interval: float = 0.5
) -> AsyncIterator[asyncio.Event]:
    """Yield an event that is set once the client disconnects."""
    cancel = asyncio.Event()

    async def watch() -> None:
        while not cancel.is_set():
            if await request.is_disconnected():
                logger.info("Client disconnected; cancelling validation")
                cancel.set()
                return
            await asyncio.sleep(interval)

    task = asyncio.create_task(watch())
    try:
        yield cancel
    finally:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task


@router.post(
    "", response_model=Problem, status_code=201, responses=VALIDATION_RESPONSES
)
async def create_problem(
    payload: ProblemCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: UserModel = Depends(require_admin),
    engine: ValidationEngine = Depends(get_validation_engine),
) -> Problem:
    """Create a problem after its reference solutions pass every testcase."""
    service = ProblemService(db, engine)
    async with disconnect_watch(request) as cancel:
        problem = await service.create_problem(payload, user_id=admin.id, cancel=cancel)
    return problem


@router.get("", response_model=ProblemList)
async def list_problems(
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(require_user),
) -> ProblemList:
    """List all problems."""
    problems = await ProblemService(db).list_problems()
    return ProblemList(items=[Problem.model_validate(p) for p in problems])


@router.get("/solved", response_model=ProblemList)
async def list_solved_problems(
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(require_user),
) -> ProblemList:
    """List problems solved by the authenticated user."""
    problems = await ProblemService(db).list_solved_by_user(user.id)
    return ProblemList(items=[Problem.model_validate(p) for p in problems])


@router.get("/{problem_id}", response_model=Problem)
async def get_problem(
    problem_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(require_user),
) -> Problem:
    """Get problem details."""
    problem = await ProblemService(db).get_problem(problem_id)
    if not problem:
        raise HTTPException(status_code=404, detail="Problem not found")
    return problem


@router.patch(
    "/{problem_id}", response_model=Problem, responses=VALIDATION_RESPONSES
)
async def update_problem(
    problem_id: UUID,
    payload: ProblemUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: UserModel = Depends(require_admin),
    engine: ValidationEngine = Depends(get_validation_engine),
) -> Problem:
    """Update a problem; re-validates when testcases or solutions change."""
    service = ProblemService(db, engine)
    async with disconnect_watch(request) as cancel:
        problem = await service.update_problem(problem_id, payload, cancel=cancel)
    return problem


@router.delete("/{problem_id}")
async def delete_problem(
    problem_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: UserModel = Depends(require_admin),
) -> dict:
    """Delete a problem."""
    await ProblemService(db).delete_problem(problem_id)
    return {"message": "Problem deleted successfully"}
