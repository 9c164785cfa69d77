"""Problem management service."""

import asyncio
import logging
from typing import Any, List, Mapping, Optional, Sequence, cast
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from e2c.db.models import Problem as ProblemModel
from e2c.db.models import ProblemSolved
from e2c.errors import PersistenceError, ProblemNotFoundError, TestcaseValidationError
from e2c.schemas.problems import ProblemCreate, ProblemUpdate, Testcase
from e2c.services.validation import ValidationEngine

logger = logging.getLogger(__name__)


class ProblemService:
    """Create, read, update and delete problems.

    Creation and any update touching testcases or reference solutions go
    through the ``ValidationEngine`` first; nothing is written unless every
    reference solution passes every testcase. Read and delete operations
    need no engine.
    """

    def __init__(self, db: AsyncSession, engine: Optional[ValidationEngine] = None):
        self.db = db
        self.engine = engine

    async def create_problem(
        self,
        data: ProblemCreate,
        user_id: Optional[UUID] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> ProblemModel:
        """Validate reference solutions, then store the problem."""
        await self._validate(data.testcases, data.reference_solutions, cancel)

        problem = ProblemModel(user_id=user_id, **data.model_dump())
        self.db.add(problem)
        await self._commit("create problem")
        await self.db.refresh(problem)

        logger.info("Created problem %s (%s)", problem.id, problem.title)
        return problem

    async def update_problem(
        self,
        problem_id: UUID,
        data: ProblemUpdate,
        cancel: Optional[asyncio.Event] = None,
    ) -> ProblemModel:
        """Apply a partial update, re-validating only when needed."""
        problem = await self.get_problem(problem_id)
        if not problem:
            raise ProblemNotFoundError(problem_id)

        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        testcases_changed = (
            "testcases" in changes and changes["testcases"] != problem.testcases
        )
        solutions_changed = (
            "reference_solutions" in changes
            and changes["reference_solutions"] != problem.reference_solutions
        )
        if testcases_changed or solutions_changed:
            testcases = [
                Testcase.model_validate(tc)
                for tc in changes.get("testcases", problem.testcases)
            ]
            solutions = changes.get("reference_solutions", problem.reference_solutions)
            await self._validate(testcases, solutions, cancel)
        else:
            logger.debug("Problem %s: testcases and solutions unchanged", problem_id)

        p = cast(Any, problem)
        for field, value in changes.items():
            setattr(p, field, value)

        await self._commit("update problem")
        await self.db.refresh(problem)
        return problem

    async def get_problem(self, problem_id: UUID) -> Optional[ProblemModel]:
        """Get problem by ID."""
        result = await self.db.execute(
            select(ProblemModel).where(ProblemModel.id == problem_id)
        )
        return result.scalar_one_or_none()

    async def list_problems(self) -> List[ProblemModel]:
        result = await self.db.execute(
            select(ProblemModel).order_by(ProblemModel.created_at)
        )
        return list(result.scalars().all())

    async def list_solved_by_user(self, user_id: UUID) -> List[ProblemModel]:
        """Problems the user has solved."""
        result = await self.db.execute(
            select(ProblemModel)
            .join(ProblemSolved, ProblemSolved.problem_id == ProblemModel.id)
            .where(ProblemSolved.user_id == user_id)
            .order_by(ProblemSolved.created_at)
        )
        return list(result.scalars().all())

    async def delete_problem(self, problem_id: UUID) -> None:
        problem = await self.get_problem(problem_id)
        if not problem:
            raise ProblemNotFoundError(problem_id)
        await self.db.delete(problem)
        await self._commit("delete problem")
        logger.info("Deleted problem %s", problem_id)

    async def _validate(
        self,
        testcases: Sequence[Testcase],
        reference_solutions: Mapping[str, str],
        cancel: Optional[asyncio.Event],
    ) -> None:
        if self.engine is None:
            raise RuntimeError(
                "ProblemService needs a ValidationEngine to write problems"
            )
        report = await self.engine.validate(testcases, reference_solutions, cancel)
        failure = report.first_failure
        if failure is not None:
            status = failure.failure_status
            raise TestcaseValidationError(
                failure.language,
                cast(int, failure.failed_testcase),
                status.value if status else "Unknown",
            )

    async def _commit(self, action: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("Failed to %s: %s", action, exc)
            raise PersistenceError(f"Failed to {action}") from exc

