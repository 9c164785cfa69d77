"""Judge0 wire schemas used by the validation pipeline."""

import enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class JudgeStatus(str, enum.Enum):
    """Judge0 submission status, collapsed to what the pipeline cares about."""

    queued = "Queued"
    processing = "Processing"
    accepted = "Accepted"
    wrong_answer = "WrongAnswer"
    time_limit_exceeded = "TimeLimitExceeded"
    compile_error = "CompileError"
    runtime_error = "RuntimeError"
    other = "Other"

    @classmethod
    def from_id(cls, status_id: Optional[int]) -> "JudgeStatus":
        if status_id is None:
            return cls.other
        if 7 <= status_id <= 12:
            return cls.runtime_error
        return _STATUS_BY_ID.get(status_id, cls.other)

    @property
    def is_terminal(self) -> bool:
        return self not in (JudgeStatus.queued, JudgeStatus.processing)


_STATUS_BY_ID = {
    1: JudgeStatus.queued,
    2: JudgeStatus.processing,
    3: JudgeStatus.accepted,
    4: JudgeStatus.wrong_answer,
    5: JudgeStatus.time_limit_exceeded,
    6: JudgeStatus.compile_error,
}


class SubmissionRequest(BaseModel):
    """One (reference solution, testcase) execution request."""

    source_code: str
    language_id: int
    stdin: str
    expected_output: str


class SubmissionResult(BaseModel):
    """Result of one judge submission."""

    token: str
    status_id: Optional[int] = None
    status_description: Optional[str] = None
    stdout: Optional[str] = None
    stderr: Optional[str] = None
    compile_output: Optional[str] = None
    message: Optional[str] = None
    time: Optional[str] = None
    memory: Optional[int] = None

    @property
    def status(self) -> JudgeStatus:
        return JudgeStatus.from_id(self.status_id)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @classmethod
    def from_judge(cls, payload: Dict[str, Any]) -> "SubmissionResult":
        """Build a result from a Judge0 submission object."""
        status = payload.get("status") or {}
        status_id = status.get("id") if isinstance(status, dict) else None
        if status_id is None:
            status_id = payload.get("status_id")
        return cls(
            token=payload["token"],
            status_id=status_id,
            status_description=(
                status.get("description") if isinstance(status, dict) else None
            ),
            stdout=payload.get("stdout"),
            stderr=payload.get("stderr"),
            compile_output=payload.get("compile_output"),
            message=payload.get("message"),
            time=str(payload["time"]) if payload.get("time") is not None else None,
            memory=payload.get("memory"),
        )


class ValidationOutcome(BaseModel):
    """Verdict for one language across all testcases."""

    language: str
    passed: bool
    failed_testcase: Optional[int] = None
    result: Optional[SubmissionResult] = None

    @property
    def failure_status(self) -> Optional[JudgeStatus]:
        return self.result.status if self.result is not None else None


class ValidationReport(BaseModel):
    """Verdicts for every validated language, in declaration order."""

    outcomes: List[ValidationOutcome] = []

    @property
    def passed(self) -> bool:
        return all(outcome.passed for outcome in self.outcomes)

    @property
    def first_failure(self) -> Optional[ValidationOutcome]:
        return next((o for o in self.outcomes if not o.passed), None)
