"""Application error taxonomy and the HTTP handler that renders it."""

from typing import Any, Dict, Iterable, Optional

from fastapi import Request
from fastapi.responses import JSONResponse


class E2CError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


class UnsupportedLanguageError(E2CError):
    """A reference solution was declared for a language the judge can't run."""

    status_code = 400
    code = "UNSUPPORTED_LANGUAGE"

    def __init__(self, language: str):
        super().__init__(
            f"Language {language} is not supported", {"language": language}
        )
        self.language = language


class TestcaseValidationError(E2CError):
    """A reference solution did not pass one of the problem's testcases."""

    __test__ = False

    status_code = 400
    code = "TESTCASE_FAILED"

    def __init__(self, language: str, testcase: int, status: str):
        super().__init__(
            f"Testcase {testcase} failed for language {language}",
            {"language": language, "testcase": testcase, "status": status},
        )
        self.language = language
        self.testcase = testcase
        self.status = status


class BatchSubmissionError(E2CError):
    """The judge rejected or could not receive a batch of submissions."""

    status_code = 502
    code = "JUDGE_UNAVAILABLE"

    def __init__(self, batch_index: int, cause: Any):
        super().__init__(
            f"Failed to submit batch {batch_index} to the judge: {cause}",
            {"batch_index": batch_index},
        )
        self.batch_index = batch_index
        self.cause = cause


class PollTimeoutError(E2CError):
    """Submissions did not reach a terminal status in time."""

    status_code = 504
    code = "JUDGE_TIMEOUT"

    def __init__(self, outstanding: Iterable[str], reason: str = "deadline exceeded"):
        outstanding = sorted(outstanding)
        super().__init__(
            f"Judge results not ready ({reason}); "
            f"{len(outstanding)} submission(s) outstanding",
            {"outstanding": outstanding, "reason": reason},
        )
        self.outstanding = outstanding
        self.reason = reason


class ValidationCancelledError(E2CError):
    """The client went away while validation was still running."""

    status_code = 499
    code = "CLIENT_CLOSED_REQUEST"

    def __init__(self):
        super().__init__("Validation cancelled")


class ProblemNotFoundError(E2CError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, problem_id: Any):
        super().__init__("Problem not found", {"problem_id": str(problem_id)})


class PersistenceError(E2CError):
    status_code = 500
    code = "PERSISTENCE_ERROR"


class EmailTakenError(E2CError):
    status_code = 409
    code = "EMAIL_TAKEN"

    def __init__(self, email: str):
        super().__init__("User with this email already exists", {"email": email})


class InvalidCredentialsError(E2CError):
    status_code = 401
    code = "INVALID_CREDENTIALS"

    def __init__(self):
        super().__init__("Invalid email or password")


async def e2c_error_handler(request: Request, exc: E2CError) -> JSONResponse:
    """Render an application error with the standard error envelope."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
