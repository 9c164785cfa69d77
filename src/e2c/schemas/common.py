"""Common Pydantic schemas."""

from typing import Any, Dict

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: Dict[str, Any] = Field(
        ...,
        examples=[
            {
                "code": "TESTCASE_FAILED",
                "message": "Testcase 2 failed for language PYTHON",
                "details": {"language": "PYTHON", "testcase": 2, "status": "WrongAnswer"},
            }
        ],
    )


VALIDATION_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Unsupported language or failing testcase"},
    502: {"model": ErrorResponse, "description": "Judge rejected or unreachable"},
    504: {"model": ErrorResponse, "description": "Judge results not ready in time"},
}
