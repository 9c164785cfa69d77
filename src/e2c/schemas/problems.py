"""Problem-related schemas."""

from datetime import datetime
from typing import Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

Difficulty = Literal["EASY", "MEDIUM", "HARD"]


class Testcase(BaseModel):
    """Hidden testcase; identified by its 1-based position in the problem."""

    __test__ = False

    input: str
    output: str


class Example(BaseModel):
    """Example shown in the problem statement."""

    input: str
    output: str
    explanation: Optional[str] = None


class ProblemCreate(BaseModel):
    """Create problem request."""

    title: str = Field(min_length=1, max_length=200)
    description: str
    difficulty: Difficulty
    tags: List[str] = []
    examples: List[Example] = []
    constraints: List[str] = []
    testcases: List[Testcase] = Field(min_length=1)
    code_snippets: Dict[str, str] = {}
    reference_solutions: Dict[str, str] = Field(min_length=1)


class ProblemUpdate(BaseModel):
    """Partial problem update; omitted fields are left untouched."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    tags: Optional[List[str]] = None
    examples: Optional[List[Example]] = None
    constraints: Optional[List[str]] = None
    testcases: Optional[List[Testcase]] = Field(default=None, min_length=1)
    code_snippets: Optional[Dict[str, str]] = None
    reference_solutions: Optional[Dict[str, str]] = Field(default=None, min_length=1)


class Problem(BaseModel):
    """Problem response."""

    id: UUID
    title: str
    description: str
    difficulty: str
    tags: List[str]
    examples: List[Example]
    constraints: List[str]
    testcases: List[Testcase]
    code_snippets: Dict[str, str]
    reference_solutions: Dict[str, str]
    user_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProblemList(BaseModel):
    """List of problems."""

    items: List[Problem]


class LanguageList(BaseModel):
    """Languages accepted for reference solutions."""

    items: List[str]
