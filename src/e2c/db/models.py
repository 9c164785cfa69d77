"""SQLAlchemy ORM models."""

import enum
from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import relationship
from sqlalchemy.types import JSON

from e2c.db.base import Base

# JSONB for Postgres with JSON fallback
JSONType = JSON().with_variant(JSONB, "postgresql")


class UserRole(enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class User(Base):
    """Registered user."""

    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    password = Column(String(255), nullable=False)
    role = Column(Enum(UserRole, name="user_role"), nullable=False, default=UserRole.USER)
    image = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    problems = relationship("Problem", back_populates="author")
    solved = relationship(
        "ProblemSolved", back_populates="user", cascade="all, delete-orphan"
    )


class Problem(Base):
    """Coding problem; only stored once its reference solutions pass."""

    __tablename__ = "problems"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    difficulty = Column(String(10), nullable=False)
    tags = Column(JSONType, nullable=False, default=list)
    examples = Column(JSONType, nullable=False, default=list)
    constraints = Column(JSONType, nullable=False, default=list)
    # Ordered list of {"input", "output"}; position + 1 is the testcase id
    testcases = Column(JSONType, nullable=False, default=list)
    code_snippets = Column(JSONType, nullable=False, default=dict)
    reference_solutions = Column(JSONType, nullable=False, default=dict)
    user_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    author = relationship("User", back_populates="problems")
    solved_by = relationship(
        "ProblemSolved", back_populates="problem", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(
            "difficulty IN ('EASY', 'MEDIUM', 'HARD')", name="check_difficulty"
        ),
        Index("idx_problems_difficulty", "difficulty"),
    )


class ProblemSolved(Base):
    """A user has an accepted submission for a problem."""

    __tablename__ = "problems_solved"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    problem_id = Column(
        UUID(as_uuid=True),
        ForeignKey("problems.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)

    user = relationship("User", back_populates="solved")
    problem = relationship("Problem", back_populates="solved_by")

    __table_args__ = (
        UniqueConstraint("user_id", "problem_id", name="unique_user_problem_solved"),
        Index("idx_problems_solved_user", "user_id"),
    )
