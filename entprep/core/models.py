"""
Domain models for users, tests, questions and results.

Wire dictionaries use the backend's key names (snake_case for stored
entities, camelCase for derived stats) so that remote and local paths hand
callers identical shapes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from entprep.core.answers import Correctness, canonical_index, normalize


ROUNDING_EPSILON = 1e-9


def round_half_up(value: float) -> int:
    """
    Round .5 up (2.5 -> 3), unlike round().

    The epsilon absorbs float noise from incremental means, so 85.49999999999999
    reached by folding scores one at a time still rounds like 85.5.
    """
    return int(math.floor(value + 0.5 + ROUNDING_EPSILON))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO timestamp (with optional trailing Z) into an aware datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        return utcnow()
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class Role(str, Enum):
    """Account roles. Fixed at creation."""

    STUDENT = "student"
    TEACHER = "teacher"
    TUTOR = "tutor"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuestionType(str, Enum):
    """Question type tags as the backend spells them."""

    MULTIPLE_CHOICE = "multiple_choice"
    MULTI_SELECT = "multi_select"
    NUMERIC = "numeric"
    MATCHING = "matching"
    TRUE_FALSE = "true_false"
    TEXT = "text"
    IMAGE = "image"
    LATEX = "latex"

    @classmethod
    def parse(cls, value: Any) -> "QuestionType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.MULTIPLE_CHOICE


# =============================================================================
# Questions & Tests
# =============================================================================


@dataclass(frozen=True)
class Question:
    """
    One assessment item.

    ``correct_answer`` keeps the raw value whose shape depends on ``type``:
    an index for single choice, a list of indices for multi-select, a string
    for free text, a term -> definition mapping for matching.
    """

    id: str
    question: str
    type: QuestionType = QuestionType.MULTIPLE_CHOICE
    options: list[str] = field(default_factory=list)
    correct_answer: Any = 0
    explanation: str | None = None
    subject: str | None = None
    difficulty: str | None = None
    lang: str | None = None
    image_url: str | None = None

    @property
    def correct_index(self) -> int:
        """Single-option alias. Lossy for multi-select and matching questions."""
        return canonical_index(self.correct_answer)

    @property
    def correctness(self) -> Correctness:
        return normalize(self.correct_answer, self.type)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "question": self.question,
            "type": self.type.value,
            "options": list(self.options),
            "correct_answer": self.correct_answer,
            "correctAnswer": self.correct_index,
        }
        for key, value in (
            ("explanation", self.explanation),
            ("subject", self.subject),
            ("difficulty", self.difficulty),
            ("lang", self.lang),
            ("imageUrl", self.image_url),
        ):
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Question:
        """Parse a wire question. A missing ``correct_answer`` falls back to ``correctAnswer``."""
        raw = data.get("correct_answer", data.get("correctAnswer", 0))
        return cls(
            id=str(data.get("id", "")),
            question=data.get("question", ""),
            type=QuestionType.parse(data.get("type", QuestionType.MULTIPLE_CHOICE)),
            options=list(data.get("options") or []),
            correct_answer=raw,
            explanation=data.get("explanation"),
            subject=data.get("subject"),
            difficulty=data.get("difficulty"),
            lang=data.get("lang"),
            image_url=data.get("imageUrl", data.get("image_url")),
        )


@dataclass(frozen=True)
class Test:
    """A fixed, named quiz. ``questions`` is stored as a tuple."""

    __test__ = False  # keep pytest from collecting this class

    id: str
    title: str
    subject: str
    difficulty: Difficulty
    questions: tuple[Question, ...] = ()
    time_limit: int | None = None  # seconds
    created_by: str | None = None
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "questions", tuple(self.questions))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "subject": self.subject,
            "difficulty": self.difficulty.value,
            "time_limit": self.time_limit,
            "questions": [q.to_dict() for q in self.questions],
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Test:
        created_at = data.get("created_at")
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title", ""),
            subject=data.get("subject", ""),
            difficulty=Difficulty(data.get("difficulty", Difficulty.MEDIUM.value)),
            questions=tuple(Question.from_dict(q) for q in data.get("questions") or []),
            time_limit=data.get("time_limit"),
            created_by=data.get("created_by"),
            created_at=parse_timestamp(created_at) if created_at else None,
        )


# =============================================================================
# Users
# =============================================================================


@dataclass
class User:
    """
    A learner, teacher or tutor account.

    ``average_score`` is the unrounded running mean of result percentages;
    ``to_dict`` reports it rounded. ``total_study_time`` is in minutes.
    """

    id: str
    email: str
    name: str
    role: Role = Role.STUDENT
    tests_completed: int = 0
    average_score: float = 0.0
    study_streak: int = 0
    total_study_time: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
            "tests_completed": self.tests_completed,
            "average_score": round_half_up(self.average_score),
            "study_streak": self.study_streak,
            "total_study_time": self.total_study_time,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> User:
        return cls(
            id=str(data.get("id", "")),
            email=data.get("email", ""),
            name=data.get("name", ""),
            role=Role(data.get("role", Role.STUDENT.value)),
            tests_completed=int(data.get("tests_completed") or 0),
            average_score=float(data.get("average_score") or 0),
            study_streak=int(data.get("study_streak") or 0),
            total_study_time=int(data.get("total_study_time") or 0),
        )


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class AnswerRecord:
    """How one question inside a result was answered."""

    correct: bool
    question_id: str | None = None
    given: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"questionId": self.question_id, "answer": self.given, "correct": self.correct}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnswerRecord:
        return cls(
            correct=bool(data.get("correct", False)),
            question_id=data.get("questionId", data.get("question_id")),
            given=data.get("answer", data.get("given")),
        )

    @classmethod
    def coerce(cls, value: Any) -> AnswerRecord:
        if isinstance(value, cls):
            return value
        if isinstance(value, dict):
            return cls.from_dict(value)
        return cls(correct=False, given=value)


@dataclass(frozen=True)
class TestResult:
    """A completed attempt. ``score`` is a percentage, ``time_spent`` in seconds."""

    __test__ = False

    id: str
    user_id: str
    test_id: str
    answers: tuple[AnswerRecord, ...]
    score: float
    time_spent: int
    completed_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "answers", tuple(AnswerRecord.coerce(a) for a in self.answers)
        )

    @property
    def subject(self) -> str:
        """Subject tag derived from the test reference (``test-math`` -> ``math``)."""
        return self.test_id.replace("test-", "", 1)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "test_id": self.test_id,
            "answers": [a.to_dict() for a in self.answers],
            "score": self.score,
            "time_spent": self.time_spent,
            "completed_at": self.completed_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TestResult:
        return cls(
            id=str(data.get("id", "")),
            user_id=str(data.get("user_id", "")),
            test_id=str(data.get("test_id", "")),
            answers=tuple(data.get("answers") or []),
            score=float(data.get("score", 0)),
            time_spent=int(data.get("time_spent", 0)),
            completed_at=parse_timestamp(data.get("completed_at")),
        )


# =============================================================================
# Derived statistics
# =============================================================================


@dataclass(frozen=True)
class RecentTest:
    subject: str
    score: int  # out of ``total``
    total: int
    percentage: int
    completed_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "subject": self.subject,
            "score": self.score,
            "total": self.total,
            "percentage": self.percentage,
            "completedAt": self.completed_at.isoformat(),
        }


@dataclass(frozen=True)
class UserStats:
    """Computed snapshot. Never stored."""

    tests_completed: int
    average_score: int
    total_questions: int
    correct_answers: int
    study_time: int  # seconds
    streak: int
    rank: str
    achievements: list[str] = field(default_factory=list)
    recent_tests: list[RecentTest] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "testsCompleted": self.tests_completed,
            "averageScore": self.average_score,
            "totalQuestions": self.total_questions,
            "correctAnswers": self.correct_answers,
            "studyTime": self.study_time,
            "streak": self.streak,
            "rank": self.rank,
            "achievements": list(self.achievements),
            "recentTests": [r.to_dict() for r in self.recent_tests],
        }
