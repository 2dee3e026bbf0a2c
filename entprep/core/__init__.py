"""
Core Module - Shared domain models and infrastructure.

Components:
- models: Users, Tests, Questions, Results and derived stats
- answers: Correct-answer normalization and comparison
- store: In-memory entity store used when the backend is unreachable
- remote: HTTP client for the backend contract
- protocol: Remote-first, local-fallback execution
- session_store: Auth token persistence
"""

from entprep.core.answers import canonical_index, is_correct, normalize
from entprep.core.errors import (
    EntPrepError,
    GeneratorNotFoundError,
    InvalidIdentityError,
    NotAuthenticatedError,
    QuotaExhaustedError,
    RemoteError,
    UnknownSubjectKeyError,
    UnknownTrackError,
)
from entprep.core.models import (
    AnswerRecord,
    Difficulty,
    Question,
    QuestionType,
    RecentTest,
    Role,
    Test,
    TestResult,
    User,
    UserStats,
)
from entprep.core.protocol import Served, Tier, dual_mode

__all__ = [
    # Models
    "AnswerRecord",
    "Difficulty",
    "Question",
    "QuestionType",
    "RecentTest",
    "Role",
    "Test",
    "TestResult",
    "User",
    "UserStats",
    # Answers
    "canonical_index",
    "is_correct",
    "normalize",
    # Protocol
    "Served",
    "Tier",
    "dual_mode",
    # Errors
    "EntPrepError",
    "GeneratorNotFoundError",
    "InvalidIdentityError",
    "NotAuthenticatedError",
    "QuotaExhaustedError",
    "RemoteError",
    "UnknownSubjectKeyError",
    "UnknownTrackError",
]
