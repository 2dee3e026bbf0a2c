"""
entprep - Content & Statistics Engine for ENT practice quizzes.

Supplies practice quizzes, records results and derives learner progress.
Every public operation goes remote-first and degrades to a local in-memory
store plus procedural question generators when the backend is unreachable.

Usage:
    async with ContentService.from_settings() as service:
        served = await service.generate_track_quiz("math", max_per_section=2)
        served.data      # list[Question]
        served.demo      # True when generated locally
"""

__version__ = "1.0.0"

from entprep.core.errors import (
    EntPrepError,
    InvalidIdentityError,
    NotAuthenticatedError,
    RemoteError,
)
from entprep.core.models import Question, Test, TestResult, User, UserStats
from entprep.core.protocol import Served, Tier
from entprep.service import ContentService, ServiceContext

__all__ = [
    "ContentService",
    "ServiceContext",
    "Served",
    "Tier",
    "Question",
    "Test",
    "TestResult",
    "User",
    "UserStats",
    "EntPrepError",
    "InvalidIdentityError",
    "NotAuthenticatedError",
    "RemoteError",
]
