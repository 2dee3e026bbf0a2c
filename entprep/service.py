"""
Content service: the public face of entprep.

Every operation that the backend also offers goes through ``dual_mode``:
probe the backend, try it, and fall back to the in-memory store and the
procedural generators when it is down or answers with an error. Operations
that only exist locally (test authoring, custom banks, stats) talk to the
store directly.

Session state (current user plus optional bearer token) lives on an explicit
``ServiceContext`` rather than in module globals, so several services can
coexist in one process.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

import httpx
from loguru import logger

from entprep.assistant import Language, LocalAssistant
from entprep.config import Settings, get_settings
from entprep.core.errors import (
    InvalidIdentityError,
    NotAuthenticatedError,
    UnknownSubjectKeyError,
)
from entprep.core.models import (
    AnswerRecord,
    Difficulty,
    Question,
    Role,
    Test,
    TestResult,
    User,
    UserStats,
    utcnow,
)
from entprep.core.protocol import Served, dual_mode
from entprep.core.remote import RemoteClient
from entprep.core.session_store import TokenStore
from entprep.core.store import EntityStore, new_id
from entprep.generation.assembler import QuizAssembler
from entprep.generation.demo import generate_demo_quiz
from entprep.generation.templates import SECTION_KEYS, load_track_template
from entprep.stats import compute_analytics, compute_user_stats

DEMO_USER_ID = "demo-user"


@dataclass
class Session:
    """Who is signed in. Replaced wholesale on login and logout."""

    user: Optional[User] = None
    token: Optional[str] = None


@dataclass
class ServiceContext:
    """Everything a ContentService needs, passed explicitly."""

    settings: Settings
    store: EntityStore
    remote: RemoteClient
    token_store: TokenStore
    rng: random.Random = field(default_factory=random.Random)
    session: Session = field(default_factory=Session)


def check_email(email: str) -> str:
    """Reject identities without a local part and a domain around a single '@'."""
    candidate = email.strip()
    local, sep, domain = candidate.partition("@")
    if not sep or not local or not domain or "@" in domain:
        raise InvalidIdentityError(f"Not a plausible email address: '{email}'")
    return candidate


def parse_role(role: str) -> Role:
    try:
        return Role(role)
    except ValueError:
        raise InvalidIdentityError(
            f"Unknown role '{role}'. Expected one of: {', '.join(r.value for r in Role)}"
        ) from None


class ContentService:
    """
    Remote-first access to quizzes, results and learner progress.

    Usage:
        async with ContentService.from_settings() as service:
            served = await service.login("demo@example.com", "password123")
            quiz = await service.generate_track_quiz("physics", max_per_section=3)
    """

    def __init__(self, context: ServiceContext) -> None:
        """
        Initialize the service and restore a persisted session token.

        Args:
            context: Settings, store, remote client and session to operate on
        """
        self.context = context
        self.assembler = QuizAssembler(context.store, context.rng)
        self.assistant = LocalAssistant(
            context.rng,
            context.settings.assistant_delay_min_seconds,
            context.settings.assistant_delay_max_seconds,
        )

        token = context.token_store.load()
        if token:
            context.remote.set_token(token)
            context.session.token = token
            logger.debug("Restored persisted session token")

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        store: EntityStore | None = None,
        rng: random.Random | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "ContentService":
        settings = settings or get_settings()
        context = ServiceContext(
            settings=settings,
            store=store or EntityStore(),
            remote=RemoteClient(settings.api, transport=transport),
            token_store=TokenStore(settings.session_file),
            rng=rng or random.Random(),
        )
        return cls(context)

    async def __aenter__(self) -> "ContentService":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self.context.remote.close()

    # ========================================
    # Shortcuts
    # ========================================

    @property
    def settings(self) -> Settings:
        return self.context.settings

    @property
    def store(self) -> EntityStore:
        return self.context.store

    @property
    def remote(self) -> RemoteClient:
        return self.context.remote

    @property
    def current_user(self) -> Optional[User]:
        return self.context.session.user

    async def _probe(self) -> bool:
        return await self.remote.health_check()

    async def _simulate_generation(self) -> None:
        delay = self.settings.generation_delay_seconds
        if delay > 0:
            await asyncio.sleep(delay)

    def _require_user(self) -> User:
        user = self.context.session.user
        if user is None:
            raise NotAuthenticatedError()
        return user

    # ========================================
    # Authentication
    # ========================================

    async def login(self, email: str, password: str) -> Served[User]:
        """
        Sign in remotely, or locally when the backend is unavailable.

        Locally only the configured demo credentials get the pre-populated
        demo learner; any other plausible identity signs in as a fresh learner.
        """

        async def remote() -> User:
            user, token = await self.remote.login(email, password)
            try:
                self.context.token_store.save(token)
            except OSError as e:
                logger.warning(f"Could not persist session token: {e}")
            self.store.add_user(user)
            self.context.session = Session(user=user, token=token)
            return user

        def local() -> User:
            user = self._local_login(check_email(email), password)
            self.context.session = Session(user=user)
            return user

        served = await dual_mode("login", self._probe, remote, local)
        logger.info(f"Signed in as {served.data.email} ({served.served_by.value})")
        return served

    def _local_login(self, email: str, password: str) -> User:
        settings = self.settings
        if email.lower() == settings.demo_email.lower() and password == settings.demo_password:
            return self.store.get_user(DEMO_USER_ID) or self.store.add_user(
                User(
                    id=DEMO_USER_ID,
                    email=settings.demo_email,
                    name="Demo User",
                    role=Role.STUDENT,
                    tests_completed=3,
                    average_score=85.0,
                    study_streak=5,
                    total_study_time=180,
                )
            )

        return self.store.add_user(
            User(id=new_id("user"), email=email, name=email.split("@")[0])
        )

    async def register(
        self, email: str, password: str, name: str, role: str = Role.STUDENT.value
    ) -> Served[User]:
        async def remote() -> User:
            user = await self.remote.register(email, password, name, role)
            # Registration issues no token; drop any left from an earlier login
            self.remote.set_token(None)
            self.context.token_store.clear()
            self.store.add_user(user)
            self.context.session = Session(user=user)
            return user

        def local() -> User:
            user = self.store.add_user(
                User(
                    id=new_id("user"),
                    email=check_email(email),
                    name=name,
                    role=parse_role(role),
                )
            )
            self.context.session = Session(user=user)
            return user

        served = await dual_mode("register", self._probe, remote, local)
        logger.info(f"Registered {served.data.email} ({served.served_by.value})")
        return served

    async def logout(self) -> Served[None]:
        """End the session on both tiers. The local tier always succeeds."""
        served = await dual_mode("logout", self._probe, self.remote.logout, lambda: None)
        self.remote.set_token(None)
        self.context.token_store.clear()
        self.context.session = Session()
        return served

    # ========================================
    # Tests & questions
    # ========================================

    async def get_tests(self) -> Served[list[Test]]:
        return await dual_mode("get_tests", self._probe, self.remote.get_tests, self.store.list_tests)

    async def get_test(self, test_id: str) -> Optional[Test]:
        return self.store.get_test(test_id)

    async def create_test(
        self,
        title: str,
        subject: str,
        difficulty: Difficulty | str,
        questions: Iterable[Question],
        time_limit: int | None = None,
    ) -> Test:
        creator = self.current_user.id if self.current_user else None
        return self.store.create_test(
            title, subject, difficulty, questions, time_limit=time_limit, created_by=creator
        )

    async def get_questions(self) -> Served[list[Question]]:
        return await dual_mode(
            "get_questions", self._probe, self.remote.get_questions, self.store.all_questions
        )

    async def import_track_questions(self, subject_key: str, questions: Iterable[Question]) -> int:
        """
        Append questions to a custom bank used by track quizzes.

        Args:
            subject_key: One of history_kz, math_literacy, math_profile, physics_profile
            questions: Items to append; their subject is set to ``subject_key``

        Returns:
            The bank's size after the append
        """
        if subject_key not in SECTION_KEYS:
            raise UnknownSubjectKeyError(
                f"Unknown subject key '{subject_key}'. "
                f"Expected one of: {', '.join(sorted(SECTION_KEYS))}"
            )
        size = self.store.append_to_bank(subject_key, questions)
        logger.info(f"Custom bank {subject_key} now holds {size} questions")
        return size

    # ========================================
    # Quiz generation
    # ========================================

    async def generate_quiz(
        self, subject: str, difficulty: str = Difficulty.MEDIUM.value, count: int = 5
    ) -> Served[list[Question]]:
        async def remote() -> list[Question]:
            return await self.remote.generate_quiz(subject, difficulty, count)

        async def local() -> list[Question]:
            await self._simulate_generation()
            return generate_demo_quiz(subject, difficulty, count, self.context.rng)

        return await dual_mode("generate_quiz", self._probe, remote, local)

    async def generate_track_quiz(
        self, track: str, max_per_section: int | None = None
    ) -> Served[list[Question]]:
        """
        Build an exam-layout quiz for a track.

        The backend receives only the track; ``max_per_section`` caps the
        local assembly.
        """
        load_track_template(track)

        async def remote() -> list[Question]:
            return await self.remote.generate_track_quiz(track)

        async def local() -> list[Question]:
            await self._simulate_generation()
            return self.assembler.assemble(track, max_per_section)

        return await dual_mode("generate_track_quiz", self._probe, remote, local)

    # ========================================
    # Results
    # ========================================

    async def submit_test(
        self,
        answers: list[Any],
        score: int,
        total: int,
        time_spent: int,
        subject: str,
        difficulty: str,
    ) -> Served[Optional[TestResult]]:
        """
        Submit a finished quiz.

        ``score`` is the number of correct answers out of ``total``. The
        remote tier only acknowledges; the local tier records a result scored
        as a percentage and returns it.
        """
        payload = {
            "answers": [a.to_dict() if isinstance(a, AnswerRecord) else a for a in answers],
            "score": score,
            "total": total,
            "timeSpent": time_spent,
            "subject": subject,
            "difficulty": difficulty,
        }

        async def remote() -> None:
            await self.remote.submit_test(payload)

        def local() -> TestResult:
            user = self._require_user()
            percentage = score / total * 100 if total else 0.0
            return self.store.record_result(
                TestResult(
                    id=new_id("result"),
                    user_id=user.id,
                    test_id=f"test-{subject}",
                    answers=tuple(answers),
                    score=percentage,
                    time_spent=time_spent,
                    completed_at=utcnow(),
                )
            )

        return await dual_mode("submit_test", self._probe, remote, local)

    async def submit_test_result(
        self, test_id: str, answers: list[Any], score: float, time_spent: int
    ) -> TestResult:
        """Record an attempt at a stored test. ``score`` is already a percentage."""
        user = self._require_user()
        result = self.store.record_result(
            TestResult(
                id=new_id("result"),
                user_id=user.id,
                test_id=test_id,
                answers=tuple(answers),
                score=score,
                time_spent=time_spent,
                completed_at=utcnow(),
            )
        )
        logger.debug(f"Recorded {result.id} for {user.id}: {score}%")
        return result

    async def get_results(self, user_id: str | None = None) -> list[TestResult]:
        target = user_id or (self.current_user.id if self.current_user else None)
        if target is None:
            return []
        return self.store.results_for(target)

    async def get_user_stats(self) -> UserStats:
        user = self._require_user()
        return compute_user_stats(user, self.store.results_for(user.id))

    async def get_analytics(self, user_id: str | None = None) -> dict[str, Any]:
        results = await self.get_results(user_id)
        return compute_analytics(self.current_user, results)

    # ========================================
    # Assistant
    # ========================================

    async def send_message(
        self,
        message: str,
        context: str | None = None,
        language: Language | None = None,
    ) -> Served[str]:
        """Ask the assistant. Out-of-quota and unreachable backends both fall back locally."""
        api_keys = {
            "x-deepseek-api-key": self.settings.deepseek_api_key,
            "x-gemini-api-key": self.settings.gemini_api_key,
        }

        async def remote() -> str:
            return await self.remote.chat(message, context, language, api_keys)

        async def local() -> str:
            return await self.assistant.reply(message, context, language, self.current_user)

        return await dual_mode("send_message", self._probe, remote, local)
