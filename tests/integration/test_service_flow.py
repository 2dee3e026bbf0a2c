"""
Integration tests for ContentService.

Offline flows run against a backend that refuses every connection, so every
dual-mode operation must be served locally. Online flows use an httpx
MockTransport standing in for the backend.

Run: pytest tests/integration/test_service_flow.py -v
"""

import json

import httpx
import pytest
import pytest_asyncio

from entprep.core.errors import (
    InvalidIdentityError,
    NotAuthenticatedError,
    UnknownSubjectKeyError,
    UnknownTrackError,
)
from entprep.core.models import AnswerRecord, QuestionType
from entprep.core.protocol import Tier
from entprep.core.session_store import TokenStore
from entprep.service import DEMO_USER_ID, ContentService


# =============================================================================
# Offline
# =============================================================================


class TestOfflineAuth:
    """Local login, register and logout."""

    @pytest.mark.asyncio
    async def test_demo_login(self, offline_service):
        served = await offline_service.login("demo@example.com", "password123")

        assert served.served_by is Tier.LOCAL
        assert served.demo is True
        assert served.data.id == DEMO_USER_ID
        assert served.data.tests_completed == 3
        assert served.data.to_dict()["average_score"] == 85
        assert served.data.study_streak == 5
        assert served.data.total_study_time == 180
        assert offline_service.current_user is served.data

    @pytest.mark.asyncio
    async def test_any_plausible_email_gets_a_fresh_learner(self, offline_service):
        first = await offline_service.login("aru@example.kz", "whatever")
        await offline_service.logout()
        again = await offline_service.login("aru@example.kz", "whatever")

        assert first.data.name == "aru"
        assert again.data.id != first.data.id
        assert again.data.tests_completed == 0

    @pytest.mark.asyncio
    async def test_demo_email_with_wrong_password_is_not_demo(self, offline_service):
        await offline_service.login("demo@example.com", "password123")
        await offline_service.logout()

        served = await offline_service.login("demo@example.com", "WRONG")

        assert served.data.id != DEMO_USER_ID
        assert served.data.tests_completed == 0
        assert served.data.average_score == 0

    @pytest.mark.asyncio
    async def test_demo_learner_is_resumed(self, offline_service):
        first = await offline_service.login("demo@example.com", "password123")
        await offline_service.logout()
        again = await offline_service.login("demo@example.com", "password123")

        assert again.data is first.data

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email", ["not-an-email", "@example.kz", "aru@", "a@b@c"])
    async def test_implausible_email(self, offline_service, email):
        with pytest.raises(InvalidIdentityError):
            await offline_service.login(email, "x")

    @pytest.mark.asyncio
    async def test_register(self, offline_service):
        served = await offline_service.register("teacher@example.kz", "pw", "Гульнара", "teacher")

        assert served.data.role.value == "teacher"
        assert offline_service.current_user is served.data

    @pytest.mark.asyncio
    async def test_register_unknown_role(self, offline_service):
        with pytest.raises(InvalidIdentityError):
            await offline_service.register("x@example.kz", "pw", "X", "admin")

    @pytest.mark.asyncio
    async def test_logout_always_succeeds(self, offline_service):
        await offline_service.login("demo@example.com", "password123")

        served = await offline_service.logout()

        assert served.served_by is Tier.LOCAL
        assert offline_service.current_user is None


class TestOfflineContent:
    """Local tests, questions and generated quizzes."""

    @pytest.mark.asyncio
    async def test_get_tests(self, offline_service):
        served = await offline_service.get_tests()

        assert served.demo is True
        assert len(served.data) == 3

    @pytest.mark.asyncio
    async def test_get_questions_include_custom_bank(self, offline_service, sample_question):
        size = await offline_service.import_track_questions("history_kz", [sample_question])
        served = await offline_service.get_questions()

        assert size == 1
        assert served.data[-1].subject == "history_kz"

    @pytest.mark.asyncio
    async def test_import_unknown_key(self, offline_service, sample_question):
        with pytest.raises(UnknownSubjectKeyError):
            await offline_service.import_track_questions("chemistry", [sample_question])

    @pytest.mark.asyncio
    async def test_track_quiz_capped(self, offline_service):
        served = await offline_service.generate_track_quiz("math", max_per_section=2)

        assert served.demo is True
        assert [q.subject for q in served.data] == [
            "history_kz", "history_kz",
            "math_literacy", "math_literacy",
            "math_profile", "math_profile",
        ]

    @pytest.mark.asyncio
    async def test_track_quiz_uses_imported_bank(self, offline_service, sample_question):
        await offline_service.import_track_questions("math_literacy", [sample_question] * 3)

        served = await offline_service.generate_track_quiz("physics", max_per_section=2)

        assert [q.id for q in served.data[2:4]] == [sample_question.id] * 2

    @pytest.mark.asyncio
    async def test_full_physics_track(self, offline_service):
        served = await offline_service.generate_track_quiz("physics")

        assert len(served.data) == 70
        assert sum(q.type is QuestionType.MULTI_SELECT for q in served.data) == 10

    @pytest.mark.asyncio
    async def test_unknown_track(self, offline_service):
        with pytest.raises(UnknownTrackError):
            await offline_service.generate_track_quiz("chemistry")

    @pytest.mark.asyncio
    async def test_free_form_quiz(self, offline_service):
        served = await offline_service.generate_quiz("mathematics", "easy", 3)

        assert served.demo is True
        assert len(served.data) == 3
        assert all(q.subject == "math_profile" for q in served.data)

    @pytest.mark.asyncio
    async def test_create_and_get_test(self, offline_service, sample_question):
        await offline_service.login("aru@example.kz", "pw")

        test = await offline_service.create_test("Мой тест", "math", "hard", [sample_question])

        assert test.created_by == offline_service.current_user.id
        assert await offline_service.get_test(test.id) is test
        assert await offline_service.get_test("missing") is None


class TestOfflineResults:
    """Submissions, stats and analytics."""

    @pytest.mark.asyncio
    async def test_submit_requires_session(self, offline_service):
        with pytest.raises(NotAuthenticatedError):
            await offline_service.submit_test([], 5, 10, 300, "math", "medium")

        with pytest.raises(NotAuthenticatedError):
            await offline_service.submit_test_result("test-1", [], 80, 300)

        with pytest.raises(NotAuthenticatedError):
            await offline_service.get_user_stats()

    @pytest.mark.asyncio
    async def test_submit_test_scores_as_percentage(self, offline_service):
        await offline_service.login("aru@example.kz", "pw")
        answers = [{"questionId": "q1", "answer": 0, "correct": True}]

        served = await offline_service.submit_test(answers, 7, 10, 90, "physics", "medium")

        result = served.data
        assert served.served_by is Tier.LOCAL
        assert result.score == pytest.approx(70)
        assert result.test_id == "test-physics"
        assert result.answers == (AnswerRecord(True, "q1", 0),)

        user = offline_service.current_user
        assert user.tests_completed == 1
        assert user.total_study_time == 2  # 1.5 min rounds up

    @pytest.mark.asyncio
    async def test_stats_after_several_results(self, offline_service):
        await offline_service.login("aru@example.kz", "pw")
        for score in (95, 40, 90):
            await offline_service.submit_test_result("test-math", [], score, 1300)

        stats = await offline_service.get_user_stats()

        assert stats.tests_completed == 3
        assert stats.average_score == 75
        assert stats.rank == "Intermediate"
        assert stats.study_time == 3900
        assert "Hour of Study" in stats.achievements
        assert offline_service.current_user.to_dict()["average_score"] == 75

    @pytest.mark.asyncio
    async def test_results_and_analytics(self, offline_service):
        assert await offline_service.get_results() == []

        await offline_service.login("aru@example.kz", "pw")
        await offline_service.submit_test_result("test-1", [], 80, 600)

        results = await offline_service.get_results()
        analytics = await offline_service.get_analytics()

        assert len(results) == 1
        assert analytics["totalTests"] == 1
        assert analytics["averageScore"] == 80
        assert len(analytics["progressTrend"]) == 1
        assert analytics["totalStudyTime"] == 10

    @pytest.mark.asyncio
    async def test_demo_learner_average_continues_from_counters(self, offline_service):
        await offline_service.login("demo@example.com", "password123")

        await offline_service.submit_test_result("test-1", [], 65, 60)

        user = offline_service.current_user
        assert user.tests_completed == 4
        assert user.to_dict()["average_score"] == 80  # (85 * 3 + 65) / 4


class TestOfflineAssistant:
    """Assistant fallback."""

    @pytest.mark.asyncio
    async def test_send_message(self, offline_service):
        served = await offline_service.send_message("Как подготовиться по истории?")

        assert served.demo is True
        assert served.data

    @pytest.mark.asyncio
    async def test_personalized_reply(self, offline_service):
        await offline_service.login("demo@example.com", "password123")

        served = await offline_service.send_message("Привет", context="dashboard", language="ru")

        assert served.data.startswith("Demo User, судя по вашему прогрессу (3 тестов, средний балл 85%)")


# =============================================================================
# Online
# =============================================================================


class FakeBackend:
    """Minimal backend: records requests and answers from a route table."""

    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404)
        status, payload = route
        return httpx.Response(status, json=payload)


@pytest.fixture
def backend_user():
    return {"id": "srv-1", "email": "aru@example.kz", "name": "Aru", "role": "student"}


@pytest.fixture
def backend(backend_user, sample_question_dict):
    return FakeBackend(
        {
            ("GET", "/api/health"): (200, {"status": "ok"}),
            ("POST", "/api/auth/login"): (200, {"user": backend_user, "token": "srv-token"}),
            ("POST", "/api/auth/logout"): (200, {"ok": True}),
            ("GET", "/api/tests"): (200, []),
            ("POST", "/api/ai/generate-ent-quiz"): (200, {"questions": [sample_question_dict]}),
            ("POST", "/api/tests/submit"): (200, {"ok": True}),
            ("POST", "/api/ai/chat"): (402, {"detail": "quota"}),
        }
    )


@pytest_asyncio.fixture
async def online_service(settings, rng, backend):
    service = ContentService.from_settings(settings, rng=rng, transport=httpx.MockTransport(backend))
    yield service
    await service.close()


class TestOnline:
    """Remote tier serves when the backend is up."""

    @pytest.mark.asyncio
    async def test_login_persists_token(self, online_service, settings, backend):
        served = await online_service.login("aru@example.kz", "pw")

        assert served.served_by is Tier.REMOTE
        assert served.demo is False
        assert served.data.id == "srv-1"
        assert TokenStore(settings.session_file).load() == "srv-token"

        await online_service.get_tests()
        assert backend.requests[-1].headers["Authorization"] == "Bearer srv-token"

    @pytest.mark.asyncio
    async def test_token_restored_on_start(self, settings, rng, backend):
        TokenStore(settings.session_file).save("saved-token")

        async with ContentService.from_settings(
            settings, rng=rng, transport=httpx.MockTransport(backend)
        ) as service:
            assert service.context.session.token == "saved-token"
            await service.get_tests()

        assert backend.requests[-1].headers["Authorization"] == "Bearer saved-token"

    @pytest.mark.asyncio
    async def test_logout_clears_persisted_token(self, online_service, settings):
        await online_service.login("aru@example.kz", "pw")

        served = await online_service.logout()

        assert served.served_by is Tier.REMOTE
        assert online_service.current_user is None
        assert TokenStore(settings.session_file).load() is None

    @pytest.mark.asyncio
    async def test_track_quiz_from_backend(self, online_service, backend):
        served = await online_service.generate_track_quiz("math", max_per_section=2)

        assert served.served_by is Tier.REMOTE
        assert len(served.data) == 1
        assert json.loads(backend.requests[-1].content) == {"track": "math"}

    @pytest.mark.asyncio
    async def test_submit_acknowledged(self, online_service, backend):
        served = await online_service.submit_test([], 8, 10, 120, "math", "hard")

        assert served.served_by is Tier.REMOTE
        assert served.data is None
        body = json.loads(backend.requests[-1].content)
        assert body["timeSpent"] == 120
        assert body["total"] == 10

    @pytest.mark.asyncio
    async def test_submit_answer_records(self, online_service, backend):
        answers = [AnswerRecord(correct=True, question_id="q1", given=0)]

        served = await online_service.submit_test(answers, 1, 1, 30, "math", "easy")

        assert served.served_by is Tier.REMOTE
        body = json.loads(backend.requests[-1].content)
        assert body["answers"] == [{"questionId": "q1", "answer": 0, "correct": True}]

    @pytest.mark.asyncio
    async def test_login_survives_unwritable_session_file(self, online_service, monkeypatch):
        def fail(token):
            raise PermissionError("read-only data dir")

        monkeypatch.setattr(online_service.context.token_store, "save", fail)

        served = await online_service.login("aru@example.kz", "pw")

        assert served.served_by is Tier.REMOTE
        assert online_service.context.session.token == "srv-token"

    @pytest.mark.asyncio
    async def test_register_drops_earlier_token(self, online_service, backend, backend_user, settings):
        backend.routes[("POST", "/api/auth/register")] = (201, {"user": backend_user})
        await online_service.login("aru@example.kz", "pw")

        served = await online_service.register("new@example.kz", "pw", "New", "student")

        assert served.served_by is Tier.REMOTE
        assert online_service.context.session.token is None
        assert online_service.remote.token is None
        assert TokenStore(settings.session_file).load() is None

    @pytest.mark.asyncio
    async def test_chat_quota_falls_back(self, online_service):
        served = await online_service.send_message("Что такое физика?", language="ru")

        assert served.served_by is Tier.LOCAL
        assert "payment required" in served.failure
        assert served.data.startswith("Физика")

    @pytest.mark.asyncio
    async def test_missing_endpoint_falls_back(self, online_service):
        """A 404 from the backend is a remote failure like any other."""
        served = await online_service.generate_quiz("physics", "easy", 2)

        assert served.served_by is Tier.LOCAL
        assert "404" in served.failure
        assert len(served.data) == 2
