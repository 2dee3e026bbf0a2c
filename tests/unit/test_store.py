"""
Unit tests for the in-memory entity store.
"""

from datetime import datetime, timedelta, timezone

import pytest

from entprep.core.models import Difficulty, TestResult, User
from entprep.core.store import SAMPLE_TESTS, EntityStore


@pytest.fixture
def store():
    return EntityStore()


@pytest.fixture
def learner(store):
    return store.add_user(User(id="u1", email="Aru@Example.kz", name="aru"))


def result(score, time_spent=600, minutes_ago=0, result_id=None):
    return TestResult(
        id=result_id or f"r-{score}-{minutes_ago}",
        user_id="u1",
        test_id="test-math",
        answers=(),
        score=score,
        time_spent=time_spent,
        completed_at=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
    )


class TestSeeding:
    """Sample tests are present unless disabled."""

    def test_seeded(self, store):
        assert [t.id for t in store.list_tests()] == ["test-1", "test-2", "test-3"]

    def test_unseeded(self):
        assert EntityStore(seed_samples=False).list_tests() == []


class TestUsers:
    """User lookups."""

    def test_get_user(self, store, learner):
        assert store.get_user("u1") is learner
        assert store.get_user("u2") is None


class TestTests:
    """Test authoring and question listing."""

    def test_create_test(self, store, sample_question):
        test = store.create_test("Мой тест", "math", "easy", [sample_question], time_limit=300)

        assert test.id.startswith("test-")
        assert test.difficulty is Difficulty.EASY
        assert test.created_at is not None
        assert store.get_test(test.id) is test

    def test_all_questions_inherit_test_subject(self, store):
        questions = store.all_questions()

        assert len(questions) == sum(len(t.questions) for t in SAMPLE_TESTS)
        assert questions[0].subject == "mathematics"
        assert questions[0].difficulty == "medium"

    def test_bank_questions_carry_bank_key(self, store, sample_question):
        store.append_to_bank("history_kz", [sample_question])
        assert store.all_questions()[-1].subject == "history_kz"


class TestBanks:
    """Custom banks are append-only and ordered."""

    def test_append_returns_new_size(self, store, sample_question):
        assert store.append_to_bank("math_profile", [sample_question]) == 1
        assert store.append_to_bank("math_profile", [sample_question, sample_question]) == 3

    def test_order_preserved_and_subject_stamped(self, store, sample_question):
        from dataclasses import replace

        first = replace(sample_question, id="a")
        second = replace(sample_question, id="b")
        store.append_to_bank("physics_profile", [first, second])

        bank = store.bank("physics_profile")
        assert [q.id for q in bank] == ["a", "b"]
        assert all(q.subject == "physics_profile" for q in bank)

    def test_missing_bank_is_empty(self, store):
        assert store.bank("math_literacy") == ()


class TestRecordResult:
    """Result ingestion updates the owner's counters."""

    def test_first_result(self, store, learner):
        store.record_result(result(72, time_spent=150))

        assert learner.tests_completed == 1
        assert learner.average_score == 72
        assert learner.total_study_time == 3  # 2.5 min rounds up
        assert learner.study_streak == 1

    def test_average_tracks_mean(self, store, learner):
        for i, score in enumerate([85, 86, 85, 86]):
            store.record_result(result(score, minutes_ago=10 - i))

        assert learner.to_dict()["average_score"] == 86  # mean 85.5

    def test_streak_refreshed_from_history(self, store, learner):
        store.record_result(result(90, minutes_ago=30))
        store.record_result(result(40, minutes_ago=20))
        store.record_result(result(95, minutes_ago=10))

        assert learner.study_streak == 1

    def test_results_for_user(self, store, learner):
        store.record_result(result(50))
        assert len(store.results_for("u1")) == 1
        assert store.results_for("someone-else") == []

    def test_unknown_user_still_stored(self, store):
        stored = store.record_result(result(50, result_id="orphan"))
        assert stored.id == "orphan"
        assert len(store.results_for("u1")) == 1
