"""
In-memory entity store.

Authoritative when the backend is unreachable. Holds users, tests, results
and the per-subject custom question banks for the lifetime of the process;
nothing is written to disk. No locking: the engine runs on a single event
loop and never interleaves two mutations.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from typing import Iterable

from loguru import logger

from entprep.core.models import (
    Difficulty,
    Question,
    QuestionType,
    Test,
    TestResult,
    User,
    round_half_up,
    utcnow,
)
from entprep.stats import compute_streak, running_average


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def _mc(qid: str, prompt: str, options: list[str], correct: int, explanation: str) -> Question:
    return Question(
        id=qid,
        question=prompt,
        type=QuestionType.MULTIPLE_CHOICE,
        options=options,
        correct_answer=correct,
        explanation=explanation,
    )


SAMPLE_TESTS: tuple[Test, ...] = (
    Test(
        id="test-1",
        title="Математика - Алгебра",
        subject="mathematics",
        difficulty=Difficulty.MEDIUM,
        time_limit=1800,
        questions=(
            _mc("q1", "Решите уравнение: 2x + 5 = 13", ["x = 4", "x = 3", "x = 5", "x = 6"], 0,
                "2x + 5 = 13, значит 2x = 8, откуда x = 4"),
            _mc("q2", "Найдите значение выражения: (3 + 2) × 4", ["20", "18", "14", "16"], 0,
                "Сначала вычисляем в скобках: 3 + 2 = 5, затем 5 × 4 = 20"),
            _mc("q3", "Что больше: 0.5 или 1/3?", ["0.5", "1/3", "Равны", "Невозможно определить"], 0,
                "0.5 = 1/2 = 3/6, а 1/3 = 2/6. Значит 0.5 > 1/3"),
        ),
    ),
    Test(
        id="test-2",
        title="История России - 19 век",
        subject="history",
        difficulty=Difficulty.EASY,
        time_limit=1200,
        questions=(
            _mc("q1", "В каком году было отменено крепостное право в России?",
                ["1861", "1860", "1862", "1859"], 0,
                "Крепостное право было отменено Александром II в 1861 году"),
            _mc("q2", "Кто был императором России в начале 19 века?",
                ["Александр I", "Николай I", "Александр II", "Павел I"], 0,
                "Александр I правил с 1801 по 1825 год"),
        ),
    ),
    Test(
        id="test-3",
        title="Физика - Механика",
        subject="physics",
        difficulty=Difficulty.HARD,
        time_limit=2400,
        questions=(
            _mc("q1", "Второй закон Ньютона формулируется как:", ["F = ma", "F = mv", "F = mg", "F = ma²"], 0,
                "Второй закон Ньютона: сила равна произведению массы на ускорение"),
            _mc("q2", "Единица измерения силы в СИ:", ["Ньютон", "Джоуль", "Ватт", "Паскаль"], 0,
                "Сила измеряется в ньютонах (Н) в системе СИ"),
        ),
    ),
)


class EntityStore:
    """
    Process-lifetime storage for users, tests, results and custom banks.

    Custom banks are append-only and keep insertion order, so a quiz section
    filled from a bank is deterministic.
    """

    def __init__(self, seed_samples: bool = True):
        self._users: dict[str, User] = {}
        self._tests: dict[str, Test] = {}
        self._results: dict[str, TestResult] = {}
        self._banks: dict[str, list[Question]] = {}

        if seed_samples:
            for test in SAMPLE_TESTS:
                self._tests[test.id] = test

    # =========================================================================
    # Users
    # =========================================================================

    def add_user(self, user: User) -> User:
        self._users[user.id] = user
        return user

    def get_user(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    # =========================================================================
    # Tests & questions
    # =========================================================================

    def list_tests(self) -> list[Test]:
        return list(self._tests.values())

    def get_test(self, test_id: str) -> Test | None:
        return self._tests.get(test_id)

    def create_test(
        self,
        title: str,
        subject: str,
        difficulty: Difficulty | str,
        questions: Iterable[Question],
        time_limit: int | None = None,
        created_by: str | None = None,
    ) -> Test:
        test = Test(
            id=new_id("test"),
            title=title,
            subject=subject,
            difficulty=Difficulty(difficulty),
            questions=tuple(questions),
            time_limit=time_limit,
            created_by=created_by,
            created_at=utcnow(),
        )
        self._tests[test.id] = test
        logger.debug(f"Created test {test.id} with {len(test.questions)} questions")
        return test

    def all_questions(self) -> list[Question]:
        """
        Every stored question, test questions first, then custom banks.

        Test questions inherit the test's subject and difficulty; bank
        questions carry their bank key as subject.
        """
        questions: list[Question] = []
        for test in self._tests.values():
            for question in test.questions:
                questions.append(
                    replace(question, subject=test.subject, difficulty=test.difficulty.value)
                )
        for subject_key, bank in self._banks.items():
            questions.extend(replace(q, subject=subject_key) for q in bank)
        return questions

    # =========================================================================
    # Custom question banks
    # =========================================================================

    def append_to_bank(self, subject_key: str, questions: Iterable[Question]) -> int:
        """Append to a subject bank. Returns the bank's new size."""
        bank = self._banks.setdefault(subject_key, [])
        bank.extend(replace(q, subject=subject_key) for q in questions)
        return len(bank)

    def bank(self, subject_key: str) -> tuple[Question, ...]:
        return tuple(self._banks.get(subject_key, ()))

    # =========================================================================
    # Results
    # =========================================================================

    def results_for(self, user_id: str) -> list[TestResult]:
        return [r for r in self._results.values() if r.user_id == user_id]

    def record_result(self, result: TestResult) -> TestResult:
        """
        Store a result and fold it into its owner's counters.

        The running average stays unrounded so that reporting it rounded
        always equals rounding the mean of every score so far.
        """
        self._results[result.id] = result

        user = self._users.get(result.user_id)
        if user is None:
            logger.warning(f"Result {result.id} recorded for unknown user {result.user_id}")
            return result

        user.tests_completed += 1
        user.average_score = running_average(
            user.average_score, user.tests_completed, result.score
        )
        user.total_study_time += round_half_up(result.time_spent / 60)
        user.study_streak = compute_streak(self.results_for(user.id))
        return result
