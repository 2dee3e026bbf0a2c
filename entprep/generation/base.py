"""
Base types and helpers for procedural question generators.

A generator turns random parameters into checkable questions: the correct
answer is computed from the same numbers printed in the prompt, options are
unique within the item, and the correct index is looked up after shuffling.
"""

from __future__ import annotations

import random
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Iterable

from entprep.core.models import Question, QuestionType

DEFAULT_DIFFICULTY = "medium"
OPTION_COUNT = 4


def new_question_id() -> str:
    return f"ent-{uuid.uuid4().hex[:12]}"


def fmt_number(value: float) -> str:
    """12.0 -> '12', 2.5 -> '2.5', 1/3 -> '0.33'."""
    rounded = round(value, 2)
    if float(rounded).is_integer():
        return str(int(rounded))
    return f"{rounded:.2f}".rstrip("0").rstrip(".")


def make_choice(
    prompt: str,
    options: list[str],
    correct_index: int,
    explanation: str,
    subject: str,
    difficulty: str = DEFAULT_DIFFICULTY,
) -> Question:
    return Question(
        id=new_question_id(),
        question=prompt,
        type=QuestionType.MULTIPLE_CHOICE,
        options=options,
        correct_answer=correct_index,
        explanation=explanation,
        subject=subject,
        difficulty=difficulty,
    )


def shuffled_choice(
    rng: random.Random,
    prompt: str,
    correct: str,
    distractors: Iterable[str],
    explanation: str,
    subject: str,
    difficulty: str = DEFAULT_DIFFICULTY,
) -> Question:
    """Shuffle the correct option in among the distractors and record where it landed."""
    options = [correct, *distractors]
    if len(set(options)) != len(options):
        raise ValueError(f"duplicate options in generated item: {options}")
    rng.shuffle(options)
    return make_choice(prompt, options, options.index(correct), explanation, subject, difficulty)


def unique_distractors(
    correct: str,
    candidates: Iterable[str],
    fallback: Callable[[int], str],
    count: int = OPTION_COUNT - 1,
) -> list[str]:
    """
    Pick ``count`` distinct distractors that differ from ``correct``.

    Candidates are taken in order; once they run out, ``fallback(attempt)``
    is called with an increasing attempt number until enough unique values
    exist.
    """
    chosen: list[str] = []
    seen = {correct}
    for candidate in candidates:
        if candidate not in seen:
            chosen.append(candidate)
            seen.add(candidate)
        if len(chosen) == count:
            return chosen

    attempt = 1
    while len(chosen) < count:
        candidate = fallback(attempt)
        attempt += 1
        if candidate not in seen:
            chosen.append(candidate)
            seen.add(candidate)
    return chosen


def numeric_distractors(
    rng: random.Random,
    correct: float,
    candidates: Iterable[float],
    min_gap: float = 1,
    minimum: float | None = None,
    count: int = OPTION_COUNT - 1,
) -> list[str]:
    """
    Numeric distractors at least ``min_gap`` away from ``correct``.

    Candidates closer than the gap, below ``minimum``, or formatting to an
    already used string are dropped; the rest are topped up with
    perturbations of growing size on alternating sides.
    """
    correct_text = fmt_number(correct)

    def acceptable(value: float) -> bool:
        if abs(value - correct) < min_gap:
            return False
        return minimum is None or value >= minimum

    def perturb(attempt: int) -> str:
        step = min_gap * ((attempt + 1) // 2 + rng.randint(0, 2))
        value = correct + step if attempt % 2 else correct - step
        if not acceptable(value):
            value = correct + step
        return fmt_number(value)

    return unique_distractors(
        correct_text,
        (fmt_number(c) for c in candidates if acceptable(c)),
        perturb,
        count=count,
    )


# =============================================================================
# Multi-select items
# =============================================================================


@dataclass(frozen=True)
class MultiSelectItem:
    """A pre-authored multi-select item: six statements, two or three true."""

    prompt: str
    options: tuple[str, ...]
    correct: frozenset[int]
    explanation: str

    def to_question(
        self, rng: random.Random, subject: str, difficulty: str = "hard"
    ) -> Question:
        order = list(range(len(self.options)))
        rng.shuffle(order)
        return Question(
            id=new_question_id(),
            question=self.prompt,
            type=QuestionType.MULTI_SELECT,
            options=[self.options[i] for i in order],
            correct_answer=sorted(order.index(i) for i in self.correct),
            explanation=self.explanation,
            subject=subject,
            difficulty=difficulty,
        )


# =============================================================================
# Generator base classes
# =============================================================================

Problem = Callable[[random.Random], Question]


class QuestionGenerator(ABC):
    """Produces exactly ``count`` questions for one subject key."""

    subject_key: str

    @abstractmethod
    def generate(self, count: int, rng: random.Random) -> list[Question]:
        ...


class ProblemGenerator(QuestionGenerator):
    """
    Draws each item from a random problem type.

    Problem types repeat with fresh parameters, so any count is satisfiable.
    """

    problems: tuple[Problem, ...] = ()

    def generate(self, count: int, rng: random.Random) -> list[Question]:
        return [rng.choice(self.problems)(rng) for _ in range(max(0, count))]


class ProfileGenerator(ProblemGenerator):
    """
    Profile-subject layout: single-answer items first, multi-select after.

    The first ``single_limit`` items are single-answer; anything beyond comes
    from the multi-select bank.
    """

    single_limit = 30
    multi_bank: tuple[MultiSelectItem, ...] = ()

    def generate(self, count: int, rng: random.Random) -> list[Question]:
        singles = min(self.single_limit, max(0, count))
        multis = max(0, count - singles)
        questions = super().generate(singles, rng)
        questions.extend(
            rng.choice(self.multi_bank).to_question(rng, self.subject_key)
            for _ in range(multis)
        )
        return questions
