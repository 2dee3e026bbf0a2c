"""
Local stand-in for free-form quiz generation (subject, difficulty, count).

Subjects that map onto a registered generator get real procedural items;
anything else gets placeholder questions that only show the shape of the
output.
"""

from __future__ import annotations

import random
from dataclasses import replace

from entprep.core.models import Question

from . import GENERATORS
from .base import make_choice

SUBJECT_ALIASES = {
    "math": "math_profile",
    "mathematics": "math_profile",
    "algebra": "math_profile",
    "physics": "physics_profile",
    "history": "history_kz",
    "literacy": "math_literacy",
}


def resolve_subject(subject: str) -> str | None:
    key = subject.strip().lower()
    key = SUBJECT_ALIASES.get(key, key)
    return key if key in GENERATORS else None


def placeholder_questions(subject: str, difficulty: str, count: int) -> list[Question]:
    templates = (
        make_choice(
            f'Вопрос по теме "{subject}" (сложность: {difficulty})',
            ["Вариант 1", "Вариант 2", "Вариант 3", "Вариант 4"],
            0,
            "Это демонстрационный вопрос.",
            subject,
            difficulty,
        ),
        make_choice(
            f'Ещё один вопрос по "{subject}"',
            ["Ответ A", "Ответ B", "Ответ C", "Ответ D"],
            1,
            "Демо-объяснение для второго вопроса.",
            subject,
            difficulty,
        ),
    )
    return [
        replace(templates[i % len(templates)], id=f"demo-q{i + 1}")
        for i in range(max(0, count))
    ]


def generate_demo_quiz(
    subject: str, difficulty: str, count: int, rng: random.Random
) -> list[Question]:
    key = resolve_subject(subject)
    if key is None:
        return placeholder_questions(subject, difficulty, count)
    return [
        replace(q, difficulty=difficulty)
        for q in GENERATORS[key].generate(count, rng)
    ]
