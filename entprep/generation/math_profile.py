"""
Profile mathematics section.

Single-answer problem types:
- linear_equation: solve m·x + b = rhs
- quadratic_roots: roots of a monic quadratic built from two integer roots
- derivative_concept: definition of the derivative

Items past the single-answer limit come from MULTI_BANK.
"""

from __future__ import annotations

import random

from entprep.core.models import Question

from . import register
from .base import (
    MultiSelectItem,
    ProfileGenerator,
    fmt_number,
    numeric_distractors,
    shuffled_choice,
    unique_distractors,
)

SUBJECT = "math_profile"


def _signed(coefficient: int, suffix: str = "") -> str:
    """Format a trailing term: 3 -> '+ 3x', -3 -> '- 3x', 0 -> ''."""
    if coefficient == 0:
        return ""
    sign = "+" if coefficient > 0 else "-"
    return f" {sign} {abs(coefficient)}{suffix}"


def linear_equation(rng: random.Random) -> Question:
    m = rng.randint(2, 7)
    b = rng.randint(-9, 9)
    rhs = rng.randint(-10, 20)
    x = (rhs - b) / m
    distractors = numeric_distractors(rng, x, [x + 1, x - 1, x + 2], min_gap=1)
    return shuffled_choice(
        rng,
        f"Решите уравнение: {m}x{_signed(b)} = {rhs}",
        fmt_number(x),
        distractors,
        f"x = ({rhs} − ({b})) / {m} = {fmt_number(x)}",
        SUBJECT,
    )


def _roots(r1: int, r2: int) -> str:
    return f"{{{min(r1, r2)}; {max(r1, r2)}}}"


def quadratic_roots(rng: random.Random) -> Question:
    r1 = rng.randint(-5, 5)
    r2 = rng.randint(-5, 5)
    b = -(r1 + r2)
    c = r1 * r2
    correct = _roots(r1, r2)
    lo, hi = min(r1, r2), max(r1, r2)
    distractors = unique_distractors(
        correct,
        [
            _roots(-r1, -r2),  # sign error
            _roots(r1, r1),
            _roots(r2, r2),
            "{0; 0}",
        ],
        lambda attempt: _roots(lo - attempt, hi + attempt),
    )
    return shuffled_choice(
        rng,
        f"Найдите корни уравнения: x²{_signed(b, 'x')}{_signed(c)} = 0",
        correct,
        distractors,
        f"x² + ({b})x + ({c}) = (x − ({r1}))(x − ({r2})), корни {correct}.",
        SUBJECT,
    )


def derivative_concept(rng: random.Random) -> Question:
    return shuffled_choice(
        rng,
        "Производная функции в точке — это:",
        "Предел отношения приращений функции и аргумента",
        (
            "Средняя скорость изменения функции",
            "Интеграл функции",
            "Значение функции в точке",
        ),
        "Определение производной через предел отношения приращений.",
        SUBJECT,
    )


MULTI_BANK: tuple[MultiSelectItem, ...] = (
    MultiSelectItem(
        "Выберите все верные утверждения о функции y = x²",
        (
            "Функция чётная",
            "График — парабола",
            "Функция возрастает на всей числовой оси",
            "Наименьшее значение равно 0",
            "Функция нечётная",
            "Область значений — все действительные числа",
        ),
        frozenset({0, 1, 3}),
        "y = x² чётна, её график — парабола с вершиной в (0; 0), значения y ≥ 0.",
    ),
    MultiSelectItem(
        "Выберите все простые числа",
        ("2", "9", "13", "21", "1", "17"),
        frozenset({0, 2, 5}),
        "Простые: 2, 13, 17. 9 = 3·3, 21 = 3·7, а 1 не является простым.",
    ),
    MultiSelectItem(
        "Выберите все верные равенства",
        (
            "sin²x + cos²x = 1",
            "(a + b)² = a² + b²",
            "log₂8 = 3",
            "2⁰ = 0",
            "√16 = 8",
            "a⁻¹ = 1/a (a ≠ 0)",
        ),
        frozenset({0, 2, 5}),
        "Основное тригонометрическое тождество, log₂8 = 3 и a⁻¹ = 1/a верны; 2⁰ = 1, √16 = 4.",
    ),
    MultiSelectItem(
        "Выберите все иррациональные числа",
        ("√2", "0.5", "π", "4/3", "√9", "−7"),
        frozenset({0, 2}),
        "√2 и π иррациональны; √9 = 3, остальные числа рациональные.",
    ),
)


@register(SUBJECT)
class MathProfileGenerator(ProfileGenerator):
    problems = (linear_equation, quadratic_roots, derivative_concept)
    multi_bank = MULTI_BANK
