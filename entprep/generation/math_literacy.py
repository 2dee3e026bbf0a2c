"""
Mathematical literacy section: everyday arithmetic word problems.

Problem types:
- percent_discount: new price after a percentage discount
- ratio_split: size of one group given a ratio and a total
"""

from __future__ import annotations

import math
import random

from entprep.core.models import Question, round_half_up

from . import register
from .base import ProblemGenerator, fmt_number, numeric_distractors, shuffled_choice

SUBJECT = "math_literacy"
DISCOUNTS = (5, 10, 15, 20)


def percent_discount(rng: random.Random) -> Question:
    price = rng.randint(2000, 10000)
    discount = rng.choice(DISCOUNTS)
    correct = round_half_up(price * (1 - discount / 100))
    distractors = numeric_distractors(
        rng,
        correct,
        [
            correct + rng.randint(50, 250),
            correct - rng.randint(50, 250),
            round_half_up(price * discount / 100),  # the discount itself
        ],
        min_gap=10,
        minimum=0,
    )
    return shuffled_choice(
        rng,
        f"Товар стоит {price} тг. Скидка {discount}%. Какова новая цена?",
        fmt_number(correct),
        distractors,
        f"Новая цена = {price} × (1 − {discount}/100) = {correct} тг",
        SUBJECT,
    )


def ratio_split(rng: random.Random) -> Question:
    a = rng.randint(2, 9)
    b = rng.randint(2, 9)
    parts = a + b
    # Total is a multiple of a + b so the answer is a whole number of pupils
    k = rng.randint(max(1, math.ceil(20 / parts)), max(1, 60 // parts, math.ceil(20 / parts)))
    total = parts * k
    correct = a * k
    distractors = numeric_distractors(
        rng,
        correct,
        [correct + 1, correct - 1, correct + 2, b * k],
        min_gap=1,
        minimum=0,
    )
    return shuffled_choice(
        rng,
        f"В классе соотношение мальчиков и девочек {a}:{b}. Всего {total} учеников. "
        "Сколько мальчиков?",
        fmt_number(correct),
        distractors,
        f"Мальчиков = {a}/({a}+{b}) · {total} = {correct}.",
        SUBJECT,
    )


@register(SUBJECT)
class MathLiteracyGenerator(ProblemGenerator):
    problems = (percent_discount, ratio_split)
