"""
Profile physics section.

Single-answer problem types:
- newton_second_law / energy_unit: concept checks with shuffled options
- uniform_motion: distance from speed and time
- ohms_law: current from voltage and resistance
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
)

SUBJECT = "physics_profile"


def newton_second_law(rng: random.Random) -> Question:
    return shuffled_choice(
        rng,
        "Второй закон Ньютона формулируется как:",
        "F = ma",
        ("F = mv", "F = mg", "F = ma²"),
        "Сила равна произведению массы на ускорение.",
        SUBJECT,
    )


def energy_unit(rng: random.Random) -> Question:
    return shuffled_choice(
        rng,
        "Единица измерения энергии в СИ:",
        "Джоуль",
        ("Ньютон", "Ватт", "Паскаль"),
        "Энергия измеряется в джоулях (Дж).",
        SUBJECT,
    )


def uniform_motion(rng: random.Random) -> Question:
    v = rng.randint(5, 20)
    t = rng.randint(2, 10)
    s = v * t
    distractors = numeric_distractors(
        rng,
        s,
        [s + rng.randint(1, 5), s - rng.randint(1, 5), s + 2, v + t],
        min_gap=1,
        minimum=0,
    )
    return shuffled_choice(
        rng,
        f"Тело движется равномерно со скоростью {v} м/с в течение {t} с. Какой путь пройден (м)?",
        fmt_number(s),
        distractors,
        f"s = v·t = {v}·{t} = {s} м",
        SUBJECT,
    )


def ohms_law(rng: random.Random) -> Question:
    resistance = rng.randint(2, 10)
    current = rng.randint(1, 10)
    voltage = current * resistance
    distractors = numeric_distractors(
        rng,
        current,
        [voltage * resistance, current + 1, current - 1, resistance],
        min_gap=1,
        minimum=0,
    )
    return shuffled_choice(
        rng,
        f"Напряжение на резисторе {voltage} В, сопротивление {resistance} Ом. "
        "Найдите силу тока (А).",
        fmt_number(current),
        distractors,
        f"I = U/R = {voltage}/{resistance} = {current} А",
        SUBJECT,
    )


MULTI_BANK: tuple[MultiSelectItem, ...] = (
    MultiSelectItem(
        "Выберите все верные утверждения",
        (
            "Вакуум проводит электрический ток",
            "Закон Ома: I = U/R",
            "Единица мощности — ватт",
            "Энергия измеряется в ньютонах",
            "Сопротивление измеряется в омах",
            "Мощность измеряется в джоулях",
        ),
        frozenset({1, 2, 4}),
        "Верны закон Ома, ватт как единица мощности и ом как единица сопротивления.",
    ),
    MultiSelectItem(
        "Выберите все векторные величины",
        ("Скорость", "Масса", "Сила", "Температура", "Время", "Ускорение"),
        frozenset({0, 2, 5}),
        "Скорость, сила и ускорение имеют направление; масса, температура и время — скаляры.",
    ),
    MultiSelectItem(
        "Выберите все основные единицы СИ",
        ("Килограмм", "Ньютон", "Метр", "Джоуль", "Ватт", "Секунда"),
        frozenset({0, 2, 5}),
        "Килограмм, метр и секунда — основные единицы; ньютон, джоуль и ватт — производные.",
    ),
    MultiSelectItem(
        "Выберите верные утверждения о свободном падении без сопротивления воздуха",
        (
            "Ускорение не зависит от массы тела",
            "Тяжёлые тела падают быстрее лёгких",
            "Скорость тела постоянна",
            "Ускорение примерно равно 9,8 м/с²",
            "Траектория всегда парабола",
            "Тело находится в состоянии невесомости",
        ),
        frozenset({0, 3, 5}),
        "Все тела падают с ускорением g ≈ 9,8 м/с² независимо от массы и находятся в невесомости.",
    ),
)


@register(SUBJECT)
class PhysicsProfileGenerator(ProfileGenerator):
    problems = (newton_second_law, energy_unit, uniform_motion, ohms_law)
    multi_bank = MULTI_BANK
