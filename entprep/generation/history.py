"""
History of Kazakhstan section.

Not parametric: a fixed bank of authored items, cycled in order. Option
order is reshuffled for every emitted copy.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from entprep.core.models import Question

from . import register
from .base import QuestionGenerator, shuffled_choice


@dataclass(frozen=True)
class AuthoredItem:
    prompt: str
    correct: str
    distractors: tuple[str, str, str]
    explanation: str


HISTORY_BANK: tuple[AuthoredItem, ...] = (
    AuthoredItem(
        "Когда была принята первая Конституция Республики Казахстан?",
        "1993",
        ("1991", "1995", "1998"),
        "Первая Конституция независимого Казахстана была принята в 1993 году.",
    ),
    AuthoredItem(
        "Столицей Казахстана с 1997 года является:",
        "Астана (Нур-Султан)",
        ("Алматы", "Шымкент", "Караганда"),
        "Столица была перенесена из Алматы в Акмолу (ныне Астана) в 1997 году.",
    ),
    AuthoredItem(
        "Кто является автором слов гимна Республики Казахстан (2006)?",
        "Н. Назарбаев и Ж. Нажмеденов",
        ("А. Байтұрсынұлы", "М. Әуезов", "А. Кунаев"),
        "Слова современного гимна написали Н. Назарбаев и Ж. Нажмеденов.",
    ),
    AuthoredItem(
        "Когда была провозглашена государственная независимость Казахстана?",
        "16 декабря 1991",
        ("25 октября 1990", "30 августа 1995", "1 декабря 1991"),
        "Закон о государственной независимости принят 16 декабря 1991 года.",
    ),
    AuthoredItem(
        "Основателями Казахского ханства считаются:",
        "Керей и Жанибек",
        ("Абылай и Кенесары", "Тауке и Есим", "Касым и Хакназар"),
        "Казахское ханство основали султаны Керей и Жанибек в 1465 году.",
    ),
)


@register("history_kz")
class HistoryGenerator(QuestionGenerator):
    """Cycles through the authored bank; the i-th item is bank[i % len(bank)]."""

    bank = HISTORY_BANK

    def generate(self, count: int, rng: random.Random) -> list[Question]:
        questions = []
        for i in range(max(0, count)):
            item = self.bank[i % len(self.bank)]
            questions.append(
                shuffled_choice(
                    rng,
                    item.prompt,
                    item.correct,
                    item.distractors,
                    item.explanation,
                    self.subject_key,
                )
            )
        return questions
