"""
Local assistant replies.

Used when the chat endpoint is unreachable or out of quota. Replies come
from a small keyword-driven pool in Russian or Kazakh:

1. An ``ANALYZE_TEST_RESULTS:`` context carrying JSON yields a structured
   analysis of one attempt.
2. Subject keywords (math, physics, history) and help requests get a fixed
   topical reply.
3. With a context and a signed-in learner, the reply opens with their
   progress counters.
4. Anything else draws from the generic pool.
"""

from __future__ import annotations

import asyncio
import json
import random
import re
from typing import Any, Literal, Optional

from loguru import logger

from entprep.core.models import User, round_half_up

Language = Literal["ru", "kz"]

ANALYSIS_PREFIX = "ANALYZE_TEST_RESULTS:"

_KZ_CHARS = re.compile(r"[әғқңөұүһі]", re.IGNORECASE)
# Whole words only: "ия" would otherwise match inside "история".
_KZ_WORDS = re.compile(r"\b(сәлем|қалай|ия|жоқ|үй|тапсырма|талдау)\b", re.IGNORECASE)

GENERIC_REPLIES: dict[str, tuple[str, ...]] = {
    "ru": (
        "Отличный вопрос! Для лучшего понимания этой темы рекомендую разбить её на части и изучать постепенно.",
        "Я вижу, что вы изучаете сложную тему. Давайте разберём её по шагам. Что именно вызывает затруднения?",
        "Это интересная область! Попробуйте найти практические примеры, они помогут лучше усвоить материал.",
        "Хороший подход к обучению! Не забывайте делать перерывы и повторять изученное через определённые интервалы.",
        "Для закрепления материала рекомендую пройти дополнительные тесты по этой теме.",
        "Помните: постоянная практика является ключом к успеху. Попробуйте решать задачи каждый день.",
        "Если у вас есть вопросы по конкретной теме, я готов помочь с объяснениями.",
        "Отличная работа! Продолжайте в том же духе. Какую тему изучаем дальше?",
    ),
    "kz": (
        "Тамаша сұрақ! Тақырыпты бөліктерге бөліп, біртіндеп оқуды ұсынамын.",
        "Күрделі тақырыпты оқып жатырсыз екен. Қадамдап талдайық. Нақты қай жерде қиындық бар?",
        "Өте қызық тақырып! Тәжірибелік мысалдармен байланыстыру материалды жақсы меңгеруге көмектеседі.",
        "Оқу тәсіліңіз жақсы! Үзіліс жасап, қайталауды ұмытпаңыз.",
        "Материалды бекіту үшін осы тақырып бойынша қосымша тесттерді орындаңыз.",
        "Үздіксіз тәжірибе табыстың кілті. Күн сайын тапсырмалар шешуге тырысыңыз.",
        "Егер нақты тақырып бойынша сұрақтар болса, түсіндіруге дайынмын.",
        "Жұмысыңыз жақсы! Сол қалпында жалғастыра беріңіз. Келесі тақырып қандай?",
    ),
}

# (keywords, {language: reply}); first match wins
TOPIC_REPLIES: tuple[tuple[tuple[str, ...], dict[str, str]], ...] = (
    (
        ("математика", "алгебра"),
        {
            "ru": "Математика требует постоянной практики. Рекомендую решать задачи каждый день, "
            "начиная с простых примеров.",
            "kz": "Математика тұрақты тәжірибені талап етеді. Қарапайым мысалдардан бастап күн сайын "
            "есеп шығарыңыз.",
        },
    ),
    (
        ("физика",),
        {
            "ru": "Физика учит понимать законы природы. Попробуйте связать теорию с практическими "
            "примерами из жизни.",
            "kz": "Физика табиғат заңдарын түсінуге үйретеді. Теорияны өмірдегі мысалдармен "
            "байланыстырып көріңіз.",
        },
    ),
    (
        ("история", "тарих"),
        {
            "ru": "История помогает понять настоящее. Создайте временные линии для лучшего "
            "запоминания дат и событий.",
            "kz": "Тарих қазіргі уақытты түсінуге көмектеседі. Даталар мен оқиғаларды жақсы есте "
            "сақтау үшін уақыт сызықтарын жасаңыз.",
        },
    ),
    (
        ("как", "помощь", "совет", "қалай", "көмек", "кеңес"),
        {
            "ru": "Я всегда готов помочь! Опишите конкретную проблему, и мы найдём решение вместе.",
            "kz": "Көмек беруге әрқашан дайынмын! Нақты мәселені сипаттаңыз, бірге шешім табамыз.",
        },
    ),
)

ANALYSIS_LABELS: dict[str, dict[str, str]] = {
    "ru": {
        "header": "Анализ результатов теста",
        "score": "Баллы",
        "time": "Время",
        "strengths": "Сильные стороны",
        "weaknesses": "Слабые стороны",
        "homework": "Домашнее задание",
        "topics": "Рекомендуемые темы",
    },
    "kz": {
        "header": "Тест нәтижелерінің талдауы",
        "score": "Ұпай",
        "time": "Уақыт",
        "strengths": "Күшті жақтары",
        "weaknesses": "Әлсіз жақтары",
        "homework": "Үй жұмысы",
        "topics": "Ұсынылатын тақырыптар",
    },
}


def detect_language(text: str) -> Language:
    """Kazakh if the text has Kazakh-only letters or common Kazakh words, else Russian."""
    if _KZ_CHARS.search(text) or _KZ_WORDS.search(text):
        return "kz"
    return "ru"


def parse_analysis(context: Optional[str]) -> Optional[dict[str, Any]]:
    """Extract the JSON payload after ``ANALYZE_TEST_RESULTS:``; None if absent or malformed."""
    if not context or ANALYSIS_PREFIX not in context:
        return None
    raw = context[context.index(ANALYSIS_PREFIX) + len(ANALYSIS_PREFIX):].strip()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.debug(f"Ignoring malformed analysis context: {e}")
        return None
    return data if isinstance(data, dict) else None


def format_analysis(data: dict[str, Any], language: Language) -> str:
    labels = ANALYSIS_LABELS[language]
    lines = [
        labels["header"],
        f"{labels['score']}: {data.get('percentage', 0)}% "
        f"({data.get('correct', 0)}/{data.get('total', 0)})",
    ]
    time_spent = data.get("timeSpent")
    if time_spent:
        lines.append(f"{labels['time']}: {round_half_up(float(time_spent) / 60)} мин")

    for key in ("strengths", "weaknesses", "homework", "topics"):
        items = data.get(key) or []
        lines.append("")
        lines.append(f"{labels[key]}:")
        lines.extend(f"- {item}" for item in items)

    return "\n".join(lines)


def progress_preamble(user: User, language: Language) -> str:
    tests = user.tests_completed
    average = round_half_up(user.average_score)
    if language == "kz":
        return (
            f"{user.name}, прогрессіңізге қарағанда ({tests} тест, орташа ұпай {average}%), "
            "жақсы алға жылжып жатырсыз!"
        )
    return (
        f"{user.name}, судя по вашему прогрессу ({tests} тестов, средний балл {average}%), "
        "вы хорошо продвигаетесь в обучении!"
    )


def compose_reply(
    message: str,
    context: Optional[str],
    language: Optional[Language],
    user: Optional[User],
    rng: random.Random,
) -> str:
    """Pick the local reply for one message. Pure apart from ``rng``."""
    lang: Language = language or detect_language(message)

    analysis = parse_analysis(context)
    if analysis is not None:
        return format_analysis(analysis, lang)

    lowered = message.lower()
    for keywords, replies in TOPIC_REPLIES:
        if any(word in lowered for word in keywords):
            return replies[lang]

    generic = rng.choice(GENERIC_REPLIES[lang])
    if context and user is not None:
        return f"{progress_preamble(user, lang)} {generic}"
    return generic


class LocalAssistant:
    """Keyword-driven stand-in for the chat backend, with simulated thinking time."""

    def __init__(
        self,
        rng: random.Random | None = None,
        delay_min: float = 1.0,
        delay_max: float = 3.0,
    ):
        self.rng = rng or random.Random()
        self.delay_min = delay_min
        self.delay_max = max(delay_min, delay_max)

    async def reply(
        self,
        message: str,
        context: Optional[str] = None,
        language: Optional[Language] = None,
        user: Optional[User] = None,
    ) -> str:
        if self.delay_max > 0:
            await asyncio.sleep(self.rng.uniform(self.delay_min, self.delay_max))
        return compose_reply(message, context, language, user, self.rng)
