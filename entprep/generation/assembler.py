"""
Track quiz assembly.

Walks a track template section by section. A section is filled from the
custom bank for its subject key when one has been imported (first N items,
in insertion order), otherwise from the subject's generator. The output is a
flat list; section boundaries are not kept.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass

from loguru import logger

from entprep.core.models import Question
from entprep.core.store import EntityStore

from . import get_generator
from .templates import Section, TrackTemplate, load_track_template


@dataclass(frozen=True)
class SectionPlan:
    section: Section
    count: int


def plan_sections(template: TrackTemplate, max_per_section: int | None = None) -> list[SectionPlan]:
    """Per-section counts: ``min(required, cap)`` with the cap floored at 1."""
    cap = math.inf if max_per_section is None else max(1, max_per_section)
    return [
        SectionPlan(section, int(min(section.num_questions, cap)))
        for section in template.sections
    ]


class QuizAssembler:
    """Builds a track quiz from custom banks and procedural generators."""

    def __init__(self, store: EntityStore, rng: random.Random | None = None):
        self.store = store
        self.rng = rng or random.Random()

    def assemble(self, track: str, max_per_section: int | None = None) -> list[Question]:
        template = load_track_template(track)
        questions: list[Question] = []

        for plan in plan_sections(template, max_per_section):
            custom = self.store.bank(plan.section.key)
            if custom:
                selected = list(custom[: plan.count])
                source = "custom bank"
            else:
                selected = get_generator(plan.section.key).generate(plan.count, self.rng)
                source = "generator"
            logger.debug(
                f"{track}/{plan.section.key}: {len(selected)} of {plan.count} from {source}"
            )
            questions.extend(selected)

        return questions
