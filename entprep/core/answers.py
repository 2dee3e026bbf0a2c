"""
Correct-answer normalization.

Questions arrive with correctness data in several shapes: an option index,
a list of indices (multi-select), a string (free text / numeric entry) or a
term -> definition mapping (matching). ``normalize`` turns any of these into
one of four tagged variants, each with its own comparison.

``canonical_index`` is the legacy single-index projection still sent on the
wire as ``correctAnswer``. It is lossy: anything that is not already an int
becomes 0, so code that relies on it alone misreports multi-select and
matching questions. Score with ``is_correct`` instead.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping as MappingABC
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from entprep.core.models import Question, QuestionType

NUMERIC_TOLERANCE = 1e-6


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip().replace(",", "."))
        except ValueError:
            return None
    return None


def _clean(text: Any) -> str:
    return " ".join(str(text).split()).lower()


# =============================================================================
# Tagged variants
# =============================================================================


@dataclass(frozen=True)
class SingleIndex:
    index: int

    def is_correct(self, given: Any) -> bool:
        return _as_int(given) == self.index


@dataclass(frozen=True)
class MultiIndex:
    indices: frozenset[int]

    def is_correct(self, given: Any) -> bool:
        if isinstance(given, (str, bytes)) or not isinstance(given, Iterable):
            return False
        chosen = {_as_int(g) for g in given}
        return None not in chosen and chosen == set(self.indices)


@dataclass(frozen=True)
class FreeText:
    text: str

    def is_correct(self, given: Any) -> bool:
        if given is None:
            return False
        expected_num = _as_float(self.text)
        given_num = _as_float(given)
        if expected_num is not None and given_num is not None:
            return abs(expected_num - given_num) <= NUMERIC_TOLERANCE
        return _clean(given) == _clean(self.text)


@dataclass(frozen=True)
class Mapping:
    pairs: tuple[tuple[str, str], ...]

    def is_correct(self, given: Any) -> bool:
        if not isinstance(given, MappingABC):
            return False
        expected = {k.strip(): v.strip() for k, v in self.pairs}
        received = {str(k).strip(): str(v).strip() for k, v in given.items()}
        return expected == received


Correctness = Union[SingleIndex, MultiIndex, FreeText, Mapping]


# =============================================================================
# Entry points
# =============================================================================


def canonical_index(raw: Any) -> int:
    """Legacy projection: numbers verbatim, every other shape -> 0."""
    if isinstance(raw, bool):
        return 0
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    return 0


def normalize(raw: Any, question_type: "QuestionType | str | None" = None) -> Correctness:
    """
    Build the full-fidelity correctness variant for a raw correct-answer value.

    The type tag breaks ties where the value alone is ambiguous: a numeric
    question whose answer is the number 12 is free text "12", not option 12.
    """
    type_tag = getattr(question_type, "value", question_type)

    if isinstance(raw, MappingABC):
        return Mapping(tuple((str(k), str(v)) for k, v in raw.items()))
    if isinstance(raw, (list, tuple, set, frozenset)):
        indices = {_as_int(i) for i in raw}
        indices.discard(None)
        return MultiIndex(frozenset(indices))  # type: ignore[arg-type]
    if type_tag in ("numeric", "text", "latex") or isinstance(raw, str):
        return FreeText("" if raw is None else str(raw))
    if isinstance(raw, bool):
        # true_false questions sometimes store the literal; index 0 is "true"
        return SingleIndex(0 if raw else 1)
    return SingleIndex(canonical_index(raw))


def is_correct(question: "Question", given: Any) -> bool:
    """Compare a learner's answer with the question's correct answer."""
    return normalize(question.correct_answer, question.type).is_correct(given)
