"""
Procedural question generators and the track quiz assembler.

Each subject key (history_kz, math_literacy, ...) has one generator
registered with ``@register``. The assembler looks generators up by the
section keys of a track template.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from entprep.core.errors import GeneratorNotFoundError

if TYPE_CHECKING:
    from .base import QuestionGenerator

# Generator registry - populated by @register decorator
GENERATORS: dict[str, "QuestionGenerator"] = {}


def register(subject_key: str):
    """Decorator to register a generator class under a subject key."""
    def decorator(cls):
        cls.subject_key = subject_key
        GENERATORS[subject_key] = cls()
        return cls
    return decorator


def get_generator(subject_key: str) -> "QuestionGenerator":
    try:
        return GENERATORS[subject_key]
    except KeyError:
        raise GeneratorNotFoundError(f"No generator registered for '{subject_key}'") from None


# Import generators to trigger registration
from . import history
from . import math_literacy
from . import math_profile
from . import physics

__all__ = [
    "GENERATORS",
    "get_generator",
    "register",
]
