"""
Track section templates.

A track is an ordered list of sections; each section names a subject key and
how many questions the real exam puts there.
"""

from __future__ import annotations

from dataclasses import dataclass

from entprep.core.errors import UnknownTrackError


@dataclass(frozen=True)
class Section:
    key: str
    num_questions: int


@dataclass(frozen=True)
class TrackTemplate:
    track: str
    sections: tuple[Section, ...]

    @property
    def total_questions(self) -> int:
        return sum(s.num_questions for s in self.sections)


TRACKS: dict[str, TrackTemplate] = {
    "math": TrackTemplate(
        "math",
        (
            Section("history_kz", 20),
            Section("math_literacy", 10),
            Section("math_profile", 40),
        ),
    ),
    "physics": TrackTemplate(
        "physics",
        (
            Section("history_kz", 20),
            Section("math_literacy", 10),
            Section("physics_profile", 40),
        ),
    ),
}

SECTION_KEYS: frozenset[str] = frozenset(
    section.key for template in TRACKS.values() for section in template.sections
)


def load_track_template(track: str) -> TrackTemplate:
    try:
        return TRACKS[track]
    except KeyError:
        raise UnknownTrackError(
            f"Unknown track '{track}'. Expected one of: {', '.join(sorted(TRACKS))}"
        ) from None
