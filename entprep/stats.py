"""
Learner statistics.

Everything here is a pure function of a user and their results: nothing is
cached or stored, so an achievement disappears again if the metric behind it
regresses.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Iterable

from entprep.core.models import (
    RecentTest,
    TestResult,
    User,
    UserStats,
    round_half_up,
    utcnow,
)

PASSING_SCORE = 60
RECENT_TESTS_LIMIT = 5
RECENT_ACTIVITY_LIMIT = 10
TREND_WINDOW_DAYS = 30
DIGEST_TOTAL = 10

# Highest threshold first
RANK_LADDER: tuple[tuple[int, str], ...] = (
    (90, "Expert"),
    (80, "Advanced"),
    (70, "Intermediate"),
    (60, "Developing"),
)
BASELINE_RANK = "Beginner"

ACHIEVEMENT_FIRST_TEST = "First Test"
ACHIEVEMENT_ACTIVE = "Active Learner"
ACHIEVEMENT_PERSISTENT = "Persistent"
ACHIEVEMENT_STREAK = "Winning Streak"
ACHIEVEMENT_TOP = "Top Student"
ACHIEVEMENT_HOUR = "Hour of Study"


def most_recent_first(results: Iterable[TestResult]) -> list[TestResult]:
    return sorted(results, key=lambda r: r.completed_at, reverse=True)


def average_score(results: list[TestResult]) -> int:
    if not results:
        return 0
    return round_half_up(sum(r.score for r in results) / len(results))


def running_average(previous: float, count: int, new_score: float) -> float:
    """
    Fold one more score into a running mean.

    ``count`` is the number of scores including the new one. The result is an
    exact mean, equivalent to averaging the whole history again.
    """
    if count <= 1:
        return float(new_score)
    return (previous * (count - 1) + new_score) / count


def compute_streak(results: Iterable[TestResult]) -> int:
    """Consecutive passing results, most recent first, up to the first failure."""
    streak = 0
    for result in most_recent_first(results):
        if result.score < PASSING_SCORE:
            break
        streak += 1
    return streak


def rank_for(score: int) -> str:
    for threshold, label in RANK_LADDER:
        if score >= threshold:
            return label
    return BASELINE_RANK


def achievements_for(
    tests_completed: int, streak: int, average: int, study_time: int
) -> list[str]:
    achievements = []
    if tests_completed >= 1:
        achievements.append(ACHIEVEMENT_FIRST_TEST)
    if tests_completed >= 5:
        achievements.append(ACHIEVEMENT_ACTIVE)
    if tests_completed >= 10:
        achievements.append(ACHIEVEMENT_PERSISTENT)
    if streak >= 3:
        achievements.append(ACHIEVEMENT_STREAK)
    if average >= 90:
        achievements.append(ACHIEVEMENT_TOP)
    if study_time >= 3600:
        achievements.append(ACHIEVEMENT_HOUR)
    return achievements


def digest(result: TestResult) -> RecentTest:
    return RecentTest(
        subject=result.subject,
        score=round_half_up(result.score / 100 * DIGEST_TOTAL),
        total=DIGEST_TOTAL,
        percentage=round_half_up(result.score),
        completed_at=result.completed_at,
    )


def compute_user_stats(user: User, results: list[TestResult]) -> UserStats:
    """
    Fold a learner's results into a stats snapshot.

    ``user`` identifies whose snapshot this is; every number is derived from
    ``results`` alone so that it never drifts from the stored history.
    """
    ordered = most_recent_first(results)
    tests_completed = len(ordered)
    average = average_score(ordered)

    total_questions = 0
    correct_answers = 0
    for result in ordered:
        if not result.answers:
            continue
        total_questions += len(result.answers)
        correct_answers += sum(1 for a in result.answers if a.correct)

    study_time = sum(r.time_spent for r in ordered)
    streak = compute_streak(ordered)

    return UserStats(
        tests_completed=tests_completed,
        average_score=average,
        total_questions=total_questions,
        correct_answers=correct_answers,
        study_time=study_time,
        streak=streak,
        rank=rank_for(average),
        achievements=achievements_for(tests_completed, streak, average, study_time),
        recent_tests=[digest(r) for r in ordered[:RECENT_TESTS_LIMIT]],
    )


def compute_analytics(
    user: User | None,
    results: list[TestResult],
    now: datetime | None = None,
) -> dict[str, Any]:
    """Activity digest: latest results plus a 30-day score trend."""
    streak = user.study_streak if user else 0
    study_time = user.total_study_time if user else 0

    if not results:
        return {
            "totalTests": 0,
            "averageScore": 0,
            "recentActivity": [],
            "progressTrend": [],
            "studyStreak": streak,
            "totalStudyTime": study_time,
        }

    now = now or utcnow()
    cutoff = now - timedelta(days=TREND_WINDOW_DAYS)
    ordered = most_recent_first(results)

    return {
        "totalTests": len(results),
        "averageScore": average_score(results),
        "recentActivity": [r.to_dict() for r in ordered[:RECENT_ACTIVITY_LIMIT]],
        "progressTrend": [
            {"date": r.completed_at.date().isoformat(), "score": r.score}
            for r in results
            if r.completed_at >= cutoff
        ],
        "studyStreak": streak,
        "totalStudyTime": study_time,
    }
