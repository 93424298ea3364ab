# ABOUTME: Recommends a difficulty tier from performance metrics.
# ABOUTME: Reorders topics so those matching the recommended tier come first.

from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Tuple

from .schemas import EASY, HARD, MEDIUM, PerformanceMetrics, Topic

Rule = Tuple[Callable[[PerformanceMetrics], bool], Callable[[str], str]]


class DifficultyThresholds:
    MASTERY_SCORE = 85
    MASTERY_TEST = 85
    STRONG_SCORE = 70
    STRONG_TEST = 75
    STRUGGLING_SCORE = 40
    STRUGGLING_TEST = 50


# Evaluated top to bottom; the first matching predicate decides.
DIFFICULTY_RULES: Tuple[Rule, ...] = (
    (
        lambda m: m.performance_score >= DifficultyThresholds.MASTERY_SCORE
        and m.avg_test_score >= DifficultyThresholds.MASTERY_TEST,
        lambda current: HARD,
    ),
    (
        lambda m: m.performance_score >= DifficultyThresholds.STRONG_SCORE
        and m.avg_test_score >= DifficultyThresholds.STRONG_TEST,
        lambda current: MEDIUM if current == EASY else HARD,
    ),
    (
        lambda m: m.performance_score < DifficultyThresholds.STRUGGLING_SCORE
        or m.avg_test_score < DifficultyThresholds.STRUGGLING_TEST,
        lambda current: EASY,
    ),
)


def recommend_difficulty(metrics: PerformanceMetrics, current_difficulty: Optional[str] = MEDIUM) -> str:
    """
    Pick the difficulty tier for the learner's next topic or test.

    Strong learners already past ``easy`` jump straight to ``hard``; from
    ``easy`` they step up to ``medium`` only.
    """

    current = current_difficulty or MEDIUM
    for matches, outcome in DIFFICULTY_RULES:
        if matches(metrics):
            return outcome(current)
    return MEDIUM


def sort_by_adaptive_difficulty(topics: Iterable[Topic], metrics: PerformanceMetrics) -> List[Topic]:
    """Stable partition: topics at the recommended tier first, input order kept within each side."""

    target = recommend_difficulty(metrics)
    return sorted(topics, key=lambda topic: topic.effective_difficulty != target)
