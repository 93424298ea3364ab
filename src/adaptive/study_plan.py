# ABOUTME: Turns performance metrics into personalized study plan settings.
# ABOUTME: Chains metrics, difficulty, and topic ordering into one recommendation.

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .config import DEFAULT_CONFIG, ScoringConfig
from .difficulty import recommend_difficulty, sort_by_adaptive_difficulty
from .metrics import compute_metrics
from .schemas import (
    CompletedTopicRecord,
    DateLike,
    PerformanceMetrics,
    StudyPlanSettings,
    StudyRecord,
    Topic,
)

DEFAULT_TOPICS_PER_DAY = 3

# (predicate, topics per day); first match wins, otherwise the default applies.
TOPICS_PER_DAY_RULES: Tuple[Tuple[Callable[[PerformanceMetrics], bool], int], ...] = (
    (lambda m: m.avg_minutes_per_day >= 120 and m.performance_score >= 70, 5),
    (lambda m: m.avg_minutes_per_day >= 60 and m.performance_score >= 60, 4),
    (lambda m: m.performance_score < 40, 2),
)


def topics_per_day(metrics: PerformanceMetrics) -> int:
    for matches, count in TOPICS_PER_DAY_RULES:
        if matches(metrics):
            return count
    return DEFAULT_TOPICS_PER_DAY


def get_adaptive_study_settings(metrics: PerformanceMetrics) -> StudyPlanSettings:
    return StudyPlanSettings(
        topics_per_day=topics_per_day(metrics),
        recommended_difficulty=recommend_difficulty(metrics),
        estimated_minutes_per_topic=30 if metrics.performance_score >= 70 else 45,
        should_review_previous=metrics.performance_score < 60,
    )


@dataclass(frozen=True)
class Recommendation:
    metrics: PerformanceMetrics
    difficulty: str
    settings: StudyPlanSettings
    topics: List[Topic]

    def as_dict(self) -> Dict[str, object]:
        return {
            "metrics": self.metrics.as_dict(),
            "level": self.metrics.level,
            "recommendedDifficulty": self.difficulty,
            "settings": self.settings.as_dict(),
            "topics": [
                {"id": t.topic_id, "title": t.title, "difficulty": t.effective_difficulty}
                for t in self.topics
            ],
        }


def build_recommendation(
    study_records: Optional[Iterable[StudyRecord]],
    completed_topics: Optional[Iterable[CompletedTopicRecord]],
    now: DateLike,
    topics: Optional[Iterable[Topic]] = None,
    current_difficulty: Optional[str] = None,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> Recommendation:
    """
    Run the full pipeline for one learner: metrics, then difficulty and plan
    settings, then the topic ordering when a topic list is supplied.
    """

    metrics = compute_metrics(study_records, completed_topics, now, config=config)
    return Recommendation(
        metrics=metrics,
        difficulty=recommend_difficulty(metrics, current_difficulty),
        settings=get_adaptive_study_settings(metrics),
        topics=sort_by_adaptive_difficulty(topics or [], metrics),
    )
