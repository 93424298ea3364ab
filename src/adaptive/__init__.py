# ABOUTME: Makes the adaptive engine importable as a single package.
# ABOUTME: Re-exports the scoring pipeline entrypoints and record types.

from .config import DEFAULT_CONFIG, ScoringConfig, load_config
from .difficulty import recommend_difficulty, sort_by_adaptive_difficulty
from .metrics import compute_metrics, log_study_time
from .schemas import (
    CompletedTopicRecord,
    PerformanceMetrics,
    StudyPlanSettings,
    StudyRecord,
    Topic,
)
from .study_plan import build_recommendation, get_adaptive_study_settings

__all__ = [
    "DEFAULT_CONFIG",
    "ScoringConfig",
    "load_config",
    "recommend_difficulty",
    "sort_by_adaptive_difficulty",
    "compute_metrics",
    "log_study_time",
    "CompletedTopicRecord",
    "PerformanceMetrics",
    "StudyPlanSettings",
    "StudyRecord",
    "Topic",
    "build_recommendation",
    "get_adaptive_study_settings",
]
