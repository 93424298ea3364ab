# ABOUTME: Scores whole cohorts of learners from tabular study and test exports.
# ABOUTME: Vectorizes the metrics formula and attaches per-learner plan settings.

from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np
import pandas as pd

from .config import DEFAULT_CONFIG, ScoringConfig
from .metrics import as_datetime
from .schemas import ADVANCED, BEGINNER, INTERMEDIATE, NOVICE, DateLike, PerformanceMetrics
from .study_plan import get_adaptive_study_settings

logger = logging.getLogger(__name__)

METRIC_COLUMNS = [
    "user_id",
    "performance_score",
    "avg_test_score",
    "avg_minutes_per_day",
    "consistency",
    "total_topics_completed",
    "level",
]
SETTINGS_COLUMNS = [
    "recommended_difficulty",
    "topics_per_day",
    "estimated_minutes_per_topic",
    "should_review_previous",
]
COHORT_COLUMNS = METRIC_COLUMNS + SETTINGS_COLUMNS


def compute_cohort_metrics(
    study_df: Optional[pd.DataFrame],
    completions_df: Optional[pd.DataFrame],
    now: DateLike,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> pd.DataFrame:
    """
    Compute performance metrics and study settings for every learner.

    Parameters
    ----------
    study_df : pd.DataFrame
        Expected columns: ['user_id', 'date', 'minutes'] plus optional 'topics_completed'.
    completions_df : pd.DataFrame
        Expected columns: ['user_id'] plus optional 'test_score' (null when untested).
    now : date or datetime
        End of the trailing study window.
    """

    study = _frame_or_empty(study_df, ["user_id", "date", "minutes", "topics_completed"])
    completions = _frame_or_empty(completions_df, ["user_id", "test_score"])

    users = _ordered_users(study, completions)
    if not users:
        return pd.DataFrame(columns=COHORT_COLUMNS)

    now_ts = pd.Timestamp(as_datetime(now))
    dates = pd.to_datetime(study["date"], errors="coerce")
    if dates.dt.tz is not None and now_ts.tzinfo is None:
        now_ts = now_ts.tz_localize(dates.dt.tz)
    elif dates.dt.tz is None and now_ts.tzinfo is not None:
        dates = dates.dt.tz_localize(now_ts.tzinfo)

    window_start = now_ts - pd.Timedelta(days=config.window_days)
    recent = study[dates >= window_start].copy()
    recent["minutes"] = pd.to_numeric(recent["minutes"], errors="coerce").fillna(0)
    if "topics_completed" not in recent.columns:
        recent["topics_completed"] = 0
    recent["topics_completed"] = pd.to_numeric(recent["topics_completed"], errors="coerce").fillna(0)

    by_user = recent.groupby("user_id")
    total_minutes = by_user["minutes"].sum().reindex(users, fill_value=0)
    total_topics = by_user["topics_completed"].sum().reindex(users, fill_value=0)
    study_days = by_user.size().reindex(users, fill_value=0)

    if "test_score" in completions.columns:
        scored = completions.dropna(subset=["test_score"])
        avg_test = scored.groupby("user_id")["test_score"].mean().reindex(users)
    else:
        avg_test = pd.Series(np.nan, index=users)
    avg_test = avg_test.fillna(config.neutral_test_score).astype(float)

    avg_minutes = total_minutes.astype(float) / config.window_days
    consistency = study_days.astype(float) / config.window_days
    raw_score = (
        avg_test * config.test_weight
        + np.minimum(avg_minutes / config.time_cap_minutes, 1) * 100 * config.time_weight
        + consistency * 100 * config.consistency_weight
    )
    score = np.floor(raw_score + 0.5).astype(int)
    level = np.select(
        [
            score >= config.advanced_threshold,
            score >= config.intermediate_threshold,
            score >= config.beginner_threshold,
        ],
        [ADVANCED, INTERMEDIATE, BEGINNER],
        default=NOVICE,
    )

    frame = pd.DataFrame(
        {
            "user_id": users,
            "performance_score": score.to_numpy(),
            "avg_test_score": avg_test.to_numpy(),
            "avg_minutes_per_day": avg_minutes.to_numpy(),
            "consistency": consistency.to_numpy(),
            "total_topics_completed": total_topics.astype(int).to_numpy(),
            "level": level,
        }
    )

    settings_rows = []
    for row in frame.itertuples(index=False):
        settings = get_adaptive_study_settings(
            PerformanceMetrics(
                performance_score=int(row.performance_score),
                avg_test_score=float(row.avg_test_score),
                avg_minutes_per_day=float(row.avg_minutes_per_day),
                consistency=float(row.consistency),
                total_topics_completed=int(row.total_topics_completed),
                level=str(row.level),
            )
        )
        settings_rows.append(
            {
                "recommended_difficulty": settings.recommended_difficulty,
                "topics_per_day": settings.topics_per_day,
                "estimated_minutes_per_topic": settings.estimated_minutes_per_topic,
                "should_review_previous": settings.should_review_previous,
            }
        )

    logger.debug("Scored cohort of %d learners", len(frame))
    return pd.concat([frame, pd.DataFrame(settings_rows)], axis=1)[COHORT_COLUMNS]


def _frame_or_empty(df: Optional[pd.DataFrame], columns: List[str]) -> pd.DataFrame:
    if df is None or df.empty:
        return pd.DataFrame(columns=columns)
    return df


def _ordered_users(study: pd.DataFrame, completions: pd.DataFrame) -> List[str]:
    combined = pd.concat([study["user_id"], completions["user_id"]], ignore_index=True).dropna()
    return list(pd.unique(combined))
