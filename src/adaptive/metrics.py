# ABOUTME: Extracts performance metrics from a learner's study and test history.
# ABOUTME: Blends test accuracy, study time, and consistency into a 0-100 score.

from __future__ import annotations

import logging
import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, List, Optional

from .config import DEFAULT_CONFIG, ScoringConfig
from .schemas import (
    ADVANCED,
    BEGINNER,
    INTERMEDIATE,
    NOVICE,
    CompletedTopicRecord,
    DateLike,
    PerformanceMetrics,
    StudyRecord,
)

logger = logging.getLogger(__name__)


def compute_metrics(
    study_records: Optional[Iterable[StudyRecord]],
    completed_topics: Optional[Iterable[CompletedTopicRecord]],
    now: DateLike,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> PerformanceMetrics:
    """
    Compute performance metrics for one learner.

    Steps:
    - Keep study records dated on or after ``now - window_days``. With a
      midnight ``now`` (or a plain date) that span touches window_days + 1
      calendar days, so consistency can exceed 1 for daily records; a
      time-of-day ``now`` drops the oldest midnight record.
    - Average minutes over the full window, so idle days count as zero.
    - Average every recorded test score (all-time); no tests means neutral.
    - Blend the three signals and round once at the end.
    """

    now_dt = as_datetime(now)
    window_start = now_dt - timedelta(days=config.window_days)
    recent = [
        record
        for record in (study_records or [])
        if align_to(record.date, now_dt) >= window_start
    ]

    total_minutes = sum(record.minutes for record in recent)
    total_topics_completed = sum(record.topics_completed or 0 for record in recent)
    avg_minutes_per_day = total_minutes / config.window_days
    consistency = len(recent) / config.window_days

    scores = [ct.test_score for ct in (completed_topics or []) if ct.test_score is not None]
    avg_test_score = sum(scores) / len(scores) if scores else config.neutral_test_score

    performance_score = round_half_up(
        avg_test_score * config.test_weight
        + min(avg_minutes_per_day / config.time_cap_minutes, 1) * 100 * config.time_weight
        + consistency * 100 * config.consistency_weight
    )

    logger.debug(
        "Scored %d recent study days and %d tests: score=%d",
        len(recent),
        len(scores),
        performance_score,
    )

    return PerformanceMetrics(
        performance_score=performance_score,
        avg_test_score=avg_test_score,
        avg_minutes_per_day=avg_minutes_per_day,
        consistency=consistency,
        total_topics_completed=total_topics_completed,
        level=performance_level(performance_score, config),
    )


def performance_level(score: int, config: ScoringConfig = DEFAULT_CONFIG) -> str:
    if score >= config.advanced_threshold:
        return ADVANCED
    if score >= config.intermediate_threshold:
        return INTERMEDIATE
    if score >= config.beginner_threshold:
        return BEGINNER
    return NOVICE


def round_half_up(value: float) -> int:
    # Halves round toward +inf, not to even.
    return int(math.floor(value + 0.5))


def as_datetime(value: DateLike) -> datetime:
    """Promote plain dates to midnight; datetimes pass through."""

    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def align_to(value: DateLike, reference: datetime) -> datetime:
    """Coerce ``value`` to a datetime comparable with ``reference``."""

    dt = as_datetime(value)
    if dt.tzinfo is None and reference.tzinfo is not None:
        return dt.replace(tzinfo=reference.tzinfo)
    if dt.tzinfo is not None and reference.tzinfo is None:
        return dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def calendar_day(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


def log_study_time(
    records: Iterable[StudyRecord],
    day: DateLike,
    minutes: int,
    topics_completed: int = 0,
) -> List[StudyRecord]:
    """
    Add study activity to the record for ``day``, appending one if absent.

    Returns a new list; at most one record per calendar day is touched.
    """

    target = calendar_day(day)
    updated: List[StudyRecord] = []
    merged = False
    for record in records:
        if not merged and calendar_day(record.date) == target:
            record = StudyRecord(
                date=record.date,
                minutes=record.minutes + minutes,
                topics_completed=(record.topics_completed or 0) + topics_completed,
            )
            merged = True
        updated.append(record)

    if not merged:
        updated.append(StudyRecord(date=target, minutes=minutes, topics_completed=topics_completed))
    return updated
