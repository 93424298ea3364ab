# ABOUTME: Parses exported learner profiles and tables into engine records.
# ABOUTME: Accepts camelCase web exports and snake_case files alike.

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pandas as pd
import yaml

from .daily_plan import TOPIC_STATUSES
from .schemas import (
    DIFFICULTIES,
    CompletedTopicRecord,
    DailyPlan,
    DateLike,
    PlannedTopic,
    StudyRecord,
    TestAttempt,
    Topic,
)


@dataclass
class LearnerProfile:
    """Everything the engine needs about one learner, as loaded from disk."""

    study_records: List[StudyRecord] = field(default_factory=list)
    completed_topics: List[CompletedTopicRecord] = field(default_factory=list)
    topics: List[Topic] = field(default_factory=list)
    test_attempts: List[TestAttempt] = field(default_factory=list)
    current_difficulty: Optional[str] = None
    daily_study_hours: Optional[float] = None
    mastery_threshold: Optional[float] = None


def _get(row: Mapping[str, Any], snake: str, camel: str, default: Any = None) -> Any:
    if snake in row:
        return row[snake]
    return row.get(camel, default)


def _required(row: Mapping[str, Any], key: str, kind: str, snake: Optional[str] = None) -> Any:
    value = _get(row, snake or key, key)
    if value is None or value == "":
        raise ValueError(f"{kind} is missing '{key}'.")
    return value


def parse_date(value: Any) -> Optional[DateLike]:
    if value is None or isinstance(value, (date, datetime)):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"Unparseable date '{value}'.") from exc
    if len(text) == 10:
        return parsed.date()
    return parsed


def parse_difficulty(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    normalized = str(value).strip().lower()
    if normalized not in DIFFICULTIES:
        raise ValueError(f"Unsupported difficulty '{value}'. Expected one of: {', '.join(DIFFICULTIES)}.")
    return normalized


def parse_study_records(rows: Optional[Iterable[Mapping[str, Any]]]) -> List[StudyRecord]:
    return [
        StudyRecord(
            date=parse_date(_required(row, "date", "Study record")),
            minutes=row.get("minutes") or 0,
            topics_completed=_get(row, "topics_completed", "topicsCompleted") or 0,
        )
        for row in rows or []
    ]


def parse_completed_topics(rows: Optional[Iterable[Mapping[str, Any]]]) -> List[CompletedTopicRecord]:
    return [
        CompletedTopicRecord(
            topic_id=_optional_str(_get(row, "topic_id", "topic")),
            test_score=_get(row, "test_score", "testScore"),
            completed_at=parse_date(_get(row, "completed_at", "completedAt")),
            time_spent=_get(row, "time_spent", "timeSpent"),
        )
        for row in rows or []
    ]


def parse_enrollments(enrollments: Optional[Iterable[Mapping[str, Any]]]) -> List[CompletedTopicRecord]:
    """Flatten completed topics across every enrolled roadmap."""

    records: List[CompletedTopicRecord] = []
    for enrollment in enrollments or []:
        records.extend(parse_completed_topics(_get(enrollment, "completed_topics", "completedTopics")))
    return records


def parse_topics(rows: Optional[Iterable[Mapping[str, Any]]]) -> List[Topic]:
    topics = []
    for index, row in enumerate(rows or []):
        topic_id = _get(row, "topic_id", "id", row.get("_id", index))
        topics.append(
            Topic(
                topic_id=str(topic_id),
                title=row.get("title", ""),
                difficulty=parse_difficulty(row.get("difficulty")),
                estimated_duration=_get(row, "estimated_duration", "estimatedDuration") or 0,
                order=row.get("order") or 0,
            )
        )
    return topics


def parse_test_attempts(rows: Optional[Iterable[Mapping[str, Any]]]) -> List[TestAttempt]:
    return [
        TestAttempt(
            topic_id=str(_required(row, "topic", "Test attempt", snake="topic_id")),
            score=row.get("score") or 0,
            passed=bool(row.get("passed")),
            started_at=parse_date(_get(row, "started_at", "startedAt")),
        )
        for row in rows or []
    ]


def parse_profile(data: Mapping[str, Any]) -> LearnerProfile:
    preferences = data.get("preferences") or {}
    completed = parse_enrollments(_get(data, "enrolled_roadmaps", "enrolledRoadmaps"))
    completed.extend(parse_completed_topics(_get(data, "completed_topics", "completedTopics")))
    return LearnerProfile(
        study_records=parse_study_records(_get(data, "study_time", "studyTime")),
        completed_topics=completed,
        topics=parse_topics(data.get("topics")),
        test_attempts=parse_test_attempts(_get(data, "test_attempts", "testAttempts")),
        current_difficulty=parse_difficulty(_get(data, "current_difficulty", "currentDifficulty")),
        daily_study_hours=_get(preferences, "daily_study_time", "dailyStudyTime"),
        mastery_threshold=_get(data, "mastery_threshold", "masteryThreshold"),
    )


def parse_daily_plan(data: Mapping[str, Any]) -> DailyPlan:
    """Rebuild a stored daily plan, e.g. yesterday's, for topic roll-over."""

    day = parse_date(_required(data, "date", "Daily plan"))
    if isinstance(day, datetime):
        day = day.date()

    topics = []
    for row in _get(data, "topics", "assignedTopics") or []:
        status = row.get("status") or "pending"
        if status not in TOPIC_STATUSES:
            raise ValueError(f"Unsupported topic status '{status}'. Expected one of: {', '.join(TOPIC_STATUSES)}.")
        topics.append(
            PlannedTopic(
                topic_id=str(_required(row, "topic", "Planned topic", snake="topic_id")),
                estimated_duration=_get(row, "estimated_duration", "estimatedDuration") or 0,
                priority=row.get("priority") or 1,
                status=status,
                actual_time_spent=_get(row, "actual_time_spent", "actualTimeSpent"),
            )
        )
    return DailyPlan(
        date=day,
        planned_minutes=_get(data, "planned_minutes", "plannedTime") or 0,
        topics=topics,
    )


def _read_document(path: Path, kind: str) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Missing {kind} at {path}")
    with open(path) as f:
        if path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping at the top of {path}.")
    return data


def load_profile(path: Path) -> LearnerProfile:
    """Load a learner profile from a JSON or YAML export."""

    return parse_profile(_read_document(path, "learner profile"))


def load_daily_plan(path: Path) -> DailyPlan:
    return parse_daily_plan(_read_document(path, "daily plan"))


def read_table(path: Path) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"Missing table at {path}")
    if path.suffix.lower() == ".parquet":
        return pd.read_parquet(path)
    return pd.read_csv(path)


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)
