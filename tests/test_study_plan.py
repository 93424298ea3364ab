# ABOUTME: Tests study plan settings and the end-to-end recommendation pipeline.
# ABOUTME: Checks the topics-per-day table, pacing, and review flags.

from datetime import date, datetime, timedelta

import pytest

from src.adaptive.metrics import performance_level
from src.adaptive.schemas import CompletedTopicRecord, PerformanceMetrics, StudyRecord, Topic
from src.adaptive.study_plan import build_recommendation, get_adaptive_study_settings


def _metrics(score: int, minutes: float, avg_test: float = 50.0) -> PerformanceMetrics:
    return PerformanceMetrics(
        performance_score=score,
        avg_test_score=avg_test,
        avg_minutes_per_day=minutes,
        consistency=0.0,
        total_topics_completed=0,
        level=performance_level(score),
    )


def test_high_performer_with_time_gets_five_topics():
    settings = get_adaptive_study_settings(_metrics(90, 150, avg_test=90))

    assert settings.topics_per_day == 5
    assert settings.recommended_difficulty == "hard"
    assert settings.estimated_minutes_per_topic == 30
    assert settings.should_review_previous is False


def test_struggling_learner_gets_light_load_and_review():
    settings = get_adaptive_study_settings(_metrics(30, 10))

    assert settings.topics_per_day == 2
    assert settings.recommended_difficulty == "easy"
    assert settings.estimated_minutes_per_topic == 45
    assert settings.should_review_previous is True


@pytest.mark.parametrize(
    "score,minutes,expected",
    [
        (70, 120, 5),
        (69, 120, 4),
        (75, 100, 4),
        (60, 60, 4),
        (59, 200, 3),
        (50, 10, 3),
        (40, 0, 3),
        (39, 500, 2),
    ],
)
def test_topics_per_day_rules(score, minutes, expected):
    assert get_adaptive_study_settings(_metrics(score, minutes)).topics_per_day == expected


def test_pacing_and_review_boundaries():
    assert get_adaptive_study_settings(_metrics(70, 0)).estimated_minutes_per_topic == 30
    assert get_adaptive_study_settings(_metrics(69, 0)).estimated_minutes_per_topic == 45
    assert get_adaptive_study_settings(_metrics(60, 0)).should_review_previous is False
    assert get_adaptive_study_settings(_metrics(59, 0)).should_review_previous is True


def test_build_recommendation_runs_full_pipeline():
    records = [StudyRecord(date=date(2024, 5, 2) + timedelta(days=i), minutes=60, topics_completed=1) for i in range(7)]
    topics = [Topic("t1", "Graphs", "hard"), Topic("t2", "Arrays"), Topic("t3", "Trees", "medium")]

    rec = build_recommendation(records, [], datetime(2024, 5, 8), topics=topics)

    assert rec.metrics.performance_score == 75
    assert rec.difficulty == "medium"
    assert rec.settings.topics_per_day == 4
    assert rec.settings.estimated_minutes_per_topic == 30
    assert [t.topic_id for t in rec.topics] == ["t2", "t3", "t1"]

    payload = rec.as_dict()
    assert payload["level"] == "intermediate"
    assert payload["metrics"]["performanceScore"] == 75
    assert payload["settings"]["topicsPerDay"] == 4
    assert payload["topics"][0] == {"id": "t2", "title": "Arrays", "difficulty": "medium"}


def test_build_recommendation_honours_current_difficulty():
    records = [StudyRecord(date=date(2024, 5, 2) + timedelta(days=i), minutes=60) for i in range(7)]
    completed = [CompletedTopicRecord(test_score=80)]
    # 80*0.5 + 30 + 20 = 90 with a test average below mastery.
    rec = build_recommendation(records, completed, datetime(2024, 5, 8), current_difficulty="easy")

    assert rec.metrics.performance_score == 90
    assert rec.difficulty == "medium"
    assert rec.settings.recommended_difficulty == "hard"
    assert rec.topics == []
