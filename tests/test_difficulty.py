# ABOUTME: Tests difficulty recommendation rules and adaptive topic ordering.
# ABOUTME: Ensures rule precedence, escalation from easy, and stable sorting.

from src.adaptive.difficulty import recommend_difficulty, sort_by_adaptive_difficulty
from src.adaptive.metrics import performance_level
from src.adaptive.schemas import PerformanceMetrics, Topic


def _metrics(score: int, avg_test: float, minutes: float = 0.0) -> PerformanceMetrics:
    return PerformanceMetrics(
        performance_score=score,
        avg_test_score=avg_test,
        avg_minutes_per_day=minutes,
        consistency=0.0,
        total_topics_completed=0,
        level=performance_level(score),
    )


def test_mastery_recommends_hard_even_from_easy():
    assert recommend_difficulty(_metrics(90, 90), "easy") == "hard"
    assert recommend_difficulty(_metrics(85, 85)) == "hard"


def test_strong_learner_steps_up_one_tier_from_easy():
    metrics = _metrics(75, 80)
    assert recommend_difficulty(metrics, "easy") == "medium"
    assert recommend_difficulty(metrics, "medium") == "hard"
    assert recommend_difficulty(metrics, "hard") == "hard"


def test_missing_current_difficulty_defaults_to_medium():
    assert recommend_difficulty(_metrics(75, 80), None) == "hard"
    assert recommend_difficulty(_metrics(75, 80)) == "hard"


def test_high_score_with_test_just_below_mastery_uses_strong_rule():
    assert recommend_difficulty(_metrics(85, 84), "easy") == "medium"


def test_struggling_learner_gets_easy():
    assert recommend_difficulty(_metrics(39, 90)) == "easy"
    assert recommend_difficulty(_metrics(60, 49)) == "easy"


def test_everyone_else_gets_medium():
    assert recommend_difficulty(_metrics(60, 60)) == "medium"
    assert recommend_difficulty(_metrics(40, 50), "hard") == "medium"
    assert recommend_difficulty(_metrics(70, 74)) == "medium"


def test_recommendation_is_deterministic():
    metrics = _metrics(72, 78)
    assert recommend_difficulty(metrics, "easy") == recommend_difficulty(metrics, "easy")


def test_sort_is_stable_partition_on_target():
    a = Topic("A", difficulty="medium")
    b = Topic("B", difficulty="hard")
    c = Topic("C", difficulty="medium")
    d = Topic("D", difficulty="hard")
    topics = [a, b, c, d]

    ordered = sort_by_adaptive_difficulty(topics, _metrics(90, 90))

    assert [t.topic_id for t in ordered] == ["B", "D", "A", "C"]
    assert [t.topic_id for t in topics] == ["A", "B", "C", "D"]


def test_sort_treats_untagged_topics_as_medium():
    topics = [Topic("X", difficulty="hard"), Topic("Y"), Topic("Z", difficulty="medium"), Topic("W", difficulty="easy")]

    ordered = sort_by_adaptive_difficulty(topics, _metrics(60, 60))

    assert [t.topic_id for t in ordered] == ["Y", "Z", "X", "W"]


def test_sort_empty_list():
    assert sort_by_adaptive_difficulty([], _metrics(60, 60)) == []
