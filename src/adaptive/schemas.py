# ABOUTME: Defines the record types consumed and produced by the adaptive engine.
# ABOUTME: Centralizes study history, topic, metrics, and plan schema definitions.

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional, Union

EASY = "easy"
MEDIUM = "medium"
HARD = "hard"
DIFFICULTIES = (EASY, MEDIUM, HARD)

NOVICE = "novice"
BEGINNER = "beginner"
INTERMEDIATE = "intermediate"
ADVANCED = "advanced"
LEVELS = (NOVICE, BEGINNER, INTERMEDIATE, ADVANCED)

DateLike = Union[date, datetime]


@dataclass(frozen=True)
class StudyRecord:
    """One calendar day of logged study activity."""

    date: DateLike
    minutes: int
    topics_completed: int = 0


@dataclass(frozen=True)
class CompletedTopicRecord:
    """A topic finished inside an enrolled roadmap."""

    topic_id: Optional[str] = None
    test_score: Optional[float] = None
    completed_at: Optional[datetime] = None
    time_spent: Optional[int] = None


@dataclass(frozen=True)
class Topic:
    topic_id: str
    title: str = ""
    difficulty: Optional[str] = None
    estimated_duration: int = 0
    order: int = 0

    @property
    def effective_difficulty(self) -> str:
        return self.difficulty or MEDIUM


@dataclass(frozen=True)
class PerformanceMetrics:
    """
    Composite performance snapshot over the trailing study window.

    ``consistency`` is study days divided by the window length; it is only
    bounded by 1 when the window holds at most window_days records.
    """

    performance_score: int
    avg_test_score: float
    avg_minutes_per_day: float
    consistency: float
    total_topics_completed: int
    level: str

    def as_dict(self) -> Dict[str, object]:
        return {
            "performanceScore": self.performance_score,
            "avgTestScore": self.avg_test_score,
            "avgMinutesPerDay": self.avg_minutes_per_day,
            "consistency": self.consistency,
            "totalTopicsCompleted": self.total_topics_completed,
            "level": self.level,
        }


@dataclass(frozen=True)
class StudyPlanSettings:
    topics_per_day: int
    recommended_difficulty: str
    estimated_minutes_per_topic: int
    should_review_previous: bool

    def as_dict(self) -> Dict[str, object]:
        return {
            "topicsPerDay": self.topics_per_day,
            "recommendedDifficulty": self.recommended_difficulty,
            "estimatedMinutesPerTopic": self.estimated_minutes_per_topic,
            "shouldReviewPrevious": self.should_review_previous,
        }


@dataclass(frozen=True)
class TestAttempt:
    """A completed assessment attempt on a roadmap topic."""

    __test__ = False  # keep pytest from collecting this as a test class

    topic_id: str
    score: float = 0.0
    passed: bool = False
    started_at: Optional[datetime] = None


@dataclass(frozen=True)
class TopicDiagnostic:
    topic: Topic
    mastery_score: float
    mastered: bool
    status: str
    last_attempted_at: Optional[datetime] = None


@dataclass(frozen=True)
class AdaptivePath:
    mastery_threshold: float
    diagnostics: List[TopicDiagnostic]
    recommended_next: Optional[TopicDiagnostic] = None

    @property
    def total_topics(self) -> int:
        return len(self.diagnostics)

    @property
    def mastered_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.mastered)


@dataclass(frozen=True)
class PlannedTopic:
    topic_id: str
    estimated_duration: int
    priority: int = 1
    status: str = "pending"
    completed_at: Optional[datetime] = None
    actual_time_spent: Optional[int] = None
    is_rolled_over: bool = False
    rolled_over_from: Optional[date] = None


@dataclass(frozen=True)
class Suggestion:
    message: str
    kind: str


@dataclass(frozen=True)
class DailyPlan:
    """A single day's assigned topics within the learner's minute budget."""

    date: date
    planned_minutes: int
    topics: List[PlannedTopic] = field(default_factory=list)
    suggestions: List[Suggestion] = field(default_factory=list)


@dataclass(frozen=True)
class PlanSummary:
    total_topics: int
    completed_topics: int
    total_planned_minutes: int
    actual_minutes_spent: int
    completion_percentage: int
    status: str


@dataclass(frozen=True)
class PlanHistoryStats:
    total_days: int
    completed_days: int
    partial_days: int
    missed_days: int
    average_completion: int
    total_topics_completed: int
    total_minutes_studied: int

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)
