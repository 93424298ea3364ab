# ABOUTME: Builds daily study plans inside a learner's minute budget.
# ABOUTME: Rolls over unfinished topics and summarizes plan completion history.

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, time, timedelta
from typing import Iterable, List, Mapping, Optional

from .metrics import as_datetime, calendar_day, round_half_up
from .schemas import (
    DailyPlan,
    DateLike,
    PlanHistoryStats,
    PlannedTopic,
    PlanSummary,
    Suggestion,
    Topic,
)

logger = logging.getLogger(__name__)

DEFAULT_DAILY_STUDY_HOURS = 2

PENDING = "pending"
COMPLETED = "completed"
SKIPPED = "skipped"
PARTIAL = "partial"
MISSED = "missed"
TOPIC_STATUSES = (PENDING, "in-progress", COMPLETED, SKIPPED)

ENROLL_TIP = "Consider enrolling in a roadmap to get personalized study plans!"
ROLLOVER_REMINDER = "You have some topics from yesterday. Try to complete them first!"


def generate_daily_plan(
    plan_date: DateLike,
    roadmap_topics: Iterable[Topic],
    completed_topic_ids: Iterable[str] = (),
    daily_study_hours: Optional[float] = DEFAULT_DAILY_STUDY_HOURS,
    previous_plan: Optional[DailyPlan] = None,
    topic_catalog: Optional[Mapping[str, Topic]] = None,
) -> DailyPlan:
    """
    Assign topics for ``plan_date`` within the daily minute budget.

    Unfinished topics from yesterday's plan are placed first at priority 1,
    then pending roadmap topics in roadmap order. A topic is only assigned
    when its estimated duration fits the remaining budget.
    """

    day = calendar_day(plan_date)
    roadmap = list(roadmap_topics)
    catalog = dict(topic_catalog) if topic_catalog is not None else {t.topic_id: t for t in roadmap}
    completed = set(completed_topic_ids)

    budget = int((daily_study_hours or DEFAULT_DAILY_STUDY_HOURS) * 60)
    remaining = budget
    assigned: List[PlannedTopic] = []

    yesterday = day - timedelta(days=1)
    if previous_plan is not None and previous_plan.date == yesterday:
        for entry in previous_plan.topics:
            if entry.status in (COMPLETED, SKIPPED):
                continue
            if remaining <= 0:
                break
            topic = catalog.get(entry.topic_id)
            if topic is not None and remaining >= topic.estimated_duration:
                assigned.append(
                    PlannedTopic(
                        topic_id=topic.topic_id,
                        estimated_duration=topic.estimated_duration,
                        priority=1,
                        is_rolled_over=True,
                        rolled_over_from=yesterday,
                    )
                )
                remaining -= topic.estimated_duration

    for topic in roadmap:
        if topic.topic_id in completed:
            continue
        if remaining <= 0:
            break
        if any(a.topic_id == topic.topic_id for a in assigned):
            continue
        if remaining >= topic.estimated_duration:
            assigned.append(
                PlannedTopic(
                    topic_id=topic.topic_id,
                    estimated_duration=topic.estimated_duration,
                    priority=len(assigned) + 1,
                )
            )
            remaining -= topic.estimated_duration

    suggestions: List[Suggestion] = []
    if not assigned:
        suggestions.append(Suggestion(message=ENROLL_TIP, kind="tip"))
    elif any(a.is_rolled_over for a in assigned):
        suggestions.append(Suggestion(message=ROLLOVER_REMINDER, kind="reminder"))

    logger.debug("Planned %d topics for %s using %d of %d minutes", len(assigned), day, budget - remaining, budget)
    return DailyPlan(date=day, planned_minutes=budget - remaining, topics=assigned, suggestions=suggestions)


def update_topic_status(
    plan: DailyPlan,
    topic_id: str,
    status: str,
    actual_time_spent: Optional[int] = None,
    now: Optional[datetime] = None,
) -> DailyPlan:
    """Return a copy of ``plan`` with one topic's status changed."""

    if status not in TOPIC_STATUSES:
        raise ValueError(f"Unsupported topic status '{status}'. Expected one of: {', '.join(TOPIC_STATUSES)}.")

    topics: List[PlannedTopic] = []
    found = False
    for entry in plan.topics:
        if entry.topic_id == topic_id and not found:
            found = True
            if status == COMPLETED:
                entry = replace(
                    entry,
                    status=status,
                    completed_at=now or datetime.now(),
                    actual_time_spent=actual_time_spent or entry.estimated_duration,
                )
            else:
                entry = replace(entry, status=status)
        topics.append(entry)

    if not found:
        raise KeyError(f"Topic {topic_id} not found in plan for {plan.date}")
    return replace(plan, topics=topics)


def summarize_plan(plan: DailyPlan, now: DateLike) -> PlanSummary:
    total = len(plan.topics)
    completed = sum(1 for t in plan.topics if t.status == COMPLETED)
    percentage = round_half_up(completed / total * 100) if total else 0

    if percentage == 100:
        status = COMPLETED
    elif percentage > 0:
        status = PARTIAL
    elif _naive(as_datetime(now)) > datetime.combine(plan.date, time(23, 59, 59)):
        status = MISSED
    else:
        status = PENDING

    return PlanSummary(
        total_topics=total,
        completed_topics=completed,
        total_planned_minutes=sum(t.estimated_duration or 0 for t in plan.topics),
        actual_minutes_spent=sum(t.actual_time_spent or 0 for t in plan.topics),
        completion_percentage=percentage,
        status=status,
    )


def summarize_history(plans: Iterable[DailyPlan], now: DateLike, days: int = 30) -> PlanHistoryStats:
    """Aggregate completion stats over plans from the last ``days`` days."""

    start = calendar_day(now) - timedelta(days=days)
    summaries = [summarize_plan(plan, now) for plan in plans if plan.date >= start]

    average = (
        round_half_up(sum(s.completion_percentage for s in summaries) / len(summaries)) if summaries else 0
    )
    return PlanHistoryStats(
        total_days=len(summaries),
        completed_days=sum(1 for s in summaries if s.status == COMPLETED),
        partial_days=sum(1 for s in summaries if s.status == PARTIAL),
        missed_days=sum(1 for s in summaries if s.status == MISSED),
        average_completion=average,
        total_topics_completed=sum(s.completed_topics for s in summaries),
        total_minutes_studied=sum(s.actual_minutes_spent for s in summaries),
    )


def _naive(value: datetime) -> datetime:
    return value.replace(tzinfo=None)
