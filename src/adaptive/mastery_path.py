# ABOUTME: Diagnoses per-topic mastery along a roadmap from test attempts.
# ABOUTME: Picks the next topic to study once its predecessor is mastered.

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .schemas import AdaptivePath, TestAttempt, Topic, TopicDiagnostic

DEFAULT_MASTERY_THRESHOLD = 70

MASTERED = "mastered"
IN_PROGRESS = "in-progress"
NOT_STARTED = "not-started"


def best_attempts(attempts: Iterable[TestAttempt]) -> Dict[str, TestAttempt]:
    """Highest-scoring attempt per topic; earlier attempts win ties."""

    best: Dict[str, TestAttempt] = {}
    for attempt in attempts:
        current = best.get(attempt.topic_id)
        if current is None or (attempt.score or 0) > (current.score or 0):
            best[attempt.topic_id] = attempt
    return best


def diagnose_roadmap(
    topics: Iterable[Topic],
    attempts: Iterable[TestAttempt],
    completed_topic_ids: Iterable[str] = (),
    mastery_threshold: Optional[float] = DEFAULT_MASTERY_THRESHOLD,
) -> AdaptivePath:
    threshold = mastery_threshold or DEFAULT_MASTERY_THRESHOLD
    completed = set(completed_topic_ids)
    best = best_attempts(attempts)

    diagnostics: List[TopicDiagnostic] = []
    for topic in sorted(topics, key=lambda t: t.order or 0):
        attempt = best.get(topic.topic_id)
        score = (attempt.score or 0) if attempt else 0
        mastered = bool(attempt and attempt.passed) or score >= threshold or topic.topic_id in completed

        if mastered:
            status = MASTERED
        elif attempt:
            status = IN_PROGRESS
        else:
            status = NOT_STARTED

        diagnostics.append(
            TopicDiagnostic(
                topic=topic,
                mastery_score=score,
                mastered=mastered,
                status=status,
                last_attempted_at=attempt.started_at if attempt else None,
            )
        )

    return AdaptivePath(
        mastery_threshold=threshold,
        diagnostics=diagnostics,
        recommended_next=_next_topic(diagnostics),
    )


def _next_topic(diagnostics: List[TopicDiagnostic]) -> Optional[TopicDiagnostic]:
    previous_mastered = True
    for diagnostic in diagnostics:
        if not diagnostic.mastered and previous_mastered:
            return diagnostic
        previous_mastered = diagnostic.mastered
    return None
