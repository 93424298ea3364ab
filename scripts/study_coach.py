# ABOUTME: Provides a CLI that scores learners and prints adaptive study recommendations.
# ABOUTME: Reads exported learner profiles or cohort tables and renders rich tables.

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from src.adaptive.cohort import compute_cohort_metrics
from src.adaptive.config import ScoringConfig, load_config
from src.adaptive.daily_plan import generate_daily_plan
from src.adaptive.loaders import LearnerProfile, load_daily_plan, load_profile, parse_date, read_table
from src.adaptive.logging_config import configure_logging
from src.adaptive.mastery_path import diagnose_roadmap
from src.adaptive.metrics import as_datetime
from src.adaptive.schemas import LEVELS
from src.adaptive.study_plan import build_recommendation

console = Console()
logger = logging.getLogger(__name__)
app = typer.Typer(help="Score learner activity and recommend difficulty and daily study load.")


@app.callback()
def main(
    log_level: str = typer.Option(None, "--log-level", help="Logging level; defaults to STUDY_COACH_LOG_LEVEL or WARNING."),
) -> None:
    configure_logging(log_level)


def _fail(message: str) -> None:
    console.print(f"[red]{message}[/red]")
    raise typer.Exit(code=1)


def _load_inputs(profile_path: Path, config_path: Optional[Path], now: Optional[str]):
    try:
        profile = load_profile(profile_path)
        config = load_config(config_path)
        moment = as_datetime(parse_date(now)) if now else datetime.now()
    except (FileNotFoundError, ValueError) as exc:
        _fail(str(exc))
    logger.debug("Loaded %d study records for %s", len(profile.study_records), profile_path)
    return profile, config, moment


def _recommend(profile: LearnerProfile, config: ScoringConfig, moment: datetime):
    return build_recommendation(
        profile.study_records,
        profile.completed_topics,
        moment,
        topics=profile.topics,
        current_difficulty=profile.current_difficulty,
        config=config,
    )


PROFILE_OPTION = typer.Option(..., "--profile", help="Learner profile export (JSON or YAML).")
CONFIG_OPTION = typer.Option(None, "--config", help="Scoring config YAML; defaults apply when omitted.")
NOW_OPTION = typer.Option(None, "--now", help="ISO8601 end of the study window; defaults to the current time.")


@app.command()
def metrics(
    profile: Path = PROFILE_OPTION,
    config: Path = CONFIG_OPTION,
    now: str = NOW_OPTION,
) -> None:
    """
    Show the learner's performance metrics over the trailing study window.
    """
    learner, scoring, moment = _load_inputs(profile, config, now)
    rec = _recommend(learner, scoring, moment)

    console.rule("[bold blue]Performance Metrics[/bold blue]")
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Metric")
    table.add_column("Value")
    m = rec.metrics
    table.add_row("Performance score", str(m.performance_score))
    table.add_row("Level", m.level)
    table.add_row("Avg test score", f"{m.avg_test_score:.1f}")
    table.add_row("Avg minutes/day", f"{m.avg_minutes_per_day:.1f}")
    table.add_row("Consistency", f"{m.consistency:.0%}")
    table.add_row("Topics completed", str(m.total_topics_completed))
    console.print(table)


@app.command()
def plan(
    profile: Path = PROFILE_OPTION,
    config: Path = CONFIG_OPTION,
    now: str = NOW_OPTION,
    output: Path = typer.Option(None, "--output", help="Optional JSON file for the full recommendation."),
) -> None:
    """
    Recommend a difficulty tier and personalized study plan settings.
    """
    learner, scoring, moment = _load_inputs(profile, config, now)
    rec = _recommend(learner, scoring, moment)

    console.print(f"[bold]Level:[/] {rec.metrics.level} ({rec.metrics.performance_score})")
    console.print(f"[bold]Next difficulty:[/] {rec.difficulty}")
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Topics/day")
    table.add_column("Difficulty")
    table.add_column("Minutes/topic")
    table.add_column("Review previous")
    s = rec.settings
    table.add_row(
        str(s.topics_per_day),
        s.recommended_difficulty,
        str(s.estimated_minutes_per_topic),
        "yes" if s.should_review_previous else "no",
    )
    console.print(table)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(json.dumps(rec.as_dict(), indent=2))
        console.print(f"[bold]Recommendation saved to {output}[/bold]")


@app.command("sort-topics")
def sort_topics(
    profile: Path = PROFILE_OPTION,
    config: Path = CONFIG_OPTION,
    now: str = NOW_OPTION,
) -> None:
    """
    List roadmap topics with those at the recommended difficulty first.
    """
    learner, scoring, moment = _load_inputs(profile, config, now)
    rec = _recommend(learner, scoring, moment)

    console.print(f"[bold]Target difficulty:[/] {rec.settings.recommended_difficulty}")
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("#")
    table.add_column("Topic")
    table.add_column("Difficulty")
    for index, topic in enumerate(rec.topics, start=1):
        table.add_row(str(index), topic.title or topic.topic_id, topic.effective_difficulty)
    console.print(table)


@app.command("adaptive-path")
def adaptive_path(
    profile: Path = PROFILE_OPTION,
    threshold: float = typer.Option(None, "--threshold", help="Mastery threshold percentage; profile value or 70 when omitted."),
) -> None:
    """
    Diagnose roadmap mastery and point at the next topic to study.
    """
    try:
        learner = load_profile(profile)
    except (FileNotFoundError, ValueError) as exc:
        _fail(str(exc))

    completed_ids = [ct.topic_id for ct in learner.completed_topics if ct.topic_id]
    path = diagnose_roadmap(
        learner.topics,
        learner.test_attempts,
        completed_ids,
        mastery_threshold=threshold or learner.mastery_threshold,
    )

    console.print(f"[bold]Mastered:[/] {path.mastered_count}/{path.total_topics} (threshold {path.mastery_threshold:g}%)")
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Topic")
    table.add_column("Score")
    table.add_column("Status")
    for diagnostic in path.diagnostics:
        table.add_row(diagnostic.topic.title or diagnostic.topic.topic_id, f"{diagnostic.mastery_score:g}", diagnostic.status)
    console.print(table)

    if path.recommended_next is None:
        console.print("[green]No pending topic to recommend.[/green]")
    else:
        nxt = path.recommended_next.topic
        console.print(f"[bold yellow]Next up:[/] {nxt.title or nxt.topic_id}")


@app.command("daily-plan")
def daily_plan(
    profile: Path = PROFILE_OPTION,
    plan_date: str = typer.Option(None, "--date", help="ISO8601 date to plan; defaults to today."),
    previous_plan_path: Path = typer.Option(
        None, "--previous-plan", help="Yesterday's plan (JSON or YAML); unfinished topics roll over first."
    ),
) -> None:
    """
    Assign today's topics within the learner's daily study budget.
    """
    try:
        learner = load_profile(profile)
        day = parse_date(plan_date) if plan_date else datetime.now().date()
        previous = load_daily_plan(previous_plan_path) if previous_plan_path else None
    except (FileNotFoundError, ValueError) as exc:
        _fail(str(exc))

    completed_ids = [ct.topic_id for ct in learner.completed_topics if ct.topic_id]
    topics = sorted(learner.topics, key=lambda t: t.order)
    generated = generate_daily_plan(
        day,
        topics,
        completed_ids,
        daily_study_hours=learner.daily_study_hours,
        previous_plan=previous,
    )
    titles = {t.topic_id: t.title or t.topic_id for t in topics}

    console.print(f"[bold]Plan for {generated.date.isoformat()}:[/] {generated.planned_minutes} minutes")
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Priority")
    table.add_column("Topic")
    table.add_column("Minutes")
    for entry in generated.topics:
        table.add_row(str(entry.priority), titles.get(entry.topic_id, entry.topic_id), str(entry.estimated_duration))
    console.print(table)
    for suggestion in generated.suggestions:
        console.print(f"[yellow]{suggestion.kind}:[/] {suggestion.message}")


@app.command()
def cohort(
    study_path: Path = typer.Option(..., "--study", help="CSV or parquet of user_id, date, minutes, topics_completed."),
    completions_path: Path = typer.Option(..., "--completions", help="CSV or parquet of user_id, test_score."),
    output: Path = typer.Option(Path("reports/cohort_metrics.parquet"), "--output", help="Output parquet for cohort scores."),
    config: Path = CONFIG_OPTION,
    now: str = NOW_OPTION,
) -> None:
    """
    Score every learner in a cohort export and save the results.
    """
    try:
        study_df = read_table(study_path)
        completions_df = read_table(completions_path)
        scoring = load_config(config)
        moment = as_datetime(parse_date(now)) if now else datetime.now()
    except (FileNotFoundError, ValueError) as exc:
        _fail(str(exc))

    scores = compute_cohort_metrics(study_df, completions_df, moment, config=scoring)
    output.parent.mkdir(parents=True, exist_ok=True)
    scores.to_parquet(output, index=False)

    counts = scores["level"].value_counts()
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Level")
    table.add_column("Learners")
    for level in reversed(LEVELS):
        table.add_row(level, str(int(counts.get(level, 0))))
    console.print(table)
    console.print(f"[bold]Scored {len(scores):,} learners; results saved to {output}[/bold]")


if __name__ == "__main__":
    app()
