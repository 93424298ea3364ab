# ABOUTME: Verifies the study coach CLI exposes its commands and renders results.
# ABOUTME: Runs commands against temporary learner profiles through Typer's runner.

import json

import pandas as pd
from typer.testing import CliRunner

from scripts import study_coach

runner = CliRunner()

PROFILE = {
    "studyTime": [{"date": f"2024-05-0{day}", "minutes": 60, "topicsCompleted": 1} for day in range(2, 9)],
    "enrolledRoadmaps": [{"completedTopics": [{"topic": "t1", "testScore": 90}]}],
    "topics": [
        {"id": "t1", "title": "Arrays", "difficulty": "easy", "estimatedDuration": 30, "order": 1},
        {"id": "t2", "title": "Graphs", "difficulty": "hard", "estimatedDuration": 60, "order": 2},
    ],
    "testAttempts": [{"topic": "t1", "score": 90, "passed": True}],
}


def _write_profile(tmp_path, data=PROFILE):
    path = tmp_path / "learner.json"
    path.write_text(json.dumps(data))
    return path


def test_cli_registers_commands():
    command_names = {cmd.name or cmd.callback.__name__ for cmd in study_coach.app.registered_commands}
    assert {"metrics", "plan", "sort-topics", "adaptive-path", "daily-plan", "cohort"} <= command_names


def test_plan_command_writes_recommendation(tmp_path):
    profile = _write_profile(tmp_path)
    output = tmp_path / "out" / "plan.json"

    result = runner.invoke(
        study_coach.app,
        ["plan", "--profile", str(profile), "--now", "2024-05-08", "--output", str(output)],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(output.read_text())
    # 90*0.5 + 30 + 20 = 95
    assert payload["metrics"]["performanceScore"] == 95
    assert payload["recommendedDifficulty"] == "hard"
    assert payload["topics"][0]["id"] == "t2"


def test_adaptive_path_and_daily_plan_commands(tmp_path):
    profile = _write_profile(tmp_path)

    path_result = runner.invoke(study_coach.app, ["adaptive-path", "--profile", str(profile)])
    assert path_result.exit_code == 0, path_result.output
    assert "Graphs" in path_result.output

    plan_result = runner.invoke(study_coach.app, ["daily-plan", "--profile", str(profile), "--date", "2024-05-09"])
    assert plan_result.exit_code == 0, plan_result.output
    assert "Graphs" in plan_result.output


def test_invalid_profile_exits_with_error(tmp_path):
    profile = _write_profile(tmp_path, {"topics": [{"id": "t1", "difficulty": "extreme"}]})

    result = runner.invoke(study_coach.app, ["metrics", "--profile", str(profile)])

    assert result.exit_code == 1


def test_profile_with_undated_study_record_exits_with_error(tmp_path):
    profile = _write_profile(tmp_path, {"studyTime": [{"minutes": 30}]})

    result = runner.invoke(study_coach.app, ["metrics", "--profile", str(profile)])

    assert result.exit_code == 1


def test_daily_plan_rolls_over_previous_plan(tmp_path):
    profile = _write_profile(tmp_path)
    previous = tmp_path / "yesterday.json"
    previous.write_text(
        json.dumps({"date": "2024-05-08", "assignedTopics": [{"topic": "t2", "estimatedDuration": 60, "status": "pending"}]})
    )

    result = runner.invoke(
        study_coach.app,
        ["daily-plan", "--profile", str(profile), "--date", "2024-05-09", "--previous-plan", str(previous)],
    )

    assert result.exit_code == 0, result.output
    assert "Graphs" in result.output
    assert "reminder" in result.output


def test_daily_plan_rejects_invalid_previous_plan(tmp_path):
    profile = _write_profile(tmp_path)
    previous = tmp_path / "yesterday.json"
    previous.write_text(json.dumps({"date": "2024-05-08", "assignedTopics": [{"topic": "t2", "status": "lost"}]}))

    result = runner.invoke(
        study_coach.app,
        ["daily-plan", "--profile", str(profile), "--date", "2024-05-09", "--previous-plan", str(previous)],
    )

    assert result.exit_code == 1


def test_cohort_command_saves_parquet(tmp_path):
    study = tmp_path / "study.csv"
    completions = tmp_path / "completions.csv"
    output = tmp_path / "cohort.parquet"
    pd.DataFrame({"user_id": ["u1", "u2"], "date": ["2024-05-07", "2024-05-08"], "minutes": [30, 90]}).to_csv(study, index=False)
    pd.DataFrame({"user_id": ["u1"], "test_score": [70]}).to_csv(completions, index=False)

    result = runner.invoke(
        study_coach.app,
        ["cohort", "--study", str(study), "--completions", str(completions), "--output", str(output), "--now", "2024-05-08"],
    )

    assert result.exit_code == 0, result.output
    assert list(pd.read_parquet(output)["user_id"]) == ["u1", "u2"]
