# ABOUTME: Holds the tunable weights and thresholds behind performance scoring.
# ABOUTME: Loads overrides from YAML so cohorts can be rescored without code edits.

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional

import yaml


@dataclass(frozen=True)
class ScoringConfig:
    window_days: int = 7
    test_weight: float = 0.5
    time_weight: float = 0.3
    consistency_weight: float = 0.2
    time_cap_minutes: float = 60.0
    neutral_test_score: float = 50.0
    advanced_threshold: int = 80
    intermediate_threshold: int = 60
    beginner_threshold: int = 40


DEFAULT_CONFIG = ScoringConfig()
POSITIVE_KEYS = ("window_days", "time_cap_minutes")


def load_config(path: Optional[Path]) -> ScoringConfig:
    """
    Build a ScoringConfig from a YAML file; missing keys keep their defaults.

    The file may either hold the keys at the top level or nest them under a
    ``scoring`` section.
    """

    if path is None:
        return DEFAULT_CONFIG

    with open(path) as f:
        cfg = yaml.safe_load(f) or {}
    if not isinstance(cfg, dict):
        raise ValueError(f"Expected a mapping at the top of {path}.")

    section = cfg.get("scoring", cfg) or {}
    if not isinstance(section, dict):
        raise ValueError(f"Expected the scoring section of {path} to be a mapping.")

    types = {f.name: f.type for f in fields(ScoringConfig)}
    unknown = sorted(set(section) - set(types))
    if unknown:
        raise ValueError(f"Unsupported scoring config keys: {', '.join(unknown)}.")

    overrides = {key: _coerce(key, value, types[key]) for key, value in section.items()}
    return replace(DEFAULT_CONFIG, **overrides)


def _coerce(key: str, value, annotation):
    # Annotations are strings under postponed evaluation.
    target = float if annotation in (float, "float") else int
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Scoring config key '{key}' must be a number, got {value!r}.")
    if target is int and value != int(value):
        raise ValueError(f"Scoring config key '{key}' must be a whole number, got {value!r}.")
    if key in POSITIVE_KEYS and value <= 0:
        raise ValueError(f"Scoring config key '{key}' must be positive, got {value!r}.")
    return target(value)
