"""Load and validate formation configuration (YAML or JSON)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from teammate.engine.balancer import BalancePolicy
from teammate.services.constraints import CompositionRules

STRATEGIES = ("balanced", "cp_sat")


@dataclass(frozen=True)
class CategorizerSettings:
    parallel: bool = False
    workers: int = 4
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class CpSatSettings:
    max_time_seconds: float = 10.0
    workers: int = 4
    spread_weight: int = 10  # per skill point between strongest and weakest team
    penalty_weight: int = 100  # per composition rule violation


@dataclass
class FormationConfig:
    team_size: int = 5
    seed: Optional[int] = None
    strategy: str = "balanced"
    rules: CompositionRules = field(default_factory=CompositionRules)
    balance: BalancePolicy = field(default_factory=BalancePolicy)
    categorizer: CategorizerSettings = field(default_factory=CategorizerSettings)
    cp_sat: CpSatSettings = field(default_factory=CpSatSettings)


def _section(cls, raw: Dict[str, Any] | None, name: str):
    if raw is None:
        return cls()
    if not isinstance(raw, dict):
        raise ValueError(f"Config section '{name}' must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = set(raw) - known
    if unknown:
        raise ValueError(f"Unknown keys in config section '{name}': {sorted(unknown)}")
    return cls(**raw)


def config_from_dict(data: Dict[str, Any]) -> FormationConfig:
    """Build a FormationConfig from parsed YAML/JSON, keeping defaults for missing keys."""
    data = dict(data or {})
    cfg = FormationConfig(
        team_size=int(data.get("team_size", 5)),
        seed=data.get("seed"),
        strategy=str(data.get("strategy", "balanced")),
        rules=_section(CompositionRules, data.get("rules"), "rules"),
        balance=_section(BalancePolicy, data.get("balance"), "balance"),
        categorizer=_section(CategorizerSettings, data.get("categorizer"), "categorizer"),
        cp_sat=_section(CpSatSettings, data.get("cp_sat"), "cp_sat"),
    )
    validate_config(cfg)
    return cfg


def validate_config(cfg: FormationConfig) -> None:
    if cfg.team_size < 2:
        raise ValueError(f"team_size must be at least 2, got {cfg.team_size}")
    if cfg.strategy not in STRATEGIES:
        raise ValueError(f"Unknown strategy '{cfg.strategy}', expected one of {STRATEGIES}")
    if cfg.seed is not None and not isinstance(cfg.seed, int):
        raise ValueError(f"seed must be an integer or null, got {cfg.seed!r}")
    if cfg.balance.max_iterations < 0:
        raise ValueError("balance.max_iterations must be >= 0")
    if cfg.balance.improvement_threshold < 0:
        raise ValueError("balance.improvement_threshold must be >= 0")
    rules = cfg.rules
    if min(rules.leader_cap, rules.thinker_cap, rules.game_cap, rules.min_unique_roles) < 0:
        raise ValueError("rules values must be >= 0")
    if cfg.categorizer.workers < 1:
        raise ValueError("categorizer.workers must be >= 1")


def load_config(path: str | Path | None = None) -> FormationConfig:
    """
    Load configuration from a YAML (.yaml/.yml) or JSON file.

    Args:
        path: Config file path; None returns the defaults

    Returns:
        Validated FormationConfig
    """
    if path is None:
        return FormationConfig()
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    return config_from_dict(data)
