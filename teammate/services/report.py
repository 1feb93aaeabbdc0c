"""Compliance classification and summary statistics for formed teams."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

import pandas as pd

from teammate.domain.roster import BALANCED, LEADER, THINKER, Assignment
from teammate.services.constraints import (
    CompositionRules,
    composition_issues,
    count_categories,
    count_games,
    games_hold,
    quotas_hold,
    unique_roles,
)


@dataclass(frozen=True)
class TeamReport:
    group_id: str
    size: int
    capacity: int
    mean_skill: float
    category_counts: Dict[str, int]
    game_counts: Dict[str, int]
    roles: Tuple[str, ...]
    quota_ok: bool
    games_ok: bool
    roles_ok: bool
    issues: Tuple[str, ...]

    @property
    def is_full(self) -> bool:
        return self.size == self.capacity

    @property
    def compliant(self) -> bool:
        # Fullness is reported separately and does not affect compliance.
        return self.quota_ok and self.games_ok and self.roles_ok


@dataclass(frozen=True)
class SkillStatistics:
    mean: float
    minimum: float
    maximum: float

    @property
    def spread(self) -> float:
        return self.maximum - self.minimum


@dataclass(frozen=True)
class FormationReport:
    teams: Tuple[TeamReport, ...]
    statistics: SkillStatistics
    pool_size: int
    placed: int

    @property
    def unplaced(self) -> int:
        return self.pool_size - self.placed

    @property
    def compliant(self) -> Tuple[TeamReport, ...]:
        return tuple(t for t in self.teams if t.compliant)

    @property
    def non_compliant(self) -> Tuple[TeamReport, ...]:
        return tuple(t for t in self.teams if not t.compliant)

    @property
    def under_full(self) -> Tuple[TeamReport, ...]:
        return tuple(t for t in self.teams if not t.is_full)


def build_report(assignment: Assignment, rules: CompositionRules | None = None) -> FormationReport:
    """
    Classify every team and compute skill statistics.

    Reads the assignment only; nothing is cached on or written to it.

    Args:
        assignment: Formed teams
        rules: Composition limits (defaults apply when omitted)

    Returns:
        FormationReport
    """
    rules = rules or CompositionRules()
    teams = []
    for group in assignment.groups:
        members = assignment.members(group)
        categories = count_categories(members)
        games = count_games(members)
        roles = unique_roles(members)
        mean = sum(m.skill_level for m in members) / len(members) if members else 0.0
        teams.append(
            TeamReport(
                group_id=group.group_id,
                size=len(members),
                capacity=group.capacity,
                mean_skill=mean,
                category_counts=dict(categories),
                game_counts=dict(games),
                roles=tuple(sorted(roles)),
                quota_ok=quotas_hold(categories, rules),
                games_ok=games_hold(games, rules),
                roles_ok=len(roles) >= rules.min_unique_roles,
                issues=tuple(composition_issues(members, rules)),
            )
        )

    means = [t.mean_skill for t in teams if t.size > 0]
    if means:
        statistics = SkillStatistics(sum(means) / len(means), min(means), max(means))
    else:
        statistics = SkillStatistics(0.0, 0.0, 0.0)

    return FormationReport(
        teams=tuple(teams),
        statistics=statistics,
        pool_size=len(assignment.pool),
        placed=sum(t.size for t in teams),
    )


def report_frame(report: FormationReport) -> pd.DataFrame:
    """One row per team with the classification values."""
    rows = [
        {
            "team": t.group_id,
            "status": "VALID" if t.compliant else "INVALID",
            "size": f"{t.size}/{t.capacity}",
            "avg_skill": round(t.mean_skill, 1),
            "leaders": t.category_counts.get(LEADER, 0),
            "thinkers": t.category_counts.get(THINKER, 0),
            "balanced": t.category_counts.get(BALANCED, 0),
            "roles": len(t.roles),
            "issues": ", ".join(t.issues),
        }
        for t in report.teams
    ]
    return pd.DataFrame(rows).set_index("team") if rows else pd.DataFrame()


def summarize_report(report: FormationReport, assignment: Assignment | None = None) -> str:
    """Render the report as text; member listings are added when the assignment is given."""
    if not report.teams:
        return "No teams formed."

    total = len(report.teams)
    stats = report.statistics
    lines = ["Teams:", report_frame(report).to_string(), ""]

    if assignment is not None:
        members = pd.DataFrame(
            [
                {
                    "team": group.group_id,
                    "name": m.name,
                    "personality": m.category,
                    "skill": m.skill_level,
                    "role": m.preferred_role,
                    "game": m.preferred_game,
                }
                for group in assignment.groups
                for m in assignment.members(group)
            ]
        )
        if not members.empty:
            lines.append("Members:")
            lines.append(members.to_string(index=False))
            lines.append("")

    lines.append("Summary:")
    lines.append(f"Total Teams: {total}")
    lines.append(f"Valid Teams: {len(report.compliant)} ({len(report.compliant) * 100.0 / total:.1f}%)")
    lines.append(f"Invalid Teams: {len(report.non_compliant)} ({len(report.non_compliant) * 100.0 / total:.1f}%)")
    if report.under_full:
        lines.append(f"Under-full Teams: {len(report.under_full)}")
    lines.append(f"Overall Average Skill: {stats.mean:.1f}")
    lines.append(f"Range: {stats.minimum:.1f} - {stats.maximum:.1f}")
    lines.append(f"Variation: {stats.spread:.2f}")
    lines.append(f"Participants used: {report.placed} out of {report.pool_size}")
    lines.append(f"Participants not assigned: {report.unplaced}")
    return "\n".join(lines)
