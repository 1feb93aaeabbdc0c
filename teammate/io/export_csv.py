"""CSV export utilities for formed teams and participants."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import pandas as pd
from sqlalchemy.orm import Session

from teammate.domain.repositories import FormationRunRepository
from teammate.domain.roster import Assignment, Candidate
from teammate.exceptions import InvalidDataError

TEAM_COLUMNS = [
    "TeamID",
    "MemberID",
    "MemberName",
    "PreferredGame",
    "SkillLevel",
    "PreferredRole",
    "PersonalityType",
    "PersonalityScore",
]

PARTICIPANT_COLUMNS = [
    "ID",
    "Name",
    "Email",
    "PreferredGame",
    "SkillLevel",
    "PreferredRole",
    "PersonalityScore",
    "PersonalityType",
]


def _team_row(team_id: str, member: Candidate) -> dict:
    return {
        "TeamID": team_id,
        "MemberID": member.candidate_id,
        "MemberName": member.name,
        "PreferredGame": member.preferred_game,
        "SkillLevel": member.skill_level,
        "PreferredRole": member.preferred_role,
        "PersonalityType": member.category,
        "PersonalityScore": member.personality_score,
    }


def export_teams_csv(assignment: Assignment, csv_path: str | Path) -> int:
    """
    Write one row per team member.

    Args:
        assignment: Formed teams
        csv_path: Output path

    Returns:
        Number of rows written

    Raises:
        InvalidDataError: If there are no teams to save
    """
    rows = [
        _team_row(group.group_id, member)
        for group in assignment.groups
        for member in assignment.members(group)
    ]
    if not rows:
        raise InvalidDataError("No teams to save")

    pd.DataFrame(rows, columns=TEAM_COLUMNS).to_csv(csv_path, index=False)
    print(f"[INFO] Exported {len(rows)} team members to {csv_path}")
    return len(rows)


def export_run_csv(session: Session, run_id: int, csv_path: str | Path) -> int:
    """Write the teams of a stored formation run in the same format as export_teams_csv."""
    teams = FormationRunRepository.get_memberships(session, run_id)
    rows = [
        _team_row(team_id, participant.to_candidate())
        for team_id, participants in teams.items()
        for participant in participants
    ]
    if not rows:
        raise InvalidDataError(f"No teams stored for run {run_id}")

    pd.DataFrame(rows, columns=TEAM_COLUMNS).to_csv(csv_path, index=False)
    print(f"[INFO] Exported {len(rows)} team members of run {run_id} to {csv_path}")
    return len(rows)


def export_participants_csv(candidates: Iterable[Candidate], csv_path: str | Path) -> int:
    """Write participants in the import format so the file can be loaded again."""
    rows = [
        {
            "ID": c.candidate_id,
            "Name": c.name,
            "Email": c.email,
            "PreferredGame": c.preferred_game,
            "SkillLevel": c.skill_level,
            "PreferredRole": c.preferred_role,
            "PersonalityScore": c.personality_score,
            "PersonalityType": c.category,
        }
        for c in candidates
    ]
    pd.DataFrame(rows, columns=PARTICIPANT_COLUMNS).to_csv(csv_path, index=False)
    return len(rows)
