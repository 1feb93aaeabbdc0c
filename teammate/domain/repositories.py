"""Repository classes for data access."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from .models import FormationRun, Participant, TeamMembership
from .roster import Assignment


class ParticipantRepository:
    """Repository for participant data access."""

    @staticmethod
    def get_all(session: Session) -> List[Participant]:
        """Get all participants ordered by id."""
        return session.query(Participant).order_by(Participant.participant_id).all()

    @staticmethod
    def get_by_id(session: Session, participant_id: str) -> Optional[Participant]:
        """Get participant by ID."""
        return session.query(Participant).filter(Participant.participant_id == participant_id).first()

    @staticmethod
    def get_surveyed(session: Session) -> List[Participant]:
        """Get participants that completed the survey."""
        return (
            session.query(Participant)
            .filter(Participant.survey_completed.is_(True))
            .order_by(Participant.participant_id)
            .all()
        )

    @staticmethod
    def upsert_many(session: Session, participants: List[Participant]) -> int:
        """Insert or replace participants by id. Returns number written."""
        for participant in participants:
            session.merge(participant)
        session.commit()
        return len(participants)


class FormationRunRepository:
    """Repository for formation runs and their team memberships."""

    @staticmethod
    def create_run(
        session: Session,
        assignment: Assignment,
        strategy: str,
        seed: int | None = None,
        compliant_teams: int = 0,
    ) -> FormationRun:
        """
        Persist the teams of a finished assignment.

        Every member must already exist as a Participant row.

        Args:
            session: Database session
            assignment: Finished assignment
            strategy: Name of the strategy that produced it
            seed: Random seed used for the run, if any
            compliant_teams: Number of rule-compliant teams in the run

        Returns:
            The stored FormationRun
        """
        run = FormationRun(
            team_size=assignment.team_size,
            strategy=strategy,
            seed=seed,
            compliant_teams=compliant_teams,
            total_teams=len(assignment.groups),
        )
        for group in assignment.groups:
            for member in assignment.members(group):
                run.memberships.append(
                    TeamMembership(team_id=group.group_id, participant_id=member.candidate_id)
                )
        session.add(run)
        session.commit()
        session.refresh(run)
        return run

    @staticmethod
    def get_by_id(session: Session, run_id: int) -> Optional[FormationRun]:
        """Get run by ID."""
        return session.query(FormationRun).filter(FormationRun.id == run_id).first()

    @staticmethod
    def get_latest(session: Session) -> Optional[FormationRun]:
        """Get the most recent run."""
        return session.query(FormationRun).order_by(FormationRun.id.desc()).first()

    @staticmethod
    def get_memberships(session: Session, run_id: int) -> Dict[str, List[Participant]]:
        """Get team id -> participants for a run, in insertion order."""
        rows = (
            session.query(TeamMembership)
            .filter(TeamMembership.run_id == run_id)
            .order_by(TeamMembership.id)
            .all()
        )
        teams: Dict[str, List[Participant]] = defaultdict(list)
        for row in rows:
            teams[row.team_id].append(row.participant)
        return dict(teams)
