"""SQLAlchemy models for the team formation system."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, relationship

from .roster import Candidate, classify_personality


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class Participant(Base):
    """Participant with survey answers."""

    __tablename__ = "participants"

    participant_id = Column(String(50), primary_key=True)
    name = Column(String(200), nullable=False)
    email = Column(String(200), nullable=False)
    preferred_game = Column(String(50), nullable=True)
    skill_level = Column(Integer, nullable=True)  # 1-10
    preferred_role = Column(String(50), nullable=True)
    personality_score = Column(Integer, nullable=True)  # 20-100 from survey
    personality_type = Column(String(20), nullable=True)  # Leader, Balanced, Thinker, Unknown
    survey_completed = Column(Boolean, nullable=False, default=False)
    survey_responses = Column(Text, nullable=True)  # Semicolon-separated Q1=4;Q2=5

    memberships = relationship("TeamMembership", back_populates="participant")

    def to_candidate(self) -> Candidate:
        """Convert to the read-only engine representation."""
        return Candidate(
            candidate_id=self.participant_id,
            name=self.name,
            email=self.email,
            skill_level=int(self.skill_level or 0),
            personality_score=self.personality_score,
            preferred_game=self.preferred_game or "",
            preferred_role=self.preferred_role or "",
        )

    @classmethod
    def from_candidate(cls, candidate: Candidate, survey_responses: str | None = None) -> "Participant":
        return cls(
            participant_id=candidate.candidate_id,
            name=candidate.name,
            email=candidate.email,
            preferred_game=candidate.preferred_game,
            skill_level=candidate.skill_level,
            preferred_role=candidate.preferred_role,
            personality_score=candidate.personality_score,
            personality_type=classify_personality(candidate.personality_score),
            survey_completed=candidate.personality_score is not None,
            survey_responses=survey_responses,
        )

    def __repr__(self) -> str:
        return f"<Participant(id='{self.participant_id}', name='{self.name}', type='{self.personality_type}')>"


class FormationRun(Base):
    """One execution of a formation strategy."""

    __tablename__ = "formation_runs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    team_size = Column(Integer, nullable=False)
    strategy = Column(String(30), nullable=False)
    seed = Column(Integer, nullable=True)
    compliant_teams = Column(Integer, nullable=False, default=0)
    total_teams = Column(Integer, nullable=False, default=0)

    memberships = relationship(
        "TeamMembership", back_populates="run", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<FormationRun(id={self.id}, strategy='{self.strategy}', team_size={self.team_size})>"


class TeamMembership(Base):
    """A participant placed in a team by a formation run."""

    __tablename__ = "team_memberships"

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_id = Column(Integer, ForeignKey("formation_runs.id"), nullable=False)
    team_id = Column(String(20), nullable=False)  # e.g., "Team-3"
    participant_id = Column(String(50), ForeignKey("participants.participant_id"), nullable=False)

    run = relationship("FormationRun", back_populates="memberships")
    participant = relationship("Participant", back_populates="memberships")

    def __repr__(self) -> str:
        return f"<TeamMembership(run={self.run_id}, team='{self.team_id}', participant='{self.participant_id}')>"
