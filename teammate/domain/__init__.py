"""Domain models and data access layer."""

from .models import Base, FormationRun, Participant, TeamMembership
from .repositories import FormationRunRepository, ParticipantRepository
from .roster import Assignment, Candidate, Group, Pool, classify_personality

__all__ = [
    "Assignment",
    "Candidate",
    "Group",
    "Pool",
    "classify_personality",
    "Base",
    "Participant",
    "FormationRun",
    "TeamMembership",
    "ParticipantRepository",
    "FormationRunRepository",
]
