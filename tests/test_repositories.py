"""Tests for repository data access."""

from teammate.domain.models import Participant
from teammate.domain.repositories import FormationRunRepository, ParticipantRepository
from teammate.domain.roster import Pool
from teammate.engine.orchestrator import BalancedFormationStrategy


def test_participant_roundtrip(db_session, make_candidate):
    """Test converting between Candidate and Participant rows."""
    candidate = make_candidate(72, skill=6, game="Chess", role="Coordinator")
    count = ParticipantRepository.upsert_many(
        db_session, [Participant.from_candidate(candidate, survey_responses="Q1=4;Q2=3")]
    )

    stored = ParticipantRepository.get_by_id(db_session, candidate.candidate_id)
    assert count == 1
    assert stored.personality_type == "Balanced"
    assert stored.survey_responses == "Q1=4;Q2=3"
    assert stored.to_candidate() == candidate


def test_get_surveyed_excludes_unsurveyed(db_session, make_candidate):
    """Test only surveyed participants are returned."""
    ParticipantRepository.upsert_many(
        db_session,
        [
            Participant.from_candidate(make_candidate(80, candidate_id="B")),
            Participant.from_candidate(make_candidate(None, candidate_id="A")),
            Participant.from_candidate(make_candidate(60, candidate_id="C")),
        ],
    )

    assert [p.participant_id for p in ParticipantRepository.get_all(db_session)] == ["A", "B", "C"]
    assert [p.participant_id for p in ParticipantRepository.get_surveyed(db_session)] == ["B", "C"]
    assert ParticipantRepository.get_by_id(db_session, "A").personality_type == "Unknown"


def test_upsert_replaces_existing(db_session, make_candidate):
    """Test upserting the same id updates the row."""
    ParticipantRepository.upsert_many(db_session, [Participant.from_candidate(make_candidate(80, candidate_id="X"))])
    ParticipantRepository.upsert_many(
        db_session, [Participant.from_candidate(make_candidate(95, skill=9, candidate_id="X"))]
    )

    participants = ParticipantRepository.get_all(db_session)
    assert len(participants) == 1
    assert participants[0].skill_level == 9
    assert participants[0].personality_type == "Leader"


def test_formation_runs(db_session, make_candidate):
    """Test storing runs and reading memberships back."""
    candidates = [make_candidate(s, skill=n + 1) for n, s in enumerate([95, 80, 60, 95, 80, 60, 30])]
    ParticipantRepository.upsert_many(db_session, [Participant.from_candidate(c) for c in candidates])
    assignment = BalancedFormationStrategy(seed=2).form_groups(Pool(candidates), 3)

    first = FormationRunRepository.create_run(db_session, assignment, strategy="balanced", seed=2)
    second = FormationRunRepository.create_run(db_session, assignment, strategy="balanced", compliant_teams=1)

    assert FormationRunRepository.get_latest(db_session).id == second.id
    assert FormationRunRepository.get_by_id(db_session, first.id).seed == 2
    assert second.seed is None
    assert first.total_teams == 2
    assert first.team_size == 3

    teams = FormationRunRepository.get_memberships(db_session, first.id)
    assert list(teams) == ["Team-1", "Team-2"]
    assert sum(len(members) for members in teams.values()) == 6


def test_no_runs(db_session):
    """Test empty run table."""
    assert FormationRunRepository.get_latest(db_session) is None
    assert FormationRunRepository.get_memberships(db_session, 1) == {}
