"""Pytest configuration and shared fixtures."""

import itertools

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from teammate.domain.models import Base
from teammate.domain.roster import Candidate


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (deselect with '-m \"not integration\"')"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def db_session():
    """Create in-memory database session for testing."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def make_candidate():
    """Factory for candidates with sequential ids (P001, P002, ...)."""
    counter = itertools.count(1)

    def _make(score, skill=5, game="Valorant", role="Attacker", candidate_id=None):
        number = next(counter)
        return Candidate(
            candidate_id=candidate_id or f"P{number:03d}",
            name=f"Player {number}",
            email=f"player{number}@example.com",
            skill_level=skill,
            personality_score=score,
            preferred_game=game,
            preferred_role=role,
        )

    return _make
