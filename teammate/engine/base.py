"""Base formation strategy interface that all strategies must implement."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from teammate.domain.roster import Assignment, Candidate, Pool


class FormationStrategy(ABC):
    """
    Abstract base class for team formation strategies.

    A strategy turns a pool of candidates into floor(pool / team_size) teams.
    Reporting and persistence only depend on the returned Assignment, so
    strategies can be swapped freely.
    """

    name: str | None = None  # Override in subclasses (e.g., "balanced", "cp_sat")

    @abstractmethod
    def form_groups(self, candidates: Sequence[Candidate] | Pool, team_size: int) -> Assignment:
        """
        Form teams from the candidate pool.

        Args:
            candidates: Candidates to draw from (not modified)
            team_size: Members per team

        Returns:
            Assignment with the formed teams; leftover candidates stay unplaced

        Raises:
            TeamFormationError: If the pool is empty, team_size < 2 or pool < team_size
        """
        pass

    def get_strategy_name(self) -> str:
        """Get the name of this strategy."""
        return self.name or "UNKNOWN"
