"""Greedy seat allocation: quota seed, bounded top-up, fill, gap sweep."""

from __future__ import annotations

from collections import deque
from typing import Deque, Dict, List, Sequence

from teammate.domain.roster import BALANCED, LEADER, THINKER, Assignment, Group, Pool, create_empty_groups
from teammate.services.constraints import CompositionRules, validate_formation_request


class GreedyAllocator:
    """
    Builds the initial roster from categorized buckets.

    Leaders are spread one per team, Thinkers topped up to the thinker cap,
    Balanced members fill teams in order, and whatever is left in the pool
    plugs remaining gaps. Under-supplied trailing teams are left under-full.
    """

    def __init__(self, rules: CompositionRules | None = None):
        self.rules = rules or CompositionRules()

    def allocate(
        self,
        buckets: Dict[str, Sequence[int]],
        team_size: int,
        pool: Pool,
    ) -> Assignment:
        """
        Allocate pool members into floor(len(pool) / team_size) teams.

        Args:
            buckets: Category -> pool indices (as returned by the categorizer)
            team_size: Target team size (>= 2)
            pool: Candidate arena

        Returns:
            Assignment holding the new teams

        Raises:
            TeamFormationError: If the request cannot produce a team
        """
        validate_formation_request(len(pool), team_size)

        groups = create_empty_groups(len(pool) // team_size, team_size)
        leaders: Deque[int] = deque(buckets.get(LEADER, ()))
        thinkers: Deque[int] = deque(buckets.get(THINKER, ()))
        balanced: Deque[int] = deque(buckets.get(BALANCED, ()))

        self._seed_quota(groups, leaders, pool)
        self._top_up(groups, thinkers, pool, per_group=self.rules.thinker_cap)
        self._fill(groups, balanced, pool)
        self._sweep_gaps(groups, pool)

        return Assignment(pool=pool, team_size=team_size, groups=tuple(groups))

    def _seed_quota(self, groups: List[Group], bucket: Deque[int], pool: Pool) -> None:
        for group in groups:
            if not bucket:
                break
            if group.is_full:
                continue
            group.add(bucket.popleft(), pool)

    def _top_up(self, groups: List[Group], bucket: Deque[int], pool: Pool, per_group: int) -> None:
        for group in groups:
            added = 0
            while added < per_group and bucket and not group.is_full:
                group.add(bucket.popleft(), pool)
                added += 1

    def _fill(self, groups: List[Group], bucket: Deque[int], pool: Pool) -> None:
        for group in groups:
            while bucket and not group.is_full:
                group.add(bucket.popleft(), pool)

    def _sweep_gaps(self, groups: List[Group], pool: Pool) -> None:
        placed = {i for group in groups for i in group.members}
        unplaced = deque(i for i in pool.indices() if i not in placed)
        for group in groups:
            while unplaced and not group.is_full:
                group.add(unplaced.popleft(), pool)
