"""Local-search balancing by single-for-single member exchanges."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from teammate.domain.roster import Assignment, Group
from teammate.services.constraints import (
    CompositionRules,
    count_games,
    is_valid_exchange,
    unique_roles,
)

SKILL_STAGE = "skill"
GAME_STAGE = "game_variety"
ROLE_STAGE = "role_diversity"

# Guards against committing float-noise "improvements".
_EPSILON = 1e-9


@dataclass(frozen=True)
class BalancePolicy:
    """Iteration caps and thresholds for the balancing passes."""

    max_iterations: int = 10
    improvement_threshold: float = 1.0
    variety_rounds: int = 1
    diversity_rounds: int = 1


@dataclass(frozen=True)
class Exchange:
    """A committed swap: `out_of_a` moved from team A to B, `out_of_b` from B to A."""

    stage: str
    group_a: str
    group_b: str
    out_of_a: int
    out_of_b: int


@dataclass
class BalanceResult:
    assignment: Assignment
    exchanges: List[Exchange] = field(default_factory=list)
    converged: bool = True
    iterations: int = 0


def apply_exchange(assignment: Assignment, exchange: Exchange) -> None:
    """Apply a recorded exchange to an assignment's teams (in place)."""
    groups = {g.group_id: g for g in assignment.groups}
    groups[exchange.group_a].replace(exchange.out_of_a, exchange.out_of_b, assignment.pool)
    groups[exchange.group_b].replace(exchange.out_of_b, exchange.out_of_a, assignment.pool)


class LocalSearchBalancer:
    """
    Reduces disparity between teams without breaking composition rules.

    Three passes run in order: skill (lowest vs highest mean team), game
    variety (teams over the game cap) and role diversity (teams with too few
    distinct roles). Each pass takes the first valid exchange it finds, so
    results depend on member order; this is a heuristic, not an optimizer.
    Only full teams take part in exchanges.
    The input assignment is never modified; balancing works on a copy.
    """

    def __init__(self, rules: CompositionRules | None = None, policy: BalancePolicy | None = None):
        self.rules = rules or CompositionRules()
        self.policy = policy or BalancePolicy()

    def balance(self, assignment: Assignment) -> BalanceResult:
        working = assignment.copy()
        result = BalanceResult(assignment=working)

        result.converged, result.iterations = self._balance_skill(working, result.exchanges)
        for _ in range(self.policy.variety_rounds):
            self._balance_games(working, result.exchanges)
        for _ in range(self.policy.diversity_rounds):
            self._balance_roles(working, result.exchanges)

        return result

    # Skill

    def _balance_skill(self, assignment: Assignment, journal: List[Exchange]) -> Tuple[bool, int]:
        """
        Narrow the gap between the lowest and highest mean-skill teams.

        Returns:
            (converged, iterations) where converged means the pass stopped on
            its own (gap under threshold or no improving exchange) rather
            than at the iteration cap.
        """
        groups = [g for g in assignment.groups if g.members]
        if len(groups) < 2:
            return True, 0

        for iteration in range(self.policy.max_iterations):
            low, high = self._extremes(groups)
            gap = high.mean_skill - low.mean_skill
            if gap < self.policy.improvement_threshold:
                return True, iteration

            pair = self._find_skill_exchange(assignment, low, high, gap)
            if pair is None:
                return True, iteration
            self._commit(assignment, SKILL_STAGE, low, high, pair[0], pair[1], journal)

        low, high = self._extremes(groups)
        return high.mean_skill - low.mean_skill < self.policy.improvement_threshold, self.policy.max_iterations

    @staticmethod
    def _extremes(groups: List[Group]) -> Tuple[Group, Group]:
        ordered = sorted(groups, key=lambda g: g.mean_skill)
        return ordered[0], ordered[-1]

    def _find_skill_exchange(
        self,
        assignment: Assignment,
        low: Group,
        high: Group,
        gap: float,
    ) -> Optional[Tuple[int, int]]:
        if not (low.is_full and high.is_full):
            return None
        pool = assignment.pool
        low_members = assignment.members(low)
        high_members = assignment.members(high)

        for a in low.members:
            for b in high.members:
                ca, cb = pool[a], pool[b]
                if not is_valid_exchange(low_members, high_members, ca, cb, self.rules):
                    continue
                delta = cb.skill_level - ca.skill_level
                new_low = low.mean_skill + delta / low.size
                new_high = high.mean_skill - delta / high.size
                if abs(new_high - new_low) < gap - _EPSILON:
                    return a, b
        return None

    # Game variety

    def _balance_games(self, assignment: Assignment, journal: List[Exchange]) -> None:
        for group in assignment.groups:
            if not group.is_full:
                continue
            over_cap = sorted(
                game
                for game, count in count_games(assignment.members(group)).items()
                if count > self.rules.game_cap
            )
            for game in over_cap:
                # Earlier commits may already have changed this team.
                if count_games(assignment.members(group))[game] <= self.rules.game_cap:
                    continue
                self._relieve_game(assignment, group, game, journal)

    def _relieve_game(self, assignment: Assignment, group: Group, game: str, journal: List[Exchange]) -> bool:
        pool = assignment.pool
        members = assignment.members(group)

        for a in [i for i in group.members if pool[i].preferred_game == game]:
            for other in assignment.groups:
                if other is group or not other.is_full:
                    continue
                other_members = assignment.members(other)
                for b in other.members:
                    if pool[b].preferred_game == game:
                        continue
                    if is_valid_exchange(members, other_members, pool[a], pool[b], self.rules):
                        self._commit(assignment, GAME_STAGE, group, other, a, b, journal)
                        return True
        return False

    # Role diversity

    def _balance_roles(self, assignment: Assignment, journal: List[Exchange]) -> None:
        for group in assignment.groups:
            members = assignment.members(group)
            if group.is_full and len(unique_roles(members)) < self.rules.min_unique_roles:
                self._diversify_roles(assignment, group, journal)

    def _diversify_roles(self, assignment: Assignment, group: Group, journal: List[Exchange]) -> bool:
        pool = assignment.pool
        members = assignment.members(group)
        present = unique_roles(members)
        role_counts = Counter(m.preferred_role for m in members)
        # Giving away a sole holder of a role would not raise the distinct count.
        outgoing = [i for i in group.members if role_counts[pool[i].preferred_role] > 1]

        for a in outgoing:
            for other in assignment.groups:
                if other is group or not other.is_full:
                    continue
                other_members = assignment.members(other)
                donor_ok = len(unique_roles(other_members)) >= self.rules.min_unique_roles
                for b in other.members:
                    cb = pool[b]
                    if cb.preferred_role in present:
                        continue
                    if not is_valid_exchange(members, other_members, pool[a], cb, self.rules):
                        continue
                    if donor_ok and not self._keeps_role_minimum(other_members, cb, pool[a]):
                        continue
                    self._commit(assignment, ROLE_STAGE, group, other, a, b, journal)
                    return True
        return False

    def _keeps_role_minimum(self, members, leaving, joining) -> bool:
        after = [m for m in members if m is not leaving] + [joining]
        return len(unique_roles(after)) >= self.rules.min_unique_roles

    def _commit(
        self,
        assignment: Assignment,
        stage: str,
        group_a: Group,
        group_b: Group,
        out_of_a: int,
        out_of_b: int,
        journal: List[Exchange],
    ) -> None:
        exchange = Exchange(stage, group_a.group_id, group_b.group_id, out_of_a, out_of_b)
        apply_exchange(assignment, exchange)
        journal.append(exchange)
