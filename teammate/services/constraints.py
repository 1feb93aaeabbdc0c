"""Composition rules and exchange validity checks."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Set

from teammate.domain.roster import LEADER, THINKER, Candidate
from teammate.exceptions import TeamFormationError


@dataclass(frozen=True)
class CompositionRules:
    """Per-team composition limits."""

    leader_cap: int = 1
    thinker_cap: int = 2
    game_cap: int = 2
    min_unique_roles: int = 3


def validate_formation_request(pool_size: int, team_size: int) -> None:
    """
    Fail fast on requests that cannot produce a single team.

    Raises:
        TeamFormationError: If the pool is empty, team size < 2, or pool < team size
    """
    if pool_size <= 0:
        raise TeamFormationError("No participants provided")
    if team_size < 2:
        raise TeamFormationError("Team size must be at least 2")
    if pool_size < team_size:
        raise TeamFormationError(
            f"Not enough participants to form even one team. Have {pool_size}, need at least {team_size}"
        )


def count_categories(members: Iterable[Candidate]) -> Counter:
    return Counter(m.category for m in members)


def count_games(members: Iterable[Candidate]) -> Counter:
    return Counter(m.preferred_game for m in members)


def unique_roles(members: Iterable[Candidate]) -> Set[str]:
    return {m.preferred_role for m in members}


def quotas_hold(category_counts: Counter, rules: CompositionRules) -> bool:
    return (
        category_counts.get(LEADER, 0) <= rules.leader_cap
        and category_counts.get(THINKER, 0) <= rules.thinker_cap
    )


def games_hold(game_counts: Counter, rules: CompositionRules) -> bool:
    return all(count <= rules.game_cap for count in game_counts.values())


def satisfies_hard_rules(members: Sequence[Candidate], rules: CompositionRules) -> bool:
    """Category quotas and game cap; the constraints every exchange must keep."""
    return quotas_hold(count_categories(members), rules) and games_hold(count_games(members), rules)


def is_valid_exchange(
    members_a: Sequence[Candidate],
    members_b: Sequence[Candidate],
    out_of_a: Candidate,
    out_of_b: Candidate,
    rules: CompositionRules,
) -> bool:
    """
    Check whether swapping one member of team A with one member of team B is allowed.

    Both teams are evaluated as they would look after the swap. Sizes are
    unchanged by construction.

    Args:
        members_a: Current members of team A
        members_b: Current members of team B
        out_of_a: Member leaving A (joins B)
        out_of_b: Member leaving B (joins A)
        rules: Composition limits

    Returns:
        True if both teams satisfy category quotas and the game cap post-swap
    """
    new_a = _swapped(members_a, out_of_a, out_of_b)
    new_b = _swapped(members_b, out_of_b, out_of_a)
    if new_a is None or new_b is None:
        return False
    return satisfies_hard_rules(new_a, rules) and satisfies_hard_rules(new_b, rules)


def _swapped(members: Sequence[Candidate], leaving: Candidate, joining: Candidate) -> List[Candidate] | None:
    for position, member in enumerate(members):
        if member is leaving:
            return list(members[:position]) + [joining] + list(members[position + 1:])
    return None


def composition_issues(members: Sequence[Candidate], rules: CompositionRules) -> List[str]:
    """Human-readable list of rule violations for one team."""
    issues: List[str] = []
    categories = count_categories(members)
    if categories.get(LEADER, 0) > rules.leader_cap:
        issues.append("Too many Leaders")
    if categories.get(THINKER, 0) > rules.thinker_cap:
        issues.append("Too many Thinkers")
    for game, count in sorted(count_games(members).items()):
        if count > rules.game_cap:
            issues.append(f"Too many {game} players ({count})")
    roles = unique_roles(members)
    if len(roles) < rules.min_unique_roles:
        issues.append(f"Only {len(roles)} unique roles")
    return issues
