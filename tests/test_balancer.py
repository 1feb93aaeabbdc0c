"""Tests for local-search balancing."""

import random

import pytest

from teammate.domain.roster import Assignment, Candidate, Pool, create_empty_groups
from teammate.engine.balancer import (
    GAME_STAGE,
    ROLE_STAGE,
    SKILL_STAGE,
    BalancePolicy,
    Exchange,
    LocalSearchBalancer,
    apply_exchange,
)
from teammate.engine.orchestrator import BalancedFormationStrategy
from teammate.services.constraints import CompositionRules, is_valid_exchange, satisfies_hard_rules
from teammate.services.report import build_report
from teammate.survey import GAMES, ROLES


def _assignment(pool, layout, team_size=4):
    groups = create_empty_groups(len(layout), team_size)
    for group, indices in zip(groups, layout):
        for i in indices:
            group.add(i, pool)
    return Assignment(pool, team_size, tuple(groups))


def _skill_gap_assignment(make_candidate):
    """Two teams of balanced players with distinct games and roles, skills 1-4 vs 7-10."""
    skills = [1, 2, 3, 4, 7, 8, 9, 10]
    pool = Pool(
        [make_candidate(80, skill=s, game=f"G{n}", role=f"R{n}") for n, s in enumerate(skills)]
    )
    return _assignment(pool, [[0, 1, 2, 3], [4, 5, 6, 7]])


def _improving_exchange_exists(assignment, rules):
    groups = sorted((g for g in assignment.groups if g.members), key=lambda g: g.mean_skill)
    low, high = groups[0], groups[-1]
    gap = high.mean_skill - low.mean_skill
    pool = assignment.pool
    for a in low.members:
        for b in high.members:
            if not is_valid_exchange(assignment.members(low), assignment.members(high), pool[a], pool[b], rules):
                continue
            delta = pool[b].skill_level - pool[a].skill_level
            new_gap = abs((high.mean_skill - delta / high.size) - (low.mean_skill + delta / low.size))
            if new_gap < gap - 1e-9:
                return True
    return False


def _random_pool(seed, size=40):
    rng = random.Random(seed)
    roles = list(ROLES)
    candidates = [
        Candidate(
            candidate_id=f"R{seed}-{i}",
            name=f"Random {i}",
            skill_level=rng.randint(1, 10),
            personality_score=rng.choice([95, 92, 80, 75, 72, 60, 55, 30]),
            preferred_game=rng.choice(GAMES),
            preferred_role=rng.choice(roles),
        )
        for i in range(size)
    ]
    return Pool(candidates)


def test_skill_pass_narrows_gap(make_candidate):
    """Test skill exchanges bring team means together."""
    assignment = _skill_gap_assignment(make_candidate)
    result = LocalSearchBalancer().balance(assignment)

    means = sorted(g.mean_skill for g in result.assignment.groups)
    assert means[-1] - means[0] < 6.0
    assert result.converged
    assert result.exchanges
    assert all(e.stage == SKILL_STAGE for e in result.exchanges)
    gap = means[-1] - means[0]
    assert gap < 1.0 or not _improving_exchange_exists(result.assignment, CompositionRules())


def test_first_skill_exchange(make_candidate):
    """Test the first valid improving pair in member order is taken."""
    assignment = _skill_gap_assignment(make_candidate)
    result = LocalSearchBalancer(policy=BalancePolicy(max_iterations=1)).balance(assignment)

    assert result.exchanges == [Exchange(SKILL_STAGE, "Team-1", "Team-2", 0, 4)]
    assert result.iterations == 1
    # Means 4.0 and 7.0 after one swap, still above threshold at the cap
    assert not result.converged
    assert [g.mean_skill for g in result.assignment.groups] == [pytest.approx(4.0), pytest.approx(7.0)]


def test_skill_pass_stops_under_threshold(make_candidate):
    """Test no exchange when the gap is already under the threshold."""
    assignment = _skill_gap_assignment(make_candidate)
    result = LocalSearchBalancer(policy=BalancePolicy(improvement_threshold=10.0)).balance(assignment)

    assert result.exchanges == []
    assert result.converged
    assert result.iterations == 0


def test_balance_does_not_modify_input(make_candidate):
    """Test balancing works on a copy."""
    assignment = _skill_gap_assignment(make_candidate)
    before = [list(g.members) for g in assignment.groups]

    result = LocalSearchBalancer().balance(assignment)

    assert [list(g.members) for g in assignment.groups] == before
    assert result.assignment is not assignment


def test_game_pass_relieves_over_cap(make_candidate):
    """Test a team over the game cap swaps a player out."""
    games = ["Chess", "Chess", "Chess", "FIFA", "FIFA", "Valorant", "DOTA 2", "Basketball"]
    pool = Pool([make_candidate(80, game=g, role=f"R{n}") for n, g in enumerate(games)])
    assignment = _assignment(pool, [[0, 1, 2, 3], [4, 5, 6, 7]])

    result = LocalSearchBalancer(policy=BalancePolicy(max_iterations=0)).balance(assignment)

    assert result.exchanges == [Exchange(GAME_STAGE, "Team-1", "Team-2", 0, 4)]
    report = build_report(result.assignment)
    assert all(t.games_ok for t in report.teams)


def test_game_pass_cannot_fix_single_game_pool(make_candidate):
    """Test a pool where everyone plays the same game stays over the cap."""
    pool = Pool(
        [make_candidate(80, skill=s, game="Chess", role=f"R{s}") for s in range(1, 9)]
    )
    outcome = BalancedFormationStrategy(seed=1).run(pool, 4)

    assert outcome.balanced.exchanges == []
    report = build_report(outcome.assignment)
    assert all(t.size == 4 for t in report.teams)
    assert all(not t.games_ok for t in report.teams)
    assert all(t.game_counts["Chess"] == 4 for t in report.teams)


def test_role_pass_adds_missing_role(make_candidate):
    """Test a team with too few roles trades a duplicate role for a missing one."""
    roles = ["Attacker", "Attacker", "Attacker", "Defender", "Strategist", "Supporter", "Coordinator", "Defender"]
    pool = Pool([make_candidate(80, game=f"G{n}", role=r) for n, r in enumerate(roles)])
    assignment = _assignment(pool, [[0, 1, 2, 3], [4, 5, 6, 7]])

    result = LocalSearchBalancer(policy=BalancePolicy(max_iterations=0)).balance(assignment)

    assert result.exchanges == [Exchange(ROLE_STAGE, "Team-1", "Team-2", 0, 4)]
    report = build_report(result.assignment)
    assert all(t.roles_ok for t in report.teams)


def test_role_pass_keeps_donor_minimum(make_candidate):
    """Test a donor meeting the role minimum is not pushed below it."""
    roles = ["Attacker"] * 4 + ["Attacker", "Strategist", "Supporter", "Supporter"]
    pool = Pool([make_candidate(80, game=f"G{n}", role=r) for n, r in enumerate(roles)])
    assignment = _assignment(pool, [[0, 1, 2, 3], [4, 5, 6, 7]])

    result = LocalSearchBalancer(policy=BalancePolicy(max_iterations=0)).balance(assignment)

    # Taking the only Strategist would leave Team-2 with two roles
    assert result.exchanges == [Exchange(ROLE_STAGE, "Team-1", "Team-2", 0, 6)]
    report = build_report(result.assignment)
    assert report.teams[1].roles_ok


def test_under_full_teams_are_not_exchanged(make_candidate):
    """Test teams below capacity never take part in an exchange."""
    skills = [1, 2, 3, 8, 9, 10]
    pool = Pool(
        [make_candidate(80, skill=s, game=f"G{n}", role=f"R{n}") for n, s in enumerate(skills)]
    )
    assignment = _assignment(pool, [[0, 1, 2], [3, 4, 5]], team_size=4)

    result = LocalSearchBalancer().balance(assignment)

    assert result.exchanges == []
    assert [g.members for g in result.assignment.groups] == [[0, 1, 2], [3, 4, 5]]


def test_full_team_not_exchanged_with_under_full_team(make_candidate):
    """Test an over-cap full team is not relieved from an under-full one."""
    games = ["Chess", "Chess", "Chess", "FIFA", "Valorant", "DOTA 2", "Basketball"]
    pool = Pool([make_candidate(80, game=g, role=f"R{n}") for n, g in enumerate(games)])
    assignment = _assignment(pool, [[0, 1, 2, 3], [4, 5, 6]], team_size=4)

    result = LocalSearchBalancer(policy=BalancePolicy(max_iterations=0)).balance(assignment)

    assert result.exchanges == []
    assert not build_report(result.assignment).teams[0].games_ok


@pytest.mark.parametrize("seed", range(5))
def test_journal_replay_preserves_rules(seed):
    """Test every committed exchange keeps sizes and hard rules for both teams."""
    pool = _random_pool(seed)
    rules = CompositionRules()
    outcome = BalancedFormationStrategy(rules=rules, seed=seed).run(pool, 5)

    working = outcome.allocated.copy()
    groups = {g.group_id: g for g in working.groups}
    for exchange in outcome.balanced.exchanges:
        sizes = (groups[exchange.group_a].size, groups[exchange.group_b].size)
        apply_exchange(working, exchange)
        a, b = groups[exchange.group_a], groups[exchange.group_b]
        assert (a.size, b.size) == sizes
        assert satisfies_hard_rules(working.members(a), rules)
        assert satisfies_hard_rules(working.members(b), rules)

    assert [g.members for g in working.groups] == [g.members for g in outcome.assignment.groups]


@pytest.mark.parametrize("seed", range(5))
def test_balanced_output_has_no_duplicates(seed):
    """Test balancing never duplicates or drops a placed candidate."""
    pool = _random_pool(seed, size=37)
    outcome = BalancedFormationStrategy(seed=seed).run(pool, 4)

    before = sorted(outcome.allocated.placed)
    after = sorted(outcome.assignment.placed)
    assert before == after
    assert len(after) == len(set(after))
    assert all(g.size == 4 for g in outcome.assignment.groups)


@pytest.mark.parametrize("seed", range(5))
def test_converged_skill_pass_property(seed):
    """Test convergence means the extremes are close or no valid improving exchange remains."""
    pool = _random_pool(seed)
    rules = CompositionRules()
    policy = BalancePolicy(max_iterations=1000, variety_rounds=0, diversity_rounds=0)
    outcome = BalancedFormationStrategy(rules=rules, policy=policy, seed=seed).run(pool, 5)

    assert outcome.balanced.converged
    means = sorted(g.mean_skill for g in outcome.assignment.groups)
    assert means[-1] - means[0] < policy.improvement_threshold or not _improving_exchange_exists(
        outcome.assignment, rules
    )
