"""CP-SAT constraint-based formation strategy."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Sequence, Tuple

from ortools.sat.python import cp_model

from teammate.domain.roster import LEADER, THINKER, Assignment, Candidate, Pool, as_pool, create_empty_groups
from teammate.engine.base import FormationStrategy
from teammate.services.constraints import CompositionRules, validate_formation_request


class CpSatFormationStrategy(FormationStrategy):
    """
    CP-SAT based strategy that trades skill spread against rule violations.

    Uses Google OR-Tools CP-SAT solver. Team size and single membership are
    hard constraints; composition rules are soft (penalized) so that pools
    that cannot satisfy them still produce teams:
    - Leader / Thinker counts above their caps
    - Members per game above the game cap
    - Distinct roles below the minimum
    """

    name = "cp_sat"

    def __init__(self, rules: CompositionRules | None = None, settings=None):
        """
        Initialize CP-SAT strategy.

        Args:
            rules: Composition limits
            settings: CpSatSettings (time limit, workers, objective weights)
        """
        self.rules = rules or CompositionRules()
        self.max_time_seconds = getattr(settings, "max_time_seconds", 10.0)
        self.workers = getattr(settings, "workers", 4)
        self.spread_weight = getattr(settings, "spread_weight", 10)
        self.penalty_weight = getattr(settings, "penalty_weight", 100)

    def form_groups(self, candidates: Sequence[Candidate] | Pool, team_size: int) -> Assignment:
        pool = as_pool(candidates)
        validate_formation_request(len(pool), team_size)
        team_count = len(pool) // team_size

        model = cp_model.CpModel()
        x = self._create_variables(model, pool, team_count)
        self._add_structure_constraints(model, x, pool, team_count, team_size)
        spread = self._add_skill_spread(model, x, pool, team_count, team_size)
        violations = self._add_rule_penalties(model, x, pool, team_count, team_size)

        model.Minimize(
            spread * int(self.spread_weight) + sum(violations) * int(self.penalty_weight)
        )

        solver = cp_model.CpSolver()
        solver.parameters.max_time_in_seconds = float(self.max_time_seconds)
        solver.parameters.num_search_workers = int(self.workers)

        status = solver.Solve(model)
        if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
            raise RuntimeError(
                f"CP-SAT solver failed to find teams (status: {self._status_name(status)})"
            )
        return self._extract_solution(solver, x, pool, team_count, team_size)

    def _create_variables(
        self,
        model: cp_model.CpModel,
        pool: Pool,
        team_count: int,
    ) -> Dict[Tuple[int, int], cp_model.IntVar]:
        """x[(i, t)] is 1 when pool member i joins team t."""
        return {
            (i, t): model.NewBoolVar(f"assign_p{i}_t{t}")
            for i in pool.indices()
            for t in range(team_count)
        }

    def _add_structure_constraints(self, model, x, pool: Pool, team_count: int, team_size: int) -> None:
        for i in pool.indices():
            model.Add(sum(x[(i, t)] for t in range(team_count)) <= 1)
        for t in range(team_count):
            model.Add(sum(x[(i, t)] for i in pool.indices()) == team_size)

    def _add_skill_spread(self, model, x, pool: Pool, team_count: int, team_size: int):
        """Spread between the strongest and weakest team skill totals (equal sizes, so totals compare like means)."""
        upper = team_size * max((c.skill_level for c in pool), default=0)
        totals = []
        for t in range(team_count):
            total = model.NewIntVar(0, upper, f"skill_t{t}")
            model.Add(total == sum(x[(i, t)] * pool[i].skill_level for i in pool.indices()))
            totals.append(total)

        highest = model.NewIntVar(0, upper, "skill_max")
        lowest = model.NewIntVar(0, upper, "skill_min")
        model.AddMaxEquality(highest, totals)
        model.AddMinEquality(lowest, totals)

        spread = model.NewIntVar(0, upper, "skill_spread")
        model.Add(spread == highest - lowest)
        return spread

    def _add_rule_penalties(self, model, x, pool: Pool, team_count: int, team_size: int) -> List:
        rules = self.rules
        by_category: Dict[str, List[int]] = defaultdict(list)
        by_game: Dict[str, List[int]] = defaultdict(list)
        by_role: Dict[str, List[int]] = defaultdict(list)
        for i in pool.indices():
            candidate = pool[i]
            by_category[candidate.category].append(i)
            by_game[candidate.preferred_game].append(i)
            by_role[candidate.preferred_role].append(i)

        violations = []

        def excess(name: str, members: List[int], cap: int, t: int):
            var = model.NewIntVar(0, team_size, name)
            model.Add(var >= sum(x[(i, t)] for i in members) - cap)
            violations.append(var)

        for t in range(team_count):
            excess(f"leaders_over_t{t}", by_category.get(LEADER, []), rules.leader_cap, t)
            excess(f"thinkers_over_t{t}", by_category.get(THINKER, []), rules.thinker_cap, t)
            for g, (game, members) in enumerate(sorted(by_game.items())):
                excess(f"game{g}_over_t{t}", members, rules.game_cap, t)

            present = []
            for r, (role, members) in enumerate(sorted(by_role.items())):
                has_role = model.NewBoolVar(f"role{r}_in_t{t}")
                model.Add(has_role <= sum(x[(i, t)] for i in members))
                present.append(has_role)
            deficit = model.NewIntVar(0, rules.min_unique_roles, f"roles_short_t{t}")
            model.Add(deficit >= rules.min_unique_roles - sum(present))
            violations.append(deficit)

        return violations

    def _extract_solution(self, solver, x, pool: Pool, team_count: int, team_size: int) -> Assignment:
        groups = create_empty_groups(team_count, team_size)
        for t, group in enumerate(groups):
            for i in pool.indices():
                if solver.Value(x[(i, t)]) == 1:
                    group.add(i, pool)
        return Assignment(pool=pool, team_size=team_size, groups=tuple(groups))

    def _status_name(self, status: int) -> str:
        """Convert solver status to string."""
        status_map = {
            cp_model.OPTIMAL: "OPTIMAL",
            cp_model.FEASIBLE: "FEASIBLE",
            cp_model.INFEASIBLE: "INFEASIBLE",
            cp_model.MODEL_INVALID: "MODEL_INVALID",
            cp_model.UNKNOWN: "UNKNOWN",
        }
        return status_map.get(status, f"UNKNOWN({status})")
