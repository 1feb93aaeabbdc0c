"""Orchestrator - runs the categorize / allocate / balance pipeline and reports on it."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from sqlalchemy.orm import Session

from teammate.domain.repositories import FormationRunRepository, ParticipantRepository
from teammate.domain.models import Participant
from teammate.domain.roster import CATEGORIES, Assignment, Candidate, Pool, as_pool
from teammate.services.constraints import CompositionRules, validate_formation_request
from teammate.services.report import FormationReport, build_report

from .allocator import GreedyAllocator
from .balancer import BalancePolicy, BalanceResult, LocalSearchBalancer
from .base import FormationStrategy
from .categorizer import categorize, categorize_concurrently


@dataclass
class FormationOutcome:
    """Intermediate and final rosters of one balanced run."""

    buckets: Dict[str, List[int]]
    allocated: Assignment
    balanced: BalanceResult

    @property
    def assignment(self) -> Assignment:
        return self.balanced.assignment


class BalancedFormationStrategy(FormationStrategy):
    """
    Greedy allocation followed by local-search balancing.

    The random source is explicit: pass `seed` (or an `rng`) to reproduce
    the exact bucket shuffle, and therefore the exact teams.
    """

    name = "balanced"

    def __init__(
        self,
        rules: CompositionRules | None = None,
        policy: BalancePolicy | None = None,
        seed: int | None = None,
        rng: random.Random | None = None,
        parallel: bool = False,
        workers: int = 4,
        timeout: float = 30.0,
    ):
        self.rules = rules or CompositionRules()
        self.policy = policy or BalancePolicy()
        self.rng = rng or random.Random(seed)
        self.parallel = parallel
        self.workers = workers
        self.timeout = timeout
        self.allocator = GreedyAllocator(self.rules)
        self.balancer = LocalSearchBalancer(self.rules, self.policy)

    def run(self, candidates: Sequence[Candidate] | Pool, team_size: int) -> FormationOutcome:
        """Run every stage and keep the intermediate results."""
        pool = as_pool(candidates)
        validate_formation_request(len(pool), team_size)

        if self.parallel:
            buckets = categorize_concurrently(pool, self.rng, self.workers, self.timeout)
        else:
            buckets = categorize(pool, self.rng)

        allocated = self.allocator.allocate(buckets, team_size, pool)
        balanced = self.balancer.balance(allocated)
        return FormationOutcome(buckets=buckets, allocated=allocated, balanced=balanced)

    def form_groups(self, candidates: Sequence[Candidate] | Pool, team_size: int) -> Assignment:
        return self.run(candidates, team_size).assignment


def build_strategy(cfg, seed: int | None = None, strategy: str | None = None) -> FormationStrategy:
    """
    Create the strategy named in the config.

    Args:
        cfg: FormationConfig
        seed: Overrides cfg.seed when given
        strategy: Overrides cfg.strategy when given
    """
    name = strategy or cfg.strategy
    seed = cfg.seed if seed is None else seed

    if name == "balanced":
        return BalancedFormationStrategy(
            rules=cfg.rules,
            policy=cfg.balance,
            seed=seed,
            parallel=cfg.categorizer.parallel,
            workers=cfg.categorizer.workers,
            timeout=cfg.categorizer.timeout_seconds,
        )
    if name == "cp_sat":
        from teammate.ai.cp_sat_strategy import CpSatFormationStrategy

        return CpSatFormationStrategy(rules=cfg.rules, settings=cfg.cp_sat)
    raise ValueError(f"Unknown formation strategy: {name}")


def form_teams(
    candidates: Sequence[Candidate] | Pool,
    team_size: int,
    cfg,
    seed: int | None = None,
    strategy: str | None = None,
    session: Session | None = None,
    persist: bool = False,
) -> Tuple[Assignment, FormationReport]:
    """
    Convenience function to form teams, report on them and optionally store the run.

    Args:
        candidates: Candidate pool
        team_size: Members per team
        cfg: FormationConfig
        seed: Optional seed override
        strategy: Optional strategy name override
        session: Database session, required when persist is True
        persist: If True, save participants and the run to the database

    Returns:
        (assignment, report)
    """
    pool = as_pool(candidates)
    formation = build_strategy(cfg, seed=seed, strategy=strategy)
    name = formation.get_strategy_name()

    print(f"[INFO] Forming teams of {team_size} from {len(pool)} participants ({name} strategy)")
    distribution = {category: 0 for category in CATEGORIES}
    for candidate in pool:
        distribution[candidate.category] += 1
    print(f"[INFO] Personality distribution: {distribution}")

    assignment = formation.form_groups(pool, team_size)
    report = build_report(assignment, cfg.rules)
    print(
        f"[OK] Formed {len(assignment.groups)} teams using {report.placed} participants "
        f"({len(report.compliant)} compliant, {report.unplaced} not assigned)"
    )

    if persist:
        if session is None:
            raise ValueError("A database session is required to persist a formation run")
        # Participants loaded from CSV may not be stored yet.
        missing = [
            Participant.from_candidate(c)
            for c in pool
            if ParticipantRepository.get_by_id(session, c.candidate_id) is None
        ]
        if missing:
            ParticipantRepository.upsert_many(session, missing)
        run = FormationRunRepository.create_run(
            session,
            assignment,
            strategy=name,
            seed=cfg.seed if seed is None else seed,
            compliant_teams=len(report.compliant),
        )
        print(f"[INFO] Persisted formation run {run.id} to database")

    return assignment, report
