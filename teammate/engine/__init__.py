"""Team formation engine."""

from .allocator import GreedyAllocator
from .balancer import BalancePolicy, BalanceResult, Exchange, LocalSearchBalancer
from .base import FormationStrategy
from .categorizer import categorize, categorize_concurrently
from .orchestrator import BalancedFormationStrategy, build_strategy, form_teams

__all__ = [
    "FormationStrategy",
    "BalancedFormationStrategy",
    "GreedyAllocator",
    "LocalSearchBalancer",
    "BalancePolicy",
    "BalanceResult",
    "Exchange",
    "categorize",
    "categorize_concurrently",
    "build_strategy",
    "form_teams",
]
