"""Services for composition rules and reporting."""

from .constraints import CompositionRules, is_valid_exchange, validate_formation_request
from .report import FormationReport, TeamReport, build_report, summarize_report

__all__ = [
    "CompositionRules",
    "is_valid_exchange",
    "validate_formation_request",
    "FormationReport",
    "TeamReport",
    "build_report",
    "summarize_report",
]
