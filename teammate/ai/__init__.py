"""Constraint-programming formation strategies."""

from .cp_sat_strategy import CpSatFormationStrategy

__all__ = ["CpSatFormationStrategy"]
