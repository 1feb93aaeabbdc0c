"""Exceptions raised by the team formation system."""


class TeamFormationError(ValueError):
    """Invalid formation request (empty pool, bad team size)."""


class InvalidDataError(ValueError):
    """Participant or team data that cannot be read or written."""
