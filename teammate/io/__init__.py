"""I/O utilities for CSV import/export."""

from .import_csv import import_participants_csv, read_participants_csv
from .export_csv import export_participants_csv, export_run_csv, export_teams_csv

__all__ = [
    "import_participants_csv",
    "read_participants_csv",
    "export_participants_csv",
    "export_run_csv",
    "export_teams_csv",
]
