"""Solver-Modul (Backtracking-Suche über Kurs-Sektionen)."""

from .scheduler import ScheduleBuilder, BuildResult, SearchBudget, NoSchedulesPossibleError
from .report import ConflictReport

__all__ = [
    "ScheduleBuilder",
    "BuildResult",
    "SearchBudget",
    "NoSchedulesPossibleError",
    "ConflictReport",
]
