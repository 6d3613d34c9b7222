"""Backtracking-Stundenplanbauer.

Architektur:
  - Tiefensuche über die Kursliste: pro Kurs genau eine Sektion
  - Sektionen werden pro Ebene zufällig gemischt (verschiedene Pläne bei
    wiederholtem Aufruf, Korrektheit hängt nicht davon ab)
  - Jede Kollision mit Sperrzeiten oder bereits gewählten Sektionen wird
    im ConflictReport festgehalten, nicht nur die erste
  - Unzulösbarkeit ist ein normales Ergebnis (BuildResult), keine Exception
  - Optionales Suchbudget (Schritte / Zeit / Abbruch von außen)
"""

import logging
import random
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Iterator, Optional, Sequence

from models.course import Course
from models.schedule import Schedule
from models.section import Section
from solver.report import ConflictReport

if TYPE_CHECKING:
    from config.schema import PlannerConfig

logger = logging.getLogger(__name__)


class NoSchedulesPossibleError(Exception):
    """Ein gescheitertes BuildResult wurde wie ein erfolgreiches verwendet."""

    def __init__(self, report: ConflictReport) -> None:
        super().__init__(report.describe() or "Kein Stundenplan möglich")
        self.report = report


# ─── Suchbudget ───────────────────────────────────────────────────────────────

class SearchBudget:
    """Begrenzt die Suche über Schrittzahl, Zeitlimit oder expliziten Abbruch.

    Ein Schritt ist die Prüfung einer wählbaren Sektion.
    """

    def __init__(
        self,
        max_steps: Optional[int] = None,
        time_limit_seconds: Optional[float] = None,
    ) -> None:
        self.max_steps = max_steps
        self.time_limit_seconds = time_limit_seconds
        self._steps = 0
        self._deadline: Optional[float] = None
        self._cancelled = False

    @property
    def steps(self) -> int:
        return self._steps

    def start(self) -> None:
        """Setzt Zähler und Deadline zurück (ein gesetzter Abbruch bleibt bestehen)."""
        self._steps = 0
        self._deadline = None
        if self.time_limit_seconds is not None:
            self._deadline = time.monotonic() + self.time_limit_seconds

    def cancel(self) -> None:
        self._cancelled = True

    def consume(self) -> Optional[str]:
        """Verbraucht einen Schritt. Gibt den Abbruchgrund zurück, falls erschöpft."""
        if self._cancelled:
            return "Suche wurde abgebrochen"
        if self.max_steps is not None and self._steps >= self.max_steps:
            return f"Suche nach {self._steps} Schritten abgebrochen (Schrittlimit)"
        if self._deadline is not None and time.monotonic() > self._deadline:
            return (
                f"Suche nach {self.time_limit_seconds}s abgebrochen (Zeitlimit, "
                f"{self._steps} Schritte)"
            )
        self._steps += 1
        return None


# ─── Ergebnis ─────────────────────────────────────────────────────────────────

@dataclass
class BuildResult:
    """Ergebnis eines Suchlaufs: gewählte Sektionen ODER Begründung."""

    sections: Optional[list[Section]]
    report: ConflictReport
    conflicts_checked: bool = True
    aborted: bool = False
    steps: int = 0

    @property
    def ok(self) -> bool:
        return self.sections is not None

    def to_schedule(
        self,
        name: str,
        semester_number: int,
        block_outs: Optional[Sequence[Section]] = None,
    ) -> Schedule:
        """Verpackt die gewählten Sektionen in einen neuen Stundenplan (ID 0)."""
        if self.sections is None:
            raise NoSchedulesPossibleError(self.report)
        return Schedule(
            name=name,
            semester_number=semester_number,
            selected_sections=self.sections,
            block_out_sections=block_outs,
            conflicts_ignored=not self.conflicts_checked,
        )


@dataclass
class _Outcome:
    sections: Optional[list[Section]]
    report: ConflictReport
    aborted: bool = False


@contextmanager
def _provisional(selected: list[Section], section: Section) -> Iterator[None]:
    """Hängt `section` für die Dauer des Blocks an und entfernt sie danach wieder."""
    selected.append(section)
    try:
        yield
    finally:
        selected.pop()


def _no_eligible_message(course: Course) -> str:
    return f"Keine wählbare Sektion für Kurs: {course.description}"


# ─── Haupt-Builder ────────────────────────────────────────────────────────────

class ScheduleBuilder:
    """Wählt pro Kurs genau eine Sektion.

    Verwendung:
        builder = ScheduleBuilder()
        result = builder.build(courses, block_outs)
        if result.ok:
            schedule = result.to_schedule("Mein Plan", 2258, block_outs)
        else:
            print(result.report.describe())
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        budget: Optional[SearchBudget] = None,
        allow_non_open: bool = False,
    ) -> None:
        # Eigener, frisch geseedeter Generator; Tests übergeben einen festen Seed
        self._rng = rng if rng is not None else random.Random()
        self.budget = budget if budget is not None else SearchBudget()
        self.allow_non_open = allow_non_open

    @classmethod
    def from_config(
        cls, config: "PlannerConfig", rng: Optional[random.Random] = None
    ) -> "ScheduleBuilder":
        budget = SearchBudget(
            max_steps=config.search.max_steps,
            time_limit_seconds=config.search.time_limit_seconds,
        )
        return cls(rng=rng, budget=budget, allow_non_open=config.allow_non_open_classes)

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def build(
        self,
        courses: Iterable[Course],
        block_outs: Iterable[Section] = (),
        allow_non_open: Optional[bool] = None,
    ) -> BuildResult:
        """Sucht einen konfliktfreien Plan (Backtracking)."""
        courses = list(courses)
        block_outs = list(block_outs)
        if allow_non_open is None:
            allow_non_open = self.allow_non_open

        # Kurse ohne wählbare Sektion machen jeden Plan unmöglich
        unreachable = [
            c for c in courses
            if not any(allow_non_open or s.is_open for s in c.sections)
        ]
        if unreachable:
            report = ConflictReport()
            for course in unreachable:
                report.add_message(_no_eligible_message(course))
            logger.info(
                f"Kein Stundenplan möglich: {len(unreachable)} Kurse ohne wählbare Sektion"
            )
            return BuildResult(sections=None, report=report)

        t0 = time.time()
        self.budget.start()
        outcome = self._search(0, courses, [], block_outs, allow_non_open)
        elapsed = time.time() - t0

        if outcome.sections is not None:
            logger.info(
                f"Stundenplan gefunden: {len(outcome.sections)} Kurse | "
                f"{self.budget.steps} Schritte | {elapsed:.3f}s"
            )
        elif outcome.aborted:
            logger.warning(f"Suche abgebrochen nach {self.budget.steps} Schritten")
        else:
            logger.info(
                f"Kein Stundenplan möglich: {len(outcome.report)} Konfliktmeldungen | "
                f"{self.budget.steps} Schritte"
            )
        return BuildResult(
            sections=outcome.sections,
            report=outcome.report,
            aborted=outcome.aborted,
            steps=self.budget.steps,
        )

    def build_ignoring_conflicts(
        self,
        courses: Iterable[Course],
        allow_non_open: Optional[bool] = None,
    ) -> BuildResult:
        """Nimmt pro Kurs die erste wählbare Sektion, ohne Konfliktprüfung.

        Kein Backtracking: ein Kurs ohne wählbare Sektion beendet die Suche sofort.
        """
        if allow_non_open is None:
            allow_non_open = self.allow_non_open

        selected: list[Section] = []
        for index, course in enumerate(courses):
            candidates = list(course.sections)
            self._rng.shuffle(candidates)
            choice = next(
                (s for s in candidates if allow_non_open or s.is_open), None
            )
            if choice is None:
                logger.info(f"Kurs {index} ({course.course_id}): keine wählbare Sektion")
                return BuildResult(
                    sections=None,
                    report=ConflictReport(_no_eligible_message(course)),
                    conflicts_checked=False,
                )
            logger.debug(f"Kurs {index}: wähle {choice.description}")
            selected.append(choice)

        logger.info(f"Stundenplan ohne Konfliktprüfung: {len(selected)} Kurse")
        return BuildResult(sections=selected, report=ConflictReport(), conflicts_checked=False)

    # ─── Suche ────────────────────────────────────────────────────────────────

    def _search(
        self,
        index: int,
        courses: list[Course],
        selected: list[Section],
        block_outs: list[Section],
        allow_non_open: bool,
    ) -> _Outcome:
        if index == len(courses):
            return _Outcome(sections=list(selected), report=ConflictReport())

        course = courses[index]
        report = ConflictReport()
        candidates = list(course.sections)
        self._rng.shuffle(candidates)
        logger.debug(f"Kurs {index} ({course.course_id}): {len(candidates)} Sektionen")

        for section in candidates:
            if not allow_non_open and not section.is_open:
                continue
            reason = self.budget.consume()
            if reason is not None:
                return _Outcome(sections=None, report=ConflictReport(reason), aborted=True)

            conflict = False
            for other in block_outs:
                if section.conflicts_with(other):
                    report.add_conflict(section, other)
                    conflict = True
            for other in selected:
                if section.conflicts_with(other):
                    report.add_conflict(section, other)
                    conflict = True
            if conflict:
                continue

            with _provisional(selected, section):
                outcome = self._search(index + 1, courses, selected, block_outs, allow_non_open)
            if outcome.sections is not None or outcome.aborted:
                return outcome
            report.merge(outcome.report)

        return _Outcome(sections=None, report=report)
