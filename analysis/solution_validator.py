"""Validierung fertiger Stundenpläne.

Prüft einen Plan unabhängig vom Builder auf Überschneidungen als
Sicherheitsnetz, z.B. für geladene Pläne oder Pläne ohne Konfliktprüfung.
"""

from itertools import combinations
from typing import Literal

from pydantic import BaseModel

from models.schedule import Schedule


class ValidationViolation(BaseModel):
    """Eine einzelne Verletzung."""

    severity: Literal["error", "warning"]
    constraint: str      # z.B. "section_conflict"
    description: str
    entity: str          # Sektions-ID(s)


class ValidationReport(BaseModel):
    """Ergebnis der Validierung."""

    violations: list[ValidationViolation]
    is_valid: bool       # True wenn keine Errors (Warnings ok)

    @property
    def errors(self) -> list[ValidationViolation]:
        return [v for v in self.violations if v.severity == "error"]

    @property
    def warnings(self) -> list[ValidationViolation]:
        return [v for v in self.violations if v.severity == "warning"]

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        status = (
            "[bold green]✓ VALIDE[/bold green]"
            if self.is_valid
            else "[bold red]✗ VERLETZUNGEN GEFUNDEN[/bold red]"
        )
        lines = [status, f"Fehler: {len(self.errors)} | Warnungen: {len(self.warnings)}"]
        console.print(Panel("\n".join(lines), title="Plan-Validierung", border_style="cyan"))

        if not self.violations:
            console.print("[dim]Keine Verletzungen gefunden.[/dim]")
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=8)
        table.add_column("Prüfung", width=20)
        table.add_column("Sektion", width=14)
        table.add_column("Beschreibung")

        for v in self.violations:
            color = "red" if v.severity == "error" else "yellow"
            table.add_row(
                f"[{color}]{v.severity.upper()}[/{color}]",
                v.constraint,
                v.entity,
                v.description,
            )
        console.print(table)


class ScheduleValidator:
    """Prüft einen Schedule auf Überschneidungen und doppelte Kurse."""

    def validate(self, schedule: Schedule) -> ValidationReport:
        """Führt alle Checks durch und gibt einen ValidationReport zurück."""
        violations: list[ValidationViolation] = []
        violations.extend(self._check_section_conflicts(schedule))
        violations.extend(self._check_block_out_conflicts(schedule))
        violations.extend(self._check_duplicate_courses(schedule))
        violations.extend(self._check_non_open(schedule))
        return ValidationReport(
            violations=violations,
            is_valid=not any(v.severity == "error" for v in violations),
        )

    def _check_section_conflicts(self, schedule: Schedule) -> list[ValidationViolation]:
        result = []
        for a, b in combinations(schedule.selected_sections, 2):
            if a.conflicts_with(b):
                result.append(ValidationViolation(
                    severity="error",
                    constraint="section_conflict",
                    description=f"Konflikt zwischen {a.description} und {b.description}",
                    entity=f"{a.section_id}/{b.section_id}",
                ))
        return result

    def _check_block_out_conflicts(self, schedule: Schedule) -> list[ValidationViolation]:
        result = []
        for section in schedule.selected_sections:
            for block in schedule.block_out_sections or ():
                if section.conflicts_with(block):
                    result.append(ValidationViolation(
                        severity="error",
                        constraint="block_out_conflict",
                        description=f"{section.description} liegt in Sperrzeit {block.description}",
                        entity=str(section.section_id),
                    ))
        return result

    def _check_duplicate_courses(self, schedule: Schedule) -> list[ValidationViolation]:
        seen: dict[str, int] = {}
        result = []
        for section in schedule.selected_sections:
            course_id = section.source_course.course_id
            if course_id in seen:
                result.append(ValidationViolation(
                    severity="error",
                    constraint="duplicate_course",
                    description=f"{course_id} ist mehrfach belegt",
                    entity=f"{seen[course_id]}/{section.section_id}",
                ))
            else:
                seen[course_id] = section.section_id
        return result

    def _check_non_open(self, schedule: Schedule) -> list[ValidationViolation]:
        return [
            ValidationViolation(
                severity="warning",
                constraint="non_open_section",
                description=f"{s.description} ist nicht offen ({s.status.value})",
                entity=str(s.section_id),
            )
            for s in schedule.selected_sections
            if not s.is_open
        ]
