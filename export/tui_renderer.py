"""Terminal-Anzeige eines Stundenplans (Rich).

Wird von `build` und `schedules show` verwendet.
"""

from typing import TYPE_CHECKING, Optional

from models.meeting_time import DAY_NAMES

if TYPE_CHECKING:
    from rich.console import Console
    from models.schedule import Schedule
    from models.section import Section


def _day_cells(section: "Section", num_days: int) -> list[str]:
    cells = [""] * num_days
    for mt in section.meeting_times:
        for day in mt.days:
            if day < num_days:
                label = f"{mt.start_time}–{mt.end_time}"
                cells[day] = f"{cells[day]}\n{label}" if cells[day] else label
    return cells


def _used_days(schedule: "Schedule") -> int:
    """Mo-Fr immer, Sa/So nur wenn ein Termin dort liegt."""
    sections = list(schedule.selected_sections) + list(schedule.block_out_sections or ())
    max_day = max(
        (d for s in sections for mt in s.meeting_times for d in mt.days),
        default=4,
    )
    return max(5, max_day + 1)


def render_schedule_rows(schedule: "Schedule") -> list[list[str]]:
    """Gibt Tabellenzeilen für den Plan zurück.

    Jede Zeile: [Kurs, Sektion, Status, Mo, Di, Mi, Do, Fr(, Sa, So)]
    Sperrzeiten folgen am Ende mit Status "Sperrzeit".
    """
    num_days = _used_days(schedule)
    rows: list[list[str]] = []

    for section in schedule.selected_sections:
        course = section.source_course
        rows.append(
            [course.description, section.section_number, section.status.value]
            + _day_cells(section, num_days)
        )

    for block in schedule.block_out_sections or ():
        rows.append(
            [block.source_course.title or "Sperrzeit", "—", "Sperrzeit"]
            + _day_cells(block, num_days)
        )

    return rows


def print_schedule(schedule: "Schedule", console: Optional["Console"] = None) -> None:
    """Gibt den Plan als Rich-Tabelle aus."""
    from rich.console import Console
    from rich.table import Table
    from rich import box

    console = console or Console()
    num_days = _used_days(schedule)
    title = f"{schedule.name} (Semester {schedule.semester_number})"
    if schedule.conflicts_ignored:
        title += " [yellow]– ohne Konfliktprüfung[/yellow]"

    table = Table(title=title, box=box.ROUNDED, show_lines=True)
    table.add_column("Kurs", style="bold")
    table.add_column("Sekt.")
    table.add_column("Status")
    for day in DAY_NAMES[:num_days]:
        table.add_column(day, justify="center")

    for row in render_schedule_rows(schedule):
        table.add_row(*row)
    console.print(table)
