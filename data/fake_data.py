"""Testdaten-Generator für den Kursplaner.

Erzeugt ein zufälliges, aber realistisches Kursangebot:
  - Kurse aus einem festen Fächer-Pool (Department + Nummer + Titel)
  - Pro Kurs 2-5 Sektionen im Mo/Mi/Fr- (50 min) oder Di/Do-Raster (80 min)
  - Ein Teil der Sektionen ist geschlossen oder auf Warteliste
  - Optional eine Sperrzeit (Freitagvormittag)
"""

import random
from typing import Optional

from models.catalog import Catalog
from models.course import Course, block_out_course
from models.meeting_time import MeetingTime
from models.section import ClassStatus, Section

# ─── Kurs-Pool ────────────────────────────────────────────────────────────────

_COURSE_POOL: list[tuple[str, str, str]] = [
    ("CSE", "1310", "Introduction to Computers & Programming"),
    ("CSE", "1320", "Intermediate Programming"),
    ("CSE", "2312", "Computer Organization & Assembly Language"),
    ("CSE", "2315", "Discrete Structures"),
    ("CSE", "3318", "Algorithms & Data Structures"),
    ("MATH", "1426", "Calculus I"),
    ("MATH", "2425", "Calculus II"),
    ("MATH", "3330", "Linear Algebra"),
    ("PHYS", "1443", "General Technical Physics I"),
    ("ENGL", "1301", "Rhetoric and Composition I"),
    ("HIST", "1311", "History of the United States"),
    ("POLS", "2311", "Government of the United States"),
]

# (Tage, Startzeiten, Dauer in Minuten)
_PATTERNS: list[tuple[list[int], list[str], int]] = [
    ([0, 2, 4], ["08:00", "09:00", "10:00", "11:00", "12:00", "13:00", "14:00"], 50),
    ([1, 3], ["08:00", "09:30", "11:00", "12:30", "14:00", "15:30"], 80),
]

_INSTRUCTORS = [
    "Becker", "Fischer", "Hoffmann", "Klein", "Koch", "Lange",
    "Meyer", "Richter", "Schmidt", "Schulz", "Wagner", "Weber",
]


def _add_minutes(start: str, minutes: int) -> str:
    hours, mins = (int(p) for p in start.split(":"))
    total = hours * 60 + mins + minutes
    return f"{total // 60:02d}:{total % 60:02d}"


class FakeCatalogGenerator:
    """Generiert ein Kursangebot mit reproduzierbarem Seed."""

    def __init__(self, seed: Optional[int] = None, semester: int = 2258) -> None:
        self.rng = random.Random(seed)
        self.semester = semester
        self._next_section_id = 40000

    def _make_section(self, number: int, closed_ratio: float) -> Section:
        days, starts, duration = self.rng.choice(_PATTERNS)
        start = self.rng.choice(starts)
        roll = self.rng.random()
        if roll < closed_ratio:
            status = ClassStatus.CLOSED
        elif roll < closed_ratio * 1.5:
            status = ClassStatus.WAITLISTED
        else:
            status = ClassStatus.OPEN
        self._next_section_id += 1
        return Section(
            section_id=self._next_section_id,
            section_number=f"{number:03d}",
            status=status,
            meeting_times=[MeetingTime(
                days=days, start_time=start, end_time=_add_minutes(start, duration),
            )],
            instructor=self.rng.choice(_INSTRUCTORS),
        )

    def generate(
        self,
        num_courses: int = 5,
        max_sections: int = 5,
        closed_ratio: float = 0.2,
        with_block_out: bool = True,
    ) -> Catalog:
        """Erzeugt das Kursangebot als Catalog-Objekt."""
        if not 1 <= num_courses <= len(_COURSE_POOL):
            raise ValueError(f"num_courses muss zwischen 1 und {len(_COURSE_POOL)} liegen")
        courses = []
        for dept, number, title in self.rng.sample(_COURSE_POOL, num_courses):
            count = self.rng.randint(2, max(2, max_sections))
            sections = [self._make_section(i + 1, closed_ratio) for i in range(count)]
            courses.append(Course(
                department=dept, course_number=number, title=title, sections=sections,
            ))

        block_outs = []
        if with_block_out:
            block_outs.append(block_out_course(
                "Arbeit",
                [MeetingTime(days=[4], start_time="08:00", end_time="12:00")],
                section_id=1,
            ))
        return Catalog(semester=self.semester, courses=courses, block_out_times=block_outs)

    # ─── Ausgabe ──────────────────────────────────────────────────────────────

    def print_summary(self, catalog: Catalog) -> None:
        """Gibt eine Rich-Tabelle mit Übersicht des erzeugten Angebots aus."""
        from rich.console import Console
        from rich.table import Table
        from rich import box

        console = Console()
        table = Table(title="Erzeugtes Kursangebot", box=box.ROUNDED)
        table.add_column("Kurs", style="bold cyan")
        table.add_column("Sektionen", justify="right")
        table.add_column("Offen", justify="right")

        for course in catalog.courses:
            num_open = sum(1 for s in course.sections if s.is_open)
            table.add_row(course.description, str(len(course.sections)), str(num_open))

        console.print(table)
