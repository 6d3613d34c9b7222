"""Stundenplan-Aggregat: gewählte Sektionen + Sperrzeiten, inkl. Datensatz-Format.

Ein Stundenplan wird entweder vom ScheduleBuilder erzeugt (ID 0) oder aus
einem gespeicherten Datensatz geladen. Konfliktfreiheit wird hier NICHT
geprüft; dafür ist der Erzeuger zuständig (siehe analysis.solution_validator).
"""

import json
from typing import Iterable, Optional, Union

from pydantic import BaseModel, ValidationError, field_validator

from models.course import Course
from models.section import Section

SCHEDULE_NAMES = "SCHEDULE_NAMES"


class MalformedScheduleError(ValueError):
    """Ein gespeicherter Stundenplan-Datensatz ist unvollständig oder ungültig."""


class ScheduleRecord(BaseModel):
    """Persistenz-Format eines Stundenplans.

    `courses` und `block_out_times` enthalten je Kurs genau eine Sektion.
    """

    name: str
    semester: int
    id: int = 0                                  # 0 = noch nicht vergeben
    courses: list[Course]
    block_out_times: Optional[list[Course]] = None

    @field_validator("courses", "block_out_times")
    @classmethod
    def _one_section_per_course(cls, v: Optional[list[Course]]) -> Optional[list[Course]]:
        if v is None:
            return v
        for course in v:
            if len(course.sections) != 1:
                raise ValueError(
                    f"{course.course_id}: genau eine Sektion erwartet, "
                    f"gefunden: {len(course.sections)}"
                )
        return v


class Schedule:
    """Ein benannter Stundenplan für ein Semester."""

    def __init__(
        self,
        name: str,
        semester_number: int,
        selected_sections: Iterable[Section],
        block_out_sections: Optional[Iterable[Section]] = None,
        schedule_id: int = 0,
        conflicts_ignored: bool = False,
    ) -> None:
        self._name = name
        self._semester_number = semester_number
        self._schedule_id = schedule_id
        self._selected_sections = list(selected_sections)
        self._block_out_sections = (
            list(block_out_sections) if block_out_sections is not None else None
        )
        # True nur für Pläne aus build_ignoring_conflicts; wird nicht gespeichert
        self.conflicts_ignored = conflicts_ignored

    # ─── Zugriff ───

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = value

    @property
    def schedule_id(self) -> int:
        return self._schedule_id

    @schedule_id.setter
    def schedule_id(self, value: int) -> None:
        self._schedule_id = value

    @property
    def semester_number(self) -> int:
        return self._semester_number

    @property
    def selected_sections(self) -> tuple[Section, ...]:
        return tuple(self._selected_sections)

    @property
    def block_out_sections(self) -> Optional[tuple[Section, ...]]:
        if self._block_out_sections is None:
            return None
        return tuple(self._block_out_sections)

    def file_name(self) -> str:
        """Schlüssel, unter dem dieser Plan im ScheduleStore abgelegt wird."""
        return f"{SCHEDULE_NAMES}_{self._name}"

    def verification_query(self) -> dict[str, str]:
        """Parameter für eine Live-Abfrage des Platzstatus aller gewählten Sektionen."""
        return {
            "semester": str(self._semester_number),
            "sections": ",".join(str(s.section_id) for s in self._selected_sections),
        }

    # ─── Serialisierung ───

    def to_record(self) -> dict:
        """Datensatz in derselben Form, die `from_record` erwartet."""
        record: dict = {"name": self._name, "semester": self._semester_number}
        if self._schedule_id != 0:
            record["id"] = self._schedule_id
        record["courses"] = [s.source_course.to_record(s) for s in self._selected_sections]
        if self._block_out_sections is not None:
            record["block_out_times"] = [
                s.source_course.to_record(s) for s in self._block_out_sections
            ]
        return record

    def to_json(self) -> str:
        return json.dumps(self.to_record(), ensure_ascii=False)

    @classmethod
    def from_record(cls, record: dict) -> "Schedule":
        """Lädt einen Plan aus einem Datensatz. Fehlende Pflichtfelder → MalformedScheduleError."""
        try:
            parsed = ScheduleRecord.model_validate(record)
        except ValidationError as e:
            raise MalformedScheduleError(
                f"Stundenplan-Datensatz ungültig:\n{e}"
            ) from e

        selected = [c.sections[0] for c in parsed.courses]
        block_outs = None
        if parsed.block_out_times is not None:
            block_outs = [c.sections[0] for c in parsed.block_out_times]
        return cls(
            name=parsed.name,
            semester_number=parsed.semester,
            selected_sections=selected,
            block_out_sections=block_outs,
            schedule_id=parsed.id,
        )

    @classmethod
    def from_json(cls, text: str) -> "Schedule":
        try:
            record = json.loads(text)
        except (json.JSONDecodeError, TypeError) as e:
            raise MalformedScheduleError(f"Kein gültiges JSON: {e}") from e
        if not isinstance(record, dict):
            raise MalformedScheduleError("Stundenplan-Datensatz muss ein JSON-Objekt sein")
        return cls.from_record(record)

    @classmethod
    def build_list(cls, records: Iterable[Union[dict, str]]) -> list["Schedule"]:
        """Baut eine Liste von Plänen; Einträge dürfen Dicts oder JSON-Strings sein."""
        schedules = []
        for item in records:
            if isinstance(item, str):
                schedules.append(cls.from_json(item))
            else:
                schedules.append(cls.from_record(item))
        return schedules

    def __repr__(self) -> str:
        return (
            f"Schedule({self._name!r}, semester={self._semester_number}, "
            f"{len(self._selected_sections)} Sektionen)"
        )
