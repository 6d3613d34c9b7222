"""Datenmodell für einen Kurs mit seinen austauschbaren Sektionen (Pydantic v2)."""

import itertools
from typing import Any, Iterable, Optional

from pydantic import BaseModel

from models.meeting_time import MeetingTime
from models.section import ClassStatus, Section

# Department-Kürzel, unter dem Sperrzeiten als Pseudo-Kurs geführt werden
BLOCK_OUT_DEPARTMENT = "SPERR"

# Automatische Sektions-IDs für Sperrzeiten, negativ und damit getrennt von echten Sektionen
_block_out_ids = itertools.count(-1, -1)


class Course(BaseModel):
    """Ein Kurs (z.B. "CSE 1310") mit allen angebotenen Sektionen."""

    department: str         # "CSE"
    course_number: str      # "1310"
    title: str = ""         # "Intro to Programming"
    sections: list[Section] = []

    def model_post_init(self, __context: Any) -> None:
        # Bereits an einen anderen Kurs gebundene Sektionen werden kopiert
        bound = []
        for section in self.sections:
            if section._source_course is not None and section._source_course is not self:
                section = section.model_copy()
            section._source_course = self
            bound.append(section)
        self.sections = bound

    @property
    def course_id(self) -> str:
        return f"{self.department} {self.course_number}"

    @property
    def description(self) -> str:
        """Lesbare Kursbezeichnung für Meldungen."""
        if self.is_block_out:
            return f"Sperrzeit {self.title}" if self.title else "Sperrzeit"
        if self.title:
            return f"{self.course_id} – {self.title}"
        return self.course_id

    @property
    def is_block_out(self) -> bool:
        return self.department == BLOCK_OUT_DEPARTMENT

    def to_record(self, section: Section) -> dict:
        """Kurs-Datensatz, der nur die übergebene Sektion enthält."""
        if section not in self.sections:
            raise ValueError(
                f"Sektion {section.section_id} gehört nicht zu {self.course_id}"
            )
        record = self.model_dump(mode="json", exclude={"sections"})
        record["sections"] = [section.model_dump(mode="json")]
        return record

    @classmethod
    def build_list(cls, records: Iterable[dict]) -> list["Course"]:
        """Baut eine Kursliste aus Datensätzen (Reihenfolge bleibt erhalten)."""
        return [cls.model_validate(r) for r in records]


def block_out_course(
    label: str,
    meeting_times: list[MeetingTime],
    section_id: Optional[int] = None,
) -> Course:
    """Erzeugt eine Sperrzeit als Pseudo-Kurs mit genau einer Sektion.

    Ohne `section_id` bekommt jede Sperrzeit eine eigene negative ID.
    """
    if section_id is None:
        section_id = next(_block_out_ids)
    return Course(
        department=BLOCK_OUT_DEPARTMENT,
        course_number=str(section_id),
        title=label,
        sections=[
            Section(
                section_id=section_id,
                section_number="1",
                status=ClassStatus.OPEN,
                meeting_times=meeting_times,
            )
        ],
    )
