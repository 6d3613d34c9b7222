"""Datenmodell für eine Sektion (ein konkretes Angebot eines Kurses, Pydantic v2)."""

from enum import Enum
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, PrivateAttr

from models.meeting_time import MeetingTime

if TYPE_CHECKING:
    from models.course import Course


class ClassStatus(str, Enum):
    """Platzstatus einer Sektion."""

    OPEN = "open"
    CLOSED = "closed"
    WAITLISTED = "waitlisted"


class Section(BaseModel):
    """Eine belegbare Sektion eines Kurses.

    Die Rückreferenz auf den Kurs wird vom Kurs selbst gesetzt
    (siehe `Course.model_post_init`) und ist kein Pydantic-Feld.
    """

    section_id: int                      # Eindeutige Sektionsnummer (z.B. 41532)
    section_number: str                  # "001", "002", ...
    status: ClassStatus = ClassStatus.OPEN
    meeting_times: list[MeetingTime] = []
    instructor: str = ""
    room: str = ""

    _source_course: Optional["Course"] = PrivateAttr(default=None)

    @property
    def source_course(self) -> "Course":
        if self._source_course is None:
            raise RuntimeError(
                f"Sektion {self.section_id} gehört zu keinem Kurs"
            )
        return self._source_course

    @property
    def is_open(self) -> bool:
        return self.status == ClassStatus.OPEN

    @property
    def time_label(self) -> str:
        """Alle Termine als Text, z.B. "Mo/Mi 09:00–10:15"."""
        if not self.meeting_times:
            return "ohne Termin"
        return ", ".join(str(mt) for mt in self.meeting_times)

    @property
    def description(self) -> str:
        """Lesbare Beschreibung für Meldungen: Kurs, Sektionsnummer und Termine."""
        if self._source_course is None:
            prefix = f"Sektion {self.section_number}"
        elif self._source_course.is_block_out:
            prefix = self._source_course.description
        else:
            prefix = f"{self._source_course.description} Sektion {self.section_number}"
        return f"{prefix} ({self.time_label})"

    def conflicts_with(self, other: "Section") -> bool:
        """True wenn sich irgendein Termin beider Sektionen überschneidet (symmetrisch)."""
        return any(
            mine.overlaps(theirs)
            for mine in self.meeting_times
            for theirs in other.meeting_times
        )

    # Gleichheit nur über die Wertfelder, nie über die Kurs-Referenz
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Section):
            return NotImplemented
        return (
            self.section_id == other.section_id
            and self.section_number == other.section_number
            and self.status == other.status
            and self.meeting_times == other.meeting_times
        )

    def __hash__(self) -> int:
        return hash((self.section_id, self.section_number))

    def __repr__(self) -> str:
        return f"Section({self.section_id}, {self.section_number}, {self.status.value})"
