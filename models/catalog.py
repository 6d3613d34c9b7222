"""Catalog: Kursangebot eines Semesters + Sperrzeiten (Pydantic v2)."""

from pathlib import Path

from pydantic import BaseModel

from models.course import Course
from models.section import Section


class Catalog(BaseModel):
    """Eingabe für den ScheduleBuilder: gewünschte Kurse und Sperrzeiten."""

    semester: int = 0
    courses: list[Course]
    block_out_times: list[Course] = []

    @property
    def block_out_sections(self) -> list[Section]:
        """Alle Sperrzeiten als Sektionen (jede Sperrzeit-Sektion zählt)."""
        return [s for c in self.block_out_times for s in c.sections]

    def summary(self) -> str:
        """Kurze Übersicht über das Angebot."""
        num_sections = sum(len(c.sections) for c in self.courses)
        num_open = sum(1 for c in self.courses for s in c.sections if s.is_open)
        lines = [
            f"Semester: {self.semester}" if self.semester else "",
            f"Kurse: {len(self.courses)}",
            f"Sektionen: {num_sections} ({num_open} offen)",
            f"Sperrzeiten: {len(self.block_out_sections)}",
        ]
        return "\n".join(l for l in lines if l)

    # ─── Persistenz ────────────────────────────────────────────────────────

    def save_json(self, path: Path) -> None:
        """Speichert das Kursangebot als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "Catalog":
        """Lädt ein Kursangebot aus einer JSON-Datei."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"JSON-Datei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
