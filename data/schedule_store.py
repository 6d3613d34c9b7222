"""ScheduleStore – Schlüssel/Wert-Ablage für gespeicherte Stundenpläne.

Eine JSON-Datei mit einem Eintrag pro Plan (Schlüssel `SCHEDULE_NAMES_<name>`,
Wert = Plan-Datensatz als JSON-String) und der Namensliste unter
`SCHEDULE_NAMES`.
"""

import json
import logging
from pathlib import Path
from typing import Iterable

from models.schedule import SCHEDULE_NAMES, MalformedScheduleError, Schedule

logger = logging.getLogger(__name__)


class ScheduleStore:
    """Liest und schreibt Stundenpläne in eine JSON-Datei."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    # ─── Dateizugriff ───

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Ablage beschädigt (kein JSON-Objekt): {self.path}")
        return data

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    # ─── Speichern ───

    def save_all(self, schedules: Iterable[Schedule]) -> None:
        """Ersetzt den kompletten Inhalt der Ablage durch `schedules`."""
        data: dict = {}
        names: list[str] = []
        for schedule in schedules:
            names.append(schedule.name)
            data[schedule.file_name()] = schedule.to_json()
            logger.info(f"Speichere Stundenplan: {schedule.name}")
        data[SCHEDULE_NAMES] = sorted(set(names))
        self._write(data)

    def save(self, schedule: Schedule) -> None:
        """Speichert einen Plan; ein gleichnamiger wird überschrieben."""
        data = self._read()
        data[schedule.file_name()] = schedule.to_json()
        names = set(data.get(SCHEDULE_NAMES, []))
        names.add(schedule.name)
        data[SCHEDULE_NAMES] = sorted(names)
        self._write(data)
        logger.info(f"Stundenplan gespeichert: {schedule.file_name()}")

    # ─── Laden ───

    def load_all(self) -> list[Schedule]:
        """Lädt alle lesbaren Pläne. Beschädigte Einträge werden protokolliert und übersprungen."""
        schedules = []
        for key, body in self._read().items():
            if key == SCHEDULE_NAMES:
                continue
            try:
                schedules.append(Schedule.from_json(body))
            except MalformedScheduleError as e:
                logger.warning(f"Eintrag {key!r} übersprungen: {e}")
        return schedules

    def load(self, name: str) -> Schedule:
        """Lädt einen einzelnen Plan über seinen Namen."""
        key = f"{SCHEDULE_NAMES}_{name}"
        data = self._read()
        if key not in data:
            raise KeyError(f"Stundenplan '{name}' nicht gefunden. Verfügbar: {self.names()}")
        return Schedule.from_json(data[key])

    def names(self) -> list[str]:
        return list(self._read().get(SCHEDULE_NAMES, []))

    # ─── Entfernen ───

    def remove(self, schedule: Schedule) -> bool:
        """Entfernt den Plan mit gleichem Namen. Gibt True zurück wenn einer entfernt wurde."""
        data = self._read()
        key = schedule.file_name()
        if key not in data:
            return False
        del data[key]
        data[SCHEDULE_NAMES] = [n for n in data.get(SCHEDULE_NAMES, []) if n != schedule.name]
        self._write(data)
        logger.info(f"Stundenplan entfernt: {key}")
        return True

    def clear(self) -> None:
        self._write({})

    def __len__(self) -> int:
        return sum(1 for key in self._read() if key != SCHEDULE_NAMES)

    def __repr__(self) -> str:
        return f"ScheduleStore({self.path})"
