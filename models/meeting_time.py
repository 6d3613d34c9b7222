"""Datenmodell für einen Termin (Wochentage + Uhrzeit) einer Sektion."""

from pydantic import BaseModel, field_validator, model_validator

DAY_NAMES = ["Mo", "Di", "Mi", "Do", "Fr", "Sa", "So"]


def _to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


class MeetingTime(BaseModel):
    """Ein wiederkehrender Termin: an allen `days` von `start_time` bis `end_time`.

    Intervalle sind halboffen [start, end): ein Termin 09:00–10:00 und einer
    10:00–11:00 überschneiden sich NICHT.
    """

    days: list[int]     # 0=Mo .. 6=So
    start_time: str     # "HH:MM"
    end_time: str       # "HH:MM"

    @field_validator("days")
    @classmethod
    def _check_days(cls, v: list[int]) -> list[int]:
        if not v:
            raise ValueError("Termin ohne Wochentag")
        for day in v:
            if not 0 <= day < len(DAY_NAMES):
                raise ValueError(f"Ungültiger Wochentag: {day}")
        return v

    @field_validator("start_time", "end_time")
    @classmethod
    def _check_time_format(cls, v: str) -> str:
        parts = v.split(":")
        if len(parts) != 2 or not all(p.isdigit() for p in parts):
            raise ValueError(f"Uhrzeit muss im Format HH:MM sein: {v!r}")
        hours, minutes = int(parts[0]), int(parts[1])
        if hours > 23 or minutes > 59:
            raise ValueError(f"Ungültige Uhrzeit: {v!r}")
        return f"{hours:02d}:{minutes:02d}"

    @model_validator(mode="after")
    def _check_order(self):
        if self.start_minutes >= self.end_minutes:
            raise ValueError(
                f"Beginn ({self.start_time}) muss vor Ende ({self.end_time}) liegen"
            )
        return self

    @property
    def start_minutes(self) -> int:
        return _to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return _to_minutes(self.end_time)

    def overlaps(self, other: "MeetingTime") -> bool:
        """True wenn beide Termine einen Tag teilen und sich zeitlich überschneiden."""
        if not set(self.days) & set(other.days):
            return False
        return self.start_minutes < other.end_minutes and other.start_minutes < self.end_minutes

    def __str__(self) -> str:
        days = "/".join(DAY_NAMES[d] for d in sorted(self.days))
        return f"{days} {self.start_time}–{self.end_time}"
