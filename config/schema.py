from pydantic import BaseModel, Field
from typing import Optional


# ─── SUCHE ───

class SearchConfig(BaseModel):
    """Begrenzung der Backtracking-Suche. None = unbegrenzt."""
    # Maximale Anzahl geprüfter Sektionen pro Suchlauf
    max_steps: Optional[int] = Field(None, ge=1,
        description="Max. geprüfte Sektionen pro Suchlauf (leer = unbegrenzt)")
    # Zeitlimit pro Suchlauf in Sekunden
    time_limit_seconds: Optional[float] = Field(None, gt=0,
        description="Zeitlimit pro Suchlauf in Sekunden (leer = unbegrenzt)")


# ─── SPEICHER ───

class StorageConfig(BaseModel):
    """Ablage der gespeicherten Stundenpläne."""
    # JSON-Datei, in der alle Pläne als Schlüssel/Wert-Paare liegen
    path: str = Field("schedules/schedules.json",
        description="Pfad der Stundenplan-Ablage (JSON)")


# ─── GESAMT-CONFIG ───

class PlannerConfig(BaseModel):
    """Gesamtkonfiguration des Kursplaners."""
    # Auch geschlossene / Wartelisten-Sektionen wählen
    allow_non_open_classes: bool = Field(False,
        description="Auch nicht offene Sektionen erlauben")
    # Name für neu generierte Pläne
    default_schedule_name: str = Field("Generierter Stundenplan",
        description="Name für neu generierte Pläne")
    # Suchbegrenzung
    search: SearchConfig = Field(default_factory=SearchConfig)
    # Ablage
    storage: StorageConfig = Field(default_factory=StorageConfig)
