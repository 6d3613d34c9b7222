from config.schema import (
    PlannerConfig,
    SearchConfig,
    StorageConfig,
)

# Semester-Nummer, wenn auf der Kommandozeile keine angegeben wird
DEFAULT_SEMESTER = 2258


def default_search() -> SearchConfig:
    """Standard-Suchbegrenzung.

    Kein Schrittlimit, aber 30 Sekunden Zeitlimit pro Suchlauf. Die Suche ist
    im schlimmsten Fall exponentiell in der Kursanzahl; bei typischen
    Semesterplänen (4-7 Kurse) ist sie nach Millisekunden fertig.
    """
    return SearchConfig(max_steps=None, time_limit_seconds=30.0)


def default_planner_config() -> PlannerConfig:
    """Vollständige Standard-Konfiguration."""
    return PlannerConfig(
        allow_non_open_classes=False,
        default_schedule_name="Generierter Stundenplan",
        search=default_search(),
        storage=StorageConfig(path="schedules/schedules.json"),
    )
