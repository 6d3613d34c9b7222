"""Kursplaner — Haupt-CLI.

Verwendung:
  kursplan config init                    Standard-Konfiguration anlegen
  kursplan config show                    Konfiguration anzeigen
  kursplan config set <schlüssel> <wert>  Einzelnen Wert ändern
  kursplan generate                       Beispiel-Kursangebot erzeugen
  kursplan build <angebot.yaml>           Stundenplan bauen
  kursplan build <datei> --ignore-conflicts   Plan ohne Konfliktprüfung
  kursplan schedules list                 Gespeicherte Pläne auflisten
  kursplan schedules show <name>          Plan anzeigen
  kursplan schedules validate <name>      Plan auf Überschneidungen prüfen
  kursplan schedules remove <name>        Plan löschen
  kursplan schedules clear                Alle Pläne löschen
"""

import logging
import random
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich import box

console = Console()

# Standard-Pfad für erzeugte Beispiel-Kursangebote
DEFAULT_CATALOG_JSON = Path("output/catalog.json")


def _manager(ctx: click.Context):
    from config.manager import ConfigManager
    return ConfigManager(ctx.obj["config_path"])


def _load_config(ctx: click.Context):
    """Lädt die Konfiguration (Standardwerte wenn keine Datei existiert)."""
    mgr = _manager(ctx)
    try:
        return mgr.load_or_default()
    except ValueError as e:
        console.print(f"[red bold]Konfiguration fehlerhaft:[/red bold]\n{escape(str(e))}")
        sys.exit(1)


def _store(ctx: click.Context):
    from data.schedule_store import ScheduleStore
    config = _load_config(ctx)
    return ScheduleStore(Path(config.storage.path))


def _abort_store_error(error: ValueError) -> None:
    """Beschädigte Ablage oder ungültiger Plan-Datensatz: Meldung und Exit 1."""
    console.print(f"[red bold]Ablage fehlerhaft:[/red bold]\n{escape(str(error))}")
    sys.exit(1)


def _load_schedule_or_abort(ctx: click.Context, name: str):
    store = _store(ctx)
    try:
        return store.load(name)
    except KeyError as e:
        console.print(f"[red]{escape(e.args[0])}[/red]")
        sys.exit(1)
    except ValueError as e:
        _abort_store_error(e)


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anlegen, anzeigen oder ändern."""


@cmd_config.command("init")
@click.option("--force", is_flag=True, default=False,
              help="Bestehende Konfiguration überschreiben.")
@click.pass_context
def config_init(ctx: click.Context, force: bool):
    """Legt eine Konfiguration mit Standardwerten an."""
    from config.defaults import default_planner_config

    mgr = _manager(ctx)
    if not mgr.first_run_check() and not force:
        console.print(
            "[yellow]Eine Konfiguration existiert bereits.[/yellow]\n"
            "Verwenden Sie [bold]--force[/bold] zum Überschreiben."
        )
        return
    mgr.save(default_planner_config())


@cmd_config.command("show")
@click.pass_context
def config_show(ctx: click.Context):
    """Zeigt die aktuelle Konfiguration an."""
    config = _load_config(ctx)

    table = Table(title="Konfiguration", box=box.ROUNDED)
    table.add_column("Parameter", style="bold")
    table.add_column("Wert")
    table.add_row("allow_non_open_classes", str(config.allow_non_open_classes))
    table.add_row("default_schedule_name", config.default_schedule_name)
    table.add_row("search.max_steps", str(config.search.max_steps))
    table.add_row("search.time_limit_seconds", str(config.search.time_limit_seconds))
    table.add_row("storage.path", config.storage.path)
    console.print(table)


@cmd_config.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str):
    """Setzt einen Wert, z.B. `allow_non_open_classes true` oder `search.max_steps 5000`."""
    from config.schema import PlannerConfig

    mgr = _manager(ctx)
    config = _load_config(ctx)
    raw = config.model_dump()

    target = raw
    parts = key.split(".")
    for part in parts[:-1]:
        if not isinstance(target.get(part), dict):
            console.print(f"[red]Unbekannter Schlüssel: {key}[/red]")
            sys.exit(1)
        target = target[part]
    if parts[-1] not in target:
        console.print(f"[red]Unbekannter Schlüssel: {key}[/red]")
        sys.exit(1)
    target[parts[-1]] = None if value.lower() in ("null", "none", "") else value

    try:
        updated = PlannerConfig.model_validate(raw)
    except ValueError as e:
        console.print(f"[red bold]Ungültiger Wert für {key}:[/red bold]\n{escape(str(e))}")
        sys.exit(1)
    mgr.save(updated)


# ─── GENERATE ─────────────────────────────────────────────────────────────────

@click.command("generate")
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Daten.")
@click.option("--courses", "num_courses", default=5, help="Anzahl Kurse.")
@click.option("--semester", default=None, type=int, help="Semester-Nummer.")
@click.option("--output", "-o", default=str(DEFAULT_CATALOG_JSON),
              help="Pfad für das erzeugte Kursangebot (JSON).")
def cmd_generate(seed: int, num_courses: int, semester: Optional[int], output: str):
    """Erzeugt ein Beispiel-Kursangebot."""
    from config.defaults import DEFAULT_SEMESTER
    from data.fake_data import FakeCatalogGenerator

    gen = FakeCatalogGenerator(seed=seed, semester=semester or DEFAULT_SEMESTER)
    try:
        catalog = gen.generate(num_courses=num_courses)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    gen.print_summary(catalog)
    console.print(f"\n[dim]{catalog.summary()}[/dim]")

    out_path = Path(output)
    catalog.save_json(out_path)
    console.print(f"[green]✓[/green] Kursangebot gespeichert: {out_path}")


# ─── BUILD ────────────────────────────────────────────────────────────────────

@click.command("build")
@click.argument("catalog_path", type=click.Path(exists=True, path_type=Path))
@click.option("--ignore-conflicts", is_flag=True, default=False,
              help="Erste wählbare Sektion je Kurs, ohne Konfliktprüfung.")
@click.option("--allow-non-open/--only-open", default=None,
              help="Nicht offene Sektionen erlauben (Standard: aus Konfiguration).")
@click.option("--seed", default=None, type=int,
              help="Zufalls-Seed (Standard: bei jedem Aufruf neu).")
@click.option("--name", default=None, help="Name des neuen Plans.")
@click.option("--semester", default=None, type=int,
              help="Semester-Nummer (Standard: aus dem Kursangebot).")
@click.option("--save", is_flag=True, default=False, help="Plan in der Ablage speichern.")
@click.pass_context
def cmd_build(ctx: click.Context, catalog_path: Path, ignore_conflicts: bool,
              allow_non_open: Optional[bool], seed: Optional[int], name: Optional[str],
              semester: Optional[int], save: bool):
    """Baut einen Stundenplan aus einem Kursangebot."""
    from config.defaults import DEFAULT_SEMESTER
    from data.catalog_import import import_catalog, CatalogImportError
    from export.tui_renderer import print_schedule
    from solver.scheduler import ScheduleBuilder

    config = _load_config(ctx)
    try:
        catalog = import_catalog(catalog_path)
    except CatalogImportError as e:
        console.print(f"[red bold]Import fehlgeschlagen:[/red bold]\n{escape(str(e))}")
        sys.exit(1)

    rng = random.Random(seed) if seed is not None else None
    builder = ScheduleBuilder.from_config(config, rng=rng)
    if allow_non_open is not None:
        builder.allow_non_open = allow_non_open

    if ignore_conflicts:
        result = builder.build_ignoring_conflicts(catalog.courses)
        block_outs = None
    else:
        block_outs = catalog.block_out_sections
        result = builder.build(catalog.courses, block_outs)

    if not result.ok:
        result.report.print_rich()
        sys.exit(1)

    schedule = result.to_schedule(
        name or config.default_schedule_name,
        semester or catalog.semester or DEFAULT_SEMESTER,
        block_outs,
    )
    print_schedule(schedule, console)
    console.print(f"[dim]{result.steps} Schritte[/dim]")

    if save:
        try:
            _store(ctx).save(schedule)
        except ValueError as e:
            _abort_store_error(e)
        console.print(f"[green]✓[/green] Plan gespeichert: {schedule.name}")


# ─── SCHEDULES ────────────────────────────────────────────────────────────────

@click.group("schedules")
def cmd_schedules():
    """Gespeicherte Stundenpläne verwalten."""


@cmd_schedules.command("list")
@click.pass_context
def schedules_list(ctx: click.Context):
    """Listet alle gespeicherten Pläne auf."""
    try:
        schedules = _store(ctx).load_all()
    except ValueError as e:
        _abort_store_error(e)
    if not schedules:
        console.print("[dim]Keine Pläne gespeichert.[/dim]")
        return

    table = Table(title="Gespeicherte Pläne", box=box.ROUNDED)
    table.add_column("Name", style="bold")
    table.add_column("Semester")
    table.add_column("ID")
    table.add_column("Kurse", justify="right")
    for s in schedules:
        table.add_row(s.name, str(s.semester_number), str(s.schedule_id or "—"),
                      str(len(s.selected_sections)))
    console.print(table)


@cmd_schedules.command("show")
@click.argument("name")
@click.pass_context
def schedules_show(ctx: click.Context, name: str):
    """Zeigt einen gespeicherten Plan an."""
    from export.tui_renderer import print_schedule
    print_schedule(_load_schedule_or_abort(ctx, name), console)


@cmd_schedules.command("validate")
@click.argument("name")
@click.pass_context
def schedules_validate(ctx: click.Context, name: str):
    """Prüft einen gespeicherten Plan auf Überschneidungen."""
    from analysis.solution_validator import ScheduleValidator

    schedule = _load_schedule_or_abort(ctx, name)
    report = ScheduleValidator().validate(schedule)
    report.print_rich()
    sys.exit(0 if report.is_valid else 1)


@cmd_schedules.command("remove")
@click.argument("name")
@click.pass_context
def schedules_remove(ctx: click.Context, name: str):
    """Löscht einen gespeicherten Plan."""
    schedule = _load_schedule_or_abort(ctx, name)
    try:
        _store(ctx).remove(schedule)
    except ValueError as e:
        _abort_store_error(e)
    console.print(f"[green]✓[/green] Plan '{name}' gelöscht.")


@cmd_schedules.command("clear")
@click.confirmation_option(prompt="Wirklich alle Pläne löschen?")
@click.pass_context
def schedules_clear(ctx: click.Context):
    """Löscht alle gespeicherten Pläne."""
    _store(ctx).clear()
    console.print("[green]✓[/green] Ablage geleert.")


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--config", "config_path", default=None,
              type=click.Path(path_type=Path),
              help="Pfad zur Konfigurationsdatei (YAML).")
@click.option("--verbose", "-v", is_flag=True, default=False,
              help="Ausführliches Logging.")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool):
    """Kursplaner: wählt pro Kurs eine Sektion ohne Überschneidungen.

    Starten Sie mit: kursplan generate && kursplan build output/catalog.json
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


def main():
    """Einstiegspunkt."""
    cli(obj={})


# Befehle registrieren
cli.add_command(cmd_config)
cli.add_command(cmd_generate)
cli.add_command(cmd_build)
cli.add_command(cmd_schedules)


if __name__ == "__main__":
    main()
