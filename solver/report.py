"""Sammelt die Begründung, warum kein Stundenplan gebaut werden konnte.

Jeder Suchzweig besitzt einen eigenen Report; beim Backtracking übernimmt
der Aufrufer den Report des gescheiterten Zweigs per `merge`.
"""

import logging

from models.section import Section

logger = logging.getLogger(__name__)


class ConflictReport:
    """Wachsende Liste lesbarer Konfliktmeldungen."""

    def __init__(self, initial: str = "") -> None:
        self._lines: list[str] = initial.splitlines() if initial else []

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    def add_message(self, message: str) -> None:
        self._lines.extend(message.splitlines())
        logger.debug(f"Konflikt erfasst: {message}")

    def add_conflict(self, first: Section, second: Section) -> None:
        self.add_message(f"Konflikt zwischen {first.description} und {second.description}")

    def merge(self, other: "ConflictReport") -> None:
        """Hängt den Inhalt eines anderen Reports an (Zeilengrenze nur wenn nicht leer)."""
        self._lines.extend(other._lines)

    def describe(self) -> str:
        """Fertiger, zeilenweise getrennter Bericht."""
        return "\n".join(self._lines)

    def __bool__(self) -> bool:
        return bool(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __str__(self) -> str:
        return self.describe()

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        if not self._lines:
            body = "[dim]Keine Kurse angegeben.[/dim]"
        else:
            # Doppelte Meldungen aus verschiedenen Zweigen nur einmal anzeigen
            unique = list(dict.fromkeys(self._lines))
            body = "\n".join(f"  [red]• {line}[/red]" for line in unique)
        console.print(Panel(
            "[bold red]✗ KEIN STUNDENPLAN MÖGLICH[/bold red]\n" + body,
            title="Konflikte",
            border_style="red",
        ))
