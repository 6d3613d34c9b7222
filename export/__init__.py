"""Export-Modul: Terminal-Anzeige (Rich) für Stundenpläne."""

from export.tui_renderer import print_schedule, render_schedule_rows

__all__ = ["print_schedule", "render_schedule_rows"]
