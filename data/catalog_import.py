"""Import eines Kursangebots aus JSON- oder YAML-Dateien.

Erwartetes Format (YAML-Beispiel):

    semester: 2258
    courses:
      - department: CSE
        course_number: "1310"
        title: Intro to Programming
        sections:
          - section_id: 41532
            section_number: "001"
            status: open
            meeting_times:
              - {days: [0, 2], start_time: "09:00", end_time: "10:20"}
    block_out_times:
      - department: SPERR
        course_number: "1"
        title: Arbeit
        sections:
          - section_id: 1
            section_number: "1"
            meeting_times:
              - {days: [4], start_time: "08:00", end_time: "12:00"}
"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from models.catalog import Catalog

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = {".yaml", ".yml"}


class CatalogImportError(ValueError):
    """Fehler beim Import eines Kursangebots."""


def _read_raw(path: Path):
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() in _YAML_SUFFIXES:
            return YAML(typ="safe").load(f)
        return json.load(f)


def import_catalog(path: Path) -> Catalog:
    """Liest ein Kursangebot aus `path` (.json, .yaml oder .yml).

    Raises:
        FileNotFoundError: Datei existiert nicht.
        CatalogImportError: Datei ist kein gültiges Kursangebot.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Kursangebot nicht gefunden: {path}")

    try:
        raw = _read_raw(path)
    except (json.JSONDecodeError, YAMLError) as e:
        raise CatalogImportError(f"{path}: Datei nicht lesbar: {e}") from e

    if not isinstance(raw, dict):
        raise CatalogImportError(
            f"{path}: Erwartet ein Objekt mit 'courses', gefunden: {type(raw).__name__}"
        )

    try:
        catalog = Catalog.model_validate(raw)
    except ValidationError as e:
        raise CatalogImportError(f"{path}: Kursangebot ungültig:\n{e}") from e

    empty = [c.course_id for c in catalog.courses if not c.sections]
    if empty:
        logger.warning(f"Kurse ohne Sektionen: {', '.join(empty)}")
    logger.info(
        f"Kursangebot geladen: {len(catalog.courses)} Kurse, "
        f"{len(catalog.block_out_sections)} Sperrzeiten"
    )
    return catalog
