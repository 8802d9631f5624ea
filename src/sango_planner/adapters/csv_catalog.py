"""CSV ingestion of building catalogs exported from the game wiki spreadsheet."""

from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from sango_planner.models import Building
from sango_planner.slots import parse_category

# Spreadsheet header -> Building field. Unlisted headers are ignored.
HEADER_FIELDS: dict[str, str] = {
    "品質": "name",
    "名稱": "name",
    "name": "name",
    "類型": "category",
    "type": "category",
    "category": "category",
    "位置": "position",
    "position": "position",
    "農業": "agriculture",
    "agriculture": "agriculture",
    "礦業": "mining",
    "mining": "mining",
    "軍事": "military",
    "military": "military",
    "商業": "commerce",
    "commerce": "commerce",
    "特性": "trait",
    "trait": "trait",
}

STAT_FIELDS = ("agriculture", "mining", "military", "commerce")

_NUMBER_RE = re.compile(r"^\s*\+?(\d+)")

_logger = logging.getLogger("sango_planner.adapters.csv_catalog")


def parse_stat(raw: str | None) -> int:
    """Leading digits of ``raw`` (an optional ``+`` allowed), else 0."""
    if not raw:
        return 0
    match = _NUMBER_RE.match(raw)
    return int(match.group(1)) if match else 0


def header_field(header: str) -> str | None:
    key = header.strip().lstrip("\ufeff")
    return HEADER_FIELDS.get(key) or HEADER_FIELDS.get(key.lower())


def parse_buildings(text: str) -> list[Building]:
    rows = list(csv.reader(io.StringIO(text.strip())))
    if len(rows) < 2:
        return []

    fields = [header_field(header) for header in rows[0]]
    buildings: list[Building] = []
    for row_number, values in enumerate(rows[1:], start=1):
        if not any(value.strip() for value in values):
            continue
        if len(values) < len(fields):
            _logger.debug("catalog_row_short", extra={"row": row_number, "columns": len(values)})
            continue

        building = _building_from_row(row_number, fields, values)
        if building is not None:
            buildings.append(building)

    _logger.info("catalog_parsed", extra={"buildings": len(buildings), "rows": len(rows) - 1})
    return buildings


def _building_from_row(row_number: int, fields: list[str | None], values: list[str]) -> Building | None:
    record: dict[str, str] = {}
    for field_name, value in zip(fields, values):
        if field_name and value.strip():
            record[field_name] = value.strip()

    name = record.get("name", "")
    if not name:
        return None

    category = parse_category(record.get("category", ""))
    if category is None:
        _logger.warning(
            "catalog_row_unknown_category",
            extra={"row": row_number, "building": name, "category": record.get("category", "")},
        )
        return None

    return Building(
        id=row_number,
        name=name,
        category=category,
        position=record.get("position", ""),
        trait=record.get("trait", ""),
        **{stat: parse_stat(record.get(stat)) for stat in STAT_FIELDS},
    )


@dataclass(slots=True)
class CsvCatalogReader:
    """Reads a building catalog from a CSV file on disk."""

    path: Path

    def read(self) -> list[Building]:
        if not self.path.exists():
            raise FileNotFoundError(f"Building catalog not found: {self.path}")
        return parse_buildings(self.path.read_text(encoding="utf-8-sig"))
