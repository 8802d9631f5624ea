"""Trait effect tables: CSV and JSON import, JSON export."""

from __future__ import annotations

import csv
import io
import json
import logging
import re
from dataclasses import asdict
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError

from sango_planner.models import TraitEffect

TRAIT_HEADER_FIELDS: dict[str, str] = {
    "特性": "name",
    "trait": "name",
    "name": "name",
    "農業": "agriculture",
    "agriculture": "agriculture",
    "礦業": "mining",
    "mining": "mining",
    "軍事": "military",
    "military": "military",
    "商業": "commerce",
    "commerce": "commerce",
    "額外效果": "extra_effect",
    "extra": "extra_effect",
    "extra_effect": "extra_effect",
}

_BONUS_RE = re.compile(r"^\s*([+-]?\d+)")

_logger = logging.getLogger("sango_planner.adapters.trait_table")


class TraitTableError(ValueError):
    """Raised when a trait document cannot be read as a trait table at all."""


class TraitEntry(BaseModel):
    """One JSON trait entry. Stat values must be integers when present."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    agriculture: StrictInt = 0
    mining: StrictInt = 0
    military: StrictInt = 0
    commerce: StrictInt = 0
    extra_effect: str = Field(default="", alias="extraEffect")

    def to_effect(self) -> TraitEffect:
        return TraitEffect(
            agriculture=self.agriculture,
            mining=self.mining,
            military=self.military,
            commerce=self.commerce,
            extra_effect=self.extra_effect.strip(),
        )


def parse_trait_json(text: str) -> dict[str, TraitEffect]:
    """Parse ``{trait: {agriculture, ..., extra_effect}}``; invalid entries are skipped."""
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise TraitTableError(f"Trait table is not valid JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise TraitTableError("Trait table must be a JSON object keyed by trait name")

    table: dict[str, TraitEffect] = {}
    for name, entry in payload.items():
        try:
            table[name.strip()] = TraitEntry.model_validate(entry).to_effect()
        except ValidationError:
            _logger.warning("trait_entry_invalid", extra={"trait": name})
    return table


def parse_bonus(raw: str | None) -> int:
    """Leading signed integer of ``raw``, else 0. Trait bonuses may be negative."""
    if not raw:
        return 0
    match = _BONUS_RE.match(raw)
    return int(match.group(1)) if match else 0


def _trait_header_field(header: str) -> str | None:
    key = header.strip().lstrip("\ufeff")
    return TRAIT_HEADER_FIELDS.get(key) or TRAIT_HEADER_FIELDS.get(key.lower())


def parse_trait_csv(text: str) -> dict[str, TraitEffect]:
    rows = list(csv.reader(io.StringIO(text.strip())))
    if len(rows) < 2:
        return {}

    fields = [_trait_header_field(header) for header in rows[0]]
    table: dict[str, TraitEffect] = {}
    for values in rows[1:]:
        record = {field: value.strip() for field, value in zip(fields, values) if field}
        name = record.get("name", "")
        if not name:
            continue
        table[name] = TraitEffect(
            agriculture=parse_bonus(record.get("agriculture")),
            mining=parse_bonus(record.get("mining")),
            military=parse_bonus(record.get("military")),
            commerce=parse_bonus(record.get("commerce")),
            extra_effect=record.get("extra_effect", ""),
        )
    return table


def dump_trait_json(table: dict[str, TraitEffect]) -> str:
    return json.dumps({name: asdict(effect) for name, effect in table.items()}, ensure_ascii=False, indent=2)


def load_trait_table(path: str | Path) -> dict[str, TraitEffect]:
    """Load a trait table, choosing the format by file suffix."""
    target = Path(path).expanduser()
    if not target.exists():
        raise FileNotFoundError(f"Trait table not found: {target}")

    text = target.read_text(encoding="utf-8-sig")
    table = parse_trait_csv(text) if target.suffix.lower() == ".csv" else parse_trait_json(text)
    _logger.info("trait_table_loaded", extra={"path": str(target), "traits": len(table)})
    return table
