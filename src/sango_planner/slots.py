"""Slot names, category/position alias tables and candidate routing."""

from __future__ import annotations

from typing import Iterable, Mapping

from .models import Building, BuildingCategory, Slot

# Names used by saved search configurations.
LOGICAL_SLOTS: dict[str, Slot] = {
    "mainHall": Slot.MAIN_HALL,
    "cityWall": Slot.CITY_WALL,
    "plaza": Slot.PLAZA,
    "westMarket1": Slot.WEST_MARKET_1,
    "westMarket2": Slot.WEST_MARKET_2,
    "eastMarket1": Slot.EAST_MARKET_1,
    "eastMarket2": Slot.EAST_MARKET_2,
}

MARKET_SLOTS: tuple[Slot, ...] = (
    Slot.WEST_MARKET_1,
    Slot.WEST_MARKET_2,
    Slot.EAST_MARKET_1,
    Slot.EAST_MARKET_2,
)

SLOT_LABELS: dict[Slot, str] = {
    Slot.MAIN_HALL: "Main Hall",
    Slot.CITY_WALL: "City Wall",
    Slot.PLAZA: "Plaza",
    Slot.WEST_MARKET_1: "West Ward",
    Slot.WEST_MARKET_2: "West Market",
    Slot.EAST_MARKET_1: "East Ward",
    Slot.EAST_MARKET_2: "East Market",
}

CATEGORY_ALIASES: dict[str, BuildingCategory] = {
    "主殿": BuildingCategory.MAIN_HALL,
    "城牆": BuildingCategory.CITY_WALL,
    "廣場": BuildingCategory.PLAZA,
    "坊市": BuildingCategory.MARKET,
    "main_hall": BuildingCategory.MAIN_HALL,
    "main hall": BuildingCategory.MAIN_HALL,
    "city_wall": BuildingCategory.CITY_WALL,
    "city wall": BuildingCategory.CITY_WALL,
    "plaza": BuildingCategory.PLAZA,
    "market": BuildingCategory.MARKET,
}

POSITION_ALIASES: dict[str, Slot] = {
    "西坊": Slot.WEST_MARKET_1,
    "西市": Slot.WEST_MARKET_2,
    "東坊": Slot.EAST_MARKET_1,
    "東市": Slot.EAST_MARKET_2,
    "west_market_1": Slot.WEST_MARKET_1,
    "west_market_2": Slot.WEST_MARKET_2,
    "east_market_1": Slot.EAST_MARKET_1,
    "east_market_2": Slot.EAST_MARKET_2,
}

_CATEGORY_SLOTS: dict[BuildingCategory, Slot] = {
    BuildingCategory.MAIN_HALL: Slot.MAIN_HALL,
    BuildingCategory.CITY_WALL: Slot.CITY_WALL,
    BuildingCategory.PLAZA: Slot.PLAZA,
}

DEFAULT_ENABLED_SLOTS: dict[str, bool] = {
    "mainHall": True,
    "cityWall": True,
    "plaza": True,
    "westMarket1": True,
    "westMarket2": True,
    "eastMarket1": False,
    "eastMarket2": False,
}


def parse_category(raw: str) -> BuildingCategory | None:
    key = raw.strip()
    return CATEGORY_ALIASES.get(key) or CATEGORY_ALIASES.get(key.lower())


def resolve_slot(name: str | Slot) -> Slot | None:
    """Map a logical name, a physical slot value or a `Slot` to a `Slot`."""
    if isinstance(name, Slot):
        return name
    if name in LOGICAL_SLOTS:
        return LOGICAL_SLOTS[name]
    try:
        return Slot(name)
    except ValueError:
        return None


def market_slots_for(position: str) -> tuple[Slot, ...]:
    """Market slots a building with ``position`` may occupy.

    A position naming one market slot pins the building there; anything else
    (blank, ``--``, an assembly-plan marker, unknown text) fans out to all four.
    """
    slot = POSITION_ALIASES.get(position.strip())
    if slot is not None:
        return (slot,)
    return MARKET_SLOTS


def assign_slots(buildings: Iterable[Building]) -> dict[Slot, list[Building]]:
    """Group a catalog into per-slot candidate lists, preserving catalog order."""
    by_slot: dict[Slot, list[Building]] = {slot: [] for slot in Slot}
    for building in buildings:
        if building.category is BuildingCategory.MARKET:
            for slot in market_slots_for(building.position):
                by_slot[slot].append(building)
            continue
        by_slot[_CATEGORY_SLOTS[building.category]].append(building)
    return by_slot


def normalize_enabled_slots(enabled_slots: Mapping[str | Slot, bool]) -> dict[Slot, bool]:
    """Resolve slot names, dropping unknown ones. Later duplicates win."""
    resolved: dict[Slot, bool] = {}
    for name, enabled in enabled_slots.items():
        slot = resolve_slot(name)
        if slot is not None:
            resolved[slot] = bool(enabled)
    return resolved
