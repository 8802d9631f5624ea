from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum


class Stat(str, Enum):
    AGRICULTURE = "agriculture"
    MINING = "mining"
    MILITARY = "military"
    COMMERCE = "commerce"

    @property
    def abbreviation(self) -> str:
        return _STAT_ABBREVIATIONS[self]

    @property
    def label(self) -> str:
        return self.value.capitalize()


_STAT_ABBREVIATIONS = {
    Stat.AGRICULTURE: "AGR",
    Stat.MINING: "MIN",
    Stat.MILITARY: "MIL",
    Stat.COMMERCE: "COM",
}


class BuildingCategory(str, Enum):
    MAIN_HALL = "main_hall"
    CITY_WALL = "city_wall"
    PLAZA = "plaza"
    MARKET = "market"


class Slot(str, Enum):
    """Physical building slots of a city."""

    MAIN_HALL = "main_hall"
    CITY_WALL = "city_wall"
    PLAZA = "plaza"
    WEST_MARKET_1 = "west_market_1"
    WEST_MARKET_2 = "west_market_2"
    EAST_MARKET_1 = "east_market_1"
    EAST_MARKET_2 = "east_market_2"


@dataclass(frozen=True, slots=True)
class StatLine:
    """Four production values, one per stat."""

    agriculture: int = 0
    mining: int = 0
    military: int = 0
    commerce: int = 0

    def __add__(self, other: StatLine) -> StatLine:
        return StatLine(
            agriculture=self.agriculture + other.agriculture,
            mining=self.mining + other.mining,
            military=self.military + other.military,
            commerce=self.commerce + other.commerce,
        )

    def get(self, stat: Stat) -> int:
        return getattr(self, stat.value)

    def items(self) -> list[tuple[Stat, int]]:
        return [(stat, self.get(stat)) for stat in Stat]

    def as_dict(self) -> dict[str, int]:
        return {stat.value: self.get(stat) for stat in Stat}


ZERO_STATS = StatLine()


@dataclass(frozen=True, slots=True)
class Building:
    """A catalog row. Read-only once ingested."""

    id: int
    name: str
    category: BuildingCategory
    position: str = ""
    agriculture: int = 0
    mining: int = 0
    military: int = 0
    commerce: int = 0
    trait: str = ""

    @property
    def base_stats(self) -> StatLine:
        return StatLine(self.agriculture, self.mining, self.military, self.commerce)

    def with_trait(self, trait: str | None) -> Building:
        """Return a copy bound to another trait variant."""
        return replace(self, trait=(trait or "").strip())


@dataclass(frozen=True, slots=True)
class TraitEffect:
    agriculture: int = 0
    mining: int = 0
    military: int = 0
    commerce: int = 0
    extra_effect: str = ""

    @property
    def bonus(self) -> StatLine:
        return StatLine(self.agriculture, self.mining, self.military, self.commerce)


@dataclass(frozen=True, slots=True)
class SlotPick:
    slot: Slot
    building: Building


@dataclass(slots=True)
class CombinationResult:
    """One ranked assignment of buildings to the active slots."""

    picks: tuple[SlotPick, ...]
    totals: StatLine
    threshold_score: int
    threshold_details: dict[Stat, int] = field(default_factory=dict)

    @property
    def buildings(self) -> list[Building]:
        return [pick.building for pick in self.picks]
