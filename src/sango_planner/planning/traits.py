"""Trait lookups: bonus aggregation, extra effects and display strings."""

from __future__ import annotations

from typing import Iterable, Iterator, Mapping

from sango_planner.models import ZERO_STATS, Building, StatLine, TraitEffect

TraitTable = Mapping[str, TraitEffect]


def lookup_trait(building: Building, trait_effects: TraitTable) -> TraitEffect | None:
    if not building.trait:
        return None
    return trait_effects.get(building.trait)


def calculate_trait_bonus(buildings: Iterable[Building], trait_effects: TraitTable) -> StatLine:
    """Sum trait bonuses over ``buildings``.

    Every occurrence counts, so two buildings sharing a trait add it twice.
    Buildings without a trait, or with one missing from the table, add nothing.
    """
    bonus = ZERO_STATS
    for building in buildings:
        effect = lookup_trait(building, trait_effects)
        if effect is not None:
            bonus = bonus + effect.bonus
    return bonus


def iter_extra_effects(buildings: Iterable[Building], trait_effects: TraitTable) -> Iterator[tuple[str, str]]:
    """Yield ``(trait, description)`` for each building with a free-text effect."""
    for building in buildings:
        effect = lookup_trait(building, trait_effects)
        if effect is not None and effect.extra_effect.strip():
            yield building.trait, effect.extra_effect.strip()


def describe_trait(building: Building, trait_effects: TraitTable) -> str:
    if not building.trait:
        return ""

    effect = trait_effects.get(building.trait)
    if effect is None:
        return f"{building.trait} (no effect defined)"

    parts = [f"{stat.abbreviation}+{value}" for stat, value in effect.bonus.items() if value]
    if parts:
        return f"{building.trait}: {' '.join(parts)}"
    if effect.extra_effect.strip():
        return f"{building.trait}: {effect.extra_effect.strip()}"
    return building.trait


def format_effect(effect: TraitEffect) -> str:
    parts = [f"{stat.label} +{value}" for stat, value in effect.bonus.items() if value]
    return ", ".join(parts) if parts else "no effect"


def collect_trait_names(buildings: Iterable[Building]) -> list[str]:
    return sorted({building.trait.strip() for building in buildings if building.trait.strip()})


def missing_traits(buildings: Iterable[Building], trait_effects: TraitTable) -> list[str]:
    """Trait names present in the catalog but absent from the table."""
    return [name for name in collect_trait_names(buildings) if name not in trait_effects]

