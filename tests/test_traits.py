from __future__ import annotations

import types

from sango_planner.models import Building, BuildingCategory, StatLine, TraitEffect
from sango_planner.planning.traits import (
    calculate_trait_bonus,
    collect_trait_names,
    describe_trait,
    format_effect,
    iter_extra_effects,
    missing_traits,
)

TRAITS = {
    "Granary": TraitEffect(agriculture=10, commerce=2),
    "Watchtower": TraitEffect(military=5, extra_effect="Reveals scouts"),
    "Festival": TraitEffect(extra_effect="Morale +1"),
    "Empty": TraitEffect(),
}


def _building(building_id: int, trait: str = "") -> Building:
    return Building(id=building_id, name=f"b{building_id}", category=BuildingCategory.MARKET, trait=trait)


def test_trait_bonus_sums_each_occurrence() -> None:
    buildings = [_building(1, "Granary"), _building(2, "Granary"), _building(3, "Watchtower")]

    assert calculate_trait_bonus(buildings, TRAITS) == StatLine(agriculture=20, military=5, commerce=4)


def test_trait_bonus_ignores_missing_and_unknown_traits() -> None:
    buildings = [_building(1), _building(2, "Unknown")]

    assert calculate_trait_bonus(buildings, TRAITS) == StatLine()
    assert calculate_trait_bonus([], {}) == StatLine()


def test_extra_effects_are_lazy_ordered_and_repeat() -> None:
    buildings = [_building(1, "Festival"), _building(2, "Granary"), _building(3, "Watchtower"), _building(4, "Festival")]

    effects = iter_extra_effects(buildings, TRAITS)

    assert isinstance(effects, types.GeneratorType)
    assert list(effects) == [
        ("Festival", "Morale +1"),
        ("Watchtower", "Reveals scouts"),
        ("Festival", "Morale +1"),
    ]


def test_describe_trait_variants() -> None:
    assert describe_trait(_building(1), TRAITS) == ""
    assert describe_trait(_building(1, "Unknown"), TRAITS) == "Unknown (no effect defined)"
    assert describe_trait(_building(1, "Granary"), TRAITS) == "Granary: AGR+10 COM+2"
    assert describe_trait(_building(1, "Watchtower"), TRAITS) == "Watchtower: MIL+5"
    assert describe_trait(_building(1, "Festival"), TRAITS) == "Festival: Morale +1"
    assert describe_trait(_building(1, "Empty"), TRAITS) == "Empty"


def test_format_effect() -> None:
    assert format_effect(TRAITS["Granary"]) == "Agriculture +10, Commerce +2"
    assert format_effect(TRAITS["Empty"]) == "no effect"


def test_collect_and_missing_trait_names() -> None:
    buildings = [_building(1, "Watchtower"), _building(2, " Granary "), _building(3), _building(4, "Moat")]

    assert collect_trait_names(buildings) == ["Granary", "Moat", "Watchtower"]
    assert missing_traits(buildings, TRAITS) == ["Moat"]
