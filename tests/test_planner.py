from __future__ import annotations

from pathlib import Path

import pytest

from sango_planner.models import Slot, StatLine, TraitEffect
from sango_planner.planner import BuildingPlanner
from sango_planner.storage import InMemoryConfigStore, SearchConfig, TargetValues

CATALOG = """name,category,position,agriculture,mining,military,commerce,trait
Golden Hall,main_hall,,20,0,0,0,Granary
Stone Wall,city_wall,,0,0,40,0,
Old Wall,city_wall,,0,0,10,0,
Tea House,market,east_market_2,0,0,0,30,Festival
Lantern Market,market,--,0,15,0,0,
"""


def _write_catalog(tmp_path: Path, traits: str | None = None) -> tuple[Path, Path]:
    catalog = tmp_path / "buildings.csv"
    catalog.write_text(CATALOG, encoding="utf-8")
    traits_path = tmp_path / "traits.json"
    if traits is not None:
        traits_path.write_text(traits, encoding="utf-8")
    return catalog, traits_path


def test_from_files_loads_catalog_and_traits(tmp_path: Path) -> None:
    catalog, traits = _write_catalog(
        tmp_path,
        '{"Granary": {"agriculture": 10}, "Harvest": {"agriculture": 30}, "Festival": {"extra_effect": "Morale +1"}}',
    )

    planner = BuildingPlanner.from_files(catalog, traits)

    assert len(planner.buildings) == 5
    assert planner.trait_effects["Granary"] == TraitEffect(agriculture=10)
    assert planner.missing_traits() == []


def test_missing_trait_file_gives_empty_table(tmp_path: Path) -> None:
    catalog, traits = _write_catalog(tmp_path)

    planner = BuildingPlanner.from_files(catalog, traits)

    assert planner.trait_effects == {}
    assert planner.missing_traits() == ["Festival", "Granary"]


def test_search_uses_current_config(tmp_path: Path) -> None:
    catalog, traits = _write_catalog(tmp_path, '{"Granary": {"agriculture": 10}}')
    store = InMemoryConfigStore()
    store.save_current(
        SearchConfig(
            slots={"mainHall": True, "cityWall": True},
            targets=TargetValues(agriculture=30, military=20),
        )
    )
    planner = BuildingPlanner.from_files(catalog, traits, store=store)

    results = planner.search()

    assert len(results) == 1
    assert [building.name for building in results[0].buildings] == ["Golden Hall", "Stone Wall"]
    assert results[0].totals == StatLine(agriculture=30, military=40)
    assert planner.estimate() == 2


def test_owned_collection_restricts_and_rebinds_traits(tmp_path: Path) -> None:
    catalog, traits = _write_catalog(tmp_path, '{"Granary": {"agriculture": 10}, "Harvest": {"agriculture": 30}}')
    planner = BuildingPlanner.from_files(catalog, traits)
    hall = planner.find_building(1)
    planner.store.set_owned(hall.id, "Harvest")
    planner.store.set_owned(3)

    owned = planner.owned_catalog()
    assert [(building.name, building.trait) for building in owned] == [("Golden Hall", "Harvest"), ("Old Wall", "")]
    assert hall.trait == "Granary"

    config = SearchConfig(slots={"mainHall": True, "cityWall": True})
    [best] = planner.search(config, owned_only=True)
    assert best.totals == StatLine(agriculture=50, military=10)
    assert planner.estimate(config, owned_only=True) == 1


def test_slot_candidates_fan_out_markets(tmp_path: Path) -> None:
    catalog, traits = _write_catalog(tmp_path)
    planner = BuildingPlanner.from_files(catalog, traits)

    candidates = planner.slot_candidates()

    assert [building.name for building in candidates[Slot.EAST_MARKET_2]] == ["Tea House", "Lantern Market"]
    assert [building.name for building in candidates[Slot.WEST_MARKET_1]] == ["Lantern Market"]


def test_extra_effects_and_descriptions(tmp_path: Path) -> None:
    catalog, traits = _write_catalog(tmp_path, '{"Festival": {"extra_effect": "Morale +1"}}')
    planner = BuildingPlanner.from_files(catalog, traits)

    [result] = planner.search(SearchConfig(slots={"eastMarket2": True}), max_results=1)

    assert result.buildings[0].name == "Tea House"
    assert planner.extra_effects(result) == [("Festival", "Morale +1")]
    assert planner.describe_trait(result.buildings[0]) == "Festival: Morale +1"


def test_find_building_unknown_id(tmp_path: Path) -> None:
    catalog, traits = _write_catalog(tmp_path)
    planner = BuildingPlanner.from_files(catalog, traits)

    with pytest.raises(KeyError):
        planner.find_building(404)
