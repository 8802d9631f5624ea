from __future__ import annotations

import json
from pathlib import Path

import pytest

from sango_planner.adapters import (
    TraitTableError,
    dump_trait_json,
    load_trait_table,
    parse_trait_csv,
    parse_trait_json,
)
from sango_planner.models import TraitEffect


def test_parse_trait_json_skips_invalid_entries() -> None:
    text = json.dumps(
        {
            "Granary": {"agriculture": 10, "commerce": 2},
            "Watchtower": {"military": 5, "extraEffect": "Reveals scouts"},
            "Broken": {"mining": "lots"},
            "Odd": 7,
        }
    )

    table = parse_trait_json(text)

    assert table == {
        "Granary": TraitEffect(agriculture=10, commerce=2),
        "Watchtower": TraitEffect(military=5, extra_effect="Reveals scouts"),
    }


@pytest.mark.parametrize("text", ["[1, 2]", "not json", "42"])
def test_parse_trait_json_rejects_non_objects(text: str) -> None:
    with pytest.raises(TraitTableError):
        parse_trait_json(text)


def test_dumped_json_loads_back() -> None:
    table = {"Festival": TraitEffect(extra_effect="節慶"), "Granary": TraitEffect(agriculture=10)}

    dumped = dump_trait_json(table)

    assert "節慶" in dumped
    assert parse_trait_json(dumped) == table


def test_parse_trait_csv() -> None:
    text = "特性,農業,礦業,軍事,商業,額外效果\nGranary,+10,,0,2,\nFestival,0,0,0,0,Morale +1\n,5,5,5,5,\n"

    table = parse_trait_csv(text)

    assert table == {
        "Granary": TraitEffect(agriculture=10, commerce=2),
        "Festival": TraitEffect(extra_effect="Morale +1"),
    }


def test_parse_trait_csv_keeps_negative_bonuses() -> None:
    text = "trait,agriculture,mining\nCurse,-5,3\nDrought,-12 (season),\n"

    table = parse_trait_csv(text)

    assert table["Curse"] == TraitEffect(agriculture=-5, mining=3)
    assert table["Drought"] == TraitEffect(agriculture=-12)
    assert table["Curse"] == parse_trait_json('{"Curse": {"agriculture": -5, "mining": 3}}')["Curse"]


def test_load_trait_table_picks_format_by_suffix(tmp_path: Path) -> None:
    csv_path = tmp_path / "traits.csv"
    csv_path.write_text("trait,mining\nDeep Shaft,8\n", encoding="utf-8")
    json_path = tmp_path / "traits.json"
    json_path.write_text('{"Deep Shaft": {"mining": 8}}', encoding="utf-8")

    assert load_trait_table(csv_path) == {"Deep Shaft": TraitEffect(mining=8)}
    assert load_trait_table(json_path) == {"Deep Shaft": TraitEffect(mining=8)}

    with pytest.raises(FileNotFoundError):
        load_trait_table(tmp_path / "absent.json")
