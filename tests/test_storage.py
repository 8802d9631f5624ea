from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from sango_planner.models import StatLine
from sango_planner.slots import DEFAULT_ENABLED_SLOTS
from sango_planner.storage import (
    ConfigStoreError,
    InMemoryConfigStore,
    JsonConfigStore,
    SearchConfig,
    TargetValues,
    UnknownConfigError,
)


def _config(agriculture: int = 0, **slots: bool) -> SearchConfig:
    return SearchConfig(slots={**DEFAULT_ENABLED_SLOTS, **slots}, targets=TargetValues(agriculture=agriculture))


def test_default_config_matches_default_slots() -> None:
    config = InMemoryConfigStore().current_config()

    assert config.slots == DEFAULT_ENABLED_SLOTS
    assert config.targets.to_stats() == StatLine()


def test_save_overwrite_list_and_delete() -> None:
    store = InMemoryConfigStore()
    store.save_config("farm", _config(agriculture=50))
    store.save_config("war", _config(eastMarket1=True))
    store.save_config("farm", _config(agriculture=75))

    assert [config.name for config in store.list_configs()] == ["farm", "war"]
    farm = store.get_config("farm")
    assert farm.targets.agriculture == 75
    assert farm.updated_at is not None

    store.delete_config("farm")
    assert [config.name for config in store.list_configs()] == ["war"]

    with pytest.raises(UnknownConfigError):
        store.get_config("farm")
    with pytest.raises(UnknownConfigError):
        store.delete_config("farm")


def test_returned_configs_are_copies() -> None:
    store = InMemoryConfigStore()
    current = store.current_config()
    current.slots["plaza"] = False

    assert store.current_config().slots["plaza"] is True


def test_collection_tracks_trait_variants() -> None:
    store = InMemoryConfigStore()
    store.set_owned(3)
    store.set_owned(5, "Granary")
    store.set_owned(6, "")
    store.remove_owned(3)
    store.remove_owned(99)

    assert store.owned_buildings() == {5: "Granary", 6: None}


def test_json_store_persists_between_instances(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "store.json"
    first = JsonConfigStore(path)
    first.save_config("farm", _config(agriculture=50))
    first.save_current(_config(agriculture=15, plaza=False))
    first.set_owned(12, "Granary")

    second = JsonConfigStore(path)

    assert second.get_config("farm").targets.agriculture == 50
    assert second.current_config().slots["plaza"] is False
    assert second.owned_buildings() == {12: "Granary"}

    second.clear()
    assert JsonConfigStore(path).list_configs() == []


def test_json_store_reports_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigStoreError):
        JsonConfigStore(path).list_configs()


def test_targets_must_be_non_negative() -> None:
    with pytest.raises(ValidationError):
        TargetValues(mining=-1)
