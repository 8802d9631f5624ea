from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from .adapters import CsvCatalogReader, load_trait_table
from .models import Building, CombinationResult, Slot, TraitEffect
from .planning.solver import DEFAULT_MAX_RESULTS, estimate_combinations, search
from .planning.traits import describe_trait, iter_extra_effects, missing_traits
from .search_runtime import SearchRequest
from .slots import assign_slots
from .storage import ConfigStore, InMemoryConfigStore, SearchConfig

_logger = logging.getLogger("sango_planner.planner")


class BuildingPlanner:
    """Ties a building catalog, a trait table and a config store to the solver."""

    def __init__(
        self,
        buildings: Iterable[Building],
        trait_effects: dict[str, TraitEffect] | None = None,
        store: ConfigStore | None = None,
    ):
        self.buildings = list(buildings)
        self.trait_effects = dict(trait_effects or {})
        self.store = store or InMemoryConfigStore()

    @classmethod
    def from_files(
        cls,
        buildings_csv: str | Path,
        traits_file: str | Path | None,
        store: ConfigStore | None = None,
    ) -> BuildingPlanner:
        buildings = CsvCatalogReader(Path(buildings_csv).expanduser()).read()
        trait_effects: dict[str, TraitEffect] = {}
        if traits_file and Path(traits_file).expanduser().exists():
            trait_effects = load_trait_table(traits_file)
        elif traits_file:
            _logger.warning("trait_table_missing", extra={"path": str(traits_file)})
        return cls(buildings, trait_effects, store)

    def find_building(self, building_id: int) -> Building:
        for building in self.buildings:
            if building.id == building_id:
                return building
        raise KeyError(f"Unknown building id: {building_id}")

    def owned_catalog(self) -> list[Building]:
        """Owned buildings, each bound to the trait variant the player selected."""
        owned = self.store.owned_buildings()
        catalog: list[Building] = []
        for building in self.buildings:
            if building.id not in owned:
                continue
            variant = owned[building.id]
            catalog.append(building.with_trait(variant) if variant else building)
        return catalog

    def slot_candidates(self, *, owned_only: bool = False) -> dict[Slot, list[Building]]:
        return assign_slots(self.owned_catalog() if owned_only else self.buildings)

    def build_request(
        self,
        config: SearchConfig | None = None,
        *,
        owned_only: bool = False,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> SearchRequest:
        config = config or self.store.current_config()
        return SearchRequest(
            slot_candidates=self.slot_candidates(owned_only=owned_only),
            enabled_slots=dict(config.slots),
            targets=config.targets.to_stats(),
            trait_effects=dict(self.trait_effects),
            max_results=max_results,
        )

    def estimate(self, config: SearchConfig | None = None, *, owned_only: bool = False) -> int:
        request = self.build_request(config, owned_only=owned_only)
        return estimate_combinations(request.slot_candidates, request.enabled_slots)

    def search(
        self,
        config: SearchConfig | None = None,
        *,
        owned_only: bool = False,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> list[CombinationResult]:
        request = self.build_request(config, owned_only=owned_only, max_results=max_results)
        return search(
            request.slot_candidates,
            request.enabled_slots,
            request.targets,
            request.trait_effects,
            request.max_results,
        )

    def missing_traits(self) -> list[str]:
        return missing_traits(self.buildings, self.trait_effects)

    def describe_trait(self, building: Building) -> str:
        return describe_trait(building, self.trait_effects)

    def extra_effects(self, result: CombinationResult) -> list[tuple[str, str]]:
        return list(iter_extra_effects(result.buildings, self.trait_effects))
