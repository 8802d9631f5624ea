"""Exhaustive combination search over enabled building slots.

Every enabled slot with at least one candidate contributes exactly one building
to a combination. Combinations are produced lazily, scored by how many stat
thresholds they clear, filtered against the targets and ranked by score. Ties
keep enumeration order, so results are deterministic for identical inputs.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import math
from enum import Enum
from typing import Callable, Iterable, Iterator, Mapping, Sequence

from sango_planner.models import Building, CombinationResult, Slot, SlotPick, Stat, StatLine
from sango_planner.planning.traits import TraitTable, calculate_trait_bonus
from sango_planner.slots import normalize_enabled_slots

THRESHOLDS: tuple[int, ...] = (15, 50, 75, 100)
MAX_THRESHOLD_SCORE = len(THRESHOLDS) * len(Stat)
DEFAULT_MAX_RESULTS = 5
# Above this many combinations callers should warn or refuse to search.
RECOMMENDED_COMBINATION_CEILING = 1_000_000

SlotCandidates = Mapping[Slot, Sequence[Building]]
EnabledSlots = Mapping[str | Slot, bool]

_logger = logging.getLogger("sango_planner.planning.solver")


class ThresholdClass(str, Enum):
    """Presentation class for a per-stat threshold count."""

    NONE = "threshold-none"
    LOW = "threshold-low"
    MID = "threshold-mid"
    HIGH = "threshold-high"
    MAX = "threshold-max"

    @property
    def rank(self) -> int:
        return _CLASS_ORDER.index(self)


_CLASS_ORDER = (ThresholdClass.NONE, ThresholdClass.LOW, ThresholdClass.MID, ThresholdClass.HIGH, ThresholdClass.MAX)


def count_thresholds(value: int) -> int:
    return sum(1 for threshold in THRESHOLDS if value >= threshold)


def threshold_details(totals: StatLine) -> dict[Stat, int]:
    return {stat: count_thresholds(value) for stat, value in totals.items()}


def calculate_threshold_score(totals: StatLine) -> int:
    return sum(threshold_details(totals).values())


def meets_targets(totals: StatLine, targets: StatLine) -> bool:
    return all(totals.get(stat) >= target for stat, target in targets.items())


def calculate_totals(buildings: Sequence[Building], trait_effects: TraitTable) -> StatLine:
    totals = StatLine()
    for building in buildings:
        totals = totals + building.base_stats
    return totals + calculate_trait_bonus(buildings, trait_effects)


def resolve_active_slots(
    slot_candidates: SlotCandidates,
    enabled_slots: EnabledSlots,
) -> list[tuple[Slot, Sequence[Building]]]:
    """Enabled slots with candidates, in the order ``enabled_slots`` lists them."""
    active: list[tuple[Slot, Sequence[Building]]] = []
    for slot, enabled in normalize_enabled_slots(enabled_slots).items():
        if not enabled:
            continue
        candidates = slot_candidates.get(slot) or ()
        if candidates:
            active.append((slot, candidates))
    return active


def iter_combinations(candidate_lists: Sequence[Sequence[Building]]) -> Iterator[tuple[Building, ...]]:
    """Depth-first cartesian product; the last slot varies fastest."""
    if not candidate_lists:
        return iter(())
    return itertools.product(*candidate_lists)


def evaluate_combination(
    slots: Sequence[Slot],
    combination: Sequence[Building],
    targets: StatLine,
    trait_effects: TraitTable,
) -> CombinationResult | None:
    """Score one combination, or return ``None`` when it misses a target."""
    totals = calculate_totals(combination, trait_effects)
    if not meets_targets(totals, targets):
        return None

    details = threshold_details(totals)
    return CombinationResult(
        picks=tuple(SlotPick(slot=slot, building=building) for slot, building in zip(slots, combination)),
        totals=totals,
        threshold_score=calculate_threshold_score(totals),
        threshold_details=details,
    )


def iter_results(
    slot_candidates: SlotCandidates,
    enabled_slots: EnabledSlots,
    targets: StatLine | None = None,
    trait_effects: TraitTable | None = None,
    should_stop: Callable[[], bool] | None = None,
) -> Iterator[CombinationResult]:
    """Lazily yield every feasible combination in enumeration order.

    ``should_stop`` is polled before each combination; once it returns true the
    stream ends early.
    """
    targets = targets or StatLine()
    trait_effects = trait_effects or {}
    active = resolve_active_slots(slot_candidates, enabled_slots)
    slots = [slot for slot, _ in active]

    for combination in iter_combinations([candidates for _, candidates in active]):
        if should_stop is not None and should_stop():
            return
        result = evaluate_combination(slots, combination, targets, trait_effects)
        if result is not None:
            yield result


def normalize_max_results(max_results: int) -> int:
    if max_results < 1:
        _logger.debug("max_results_normalized", extra={"requested": max_results})
        return 1
    return max_results


def rank_results(results: Iterable[CombinationResult], max_results: int = DEFAULT_MAX_RESULTS) -> list[CombinationResult]:
    """Top ``max_results`` by score, descending, keeping arrival order on ties.

    Holds at most ``max_results`` entries at once.
    """
    return heapq.nsmallest(
        normalize_max_results(max_results),
        results,
        key=lambda result: -result.threshold_score,
    )


def search(
    slot_candidates: SlotCandidates,
    enabled_slots: EnabledSlots,
    targets: StatLine | None = None,
    trait_effects: TraitTable | None = None,
    max_results: int = DEFAULT_MAX_RESULTS,
) -> list[CombinationResult]:
    """Return the best combinations meeting ``targets``.

    Never raises for degenerate input: no active slots or unreachable targets
    give an empty list.
    """
    ranked = rank_results(iter_results(slot_candidates, enabled_slots, targets, trait_effects), max_results)
    _logger.debug("search_completed", extra={"results": len(ranked), "max_results": max_results})
    return ranked


def estimate_combinations(slot_candidates: SlotCandidates, enabled_slots: EnabledSlots) -> int:
    """Number of combinations `search` would enumerate, 0 if none."""
    active = resolve_active_slots(slot_candidates, enabled_slots)
    if not active:
        return 0
    return math.prod(len(candidates) for _, candidates in active)


def format_threshold_indicator(value: int) -> str:
    reached = count_thresholds(value)
    return "●" * reached + "○" * (len(THRESHOLDS) - reached)


def threshold_class(threshold_count: int) -> ThresholdClass:
    index = min(max(threshold_count, 0), len(_CLASS_ORDER) - 1)
    return _CLASS_ORDER[index]
