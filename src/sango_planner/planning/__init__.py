"""Trait resolution and combination search."""

from .solver import (
    THRESHOLDS,
    ThresholdClass,
    count_thresholds,
    estimate_combinations,
    format_threshold_indicator,
    iter_results,
    rank_results,
    search,
    threshold_class,
)
from .traits import TraitTable, calculate_trait_bonus, describe_trait, iter_extra_effects

__all__ = [
    "THRESHOLDS",
    "ThresholdClass",
    "TraitTable",
    "calculate_trait_bonus",
    "count_thresholds",
    "describe_trait",
    "estimate_combinations",
    "format_threshold_indicator",
    "iter_extra_effects",
    "iter_results",
    "rank_results",
    "search",
    "threshold_class",
]
