"""Rich console rendering of search results and trait tables."""

from __future__ import annotations

from typing import Mapping, Sequence

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from sango_planner.models import CombinationResult, TraitEffect
from sango_planner.planning.solver import (
    MAX_THRESHOLD_SCORE,
    ThresholdClass,
    format_threshold_indicator,
    threshold_class,
)
from sango_planner.planning.traits import describe_trait, format_effect, iter_extra_effects
from sango_planner.slots import SLOT_LABELS

THRESHOLD_STYLES: dict[ThresholdClass, str] = {
    ThresholdClass.NONE: "dim",
    ThresholdClass.LOW: "yellow",
    ThresholdClass.MID: "green",
    ThresholdClass.HIGH: "cyan",
    ThresholdClass.MAX: "bold magenta",
}


def result_panel(result: CombinationResult, rank: int, trait_effects: Mapping[str, TraitEffect]) -> Panel:
    stats = Table.grid(padding=(0, 2))
    for stat, value in result.totals.items():
        count = result.threshold_details.get(stat, 0)
        indicator = Text(format_threshold_indicator(value), style=THRESHOLD_STYLES[threshold_class(count)])
        stats.add_row(stat.label, str(value), indicator)

    buildings = Table(show_header=True, header_style="bold", box=None)
    buildings.add_column("Slot")
    buildings.add_column("Building")
    buildings.add_column("Base")
    buildings.add_column("Trait")
    for pick in result.picks:
        building = pick.building
        base = " ".join(f"{stat.abbreviation}+{value}" for stat, value in building.base_stats.items() if value)
        buildings.add_row(SLOT_LABELS[pick.slot], building.name, base, describe_trait(building, trait_effects))

    parts: list = [stats, Text(""), buildings]
    extras = list(iter_extra_effects(result.buildings, trait_effects))
    if extras:
        parts.append(Text("\nExtra effects", style="bold"))
        for trait, description in extras:
            parts.append(Text(f"  {description} ({trait})"))

    return Panel(
        Group(*parts),
        title=f"Plan {rank}",
        subtitle=f"{result.threshold_score}/{MAX_THRESHOLD_SCORE} thresholds reached",
    )


def render_results(
    console: Console,
    results: Sequence[CombinationResult],
    trait_effects: Mapping[str, TraitEffect],
) -> None:
    if not results:
        console.print("[yellow]No combination meets the targets.[/yellow] Lower the targets or enable more slots.")
        return

    for rank, result in enumerate(results, start=1):
        console.print(result_panel(result, rank, trait_effects))


def trait_table(trait_effects: Mapping[str, TraitEffect], missing: Sequence[str] = ()) -> Table:
    table = Table(title="Trait effects")
    table.add_column("Trait")
    table.add_column("Bonus")
    table.add_column("Extra effect")
    for name in sorted(trait_effects):
        effect = trait_effects[name]
        table.add_row(name, format_effect(effect), effect.extra_effect)
    for name in missing:
        table.add_row(Text(name, style="red"), "(no effect defined)", "")
    return table
