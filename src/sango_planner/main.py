"""CLI entrypoint for the building planner."""

from __future__ import annotations

import typer
from rich import print
from rich.console import Console

from sango_planner.adapters import TraitTableError
from sango_planner.cli import CliSearchHandler
from sango_planner.config import settings
from sango_planner.planner import BuildingPlanner
from sango_planner.render import render_results, trait_table
from sango_planner.search_runtime import SearchJobStatus, SearchRuntime
from sango_planner.slots import LOGICAL_SLOTS, SLOT_LABELS
from sango_planner.storage import (
    ConfigStoreError,
    JsonConfigStore,
    SearchConfig,
    TargetValues,
    UnknownConfigError,
)
from sango_planner.telemetry.logging import configure_logging

app = typer.Typer(help="Find building combinations that reach production targets")
config_app = typer.Typer(help="Manage saved search configurations")
collection_app = typer.Typer(help="Manage the owned-building collection")
app.add_typer(config_app, name="config")
app.add_typer(collection_app, name="collection")


@app.callback()
def _setup(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log search and loading events"),
) -> None:
    configure_logging("INFO" if verbose else settings.log_level)


def _build_store(check: bool = True) -> JsonConfigStore:
    store = JsonConfigStore(settings.store_path)
    if not check:
        return store
    try:
        store.current_config()
    except ConfigStoreError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)
    return store


def _build_planner() -> BuildingPlanner:
    store = _build_store()
    try:
        return BuildingPlanner.from_files(settings.buildings_csv, settings.traits_file, store=store)
    except (FileNotFoundError, TraitTableError) as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)


def _resolve_config(planner: BuildingPlanner, name: str | None) -> SearchConfig:
    if name is None:
        return planner.store.current_config()
    try:
        return planner.store.get_config(name)
    except UnknownConfigError:
        raise typer.BadParameter(f"No saved configuration named {name!r}")


def _with_targets(config: SearchConfig, overrides: dict[str, int | None]) -> SearchConfig:
    given = {stat: value for stat, value in overrides.items() if value is not None}
    if not given:
        return config
    targets = TargetValues(**{**config.targets.model_dump(), **given})
    return config.model_copy(update={"targets": targets})


@app.command()
def start() -> None:
    """Show runtime configuration."""
    print(
        {
            "app_name": settings.app_name,
            "buildings_csv": settings.buildings_csv,
            "traits_file": settings.traits_file,
            "store_path": settings.store_path,
            "combination_warning_threshold": settings.combination_warning_threshold,
        }
    )


@app.command()
def estimate(
    config_name: str = typer.Option(None, "--config", help="Saved configuration to use instead of the current one"),
    owned_only: bool = typer.Option(False, help="Only consider buildings in the owned collection"),
) -> None:
    """Count the combinations a search would evaluate."""
    planner = _build_planner()
    config = _resolve_config(planner, config_name)
    total = planner.estimate(config, owned_only=owned_only)
    print(
        {
            "estimated_combinations": total,
            "above_warning_threshold": total > settings.combination_warning_threshold,
        }
    )


@app.command()
def search(
    config_name: str = typer.Option(None, "--config", help="Saved configuration to use instead of the current one"),
    agriculture: int = typer.Option(None, min=0, help="Agriculture target override"),
    mining: int = typer.Option(None, min=0, help="Mining target override"),
    military: int = typer.Option(None, min=0, help="Military target override"),
    commerce: int = typer.Option(None, min=0, help="Commerce target override"),
    owned_only: bool = typer.Option(False, help="Only consider buildings in the owned collection"),
    max_results: int = typer.Option(None, help="How many plans to show"),
    timeout: float = typer.Option(None, help="Give up after this many seconds"),
    force: bool = typer.Option(False, help="Skip the large-search confirmation"),
) -> None:
    """Search for the best building combinations."""
    planner = _build_planner()
    config = _with_targets(
        _resolve_config(planner, config_name),
        {"agriculture": agriculture, "mining": mining, "military": military, "commerce": commerce},
    )
    request = planner.build_request(
        config,
        owned_only=owned_only,
        max_results=settings.max_results if max_results is None else max_results,
    )

    total = planner.estimate(config, owned_only=owned_only)
    if total > settings.combination_warning_threshold and not force:
        if not typer.confirm(f"{total:,} combinations to evaluate. Continue?"):
            raise typer.Exit(code=1)

    runtime = SearchRuntime(search_timeout_seconds=timeout or settings.search_timeout_seconds)
    job = CliSearchHandler(runtime).run_search(request)
    if job.status != SearchJobStatus.SUCCEEDED:
        print({"search": job.status.value, "error": job.error})
        raise typer.Exit(code=1)

    render_results(Console(), job.results, planner.trait_effects)


@app.command()
def traits() -> None:
    """List trait effects and catalog traits with no effect defined."""
    planner = _build_planner()
    Console().print(trait_table(planner.trait_effects, planner.missing_traits()))


@config_app.command("show")
def config_show() -> None:
    """Show the current working configuration."""
    print(_build_store().current_config().model_dump(mode="json"))


@config_app.command("list")
def config_list() -> None:
    configs = _build_store().list_configs()
    print([{"name": config.name, "updated_at": config.updated_at} for config in configs])


@config_app.command("save")
def config_save(name: str) -> None:
    """Save the current configuration under NAME."""
    store = _build_store()
    saved = store.save_config(name, store.current_config())
    print({"saved": saved.name})


@config_app.command("load")
def config_load(name: str) -> None:
    """Make a saved configuration the current one."""
    store = _build_store()
    try:
        config = store.get_config(name)
    except UnknownConfigError:
        raise typer.BadParameter(f"No saved configuration named {name!r}")
    store.save_current(config.model_copy(update={"name": None, "updated_at": None}))
    print({"loaded": name})


@config_app.command("delete")
def config_delete(name: str) -> None:
    store = _build_store()
    if not typer.confirm(f"Delete configuration {name!r}?"):
        raise typer.Exit(code=1)
    try:
        store.delete_config(name)
    except UnknownConfigError:
        raise typer.BadParameter(f"No saved configuration named {name!r}")
    print({"deleted": name})


@config_app.command("reset")
def config_reset(yes: bool = typer.Option(False, "--yes", help="Do not ask for confirmation")) -> None:
    """Reset the current configuration to the defaults."""
    if not yes and not typer.confirm("Reset the current configuration to defaults?"):
        raise typer.Exit(code=1)
    _build_store().save_current(SearchConfig())
    print({"reset": True})


@config_app.command("clear")
def config_clear(yes: bool = typer.Option(False, "--yes", help="Do not ask for confirmation")) -> None:
    """Delete every saved configuration and the owned collection."""
    if not yes and not typer.confirm("Delete all saved planner data?"):
        raise typer.Exit(code=1)
    _build_store(check=False).clear()
    print({"cleared": True})


@config_app.command("target")
def config_target(
    stat: str = typer.Argument(..., help="agriculture/mining/military/commerce"),
    value: int = typer.Argument(..., min=0),
) -> None:
    """Set one target of the current configuration."""
    if stat not in TargetValues.model_fields:
        raise typer.BadParameter(f"Unknown stat {stat!r}")
    store = _build_store()
    config = _with_targets(store.current_config(), {stat: value})
    store.save_current(config)
    print(config.targets.model_dump())


@config_app.command("slot")
def config_slot(
    slot: str = typer.Argument(..., help=", ".join(LOGICAL_SLOTS)),
    enabled: bool = typer.Option(True, "--enable/--disable"),
) -> None:
    """Enable or disable one slot in the current configuration."""
    if slot not in LOGICAL_SLOTS:
        raise typer.BadParameter(f"Unknown slot {slot!r}; expected one of {', '.join(LOGICAL_SLOTS)}")
    store = _build_store()
    config = store.current_config()
    config.slots[slot] = enabled
    store.save_current(config)
    print({SLOT_LABELS[LOGICAL_SLOTS[name]]: on for name, on in config.slots.items() if name in LOGICAL_SLOTS})


@collection_app.command("add")
def collection_add(
    building_id: int,
    trait: str = typer.Option(None, help="Trait variant the owned copy carries"),
) -> None:
    planner = _build_planner()
    try:
        building = planner.find_building(building_id)
    except KeyError:
        raise typer.BadParameter(f"No building with id {building_id}")
    planner.store.set_owned(building.id, trait)
    print({"owned": building.name, "trait": trait or building.trait})


@collection_app.command("remove")
def collection_remove(building_id: int) -> None:
    _build_store().remove_owned(building_id)
    print({"removed": building_id})


@collection_app.command("list")
def collection_list() -> None:
    planner = _build_planner()
    print(
        [
            {"id": building.id, "name": building.name, "trait": planner.describe_trait(building)}
            for building in planner.owned_catalog()
        ]
    )


if __name__ == "__main__":
    app()
