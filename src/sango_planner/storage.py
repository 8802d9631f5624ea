"""Persistence for saved search configurations and the owned-building collection."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, Field, ValidationError

from sango_planner.models import StatLine
from sango_planner.slots import DEFAULT_ENABLED_SLOTS

_logger = logging.getLogger("sango_planner.storage")


class TargetValues(BaseModel):
    agriculture: int = Field(default=0, ge=0)
    mining: int = Field(default=0, ge=0)
    military: int = Field(default=0, ge=0)
    commerce: int = Field(default=0, ge=0)

    def to_stats(self) -> StatLine:
        return StatLine(self.agriculture, self.mining, self.military, self.commerce)


class SearchConfig(BaseModel):
    """Enabled slots and targets, optionally saved under a name."""

    name: str | None = None
    slots: dict[str, bool] = Field(default_factory=lambda: dict(DEFAULT_ENABLED_SLOTS))
    targets: TargetValues = Field(default_factory=TargetValues)
    updated_at: datetime | None = None


class StoreDocument(BaseModel):
    configs: list[SearchConfig] = Field(default_factory=list)
    current: SearchConfig = Field(default_factory=SearchConfig)
    # building id -> selected trait variant (None keeps the catalog trait)
    collection: dict[int, str | None] = Field(default_factory=dict)


class UnknownConfigError(KeyError):
    """Raised when a saved configuration name does not exist."""


class ConfigStoreError(RuntimeError):
    """Raised when the backing document cannot be read."""


class ConfigStore(Protocol):
    """Key-value persistence contract for planner state."""

    def list_configs(self) -> list[SearchConfig]:
        """Return saved configurations in save order."""

    def save_config(self, name: str, config: SearchConfig) -> SearchConfig:
        """Create or overwrite the configuration called ``name``."""

    def get_config(self, name: str) -> SearchConfig:
        """Return a saved configuration or raise ``UnknownConfigError``."""

    def delete_config(self, name: str) -> None:
        """Remove a saved configuration or raise ``UnknownConfigError``."""

    def current_config(self) -> SearchConfig:
        """Return the working configuration."""

    def save_current(self, config: SearchConfig) -> None:
        """Replace the working configuration."""

    def owned_buildings(self) -> dict[int, str | None]:
        """Return owned building ids mapped to their selected trait variant."""

    def set_owned(self, building_id: int, trait: str | None = None) -> None:
        """Add a building to the collection, optionally rebinding its trait."""

    def remove_owned(self, building_id: int) -> None:
        """Drop a building from the collection."""


class InMemoryConfigStore:
    """Store that keeps its document in memory; used by tests and one-shot runs."""

    def __init__(self, document: StoreDocument | None = None) -> None:
        self._document = document or StoreDocument()

    def _load(self) -> StoreDocument:
        return self._document

    def _save(self, document: StoreDocument) -> None:
        self._document = document

    def list_configs(self) -> list[SearchConfig]:
        return list(self._load().configs)

    def save_config(self, name: str, config: SearchConfig) -> SearchConfig:
        document = self._load()
        saved = config.model_copy(update={"name": name, "updated_at": datetime.now(timezone.utc)}, deep=True)
        for index, existing in enumerate(document.configs):
            if existing.name == name:
                document.configs[index] = saved
                break
        else:
            document.configs.append(saved)
        self._save(document)
        _logger.info("config_saved", extra={"config_name": name})
        return saved

    def get_config(self, name: str) -> SearchConfig:
        for config in self._load().configs:
            if config.name == name:
                return config.model_copy(deep=True)
        raise UnknownConfigError(f"Unknown saved configuration: {name}")

    def delete_config(self, name: str) -> None:
        document = self._load()
        remaining = [config for config in document.configs if config.name != name]
        if len(remaining) == len(document.configs):
            raise UnknownConfigError(f"Unknown saved configuration: {name}")
        document.configs = remaining
        self._save(document)
        _logger.info("config_deleted", extra={"config_name": name})

    def current_config(self) -> SearchConfig:
        return self._load().current.model_copy(deep=True)

    def save_current(self, config: SearchConfig) -> None:
        document = self._load()
        document.current = config.model_copy(deep=True)
        self._save(document)

    def owned_buildings(self) -> dict[int, str | None]:
        return dict(self._load().collection)

    def set_owned(self, building_id: int, trait: str | None = None) -> None:
        document = self._load()
        document.collection[building_id] = trait or None
        self._save(document)

    def remove_owned(self, building_id: int) -> None:
        document = self._load()
        document.collection.pop(building_id, None)
        self._save(document)

    def clear(self) -> None:
        self._save(StoreDocument())


class JsonConfigStore(InMemoryConfigStore):
    """Single JSON file store; every call re-reads the file so external edits are seen."""

    def __init__(self, file_path: str | Path) -> None:
        self._path = Path(file_path).expanduser()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        super().__init__()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> StoreDocument:
        if not self._path.exists():
            return StoreDocument()
        try:
            return StoreDocument.model_validate_json(self._path.read_text(encoding="utf-8"))
        except ValidationError as exc:
            raise ConfigStoreError(f"Unreadable planner store {self._path}: {exc}") from exc

    def _save(self, document: StoreDocument) -> None:
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(document.model_dump_json(indent=2), encoding="utf-8")
        tmp_path.replace(self._path)
