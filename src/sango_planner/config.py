"""Runtime configuration for the building planner."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from sango_planner.planning.solver import RECOMMENDED_COMBINATION_CEILING


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="SANGO_PLANNER_", env_file=".env", extra="ignore")

    app_name: str = "sango-planner"
    log_level: str = "WARNING"
    buildings_csv: str = Field(default="data/buildings.csv", description="Building catalog CSV export.")
    traits_file: str = Field(default="data/traits.csv", description="Trait effect table (.csv or .json).")
    store_path: str = Field(
        default="~/.sango_planner/store.json",
        description="JSON document holding saved configurations and the owned collection.",
    )
    max_results: int = Field(default=5, ge=1)
    combination_warning_threshold: int = Field(
        default=RECOMMENDED_COMBINATION_CEILING,
        description="Ask for confirmation before enumerating more combinations than this.",
    )
    search_timeout_seconds: float = 30.0


settings = Settings()
