"""Configuration schema using Pydantic."""

from pathlib import Path
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from inspectsonar.config.defaults import DEFAULT_FILTERS, DEFAULT_OVERRIDES, DEFAULT_VALIDATION

if TYPE_CHECKING:
    from loguru import Logger

EmptyPolicy = Literal["accept", "reject"]


class ValidationConfig(BaseModel):
    """XML schema validation gate applied before parsing."""

    enabled: bool = bool(DEFAULT_VALIDATION["enabled"])


class OverridesConfig(BaseModel):
    """Where to find the rule override document."""

    file_name: str = str(DEFAULT_OVERRIDES["file_name"])
    env_var: str = str(DEFAULT_OVERRIDES["env_var"])
    use_bundled_default: bool = bool(DEFAULT_OVERRIDES["use_bundled_default"])


class FilterConfig(BaseModel):
    """How an empty (but present) predicate collection behaves per record kind.

    An absent collection always accepts everything.
    """

    empty_definition_filters: EmptyPolicy = DEFAULT_FILTERS["empty_definition_filters"]
    empty_issue_filters: EmptyPolicy = DEFAULT_FILTERS["empty_issue_filters"]
    empty_project_filters: EmptyPolicy = DEFAULT_FILTERS["empty_project_filters"]


class SensorConfig(BaseModel):
    """Project properties needed to attach issues to source files."""

    project_name: str = ""
    solution_file: str = ""
    user_dir: str = ""

    def validate_properties(self, log: "Logger") -> bool:
        """Log every missing mandatory property. Returns True when all are set."""
        missing = False
        if not self.project_name.strip():
            log.warning("sensor_property_missing property=project_name detail=name of the current project")
            missing = True
        if not self.user_dir.strip():
            log.warning("sensor_property_missing property=user_dir detail=base directory of the analysis")
            missing = True
        if not self.solution_file.strip():
            log.warning("sensor_property_missing property=solution_file detail=solution file inspected by InspectCode")
            missing = True
        return not missing

    @property
    def solution_dir(self) -> Path:
        """Directory of the solution file, relative to ``user_dir``."""
        return (Path(self.user_dir).expanduser() / self.solution_file).parent


class Config(BaseSettings):
    """Root configuration for inspectsonar."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True, env_prefix="INSPECTSONAR_", env_nested_delimiter="__")

    config_version: int = 1
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    overrides: OverridesConfig = Field(default_factory=OverridesConfig)
    filters: FilterConfig = Field(default_factory=FilterConfig)
    sensor: SensorConfig = Field(default_factory=SensorConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Values read from config.json arrive as init kwargs; the environment wins over them.
        return env_settings, init_settings, dotenv_settings, file_secret_settings
