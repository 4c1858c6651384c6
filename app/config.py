from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from adapters.layout.column import LayoutConfig
from domain.models import ColumnSize
from domain.services.backtracking_solver import DEFAULT_TIME_BUDGET_SECONDS
from domain.services.placement_domain import DomainStrategy

DEFAULT_CONFIG_PATH = Path("config/layout.yaml")


class LayoutSettings(BaseModel):
    column_width: float = Field(default=300.0, gt=0)
    column_height: float = Field(default=1200.0, gt=0)
    time_budget_seconds: float = Field(default=DEFAULT_TIME_BUDGET_SECONDS, gt=0)
    domain_strategy: DomainStrategy = DomainStrategy.SUB_OPTIMAL
    log_level: str = "INFO"

    @field_validator("domain_strategy", mode="before")
    @classmethod
    def normalize_domain_strategy(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower().replace("-", "_")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> str:
        level = str(value or "INFO").strip().upper()
        if level not in logging.getLevelNamesMapping():
            msg = f"layout.log_level must be a logging level name, got {value!r}"
            raise ValueError(msg)
        return level

    def column(self) -> ColumnSize:
        return ColumnSize(width=self.column_width, height=self.column_height)

    def to_layout_config(self) -> LayoutConfig:
        return LayoutConfig(
            strategy=self.domain_strategy,
            time_budget_seconds=self.time_budget_seconds,
        )


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="EFL_", env_nested_delimiter="__")

    layout: LayoutSettings = LayoutSettings()

    _yaml_path: ClassVar[Path | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        ]
        if cls._yaml_path:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path))
        return tuple(sources)


def load_settings(config_path: Path | None = None) -> AppSettings:
    env_path = os.getenv("EFL_CONFIG_PATH")
    resolved_path: Path | None = None

    if config_path is not None:
        resolved_path = config_path
    elif env_path:
        resolved_path = Path(env_path)
    elif DEFAULT_CONFIG_PATH.exists():
        resolved_path = DEFAULT_CONFIG_PATH

    previous = AppSettings._yaml_path
    try:
        if resolved_path is not None:
            if not resolved_path.exists():
                msg = f"Config file not found: {resolved_path}"
                raise FileNotFoundError(msg)
            AppSettings._yaml_path = resolved_path
        return AppSettings()
    finally:
        AppSettings._yaml_path = previous
