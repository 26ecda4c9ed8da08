from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

from config.scene_standards import STANDARDS

# Load .env file from project root
_env_path = Path(__file__).parent.parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path)


class ExportSettings(BaseModel):
    meters_per_pixel: float = Field(STANDARDS["METERS_PER_PIXEL"], gt=0.0)
    wall_height_m: float = Field(STANDARDS["WALL_HEIGHT"], gt=0.0)
    wall_thickness_m: float = Field(STANDARDS["WALL_THICKNESS"], gt=0.0)
    floor_thickness_m: float = Field(STANDARDS["FLOOR_THICKNESS"], gt=0.0)
    max_tiles_x: int = Field(STANDARDS["SIM_MAX_TILES_X"], ge=1)
    max_tiles_y: int = Field(STANDARDS["SIM_MAX_TILES_Y"], ge=1)
    length_unit: str = STANDARDS["LENGTH_UNIT"]
    axes: str = STANDARDS["AXES"]
    coordinate_system: str = STANDARDS["COORDINATE_SYSTEM"]
    offset_format: str = STANDARDS["OFFSET_FORMAT"]

    @field_validator("axes")
    @classmethod
    def _check_axes(cls, value: str) -> str:
        # "<up-axis>_<ground-plane>", e.g. Y_up_XZ_ground
        parts = value.split("_")
        if len(parts) != 4 or parts[1] != "up" or parts[3] != "ground":
            raise ValueError(f"axes must look like '<A>_up_<BC>_ground', got {value!r}")
        return value


class GridSettings(BaseModel):
    width: int = Field(STANDARDS["GRID_WIDTH"], ge=1)
    height: int = Field(STANDARDS["GRID_HEIGHT"], ge=1)
    cell_size_px: int = Field(STANDARDS["DEFAULT_CELL_SIZE_PX"], ge=1)


class RuleConfig(BaseModel):
    enabled: bool = True
    mode: Literal["warn", "block"] = "warn"


def _default_rules() -> dict[str, RuleConfig]:
    return {
        "unenclosed-floors": RuleConfig(),
        "oob-content": RuleConfig(),
    }


class RulesSettings(BaseModel):
    rules: dict[str, RuleConfig] = Field(default_factory=_default_rules)
    max_examples: int = Field(3, ge=1)
    dev_config_path: Path | None = None

    @field_validator("rules", mode="before")
    @classmethod
    def _merge_defaults(cls, value: Any) -> dict[str, Any]:
        merged: dict[str, Any] = {key: cfg.model_dump() for key, cfg in _default_rules().items()}
        for rule_id, cfg in (value or {}).items():
            if isinstance(cfg, RuleConfig):
                cfg = cfg.model_dump()
            merged[rule_id] = {**merged.get(rule_id, {}), **cfg}
        return merged


class LoggingSettings(BaseModel):
    level: str = "INFO"
    json_format: bool = False
    log_file: Path | None = None

    @model_validator(mode="after")
    def _upper_level(self) -> "LoggingSettings":
        self.level = self.level.upper()
        return self


class Settings(BaseModel):
    export: ExportSettings = Field(default_factory=ExportSettings)
    grid: GridSettings = Field(default_factory=GridSettings)
    rules: RulesSettings = Field(default_factory=RulesSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        """Load settings from YAML configuration file.

        Args:
            path: Optional path to configuration file. If not provided, uses
                MALLGRID_CONFIG environment variable or defaults to config/default.yaml.

        Returns:
            Settings instance with loaded configuration.

        Raises:
            FileNotFoundError: If configuration file does not exist.
            ValueError: If configuration is invalid.
        """
        config_path = path or Path(os.getenv("MALLGRID_CONFIG", "config/default.yaml"))
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        with config_path.open("r", encoding="utf-8") as fp:
            payload = yaml.safe_load(fp) or {}
        try:
            return cls(**payload)
        except Exception as exc:
            raise ValueError(f"Invalid configuration: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings(path: str | None = None) -> Settings:
    return Settings.load(Path(path) if path else None)


__all__ = [
    "Settings",
    "ExportSettings",
    "GridSettings",
    "RuleConfig",
    "RulesSettings",
    "LoggingSettings",
    "get_settings",
]
