from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from roomplan.exceptions import ConfigurationError
from roomplan.schema import GridConfig
from roomplan.storage import KeyValueStorage, LocalStorage, MemoryStorage

# Load .env file from project root
_env_path = Path(__file__).parent.parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path)


class StorageSettings(BaseModel):
    backend: Literal["memory", "local"] = "memory"
    root: Path = Path("data/layout")

    def build(self) -> KeyValueStorage:
        if self.backend == "local":
            return LocalStorage(self.root)
        return MemoryStorage()


class LoggingSettings(BaseModel):
    level: str = "INFO"
    json_format: bool = False
    file: Path | None = None

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, value: Any) -> str:
        if value is None:
            return "INFO"
        return str(value).upper()


class Settings(BaseModel):
    grid: GridConfig = Field(default_factory=GridConfig)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        """Load settings from a YAML configuration file.

        Args:
            path: Optional path to configuration file. If not provided, uses
                the ROOMPLAN_CONFIG environment variable or config/default.yaml.

        Returns:
            Settings instance with loaded configuration.

        Raises:
            ConfigurationError: If the file does not exist or its content is invalid.
        """
        config_path = path or Path(os.getenv("ROOMPLAN_CONFIG", "config/default.yaml"))
        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}", {"path": str(config_path)})
        with config_path.open("r", encoding="utf-8") as fp:
            try:
                payload = yaml.safe_load(fp) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"Invalid YAML in {config_path}", {"path": str(config_path)}) from exc
        try:
            return cls(**payload)
        except Exception as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}", {"path": str(config_path)}) from exc


@lru_cache(maxsize=1)
def get_settings(path: str | None = None) -> Settings:
    return Settings.load(Path(path) if path else None)


__all__ = [
    "LoggingSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
]
