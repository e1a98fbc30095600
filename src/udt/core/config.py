"""Configuration system for udt.

Layered config loading (lowest to highest priority):
1. config/default.toml (shipped with package)
2. ~/.config/udt/config.toml (user-level)
3. ./udt.toml (project-level)
4. Environment variables (UDT_TRANSLATION__TIMEOUT, etc.)
5. CLI flags
"""

from __future__ import annotations

import tomllib
from pathlib import Path

from pydantic import BaseModel
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

_PACKAGE_ROOT = Path(__file__).resolve().parent.parent.parent.parent
_DEFAULT_CONFIG = _PACKAGE_ROOT / "config" / "default.toml"
_USER_CONFIG = Path.home() / ".config" / "udt" / "config.toml"
_PROJECT_CONFIG = Path("udt.toml")


class TranslationConfig(BaseModel):
    endpoint: str = "https://translate.googleapis.com/translate_a/single"
    client: str = "gtx"
    timeout: float = 10.0  # seconds, per provider request
    cache_limit: int = 2000
    display_cache_limit: int = 1500
    max_concurrent: int = 8  # provider requests in flight during a whole-track export


class PrefetchConfig(BaseModel):
    window: int = 5
    track_cache_limit: int = 5
    timeout: float = 10.0


class DefaultsConfig(BaseModel):
    enabled: bool = True
    target_language: str = "ko"


class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8322
    settings_poll_interval: float = 1.0  # seconds between settings file checks


def _load_toml(path: Path) -> dict:
    """Load a TOML file if it exists, return empty dict otherwise."""
    if path.is_file():
        with open(path, "rb") as f:
            return tomllib.load(f)
    return {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _config_files() -> tuple[Path, ...]:
    return (_DEFAULT_CONFIG, _USER_CONFIG, _PROJECT_CONFIG)


class _TomlLayersSource(PydanticBaseSettingsSource):
    """Settings source merging the TOML config files, later files winning."""

    def get_field_value(self, field, field_name):
        return None, field_name, False

    def __call__(self) -> dict:
        config_data: dict = {}
        for path in _config_files():
            config_data = _deep_merge(config_data, _load_toml(path))
        return config_data


class UDTConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="UDT_",
        env_nested_delimiter="__",
    )

    translation: TranslationConfig = TranslationConfig()
    prefetch: PrefetchConfig = PrefetchConfig()
    defaults: DefaultsConfig = DefaultsConfig()
    server: ServerConfig = ServerConfig()
    settings_path: Path = Path.home() / ".config" / "udt" / "settings.json"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # CLI flags (init) > env vars > TOML layers
        return (init_settings, env_settings, _TomlLayersSource(settings_cls))


def load_config(**cli_overrides: object) -> UDTConfig:
    """Load configuration from all layers and merge.

    Args:
        **cli_overrides: Direct overrides from CLI flags. Keys can be
            dot-separated (e.g. translation.timeout=5).
    """
    overrides: dict = {}
    for key, value in cli_overrides.items():
        if value is None:
            continue
        parts = key.split(".")
        target = overrides
        for part in parts[:-1]:
            target = target.setdefault(part, {})
        target[parts[-1]] = value

    return UDTConfig(**overrides)
