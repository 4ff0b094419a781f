from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def default_data_dir() -> Path:
    """Return the default data directory path (~/.augmented_billiards)."""
    return Path.home() / ".augmented_billiards"


def default_config_path() -> Path:
    """Return the default config file path (~/.augmented_billiards/config.json)."""
    return default_data_dir() / "config.json"


@dataclass
class PhysicsConfig:
    ball_radius: float = 0.02858  # meters
    max_bounces: int = 2
    look_ahead: float = 2.0  # normalized table units
    self_exclusion_distance: float = 1e-3


@dataclass
class StickConfig:
    front_length: float = 0.5
    back_length: float = 1.5
    start_rotate_deg: float = 15.0


@dataclass
class MarkerConfig:
    spawn_distance: float = 0.05
    marker_life_s: float = 2.0
    fov_degrees: float = 45.0


@dataclass
class PreviewConfig:
    width_px: int = 1000
    margin_px: int = 40
    line_thickness: int = 2


@dataclass
class StorageConfig:
    data_directory: str = str(default_data_dir())
    default_export_format: str = "json"


@dataclass
class AppConfig:
    version: str = "1.0.0"
    physics: PhysicsConfig = field(default_factory=PhysicsConfig)
    stick: StickConfig = field(default_factory=StickConfig)
    markers: MarkerConfig = field(default_factory=MarkerConfig)
    preview: PreviewConfig = field(default_factory=PreviewConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _deep_merge(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _config_from_dict(data: dict[str, Any]) -> AppConfig:
    defaults = AppConfig().to_dict()
    merged = _deep_merge(defaults, data)
    return AppConfig(
        version=merged["version"],
        physics=PhysicsConfig(**merged["physics"]),
        stick=StickConfig(**merged["stick"]),
        markers=MarkerConfig(**merged["markers"]),
        preview=PreviewConfig(**merged["preview"]),
        storage=StorageConfig(**merged["storage"]),
    )


def load_config(path: Path | None = None) -> AppConfig:
    """Load application configuration from JSON file.

    Args:
        path: Optional path to config file. Defaults to ~/.augmented_billiards/config.json.

    Returns:
        AppConfig instance with loaded or default values.
    """
    config_path = path or default_config_path()
    if not config_path.exists():
        return AppConfig()
    raw = json.loads(config_path.read_text(encoding="utf-8"))
    logger.info("Loaded configuration from %s", config_path)
    return _config_from_dict(raw)


def save_config(config: AppConfig, path: Path | None = None) -> Path:
    """Save application configuration to JSON file.

    Args:
        config: AppConfig instance to save.
        path: Optional path for config file. Defaults to ~/.augmented_billiards/config.json.

    Returns:
        Path to the saved config file.
    """
    config_path = path or default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")
    return config_path
