"""
Box plot panel property persistence (platformdirs + JSON).

Persisted items (schema v1):
- settings: RenderSettings dict representation (marker line selector,
  line strategy, orientation, ...)

Behavior:
- If config file missing or unreadable -> defaults are used
- If schema_version mismatches:
  - default: reset to defaults
  - optional: keep loaded but update version
- Unknown keys in loaded JSON are ignored with warnings
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from platformdirs import user_config_dir

from niceboxplot.utils.logging import get_logger
from niceboxplot.box_plot_widget.render_state import RenderSettings

logger = get_logger(__name__)

# Increment when you make a breaking change to the on-disk JSON schema.
SCHEMA_VERSION: int = 1

DEFAULT_FILENAME = "box_plot_config.json"


@dataclass
class BoxPlotConfigData:
    """JSON-serializable config payload."""
    schema_version: int = SCHEMA_VERSION
    settings: Dict[str, Any] = field(default_factory=lambda: RenderSettings().to_dict())

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "schema_version": self.schema_version,
            "settings": self.settings,
        }

    @classmethod
    def from_json_dict(cls, d: Dict[str, Any]) -> "BoxPlotConfigData":
        """
        Tolerant loader:
        - ignores unknown keys
        - tolerates partially missing values
        """
        schema_version = int(d.get("schema_version", -1))

        settings_raw = d.get("settings", {})
        if not isinstance(settings_raw, dict):
            logger.warning("settings is not a dict, using defaults")
            settings_raw = {}

        known_keys = {"schema_version", "settings"}
        for key in d.keys():
            if key not in known_keys:
                logger.warning(f"Unknown key '{key}' in box plot config, ignoring")

        return cls(schema_version=schema_version, settings=dict(settings_raw))


class BoxPlotConfig:
    """Manager for loading/saving BoxPlotConfigData to disk."""

    def __init__(self, *, path: Path, data: Optional[BoxPlotConfigData] = None):
        self.path = path
        self.data = data if data is not None else BoxPlotConfigData()

    @staticmethod
    def default_config_path(
        app_name: str = "niceboxplot",
        filename: str = DEFAULT_FILENAME,
        app_author: str | None = None,
    ) -> Path:
        """
        Determine OS-appropriate per-user config path.

        macOS:   ~/Library/Application Support/niceboxplot/box_plot_config.json
        Linux:   ~/.config/niceboxplot/box_plot_config.json
        Windows: %APPDATA%\\niceboxplot\\box_plot_config.json
        """
        d = Path(user_config_dir(app_name, app_author))
        d.mkdir(parents=True, exist_ok=True)
        return d / filename

    @classmethod
    def load(
        cls,
        *,
        config_path: Optional[Path] = None,
        app_name: str = "niceboxplot",
        filename: str = DEFAULT_FILENAME,
        app_author: str | None = None,
        schema_version: int = SCHEMA_VERSION,
        reset_on_version_mismatch: bool = True,
    ) -> "BoxPlotConfig":
        """
        Load config from disk.

        If file doesn't exist or is unreadable -> defaults.
        If schema mismatch:
          - reset_on_version_mismatch=True -> defaults
          - else -> keep loaded but overwrite schema_version
        """
        path = config_path or cls.default_config_path(app_name=app_name, filename=filename, app_author=app_author)
        default_data = BoxPlotConfigData(schema_version=schema_version)

        try:
            parsed = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.debug(f"Box plot config file not found at {path}, using defaults")
            return cls(path=path, data=default_data)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Box plot config file at {path} could not be read: {e}, using defaults")
            return cls(path=path, data=default_data)

        if not isinstance(parsed, dict):
            logger.warning(f"Box plot config file at {path} does not contain a dict, using defaults")
            return cls(path=path, data=default_data)

        loaded = BoxPlotConfigData.from_json_dict(parsed)
        if loaded.schema_version != schema_version:
            if reset_on_version_mismatch:
                logger.warning(
                    f"Box plot config schema version mismatch: loaded={loaded.schema_version}, "
                    f"expected={schema_version}, resetting to defaults"
                )
                return cls(path=path, data=default_data)
            loaded.schema_version = schema_version
        return cls(path=path, data=loaded)

    def save(self) -> None:
        """Write config to disk."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self.data.to_json_dict(), indent=2), encoding="utf-8")
            logger.info(f"Saved box plot config to {self.path}")
        except OSError as e:
            logger.error(f"Error saving box plot config to {self.path}: {e}")
            raise

    def get_settings(self) -> RenderSettings:
        return RenderSettings.from_dict(self.data.settings)

    def set_settings(self, settings: RenderSettings) -> None:
        self.data.settings = settings.to_dict()

    def set_line(self, value: str) -> None:
        """Set the marker-line selector token; the other stored settings are kept."""
        settings = self.get_settings()
        settings.line = value
        self.set_settings(settings)
