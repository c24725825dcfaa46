"""
Settings Manager.

Handles editor settings with JSON file storage: layout spacing used when
shifting connected shapes, wall drawing defaults and canvas preferences.
"""

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from typing import Optional
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class LayoutSettings:
    """
    Spacing used by insert/move shifts of connected shapes.

    h_array_width / v_array_width are added to a shape's width/height to
    get the default shift distance; g_array_width is the minimum line gap
    kept when shrinking to the right.
    """
    h_array_width: float = 50.0
    v_array_width: float = 50.0
    g_array_width: float = 50.0
    custom_min_gap: float = 20.0   # Minimum gap when a custom distance is given
    collision_gap: float = 20.0    # Minimum gap between moving and remaining shapes


@dataclass
class WallSettings:
    """Wall and measurement drawing defaults."""
    wall_thickness: float = 8.33325
    use_inches: bool = True
    drawing_scale: float = 1.0
    measure_line_thickness: float = 1.0
    measure_area_opacity: float = 0.4

    def effective_thickness(self) -> float:
        """Wall thickness, falling back to the scale-based default when unset."""
        if self.wall_thickness > 0:
            return self.wall_thickness
        scale = self.drawing_scale or 1.0
        if self.use_inches:
            return 8.33333 * 48 / scale
        return 11.811023622047243 * 50 / scale


@dataclass
class UISettings:
    """User interface settings."""
    show_grid: bool = True
    grid_size: int = 25
    recent_files_max: int = 10


@dataclass
class AppSettings:
    """Complete application settings."""
    layout: LayoutSettings = field(default_factory=LayoutSettings)
    walls: WallSettings = field(default_factory=WallSettings)
    ui: UISettings = field(default_factory=UISettings)
    recent_files: list = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "layout": asdict(self.layout),
            "walls": asdict(self.walls),
            "ui": asdict(self.ui),
            "recent_files": self.recent_files,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AppSettings":
        """Create from dictionary."""
        settings = cls()

        if "layout" in data:
            settings.layout = LayoutSettings(**data["layout"])
        if "walls" in data:
            settings.walls = WallSettings(**data["walls"])
        if "ui" in data:
            settings.ui = UISettings(**data["ui"])
        if "recent_files" in data:
            settings.recent_files = data["recent_files"]

        return settings


class SettingsManager:
    """
    Manages editor settings with JSON file storage.

    Settings file location:
    - Windows: %APPDATA%/HvacDraw/settings.json
    - Linux: ~/.config/HvacDraw/settings.json
    - macOS: ~/Library/Application Support/HvacDraw/settings.json
    """

    APP_NAME = "HvacDraw"
    SETTINGS_FILE = "settings.json"

    def __init__(self, config_override: Optional[str] = None):
        """
        Initialize settings manager.

        Args:
            config_override: Optional path to override config file location.
                            Useful for testing.
        """
        self._settings = AppSettings()
        self._config_override = config_override
        self._settings_path = self._get_settings_path()
        self._ensure_settings_dir()
        self.load()

    @property
    def settings(self) -> AppSettings:
        """Get current settings."""
        return self._settings

    @property
    def settings_path(self) -> str:
        """Get the settings file path."""
        return str(self._settings_path)

    @property
    def layout(self) -> LayoutSettings:
        return self._settings.layout

    @property
    def walls(self) -> WallSettings:
        return self._settings.walls

    @property
    def wall_thickness(self) -> float:
        return self._settings.walls.wall_thickness

    @wall_thickness.setter
    def wall_thickness(self, value: float):
        self._settings.walls.wall_thickness = value
        self.save()

    def set_spacing(self, horizontal: float, vertical: float, gap: Optional[float] = None):
        """Set the default shift spacing."""
        self._settings.layout.h_array_width = horizontal
        self._settings.layout.v_array_width = vertical
        if gap is not None:
            self._settings.layout.g_array_width = gap
        self.save()

    def _get_settings_path(self) -> Path:
        """Get platform-specific settings directory."""
        if self._config_override:
            return Path(self._config_override)

        import platform
        system = platform.system()

        if system == "Windows":
            base = os.environ.get("APPDATA", os.path.expanduser("~"))
            config_dir = Path(base) / self.APP_NAME
        elif system == "Darwin":  # macOS
            config_dir = Path.home() / "Library" / "Application Support" / self.APP_NAME
        else:  # Linux and others
            xdg_config = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
            config_dir = Path(xdg_config) / self.APP_NAME

        return config_dir / self.SETTINGS_FILE

    def _ensure_settings_dir(self):
        """Create settings directory if it doesn't exist."""
        self._settings_path.parent.mkdir(parents=True, exist_ok=True)

    def load(self) -> bool:
        """Load settings from file."""
        if not self._settings_path.exists():
            return False

        try:
            with open(self._settings_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._settings = AppSettings.from_dict(data)
            return True
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Error loading settings: {e}")
            return False

    def save(self) -> bool:
        """Save settings to file."""
        try:
            self._ensure_settings_dir()
            with open(self._settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings.to_dict(), f, indent=2)
            return True
        except (OSError, TypeError) as e:
            logger.error(f"Error saving settings: {e}")
            return False

    def reset(self):
        """Reset settings to defaults."""
        self._settings = AppSettings()
        self.save()

    def add_recent_file(self, file_path: str):
        """Add a file to recent files list."""
        if file_path in self._settings.recent_files:
            self._settings.recent_files.remove(file_path)

        self._settings.recent_files.insert(0, file_path)

        max_files = self._settings.ui.recent_files_max
        self._settings.recent_files = self._settings.recent_files[:max_files]

        self.save()


# Global settings instance
_settings_manager: Optional[SettingsManager] = None


def get_settings(config_override: Optional[str] = None) -> SettingsManager:
    """
    Get the global settings manager instance.

    Args:
        config_override: Optional path to override config location.
                        Only used on first call to initialize.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager(config_override)
    return _settings_manager


def reset_settings_manager():
    """Reset the global settings manager (useful for testing)."""
    global _settings_manager
    _settings_manager = None
