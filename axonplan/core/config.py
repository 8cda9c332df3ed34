"""
Configuration management for axonplan.

Loads topology rules, geometry defaults and export settings from JSON files
and turns them into frozen settings objects that are passed explicitly to
the repair and geometry functions.
"""

import json
import math
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from loguru import logger
from pydantic import BaseModel, ConfigDict

from axonplan.core.models import Point3D


class TopologySettings(BaseModel):
    """Tolerances and defaults used by the topology validator and repairer."""
    model_config = ConfigDict(frozen=True)

    epsilon_ratio: float = 0.01  # fraction of bbox size
    min_epsilon: float = 0.01  # 1 cm in record units
    min_wall_length: float = 0.05  # 5 cm
    default_wall_thickness: float = 0.25
    default_wall_type: str = "interior"
    default_opening_type: str = "opening"
    default_opening_position: float = 0.5
    default_scale: float = 0.01
    area_mismatch_tolerance: float = 0.1


class AxonProjection(BaseModel):
    """Fixed parallel projection angles (degrees)."""
    model_config = ConfigDict(frozen=True)

    angle_x_deg: float = 30.0
    angle_y_deg: float = 30.0

    def coefficients(self) -> Tuple[float, float, float, float]:
        """Get (cos_x, sin_x, cos_y, sin_y)."""
        ax = math.radians(self.angle_x_deg)
        ay = math.radians(self.angle_y_deg)
        return (math.cos(ax), math.sin(ax), math.cos(ay), math.sin(ay))


DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "pipeline_defaults.json"


class Config:
    """Configuration manager for topology rules, geometry defaults and export settings."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to JSON config file. If None, uses the packaged defaults.
        """
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from JSON file."""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        with open(self.config_path, 'r') as f:
            self._config = json.load(f)

        logger.info(f"Loaded config: {self._config.get('name', 'Unknown')}")

    @property
    def name(self) -> str:
        return self._config.get("name", "Unknown")

    def get_geometry_default(self, param_name: str, default: Any = None) -> Any:
        """
        Get a geometry pipeline parameter.

        Args:
            param_name: Parameter name
            default: Default value if not found

        Returns:
            Parameter value or default
        """
        return self._config.get("geometry_defaults", {}).get(param_name, default)

    def get_export_setting(self, param_name: str, default: Any = None) -> Any:
        """Get a DXF export setting, or default if not found."""
        return self._config.get("export", {}).get(param_name, default)

    def topology_settings(self) -> TopologySettings:
        """Build topology settings, falling back to built-in defaults per field."""
        rules = self._config.get("topology_rules", {})
        known = {k: v for k, v in rules.items() if k in TopologySettings.model_fields}
        return TopologySettings(**known)

    def projection(self) -> AxonProjection:
        """Build the projection from configured angles."""
        return AxonProjection(
            angle_x_deg=self.get_geometry_default("projection_angle_x_deg", 30.0),
            angle_y_deg=self.get_geometry_default("projection_angle_y_deg", 30.0),
        )

    def view_direction(self) -> Point3D:
        """Get the normalized culling view direction."""
        x, y, z = self.get_geometry_default("view_direction", [1.0, 1.0, -1.0])
        length = math.sqrt(x * x + y * y + z * z)
        if length == 0:
            raise ValueError("view_direction must be a non-zero vector")
        return Point3D(x=x / length, y=y / length, z=z / length)


# Global default config instance
_default_config: Optional[Config] = None


def get_default_config() -> Config:
    """Get the default global configuration instance."""
    global _default_config
    if _default_config is None:
        _default_config = Config()
    return _default_config


def load_config(config_path: str) -> Config:
    """
    Load configuration from a specific file.

    Args:
        config_path: Path to JSON config file

    Returns:
        Config instance
    """
    return Config(config_path)
