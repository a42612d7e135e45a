"""
Configuration Management System

Handles loading, validation, and management of pipeline parameters.
"""

import copy
import yaml
from typing import Dict, Any, Optional
from pathlib import Path


class ConfigManager:
    """Manages configuration parameters for the volume fraction pipeline."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to configuration file. If None, uses default config.
        """
        self.config_path = config_path or self._get_default_config_path()
        self.config = self._load_config()
        self._validate_config()

    def _get_default_config_path(self) -> str:
        """Get path to default configuration file."""
        package_dir = Path(__file__).parent.parent
        return str(package_dir / "config" / "default_config.yaml")

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        try:
            with open(self.config_path, 'r') as file:
                config = yaml.safe_load(file)
        except FileNotFoundError:
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")
        except yaml.YAMLError as e:
            raise ValueError(f"Error parsing configuration file: {e}")

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping at the top level")
        return config

    def _validate_config(self, config: Optional[Dict[str, Any]] = None) -> None:
        """Validate configuration parameters for consistency and feasibility."""
        config = self.config if config is None else config

        # Validate default thresholds against their pixel type bound
        thresholds = config.get('thresholds', {})
        for type_name, bound in (('gray8', 0xFF), ('gray16', 0xFFFF)):
            defaults = thresholds.get(type_name, {})
            t_min = defaults.get('min', 0)
            t_max = defaults.get('max', bound)
            if not (0 <= t_min <= t_max <= bound):
                raise ValueError(f"Default {type_name} thresholds must satisfy 0 <= min <= max <= {bound}")

        # Validate surface parameters
        surface = config.get('surface', {})
        foreground_value = surface.get('foreground_value', 255)
        iso_level = surface.get('iso_level', 128)
        if not (0 < foreground_value <= 255):
            raise ValueError("surface.foreground_value must be in (0, 255]")
        if not (0 < iso_level < foreground_value):
            raise ValueError("surface.iso_level must lie strictly between 0 and the foreground value")

        resampling = surface.get('default_resampling', 6)
        if not isinstance(resampling, int) or resampling < 0:
            raise ValueError("surface.default_resampling must be a non-negative integer")

        # Validate worker pool size
        masking = config.get('masking', {})
        max_workers = masking.get('max_workers', 1)
        if not isinstance(max_workers, int) or max_workers < 1:
            raise ValueError("masking.max_workers must be a positive integer")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key (e.g., 'surface.iso_level')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value using dot notation.

        Args:
            key: Configuration key (e.g., 'surface.default_resampling')
            value: Value to set

        Raises:
            ValueError: If the updated configuration is invalid; the current
                configuration is left unchanged
        """
        keys = key.split('.')
        updated = copy.deepcopy(self.config)
        config_ref = updated

        for k in keys[:-1]:
            if k not in config_ref:
                config_ref[k] = {}
            config_ref = config_ref[k]

        config_ref[keys[-1]] = value
        self._validate_config(updated)
        self.config = updated

    def save(self, output_path: Optional[str] = None) -> None:
        """
        Save current configuration to file.

        Args:
            output_path: Path to save configuration. If None, overwrites current file.
        """
        save_path = output_path or self.config_path

        with open(save_path, 'w') as file:
            yaml.dump(self.config, file, default_flow_style=False, indent=2)

    def get_threshold_defaults(self, type_bound: int) -> Dict[str, int]:
        """Get default thresholds for a pixel type bound (255 or 65535)."""
        type_name = {0xFF: 'gray8', 0xFFFF: 'gray16'}.get(type_bound)
        if type_name is None:
            return {}
        return self.config.get('thresholds', {}).get(type_name, {})

    def get_surface_params(self) -> Dict[str, Any]:
        """Get surface extraction parameters as a dictionary."""
        return self.config.get('surface', {})

    def get_masking_params(self) -> Dict[str, Any]:
        """Get mask construction parameters as a dictionary."""
        return self.config.get('masking', {})

    def get_pipeline_params(self) -> Dict[str, Any]:
        """Get pipeline orchestration parameters as a dictionary."""
        return self.config.get('pipeline', {})
