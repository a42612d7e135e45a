"""
Tests for Configuration Manager
"""

import pytest
import yaml

from volume_fraction.pipeline.volume_fraction_pipeline import VolumeFractionPipeline
from volume_fraction.utils.config_manager import ConfigManager


class TestConfigManager:
    """Test suite for configuration management."""

    def test_default_config_loads(self, config_manager):
        """Test that the packaged default configuration loads and validates."""
        assert config_manager.get('thresholds.gray8.min') == 128
        assert config_manager.get('thresholds.gray8.max') == 255
        assert config_manager.get('thresholds.gray16.min') == 2424
        assert config_manager.get('thresholds.gray16.max') == 11215
        assert config_manager.get('masking.max_workers') == 1
        assert config_manager.get('pipeline.parallel_branches') is False

    def test_get_missing_key_returns_default(self, config_manager):
        """Test dot-notation lookup of absent keys."""
        assert config_manager.get('surface.missing') is None
        assert config_manager.get('nothing.here', 7) == 7

    def test_threshold_defaults_by_type(self, config_manager):
        """Test threshold defaults lookup per pixel type bound."""
        assert config_manager.get_threshold_defaults(255) == {'min': 128, 'max': 255}
        assert config_manager.get_threshold_defaults(65535) == {'min': 2424, 'max': 11215}
        assert config_manager.get_threshold_defaults(1023) == {}

    def test_set_validates(self, config_manager):
        """Test that invalid values are rejected on set."""
        with pytest.raises(ValueError, match="default_resampling"):
            config_manager.set('surface.default_resampling', -1)

        with pytest.raises(ValueError, match="iso_level"):
            config_manager.set('surface.iso_level', 300)

    def test_rejected_set_keeps_previous_value(self, config_manager):
        """Test that a rejected value is not left in the configuration."""
        with pytest.raises(ValueError):
            config_manager.set('surface.default_resampling', -1)

        assert config_manager.get('surface.default_resampling') == 6
        assert VolumeFractionPipeline(config_manager).surface_resampling == 6

        with pytest.raises(ValueError):
            config_manager.set('masking.max_workers', 0)
        assert config_manager.get('masking.max_workers') == 1

    def test_invalid_threshold_defaults(self, tmp_path):
        """Test that inverted default thresholds fail validation on load."""
        config_file = tmp_path / "bad.yaml"
        config_file.write_text(yaml.dump({'thresholds': {'gray8': {'min': 200, 'max': 100}}}))

        with pytest.raises(ValueError, match="gray8"):
            ConfigManager(str(config_file))

    def test_missing_file(self, tmp_path):
        """Test error for a missing configuration file."""
        with pytest.raises(FileNotFoundError):
            ConfigManager(str(tmp_path / "absent.yaml"))

    def test_malformed_yaml(self, tmp_path):
        """Test error for an unparsable configuration file."""
        config_file = tmp_path / "broken.yaml"
        config_file.write_text("surface: [unclosed")

        with pytest.raises(ValueError, match="parsing"):
            ConfigManager(str(config_file))

    def test_save_round_trip(self, config_manager, tmp_path):
        """Test saving and reloading a modified configuration."""
        config_manager.set('masking.max_workers', 4)
        output = tmp_path / "saved.yaml"
        config_manager.save(str(output))

        reloaded = ConfigManager(str(output))
        assert reloaded.get('masking.max_workers') == 4
        assert reloaded.get('surface.iso_level') == 128
