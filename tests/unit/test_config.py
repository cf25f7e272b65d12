"""Unit tests for configuration management."""

import json
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import patch

import pytest

from pgxn_meta.config import (
    MetaConfig,
    ValidationConfig,
    create_default_config,
    find_config_file,
    load_config,
)


class TestValidationConfig:
    """Test ValidationConfig model."""

    def test_defaults(self):
        config = ValidationConfig()
        assert config.default_spec_version == "1.0.0"
        assert config.strict_spec_url is False

    def test_aliases(self):
        config = ValidationConfig(defaultSpecVersion="1.0.0", strictSpecUrl=True)
        assert config.strict_spec_url is True

    def test_unknown_default_spec_version_rejected(self):
        with pytest.raises(ValueError):
            ValidationConfig(default_spec_version="9.9.9")


class TestMetaConfig:
    """Test complete MetaConfig model."""

    def test_config_from_dict(self):
        config = MetaConfig(**{"validation": {"strictSpecUrl": True}})
        assert config.validation.strict_spec_url is True
        assert config.validation.default_spec_version == "1.0.0"

    def test_config_extra_fields_forbidden(self):
        with pytest.raises(ValueError):
            MetaConfig(invalid_field="should-fail")


class TestConfigFileOperations:
    """Test configuration file loading and discovery."""

    def test_load_config_with_file(self):
        with TemporaryDirectory() as temp_dir:
            config_file = Path(temp_dir) / ".pgxn-meta.json"
            with open(config_file, "w") as f:
                json.dump({"validation": {"strictSpecUrl": True}}, f)

            config = load_config(config_file)
            assert config.validation.strict_spec_url is True

    def test_load_config_file_not_found(self):
        with TemporaryDirectory() as temp_dir:
            config = load_config(Path(temp_dir) / "nonexistent.json")
            assert config == create_default_config()

    def test_load_config_invalid_json(self):
        with TemporaryDirectory() as temp_dir:
            config_file = Path(temp_dir) / ".pgxn-meta.json"
            config_file.write_text("{invalid json")

            with pytest.raises(ValueError, match="Invalid JSON"):
                load_config(config_file)

    def test_load_config_invalid_structure(self):
        with TemporaryDirectory() as temp_dir:
            config_file = Path(temp_dir) / ".pgxn-meta.json"
            with open(config_file, "w") as f:
                json.dump({"invalid": "structure"}, f)

            with pytest.raises(ValueError, match="Failed to load config"):
                load_config(config_file)

    def test_find_config_file_parent_dir(self):
        with TemporaryDirectory() as temp_dir:
            temp_path = Path(temp_dir).resolve()
            config_file = temp_path / ".pgxn-meta.json"
            config_file.touch()

            deep_dir = temp_path / "a" / "b"
            deep_dir.mkdir(parents=True)

            assert find_config_file(deep_dir) == config_file

    def test_zero_config_operation(self):
        with patch("pgxn_meta.config.find_config_file", return_value=None):
            config = load_config()
            assert config.validation.default_spec_version == "1.0.0"
