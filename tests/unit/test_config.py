"""Unit tests for FieldVoiceConfig."""

import os
from pathlib import Path

import pytest

from fieldvoice.config import DEFAULTS, FieldVoiceConfig


@pytest.mark.unit
class TestFieldVoiceConfig:
    """Test cases for the YAML configuration loader."""

    def test_defaults_without_file(self):
        config = FieldVoiceConfig()

        assert config.get('capture.silence_ms') == 800
        assert config.get('capture.restart_delay_ms') == 200
        assert config.get('matching.command_threshold') == 0.32
        assert config.get('matching.quick_threshold') == 0.25
        assert config.get('search.fuzzy_threshold') == 0.4

    def test_defaults_are_not_shared(self):
        config = FieldVoiceConfig()
        config.set('capture.silence_ms', 1)
        assert DEFAULTS['capture']['silence_ms'] == 800

    def test_file_overrides_merge_with_defaults(self, temp_data_dir):
        path = Path(temp_data_dir) / "fieldvoice.yaml"
        path.write_text("capture:\n  silence_ms: 600\nmatching:\n  command_threshold: 0.4\n")

        config = FieldVoiceConfig(str(path))

        assert config.get('capture.silence_ms') == 600
        assert config.get('capture.pre_roll_seconds') == 5
        assert config.get('matching.command_threshold') == 0.4

    def test_relative_paths_resolved_against_config_dir(self, temp_data_dir):
        path = Path(temp_data_dir) / "fieldvoice.yaml"
        path.write_text("storage:\n  recordings_directory: recordings\n")

        config = FieldVoiceConfig(str(path))

        assert config.get('storage.recordings_directory') == str(Path(temp_data_dir) / "recordings")
        assert os.path.isabs(config.get_recordings_directory())

    def test_missing_file(self, temp_data_dir):
        with pytest.raises(FileNotFoundError):
            FieldVoiceConfig(str(Path(temp_data_dir) / "missing.yaml"))

    def test_empty_file(self, temp_data_dir):
        path = Path(temp_data_dir) / "empty.yaml"
        path.write_text("")
        with pytest.raises(ValueError):
            FieldVoiceConfig(str(path))

    def test_invalid_yaml(self, temp_data_dir):
        path = Path(temp_data_dir) / "bad.yaml"
        path.write_text("capture: [unclosed\n")
        with pytest.raises(ValueError):
            FieldVoiceConfig(str(path))

    def test_non_mapping(self, temp_data_dir):
        path = Path(temp_data_dir) / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            FieldVoiceConfig(str(path))

    def test_get_missing_key_returns_default(self):
        config = FieldVoiceConfig()
        assert config.get('nope.missing', 'fallback') == 'fallback'

    def test_set_creates_nested_keys(self):
        config = FieldVoiceConfig()
        config.set('new.section.value', 3)
        assert config.get('new.section.value') == 3
