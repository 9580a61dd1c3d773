"""Unit tests for the command line interface."""

import wave
from pathlib import Path

import pytest
from click.testing import CliRunner

from fieldvoice.main import cli


@pytest.fixture
def config_file(temp_data_dir):
    path = Path(temp_data_dir) / "fieldvoice.yaml"
    path.write_text("logging:\n  file_path: logs/fieldvoice.log\n  console_output: false\n")
    return str(path)


@pytest.mark.unit
class TestCli:
    """Test cases for the offline CLI commands."""

    def test_correct(self, config_file):
        result = CliRunner().invoke(cli, ["--config", config_file, "correct", "search for store name"])
        assert result.exit_code == 0
        assert "search for shop name" in result.output

    def test_correct_with_context(self, config_file):
        result = CliRunner().invoke(cli, ["--config", config_file, "correct", "Pepsy", "--context", "product"])
        assert result.exit_code == 0
        assert "Pepsi" in result.output

    def test_soundex(self, config_file):
        result = CliRunner().invoke(cli, ["--config", config_file, "soundex", "Robert", "Smith"])
        assert result.exit_code == 0
        assert "R163" in result.output
        assert "S530" in result.output

    def test_search(self, config_file):
        result = CliRunner().invoke(cli, ["--config", config_file, "search", "big", "--kind", "shop"])
        assert result.exit_code == 0
        assert "Big Bazaar" in result.output

    def test_wav(self, config_file, temp_data_dir, sample_audio_chunk):
        source = Path(temp_data_dir) / "input.pcm"
        source.write_bytes(sample_audio_chunk)
        destination = Path(temp_data_dir) / "output.wav"

        result = CliRunner().invoke(cli, ["--config", config_file, "wav", str(source), str(destination)])

        assert result.exit_code == 0
        with wave.open(str(destination), "rb") as wf:
            assert wf.getnframes() == len(sample_audio_chunk) // 2

    def test_wav_empty_input(self, config_file, temp_data_dir):
        source = Path(temp_data_dir) / "empty.pcm"
        source.write_bytes(b"")

        result = CliRunner().invoke(cli, ["--config", config_file, "wav", str(source),
                                          str(Path(temp_data_dir) / "out.wav")])

        assert result.exit_code != 0
        assert not (Path(temp_data_dir) / "out.wav").exists()

    def test_log_file_written_next_to_config(self, config_file, temp_data_dir):
        CliRunner().invoke(cli, ["--config", config_file, "soundex", "Lee"])
        assert (Path(temp_data_dir) / "logs" / "fieldvoice.log").exists()
