"""Tests for CLI commands."""

import json
from pathlib import Path

import mido
import pytest
from click.testing import CliRunner

from midi_scale_detector.cli.main import cli


@pytest.fixture
def scale_file(tmp_path: Path) -> Path:
    """Create a MIDI file playing a C major scale."""
    mid = mido.MidiFile(ticks_per_beat=480)
    track = mido.MidiTrack()
    mid.tracks.append(track)
    track.append(mido.MetaMessage("set_tempo", tempo=500000, time=0))
    for pitch in [60, 62, 64, 65, 67, 69, 71]:
        track.append(mido.Message("note_on", note=pitch, velocity=100, time=0))
        track.append(mido.Message("note_off", note=pitch, velocity=0, time=480))
    path = tmp_path / "scale.mid"
    mid.save(path)
    return path


@pytest.fixture
def broken_file(tmp_path: Path) -> Path:
    """Create a file that is not MIDI."""
    path = tmp_path / "broken.mid"
    path.write_bytes(b"RIFF\x00\x00\x00\x06not midi at all")
    return path


class TestCLI:
    """Tests for the CLI interface."""

    def test_version(self):
        """Test --version flag."""
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "midi-scale-detector" in result.output
        assert "0.1.0" in result.output

    def test_help(self):
        """Test --help flag."""
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "MIDI Scale Detector" in result.output
        assert "analyze" in result.output
        assert "scales" in result.output

    def test_analyze_help(self):
        """Test analyze --help."""
        runner = CliRunner()
        result = runner.invoke(cli, ["analyze", "--help"])
        assert result.exit_code == 0
        assert "Analyze MIDI files" in result.output
        assert "--json" in result.output

    def test_analyze_nonexistent_path(self):
        """Test analyze with nonexistent path."""
        runner = CliRunner()
        result = runner.invoke(cli, ["analyze", "/nonexistent/path.mid"])
        assert result.exit_code != 0


class TestAnalyzeCommand:
    """Tests for the analyze command."""

    def test_analyze(self, scale_file: Path):
        """Test the human-readable summary."""
        runner = CliRunner()
        result = runner.invoke(cli, ["analyze", str(scale_file)])

        assert result.exit_code == 0
        assert "scale.mid" in result.output
        assert "C Major" in result.output
        assert "Tempo: 120.0 BPM" in result.output
        assert "Notes: 7" in result.output

    def test_analyze_json(self, scale_file: Path):
        """Test JSON catalog records."""
        runner = CliRunner()
        result = runner.invoke(cli, ["analyze", "--json", str(scale_file)])

        assert result.exit_code == 0
        records = json.loads(result.output)
        assert len(records) == 1
        record = records[0]
        assert record["file_name"] == "scale.mid"
        assert record["detected_key"] == "C"
        assert record["detected_scale"] == "Major"
        assert record["total_notes"] == 7
        assert record["duration"] == pytest.approx(3.5)
        assert record["file_size"] == scale_file.stat().st_size

    def test_analyze_range(self, scale_file: Path):
        """Test analyzing part of a file."""
        runner = CliRunner()
        result = runner.invoke(cli, ["analyze", "--json", "--start", "0", "--end", "0.9", str(scale_file)])

        assert result.exit_code == 0
        assert json.loads(result.output)[0]["total_notes"] == 2

    def test_broken_file_is_reported(self, scale_file: Path, broken_file: Path):
        """Test undecodable files are skipped and fail the run."""
        runner = CliRunner()
        result = runner.invoke(cli, ["analyze", str(scale_file), str(broken_file)])

        assert result.exit_code == 1
        assert "C Major" in result.output
        assert "Failed to decode 1 file(s)" in result.output
        assert "broken.mid" in result.output

    def test_config_file(self, scale_file: Path, tmp_path: Path):
        """Test loading detector settings from --config."""
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"max_alternatives": 0}))

        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "analyze", str(scale_file)])

        assert result.exit_code == 0
        assert "Alternatives" not in result.output

    def test_invalid_config_file(self, scale_file: Path, tmp_path: Path):
        """Test unknown configuration keys are a usage error."""
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"bogus": 1}))

        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "analyze", str(scale_file)])

        assert result.exit_code == 2
        assert "bogus" in result.output

    def test_wrongly_typed_config_file(self, scale_file: Path, tmp_path: Path):
        """Test a wrongly typed setting is a usage error."""
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"chord_window": None}))

        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "analyze", str(scale_file)])

        assert result.exit_code == 2
        assert "chord_window" in result.output


class TestScalesCommand:
    """Tests for the scales command."""

    @staticmethod
    def names(output: str) -> list[str]:
        """Scale names from the listing."""
        return [line[:24].strip() for line in output.splitlines() if line.strip()]

    def test_list_all(self):
        """Test listing the whole catalog."""
        runner = CliRunner()
        result = runner.invoke(cli, ["scales"])

        assert result.exit_code == 0
        names = self.names(result.output)
        assert len(names) == 83
        assert names[0] == "Major"
        assert "Harmonic Minor" in names

    def test_contains(self):
        """Test filtering by a contained note."""
        runner = CliRunner()
        result = runner.invoke(cli, ["scales", "--contains", "F#"])

        assert result.exit_code == 0
        names = self.names(result.output)
        assert "Lydian" in names
        assert "Blues" in names
        assert "Major" not in names

    def test_contains_invalid_note(self):
        """Test an unknown note name is a usage error."""
        runner = CliRunner()
        result = runner.invoke(cli, ["scales", "--contains", "H"])
        assert result.exit_code == 2

    def test_show_scale_by_name(self):
        """Test spelling one scale on a chosen root."""
        runner = CliRunner()
        result = runner.invoke(cli, ["scales", "--name", "dorian", "--root", "D"])

        assert result.exit_code == 0
        assert "D Dorian" in result.output
        assert "D E F G A B C" in result.output

    def test_show_scale_by_display_name(self):
        """Test display names with spaces and the default root."""
        runner = CliRunner()
        result = runner.invoke(cli, ["scales", "--name", "Harmonic Minor"])

        assert result.exit_code == 0
        assert "C Harmonic Minor" in result.output
        assert "C D Eb F G Ab B" in result.output

    def test_unknown_scale_name(self):
        """Test unknown names and the template-less Unknown type are usage errors."""
        runner = CliRunner()
        assert runner.invoke(cli, ["scales", "--name", "Martian"]).exit_code == 2
        assert runner.invoke(cli, ["scales", "--name", "Unknown"]).exit_code == 2
