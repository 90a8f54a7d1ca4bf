"""Main CLI entry point for MIDI Scale Detector."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from midi_scale_detector import __version__
from midi_scale_detector.analysis.detector import DetectorConfig, ScaleDetector, load_config
from midi_scale_detector.export import build_record, records_to_json
from midi_scale_detector.harmony.scales import (
    NOTE_NAMES,
    SCALE_TEMPLATES,
    NoteName,
    Scale,
    scale_type_from_name,
    scales_containing,
)
from midi_scale_detector.ingest.parser import parse_midi_file
from midi_scale_detector.ingest.reader import MidiFormatError

logger = logging.getLogger(__name__)


# ANSI color codes for terminal output
class Colors:
    """ANSI color codes for styled terminal output."""

    CYAN = "\033[96m"
    GREEN = "\033[92m"
    RED = "\033[91m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    END = "\033[0m"


def color(text: str, *codes: str) -> str:
    """Apply color codes to text."""
    return "".join(codes) + str(text) + Colors.END


@click.group()
@click.version_option(version=__version__, prog_name="midi-scale-detector")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a JSON configuration file.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config: Path | None) -> None:
    """MIDI Scale Detector - Detect key, scale and chords of MIDI files."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    try:
        ctx.obj["config"] = load_config(config) if config else DetectorConfig()
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--config") from e


@cli.command()
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--json", "as_json", is_flag=True, help="Output catalog records as JSON.")
@click.option("--start", type=float, default=None, help="Range start in seconds.")
@click.option("--end", type=float, default=None, help="Range end in seconds.")
@click.option("--no-key-changes", is_flag=True, help="Skip key-change detection.")
@click.pass_context
def analyze(
    ctx: click.Context,
    files: tuple[Path, ...],
    as_json: bool,
    start: float | None,
    end: float | None,
    no_key_changes: bool,
) -> None:
    """Analyze MIDI files and display their key, scale and chords.

    Files that cannot be decoded are reported and skipped.
    """
    detector = ScaleDetector(ctx.obj["config"])
    if no_key_changes:
        detector.set_detect_key_changes(False)

    records = []
    failed_files: list[tuple[Path, str]] = []

    for file_path in files:
        try:
            midi_file = parse_midi_file(file_path)
        except MidiFormatError as e:
            logger.warning(f"Skipping {file_path}: {e}")
            failed_files.append((file_path, str(e)))
            continue

        range_start = 0.0 if start is None else start
        range_end = midi_file.duration if end is None else end
        analysis = detector.analyze_range(midi_file, range_start, range_end)

        if as_json:
            records.append(build_record(midi_file, analysis))
            continue

        scale = analysis.primary_scale
        click.echo(
            f"\n{color(file_path.name, Colors.BOLD, Colors.CYAN)}: "
            f"{scale.name} ({scale.confidence:.0%})"
        )
        click.echo(
            f"  Tempo: {midi_file.tempo_bpm:.1f} BPM, "
            f"Duration: {midi_file.duration:.1f}s, "
            f"Notes: {analysis.total_notes}, "
            f"Average pitch: {analysis.average_pitch:.1f}"
        )
        if analysis.alternative_scales:
            alternatives = ", ".join(str(s) for s in analysis.alternative_scales)
            click.echo(f"  Alternatives: {alternatives}")
        if analysis.chord_progression:
            chords = analysis.chord_progression[:16]
            progression = " → ".join(chords)
            if len(analysis.chord_progression) > 16:
                progression += " ..."
            click.echo(f"  Chords: {progression}")
        for change in analysis.key_changes:
            click.echo(f"  {color('Key change', Colors.GREEN)} at {change.time:.1f}s: {change.scale}")

    if as_json:
        click.echo(records_to_json(records))

    if failed_files:
        click.echo(color(f"\nFailed to decode {len(failed_files)} file(s):", Colors.RED), err=True)
        for file_path, error in failed_files:
            click.echo(f"  {file_path.name}: {error}", err=True)
        raise SystemExit(1)


@cli.command()
@click.option("--contains", "note", default=None, help="Only scales containing this note, rooted on C.")
@click.option("--name", default=None, help="Show one scale by name, e.g. 'Dorian b2'.")
@click.option("--root", default="C", show_default=True, help="Root note used with --name.")
def scales(note: str | None, name: str | None, root: str) -> None:
    """List the scale template catalog."""
    if name is not None:
        try:
            scale_type = scale_type_from_name(name)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--name") from e
        if scale_type not in SCALE_TEMPLATES:
            raise click.BadParameter(f"{scale_type.value} has no template", param_hint="--name")
        try:
            root_note = NoteName.from_label(root)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--root") from e

        scale = Scale.from_template(root_note, scale_type)
        notes = " ".join(NOTE_NAMES[(scale.root + i) % 12] for i in scale.intervals)
        click.echo(f"{color(scale.name, Colors.BOLD)}: {notes}")
        return

    pitch_class = None
    if note is not None:
        try:
            pitch_class = NoteName.from_label(note).value
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--contains") from e

    scale_types = list(SCALE_TEMPLATES) if pitch_class is None else scales_containing(pitch_class)
    for scale_type in scale_types:
        interval_str = " ".join(str(i) for i in SCALE_TEMPLATES[scale_type])
        click.echo(f"{scale_type.value:<24} {color(interval_str, Colors.DIM)}")


def main() -> None:
    """Run the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
