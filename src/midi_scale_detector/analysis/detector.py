"""Harmonic analysis of decoded MIDI files."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any

from midi_scale_detector.harmony.chords import DEFAULT_CHORD_WINDOW, detect_chord_progression
from midi_scale_detector.harmony.keys import (
    EMPTY_HISTOGRAM,
    build_pitch_class_histogram,
    find_alternative_scales,
    find_best_scale,
)
from midi_scale_detector.harmony.modulation import (
    DEFAULT_HOP_SECONDS,
    DEFAULT_WINDOW_SECONDS,
    KeyChange,
    detect_key_changes,
)
from midi_scale_detector.harmony.scales import Scale
from midi_scale_detector.ingest.parser import parse_midi_file

if TYPE_CHECKING:
    from collections.abc import Sequence

    from midi_scale_detector.models.core import MidiEvent, MidiFile

logger = logging.getLogger(__name__)

_FLAG_FIELDS = ("weight_by_duration", "weight_by_velocity", "detect_key_changes")
_NUMBER_FIELDS = (
    "min_confidence",
    "key_change_min_span",
    "key_change_window",
    "key_change_hop",
    "chord_window",
)


@dataclass
class DetectorConfig:
    """Configuration for harmonic analysis.

    Attributes:
        min_confidence: Minimum confidence for alternatives and key changes.
        weight_by_duration: Weight notes by their length in seconds.
        weight_by_velocity: Weight notes by velocity / 127.
        detect_key_changes: Whether to run key-change detection.
        key_change_min_span: Key changes are only detected for ranges longer
            than this many seconds.
        key_change_window: Key-change window length in seconds.
        key_change_hop: Distance between key-change windows in seconds.
        chord_window: Chord segmentation window length in seconds.
        max_alternatives: Maximum number of alternative scales.
    """

    min_confidence: float = 0.6
    weight_by_duration: bool = True
    weight_by_velocity: bool = True
    detect_key_changes: bool = True
    key_change_min_span: float = 8.0
    key_change_window: float = DEFAULT_WINDOW_SECONDS
    key_change_hop: float = DEFAULT_HOP_SECONDS
    chord_window: float = DEFAULT_CHORD_WINDOW
    max_alternatives: int = 3

    def __post_init__(self) -> None:
        for name in _FLAG_FIELDS:
            if not isinstance(getattr(self, name), bool):
                raise ValueError(f"{name} must be a boolean, got {getattr(self, name)!r}")
        for name in _NUMBER_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{name} must be a number, got {value!r}")
        if isinstance(self.max_alternatives, bool) or not isinstance(self.max_alternatives, int):
            raise ValueError(f"max_alternatives must be an integer, got {self.max_alternatives!r}")

        if not 0.0 <= self.min_confidence <= 1.0:
            raise ValueError(f"min_confidence must be within [0, 1], got {self.min_confidence}")
        for name in ("key_change_window", "key_change_hop", "chord_window"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.key_change_min_span < 0:
            raise ValueError(
                f"key_change_min_span must not be negative, got {self.key_change_min_span}"
            )
        if self.max_alternatives < 0:
            raise ValueError(
                f"max_alternatives must not be negative, got {self.max_alternatives}"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DetectorConfig:
        """Create a config from a dictionary, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


def load_config(path: Path | str) -> DetectorConfig:
    """Load a detector configuration from a JSON file.

    Args:
        path: Path to a JSON object with DetectorConfig fields.

    Returns:
        Parsed configuration.

    Raises:
        ValueError: If the file is not a JSON object or holds invalid values.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration in {path} must be a JSON object")
    return DetectorConfig.from_dict(data)


@dataclass(frozen=True)
class HarmonicAnalysis:
    """Result of analyzing a MIDI file or a time range of one.

    Attributes:
        primary_scale: Best-fitting scale.
        alternative_scales: Other major/minor readings, best first.
        pitch_class_weights: Normalized 12-bin pitch-class distribution.
        chord_progression: Chord labels with consecutive repeats removed.
        key_changes: Points where the local key changes.
        total_notes: Number of note-on events in the range.
        average_pitch: Mean MIDI note number of those note-ons.
        note_distribution: MIDI note number -> note-on count.
    """

    primary_scale: Scale = field(default_factory=Scale.unknown)
    alternative_scales: tuple[Scale, ...] = ()
    pitch_class_weights: tuple[float, ...] = EMPTY_HISTOGRAM
    chord_progression: tuple[str, ...] = ()
    key_changes: tuple[KeyChange, ...] = ()
    total_notes: int = 0
    average_pitch: float = 0.0
    note_distribution: dict[int, int] = field(default_factory=dict)

    @property
    def confidence(self) -> float:
        """Confidence of the primary scale."""
        return self.primary_scale.confidence

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "primary_scale": _scale_to_dict(self.primary_scale),
            "alternative_scales": [_scale_to_dict(s) for s in self.alternative_scales],
            "pitch_class_weights": list(self.pitch_class_weights),
            "chord_progression": list(self.chord_progression),
            "key_changes": [
                {"time": change.time, "scale": _scale_to_dict(change.scale)}
                for change in self.key_changes
            ],
            "total_notes": self.total_notes,
            "average_pitch": self.average_pitch,
            "note_distribution": {str(k): v for k, v in self.note_distribution.items()},
        }


def _scale_to_dict(scale: Scale) -> dict[str, Any]:
    return {
        "root": scale.root_name,
        "type": scale.type_name,
        "intervals": list(scale.intervals),
        "confidence": scale.confidence,
    }


class ScaleDetector:
    """Detects key, scale, chords and key changes of a decoded MIDI file.

    A detector holds only configuration. Each call builds its own working
    state, so one detector may serve concurrent analyses.

    Example:
        detector = ScaleDetector(DetectorConfig(weight_by_velocity=False))
        analysis = detector.analyze(midi_file)
        print(analysis.primary_scale.name)
    """

    def __init__(self, config: DetectorConfig | None = None) -> None:
        """Initialize the detector.

        Args:
            config: Analysis configuration, copied so setters never touch the
                caller's object. Defaults are used if omitted.
        """
        self.config = replace(config) if config is not None else DetectorConfig()

    def set_min_confidence_threshold(self, threshold: float) -> None:
        """Set the minimum confidence for alternatives and key changes."""
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"min_confidence must be within [0, 1], got {threshold}")
        self.config.min_confidence = threshold

    def set_weight_by_duration(self, enabled: bool) -> None:
        """Enable or disable duration weighting."""
        self.config.weight_by_duration = enabled

    def set_weight_by_velocity(self, enabled: bool) -> None:
        """Enable or disable velocity weighting."""
        self.config.weight_by_velocity = enabled

    def set_detect_key_changes(self, enabled: bool) -> None:
        """Enable or disable key-change detection."""
        self.config.detect_key_changes = enabled

    def analyze(self, midi_file: MidiFile) -> HarmonicAnalysis:
        """Analyze the whole file."""
        return self.analyze_range(midi_file, 0.0, midi_file.duration)

    def analyze_range(self, midi_file: MidiFile, start: float, end: float) -> HarmonicAnalysis:
        """Analyze the note events between ``start`` and ``end`` seconds.

        The histogram, scales and note statistics cover the range only.
        Chords and key changes always cover the whole file.

        Args:
            midi_file: Decoded file.
            start: Range start in seconds (inclusive).
            end: Range end in seconds (inclusive).

        Returns:
            Harmonic analysis; a zero-valued result if the range has no notes.
        """
        all_events = midi_file.note_events()
        events = _in_range(all_events, start, end)

        if not events:
            return HarmonicAnalysis()

        histogram = build_pitch_class_histogram(
            events,
            weight_by_duration=self.config.weight_by_duration,
            weight_by_velocity=self.config.weight_by_velocity,
        )
        primary = find_best_scale(histogram)
        alternatives = find_alternative_scales(
            histogram,
            primary,
            min_confidence=self.config.min_confidence,
            limit=self.config.max_alternatives,
        )

        chords = detect_chord_progression(
            all_events,
            midi_file.duration,
            primary,
            window_seconds=self.config.chord_window,
        )

        key_changes: list[KeyChange] = []
        if self.config.detect_key_changes and (end - start) > self.config.key_change_min_span:
            key_changes = detect_key_changes(
                midi_file,
                lambda s, e: self._detect_primary(_in_range(all_events, s, e)),
                window_seconds=self.config.key_change_window,
                hop_seconds=self.config.key_change_hop,
                min_confidence=self.config.min_confidence,
            )

        note_ons = [e for e in events if e.is_note_on]
        distribution: dict[int, int] = {}
        for event in note_ons:
            distribution[event.note] = distribution.get(event.note, 0) + 1
        average_pitch = sum(e.note for e in note_ons) / len(note_ons) if note_ons else 0.0

        logger.debug(
            f"Analyzed {midi_file.source_path or '<bytes>'} [{start:.2f}s-{end:.2f}s]: "
            f"{primary} with {len(note_ons)} notes"
        )

        return HarmonicAnalysis(
            primary_scale=primary,
            alternative_scales=tuple(alternatives),
            pitch_class_weights=histogram,
            chord_progression=tuple(chords),
            key_changes=tuple(key_changes),
            total_notes=len(note_ons),
            average_pitch=average_pitch,
            note_distribution=dict(sorted(distribution.items())),
        )

    def _detect_primary(self, events: Sequence[MidiEvent]) -> Scale:
        """Primary scale of a window, without chords or alternatives."""
        if not events:
            return Scale.unknown()
        histogram = build_pitch_class_histogram(
            events,
            weight_by_duration=self.config.weight_by_duration,
            weight_by_velocity=self.config.weight_by_velocity,
        )
        return find_best_scale(histogram)


def _in_range(events: Sequence[MidiEvent], start: float, end: float) -> list[MidiEvent]:
    return [e for e in events if start <= e.timestamp <= end]


def analyze_file(
    file_path: Path | str,
    config: DetectorConfig | None = None,
) -> tuple[MidiFile, HarmonicAnalysis]:
    """Convenience function to decode and analyze a MIDI file.

    Args:
        file_path: Path to the MIDI file.
        config: Analysis configuration.

    Returns:
        Tuple of (decoded file, analysis).
    """
    midi_file = parse_midi_file(file_path)
    return midi_file, ScaleDetector(config).analyze(midi_file)
