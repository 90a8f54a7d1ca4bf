"""Flattening of analysis results into catalog records."""

from __future__ import annotations

import json
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence

    from midi_scale_detector.analysis.detector import HarmonicAnalysis
    from midi_scale_detector.models.core import MidiFile

CHORD_SEPARATOR = ", "


@dataclass
class AnalysisRecord:
    """One catalog row describing an analyzed MIDI file.

    Attributes:
        file_path: Full path of the file.
        file_name: File name without directory.
        file_size: Size in bytes.
        last_modified: File modification time (Unix seconds).
        detected_key: Root name of the primary scale (e.g. "Db").
        detected_scale: Scale display name (e.g. "Harmonic Minor").
        confidence: Confidence of the primary scale (0-1).
        tempo: Tempo in BPM.
        duration: Duration in seconds.
        total_notes: Number of note-on events.
        average_pitch: Mean MIDI note number.
        chord_progression: Chord labels joined with ", ".
        date_added: When the record was first created (Unix seconds).
        date_analyzed: When the analysis ran (Unix seconds).
    """

    file_path: str
    file_name: str
    file_size: int = 0
    last_modified: int = 0
    detected_key: str = ""
    detected_scale: str = ""
    confidence: float = 0.0
    tempo: float = 120.0
    duration: float = 0.0
    total_notes: int = 0
    average_pitch: float = 0.0
    chord_progression: str = ""
    date_added: int = 0
    date_analyzed: int = 0

    @property
    def chords(self) -> list[str]:
        """Chord labels split back into a list."""
        if not self.chord_progression:
            return []
        return self.chord_progression.split(CHORD_SEPARATOR)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


def build_record(
    midi_file: MidiFile,
    analysis: HarmonicAnalysis,
    *,
    file_size: int | None = None,
    last_modified: int | None = None,
    date_added: int | None = None,
    now: int | None = None,
) -> AnalysisRecord:
    """Flatten a decoded file and its analysis into a record.

    File size and modification time are read from disk when not given and
    the source path exists.

    Args:
        midi_file: Decoded file.
        analysis: Analysis of the file.
        file_size: Size in bytes.
        last_modified: Modification time (Unix seconds).
        date_added: Original insertion time; defaults to ``now``.
        now: Analysis time (Unix seconds); defaults to the current time.

    Returns:
        Flattened record.
    """
    path = Path(midi_file.source_path) if midi_file.source_path else None
    if path is not None and path.is_file() and (file_size is None or last_modified is None):
        stat = path.stat()
        if file_size is None:
            file_size = stat.st_size
        if last_modified is None:
            last_modified = int(stat.st_mtime)

    analyzed_at = int(time.time()) if now is None else now

    return AnalysisRecord(
        file_path=midi_file.source_path,
        file_name=path.name if path is not None else "",
        file_size=file_size or 0,
        last_modified=last_modified or 0,
        detected_key=analysis.primary_scale.root_name,
        detected_scale=analysis.primary_scale.type_name,
        confidence=analysis.primary_scale.confidence,
        tempo=midi_file.tempo_bpm,
        duration=midi_file.duration,
        total_notes=analysis.total_notes,
        average_pitch=analysis.average_pitch,
        chord_progression=CHORD_SEPARATOR.join(analysis.chord_progression),
        date_added=analyzed_at if date_added is None else date_added,
        date_analyzed=analyzed_at,
    )


def records_to_json(records: Sequence[AnalysisRecord], indent: int | None = 2) -> str:
    """Serialize records as a JSON array."""
    return json.dumps([record.to_dict() for record in records], indent=indent)


__all__ = [
    "AnalysisRecord",
    "CHORD_SEPARATOR",
    "build_record",
    "records_to_json",
]
