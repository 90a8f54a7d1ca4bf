"""Data models for decoded MIDI files."""

from midi_scale_detector.models.core import (
    DEFAULT_DIVISION,
    DEFAULT_TEMPO_BPM,
    EventKind,
    MidiEvent,
    MidiFile,
    MidiHeader,
    MidiTrack,
    ticks_to_seconds,
)

__all__ = [
    "DEFAULT_DIVISION",
    "DEFAULT_TEMPO_BPM",
    "EventKind",
    "MidiEvent",
    "MidiFile",
    "MidiHeader",
    "MidiTrack",
    "ticks_to_seconds",
]
