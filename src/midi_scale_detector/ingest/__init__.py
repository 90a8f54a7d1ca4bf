"""MIDI file ingestion: byte-level decoding into the event model."""

from midi_scale_detector.ingest.parser import MidiParser, parse_midi_bytes, parse_midi_file
from midi_scale_detector.ingest.reader import ByteReader, MidiFormatError

__all__ = [
    "ByteReader",
    "MidiFormatError",
    "MidiParser",
    "parse_midi_bytes",
    "parse_midi_file",
]
